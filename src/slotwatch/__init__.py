"""Reservation calendar watcher.

Diffs each scrape of a reservation calendar against the previous one and
notifies about newly available slots, with a cooldown on repeated
"nothing available" notices.
"""

from slotwatch.check import poll, run_check
from slotwatch.gate import NotificationGate, should_send_empty_notification
from slotwatch.models import (
    CheckResult,
    CooldownPolicy,
    CooldownState,
    PersistedState,
    RunOutcome,
    Slot,
)
from slotwatch.notifier import Notifier
from slotwatch.scraper import ExportFileScraper
from slotwatch.store import SlotDiffStore

__all__ = [
    "CheckResult",
    "CooldownPolicy",
    "CooldownState",
    "ExportFileScraper",
    "NotificationGate",
    "Notifier",
    "PersistedState",
    "RunOutcome",
    "Slot",
    "SlotDiffStore",
    "poll",
    "run_check",
    "should_send_empty_notification",
]
