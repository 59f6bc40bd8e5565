"""Cooldown policy for "no availability" notifications.

New availability is always reported. A "nothing available" result is
throttled: it goes out when there is no previous notification, when the
previous notification reported availability (the drop back to nothing is
news), or when the cooldown has elapsed since the last empty notice.

Cooldown file layout (last_notification.json):
    {"timestamp": "2025-11-20T01:00:00Z", "hadAvailability": false}
"""

import json
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from slotwatch.logging import get_logger
from slotwatch.models import CooldownPolicy, CooldownState
from slotwatch.utils import Clock, ensure_utc, utc_now, write_json_atomic

logger = get_logger(__name__)


def should_send_empty_notification(
    last: CooldownState | None,
    now: datetime,
    cooldown_minutes: float,
) -> bool:
    """Decide whether a "no availability" notification may be sent.

    Args:
        last: Record of the last sent notification, or None if none exists.
        now: Current instant.
        cooldown_minutes: Minimum minutes between two empty notifications.

    Returns:
        True if the notification should be sent.
    """
    if last is None:
        return True

    if last.had_availability:
        return True

    minutes_since = (ensure_utc(now) - last.timestamp).total_seconds() / 60
    if minutes_since < 0:
        # Record from the future: clock skew or a hand-edited file
        logger.warning(
            "cooldown_timestamp_in_future",
            timestamp=last.timestamp.isoformat(),
            minutes_ahead=round(-minutes_since, 1),
        )
        return True

    if minutes_since >= cooldown_minutes:
        return True

    logger.info(
        "empty_notification_suppressed",
        minutes_since=int(minutes_since),
        minutes_remaining=round(cooldown_minutes - minutes_since, 1),
        cooldown_minutes=cooldown_minutes,
    )
    return False


class NotificationGate:
    """Applies a CooldownPolicy using the persisted last-notification record."""

    def __init__(
        self,
        path: str | Path = "last_notification.json",
        policy: CooldownPolicy | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self.path = Path(path)
        self.policy = policy or CooldownPolicy()
        self._clock = clock

    def load(self) -> CooldownState | None:
        """Return the last notification record, or None if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return CooldownState.model_validate(raw)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "cooldown_load_failed",
                path=str(self.path),
                error=str(e),
                type=type(e).__name__,
            )
            return None

    def allows_empty_notification(self) -> bool:
        """True if a "no availability" notification may go out now."""
        if not self.policy.enabled:
            return True
        return should_send_empty_notification(
            self.load(), self._clock(), self.policy.minutes
        )

    def record_notification(
        self, had_availability: bool, now: datetime | None = None
    ) -> CooldownState:
        """Overwrite the cooldown record after a notification was sent.

        Called for every sent notification regardless of whether the policy
        is enabled, so switching policies never starts from a stale record.
        Write failures are logged; the returned record is still valid.
        """
        state = CooldownState(
            timestamp=now if now is not None else self._clock(),
            had_availability=had_availability,
        )
        try:
            write_json_atomic(self.path, state.model_dump(mode="json", by_alias=True))
        except OSError as e:
            logger.error("cooldown_save_failed", path=str(self.path), error=str(e))
        else:
            logger.debug(
                "cooldown_recorded",
                path=str(self.path),
                had_availability=had_availability,
            )
        return state
