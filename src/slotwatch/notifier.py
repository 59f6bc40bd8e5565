"""Notification sinks: Discord webhook with console fallback.

Notifier.notify() never raises. Delivery failures are logged and the
message is printed to the console instead, so a broken webhook can't fail
a check run.
"""

from datetime import datetime, timezone
from typing import Protocol, Sequence

import requests

from slotwatch.errors import NotificationError
from slotwatch.logging import get_logger
from slotwatch.models import Slot

logger = get_logger(__name__)

COLOR_AVAILABLE = 0x00FF00
COLOR_NONE = 0xFF9900
BOT_USERNAME = "Reservation Bot"


class NotificationSink(Protocol):
    def notify(self, title: str, message: str, slots: Sequence[Slot]) -> bool: ...


def format_slots(slots: Sequence[Slot]) -> str:
    """One "date start-end" line per slot."""
    if not slots:
        return "No slots available"
    return "\n".join(f"{s.date} {s.start_time}-{s.end_time}" for s in slots)


def build_discord_payload(
    title: str, message: str, slots: Sequence[Slot], source: str | None = None
) -> dict:
    """Build a Discord webhook body: one embed, slots grouped by date.

    An @here mention is added when there is something to book.
    """
    slots_by_date: dict[str, list[str]] = {}
    for slot in slots:
        slots_by_date.setdefault(slot.date, []).append(f"{slot.start_time}-{slot.end_time}")

    embed = {
        "title": title,
        "description": message,
        "color": COLOR_AVAILABLE if slots else COLOR_NONE,
        "fields": [
            {"name": day, "value": "\n".join(times), "inline": False}
            for day, times in slots_by_date.items()
        ],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if source:
        embed["footer"] = {"text": f"Source: {source}"}

    payload: dict = {"username": BOT_USERNAME, "embeds": [embed]}
    if slots:
        payload["content"] = "@here"
        payload["allowed_mentions"] = {"parse": ["everyone"]}
    return payload


class Notifier:
    """Sends check results to the configured sink.

    Supported methods: "discord" (webhook) and "console".
    """

    def __init__(
        self,
        method: str = "discord",
        webhook_url: str = "",
        *,
        source: str | None = None,
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.method = method.lower()
        self.webhook_url = webhook_url
        self.source = source
        self.timeout = timeout
        self._http = session or requests

    def notify(self, title: str, message: str, slots: Sequence[Slot] = ()) -> bool:
        """Deliver a notification, falling back to the console on failure.

        Returns:
            True if the configured sink accepted it, False if the console
            fallback was used instead.
        """
        if self.method == "console":
            return self.send_console(title, message, slots)

        if self.method != "discord":
            logger.warning("unknown_notification_method", method=self.method, fallback="console")
            self.send_console(title, message, slots)
            return False

        try:
            self.send_discord(title, message, slots)
        except NotificationError as e:
            logger.error("notification_failed", method=self.method, error=str(e))
            self.send_console(title, message, slots)
            return False

        logger.info("notification_sent", method=self.method, title=title, slots=len(slots))
        return True

    def send_discord(self, title: str, message: str, slots: Sequence[Slot]) -> None:
        """POST to the Discord webhook.

        Raises:
            NotificationError: Missing URL, transport error or non-2xx status.
        """
        if not self.webhook_url:
            raise NotificationError("Discord webhook URL not configured")

        payload = build_discord_payload(title, message, slots, self.source)
        logger.debug("webhook_payload", payload=payload)
        try:
            resp = self._http.post(self.webhook_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationError(f"Webhook request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise NotificationError(f"Webhook returned status {resp.status_code}: {resp.text}")

    def send_console(self, title: str, message: str, slots: Sequence[Slot]) -> bool:
        lines = ["", "=== NOTIFICATION ===", f"Title: {title}", f"Message: {message}"]
        if self.source:
            lines.append(f"Source: {self.source}")
        if slots:
            lines += ["", "Available Slots:", format_slots(slots)]
        lines += ["===================", ""]
        print("\n".join(lines))
        return True
