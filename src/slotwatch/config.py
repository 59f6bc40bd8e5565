"""Watcher configuration loaded from environment variables.

Every path, threshold and notification setting the checker needs lives here
and is passed explicitly into the store, gate and notifier constructors.
"""

from datetime import date
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from slotwatch.models import CooldownPolicy
from slotwatch.utils import generate_dates_to_check, split_dates


class WatcherConfig(BaseSettings):
    """Watcher configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Calendar being watched
    target_url: str = Field(
        default="https://eipro.jp/takachiho1/eventCalendars/index",
        description="Reservation calendar URL (shown in notifications)",
    )
    dates: str = Field(
        default="",
        description="Comma-separated YYYY/MM/DD dates to check; empty = next days_ahead days",
    )
    days_ahead: int = Field(
        default=14,
        ge=1,
        description="Number of days to check when no explicit dates are set",
    )

    # Scraper export
    slots_file: Path = Field(
        default=Path("calendar_availabilities.json"),
        description="JSON slot export written by the browser scraper",
    )

    # State files
    state_file: Path = Field(
        default=Path("last_check.json"),
        description="Availability state (previous slots + notified history)",
    )
    cooldown_file: Path = Field(
        default=Path("last_notification.json"),
        description="Last sent notification record for cooldown decisions",
    )
    notified_history_limit: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of notified slot keys remembered",
    )

    # Cooldown for "no availability" notifications
    cooldown_enabled: bool = Field(
        default=True,
        description="Throttle repeated 'no availability' notifications",
    )
    cooldown_minutes: float = Field(
        default=30,
        ge=0,
        description="Minimum minutes between two 'no availability' notifications",
    )

    # Notifications
    notification_method: str = Field(
        default="discord",
        description="Notification sink: discord or console",
    )
    discord_webhook_url: str = Field(
        default="",
        description="Discord webhook URL",
    )
    notification_source: str = Field(
        default="Local",
        description="Label shown in notifications (e.g. Local, GitHub Actions)",
    )
    webhook_timeout_seconds: float = Field(
        default=10,
        gt=0,
        description="HTTP timeout for webhook delivery",
    )

    # Polling
    poll_interval_minutes: float = Field(
        default=5,
        gt=0,
        description="Minutes between checks in --poll mode",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("dates")
    @classmethod
    def _check_dates(cls, value: str) -> str:
        split_dates(value)
        return value

    def target_dates(self, today: date | None = None) -> list[str]:
        """Explicit dates if configured, otherwise the next `days_ahead` days."""
        explicit = split_dates(self.dates)
        if explicit:
            return explicit
        return generate_dates_to_check(self.days_ahead, today=today)

    def cooldown_policy(self) -> CooldownPolicy:
        return CooldownPolicy(enabled=self.cooldown_enabled, minutes=self.cooldown_minutes)


# Singleton pattern
_config: WatcherConfig | None = None


def get_config() -> WatcherConfig:
    """Get the watcher configuration singleton.

    Returns:
        WatcherConfig: Watcher configuration instance
    """
    global _config
    if _config is None:
        _config = WatcherConfig()
    return _config
