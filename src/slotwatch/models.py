"""Pydantic models for slot availability and persisted watcher state.

All data structures use Pydantic v2 for validation and serialization. Field
aliases keep the camelCase layout of the on-disk JSON files and of the
scraper export; snake_case names are accepted on input too.
"""

import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slotwatch.utils import DATE_FORMAT, ensure_utc

_DATE_RE = re.compile(r"^\d{4}/\d{2}/\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Slot(BaseModel):
    """A single bookable time window from the reservation calendar.

    Identity across runs is (date, startTime, endTime); any other field the
    scraper exports (serviceCd, sessionCd, startDatetime, ...) is carried
    along untouched but ignored for comparisons.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    date: str  # "2025/11/20"
    start_time: str = Field(alias="startTime")  # "10:00"
    end_time: str = Field(alias="endTime")  # "11:00"
    available: bool = False

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if not _DATE_RE.match(value):
            raise ValueError(f"date must be YYYY/MM/DD, got {value!r}")
        datetime.strptime(value, DATE_FORMAT)
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not _TIME_RE.match(value):
            raise ValueError(f"time must be HH:MM, got {value!r}")
        return value

    @property
    def key(self) -> str:
        """Serialized identity, e.g. "2025/11/20_10:00_11:00"."""
        return f"{self.date}_{self.start_time}_{self.end_time}"

    def to_record(self) -> dict:
        """JSON-ready dict in the export layout, metadata included."""
        return self.model_dump(mode="json", by_alias=True)


class PersistedState(BaseModel):
    """Availability state kept between runs (last_check.json)."""

    model_config = ConfigDict(populate_by_name=True)

    last_check: datetime | None = Field(default=None, alias="lastCheck")
    previous_slots: list[Slot] = Field(default_factory=list, alias="previousSlots")
    notified_slots: list[str] = Field(default_factory=list, alias="notifiedSlots")

    @field_validator("last_check")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @field_validator("previous_slots", "notified_slots", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        # Older state files may carry null instead of an empty list
        return [] if value is None else value


class CooldownState(BaseModel):
    """Record of the last sent notification (last_notification.json)."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime
    had_availability: bool = Field(alias="hadAvailability")

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class CooldownPolicy(BaseModel):
    """Throttling rule for "no availability" notifications.

    Disabled for runs where every check must report (e.g. scheduled CI
    runs); enabled for frequent local polling.
    """

    enabled: bool = True
    minutes: float = Field(default=30, ge=0)


class RunOutcome(str, Enum):
    """Terminal outcome of a single check run."""

    BASELINE = "baseline"  # first run, nothing notified
    NOTIFIED = "notified"  # new availability reported
    NOTIFIED_EMPTY = "notified_empty"  # "nothing available" reported
    SUPPRESSED = "suppressed"  # "nothing available" held back by cooldown
    UNCHANGED = "unchanged"  # availability exists but was already reported


class CheckResult(BaseModel):
    """Summary returned by run_check()."""

    outcome: RunOutcome
    total_slots: int
    available_slots: int
    notified: list[Slot] = Field(default_factory=list)
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StateSummary(BaseModel):
    """Counts describing the persisted availability state."""

    last_check: datetime | None
    previous_slots_count: int
    notified_slots_count: int
