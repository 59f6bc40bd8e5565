"""Shared fixtures: fixed clock, slot factory, fake scraper and sink."""

from datetime import date, datetime, timedelta, timezone
from typing import Sequence

import pytest

from slotwatch.gate import NotificationGate
from slotwatch.models import CooldownPolicy, Slot
from slotwatch.store import SlotDiffStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StaticScraper:
    """Returns preset slots; records the dates it was asked for."""

    def __init__(self, slots: Sequence[Slot] = (), error: Exception | None = None) -> None:
        self.slots = list(slots)
        self.error = error
        self.calls: list[list[str]] = []

    def scrape(self, dates: Sequence[str]) -> list[Slot]:
        self.calls.append(list(dates))
        if self.error is not None:
            raise self.error
        return list(self.slots)


class RecordingNotifier:
    """Sink that remembers every notification instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, list[Slot]]] = []

    def notify(self, title: str, message: str, slots: Sequence[Slot] = ()) -> bool:
        self.sent.append((title, message, list(slots)))
        return True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 11, 19, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_slot():
    def _make(
        day: str = "2025/11/20",
        start: str = "10:00",
        end: str = "11:00",
        available: bool = True,
        **extra,
    ) -> Slot:
        return Slot(date=day, startTime=start, endTime=end, available=available, **extra)

    return _make


@pytest.fixture
def many_slots():
    """Build `count` slots with distinct keys, one per calendar day."""

    def _many(count: int, offset: int = 0) -> list[Slot]:
        first = date(2020, 1, 1)
        return [
            Slot(
                date=(first + timedelta(days=offset + i)).strftime("%Y/%m/%d"),
                startTime="09:00",
                endTime="10:00",
                available=True,
            )
            for i in range(count)
        ]

    return _many


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "last_check.json"


@pytest.fixture
def cooldown_path(tmp_path):
    return tmp_path / "last_notification.json"


@pytest.fixture
def store(state_path, clock) -> SlotDiffStore:
    return SlotDiffStore(state_path, clock=clock)


@pytest.fixture
def gate(cooldown_path, clock) -> NotificationGate:
    return NotificationGate(cooldown_path, CooldownPolicy(enabled=True, minutes=30), clock=clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
