"""Tests for slot and state models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from slotwatch.models import CooldownPolicy, CooldownState, PersistedState, Slot


def test_slot_accepts_export_record():
    slot = Slot.model_validate(
        {
            "date": "2025/11/20",
            "startTime": "10:00",
            "endTime": "11:00",
            "available": True,
            "serviceCd": "S01",
            "hasHourglass": False,
        }
    )

    assert slot.start_time == "10:00"
    assert slot.end_time == "11:00"
    assert slot.available is True
    assert slot.key == "2025/11/20_10:00_11:00"


def test_slot_metadata_passes_through_unchanged():
    record = {
        "date": "2025/11/20",
        "startTime": "13:00",
        "endTime": "14:00",
        "available": False,
        "startDatetime": "2025/11/20 13:00:00",
        "sessionCd": None,
    }

    assert Slot.model_validate(record).to_record() == record


def test_slot_key_ignores_metadata(make_slot):
    a = make_slot(serviceCd="A", available=True)
    b = make_slot(serviceCd="B", available=False)

    assert a.key == b.key


def test_slot_accepts_snake_case_names():
    slot = Slot(date="2025/11/20", start_time="10:00", end_time="11:00")

    assert slot.key == "2025/11/20_10:00_11:00"
    assert slot.available is False


@pytest.mark.parametrize(
    "field,value",
    [
        ("date", "2025-11-20"),
        ("date", "2025/13/01"),
        ("startTime", "9:00"),
        ("endTime", "24:00"),
    ],
)
def test_slot_rejects_bad_formats(field, value):
    record = {"date": "2025/11/20", "startTime": "10:00", "endTime": "11:00"}
    record[field] = value

    with pytest.raises(ValidationError):
        Slot.model_validate(record)


def test_persisted_state_defaults():
    state = PersistedState()

    assert state.last_check is None
    assert state.previous_slots == []
    assert state.notified_slots == []


def test_persisted_state_tolerates_null_lists():
    state = PersistedState.model_validate(
        {"lastCheck": None, "previousSlots": None, "notifiedSlots": None}
    )

    assert state.previous_slots == []
    assert state.notified_slots == []


def test_persisted_state_serializes_camel_case(make_slot):
    state = PersistedState(
        last_check=datetime(2025, 11, 20, 1, 0, tzinfo=timezone.utc),
        previous_slots=[make_slot()],
        notified_slots=["2025/11/20_10:00_11:00"],
    )

    data = state.model_dump(mode="json", by_alias=True)

    assert set(data) == {"lastCheck", "previousSlots", "notifiedSlots"}
    assert data["lastCheck"].startswith("2025-11-20T01:00:00")
    assert data["previousSlots"][0]["startTime"] == "10:00"


def test_cooldown_state_naive_timestamp_is_utc():
    state = CooldownState.model_validate(
        {"timestamp": "2025-11-20T01:00:00", "hadAvailability": False}
    )

    assert state.timestamp.tzinfo is not None
    assert state.timestamp.utcoffset().total_seconds() == 0


def test_cooldown_policy_rejects_negative_minutes():
    with pytest.raises(ValidationError):
        CooldownPolicy(minutes=-1)
