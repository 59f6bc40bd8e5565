"""Shared helpers: clock, date generation and atomic JSON writes."""

import json
import os
import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

Clock = Callable[[], datetime]

DATE_FORMAT = "%Y/%m/%d"


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and fresh instants compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_dates_to_check(days_ahead: int = 14, today: date | None = None) -> list[str]:
    """Return YYYY/MM/DD strings for `today` and the following days.

    Args:
        days_ahead: Number of consecutive days, today included.
        today: Reference date (default: local today).

    Returns:
        e.g. ["2025/11/20", "2025/11/21", ...]
    """
    if today is None:
        today = date.today()
    return [(today + timedelta(days=i)).strftime(DATE_FORMAT) for i in range(days_ahead)]


def split_dates(value: str) -> list[str]:
    """Split a comma-separated date list, checking each entry is YYYY/MM/DD.

    Raises:
        ValueError: On the first entry that is not a real YYYY/MM/DD date.
    """
    dates = [d.strip() for d in value.split(",") if d.strip()]
    for d in dates:
        # strptime alone accepts "2025/1/5", which the calendar never shows
        if len(d) != 10 or datetime.strptime(d, DATE_FORMAT).strftime(DATE_FORMAT) != d:
            raise ValueError(f"date must be YYYY/MM/DD, got {d!r}")
    return dates


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write JSON to `path` via a temp file in the same directory + os.replace.

    Readers see either the previous file or the complete new one, never a
    truncated write.

    Raises:
        OSError: If the directory is not writable or the rename fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
