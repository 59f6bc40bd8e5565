"""Slot sources consumed by the checker.

The browser automation that reads the reservation calendar runs outside this
package and exports its observations as a JSON array (one record per time
window). ExportFileScraper turns that export into validated Slot models.

Export record, as written by the browser scraper:
    {
        "date": "2025/11/20", "startTime": "10:00", "endTime": "11:00",
        "available": true,
        "startDatetime": "2025/11/20 10:00:00", "endDatetime": "...",
        "hasHourglass": false, "hasCheck": true,
        "serviceCd": "...", "sessionCd": "..."
    }
"""

import json
from pathlib import Path
from typing import Protocol, Sequence

from pydantic import ValidationError

from slotwatch.errors import PermanentError, TransientError
from slotwatch.logging import get_logger
from slotwatch.models import Slot

log = get_logger(__name__)


class Scraper(Protocol):
    """Anything that can produce the slots for a set of dates."""

    def scrape(self, dates: Sequence[str]) -> list[Slot]: ...


class ExportFileScraper:
    """Reads slots from the browser scraper's JSON export."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def scrape(self, dates: Sequence[str]) -> list[Slot]:
        """Load the export and keep slots for the requested dates.

        Args:
            dates: YYYY/MM/DD strings. Empty means every slot in the export.

        Returns:
            Slots in export order.

        Raises:
            TransientError: If the export file does not exist or cannot be read.
            PermanentError: If the export is not a JSON array of valid slot records.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise TransientError(f"Slot export not found: {self.path}")
        except OSError as e:
            raise TransientError(f"Slot export unreadable: {e}") from e

        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise PermanentError(f"Slot export is not valid JSON: {e}") from e

        if not isinstance(records, list):
            raise PermanentError(
                f"Slot export must be a JSON array, got {type(records).__name__}"
            )

        slots: list[Slot] = []
        for index, record in enumerate(records):
            try:
                slots.append(Slot.model_validate(record))
            except ValidationError as e:
                raise PermanentError(f"Invalid slot record at index {index}: {e}") from e

        if dates:
            wanted = set(dates)
            slots = [slot for slot in slots if slot.date in wanted]

        log.info(
            "slots_scraped",
            path=str(self.path),
            dates=len(dates),
            total=len(slots),
            available=sum(1 for slot in slots if slot.available),
        )
        return slots
