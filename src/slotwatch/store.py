"""Availability state store and slot diffing.

SlotDiffStore keeps the previous run's full slot list plus a bounded FIFO
history of slot keys that were already notified. On each run the caller
diffs the fresh observation against that state, notifies, and then writes
the observation back as the next run's baseline.

State file layout (last_check.json):
    {
        "lastCheck": "2025-11-20T01:00:00Z" | null,
        "previousSlots": [{"date": ..., "startTime": ..., "endTime": ..., ...}],
        "notifiedSlots": ["2025/11/20_10:00_11:00", ...]
    }

Only update_state(), mark_as_notified() and clear_notified_slots() mutate
and persist; everything else is read-only.
"""

import json
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from slotwatch.logging import get_logger
from slotwatch.models import PersistedState, Slot, StateSummary
from slotwatch.utils import Clock, utc_now, write_json_atomic

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 1000


class SlotDiffStore:
    """Detects newly available slots and remembers which ones were reported."""

    def __init__(
        self,
        path: str | Path = "last_check.json",
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the store and load any existing state.

        Args:
            path: JSON state file location.
            history_limit: Maximum notified keys kept (oldest evicted first).
            clock: Returns the current instant; injectable for tests.
        """
        if history_limit < 1:
            raise ValueError(f"history_limit must be positive, got {history_limit}")
        self.path = Path(path)
        self.history_limit = history_limit
        self._clock = clock
        self.state = self.load()

    def load(self) -> PersistedState:
        """Read persisted state, falling back to a fresh state on any problem.

        Never raises: a missing, unreadable or malformed file is logged and
        replaced by an empty state, which makes the next run a first run.
        """
        if not self.path.exists():
            logger.warning("state_missing", path=str(self.path), fallback="fresh_state")
            return PersistedState()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            state = PersistedState.model_validate(raw)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "state_load_failed",
                path=str(self.path),
                error=str(e),
                type=type(e).__name__,
            )
            return PersistedState()

        logger.info(
            "state_loaded",
            path=str(self.path),
            last_check=state.last_check.isoformat() if state.last_check else None,
            previous_slots=len(state.previous_slots),
            notified_slots=len(state.notified_slots),
        )
        return state

    def save(self) -> bool:
        """Persist the in-memory state atomically.

        Returns:
            True if written. On failure the error is logged and the in-memory
            state stays usable for the rest of the run.
        """
        try:
            write_json_atomic(self.path, self.state.model_dump(mode="json", by_alias=True))
        except OSError as e:
            logger.error("state_save_failed", path=str(self.path), error=str(e))
            return False
        logger.debug("state_saved", path=str(self.path))
        return True

    def is_first_run(self) -> bool:
        """True until the first update_state() call has been recorded."""
        return self.state.last_check is None

    def find_new_availabilities(self, current_slots: Sequence[Slot]) -> list[Slot]:
        """Return slots of `current_slots` absent from the previous snapshot.

        Compares against the single most recent snapshot only, so a slot that
        disappeared for one run and came back counts as new again. Output
        order follows `current_slots`.
        """
        previous_keys = {slot.key for slot in self.state.previous_slots}
        return [slot for slot in current_slots if slot.key not in previous_keys]

    def filter_notified_slots(self, new_slots: Sequence[Slot]) -> list[Slot]:
        """Drop slots whose key was already reported within the history window."""
        notified_keys = set(self.state.notified_slots)
        return [slot for slot in new_slots if slot.key not in notified_keys]

    def mark_as_notified(self, slots: Sequence[Slot]) -> None:
        """Append the slots' keys to the notified history, clamp it, persist."""
        keys = self.state.notified_slots + [slot.key for slot in slots]
        if len(keys) > self.history_limit:
            evicted = len(keys) - self.history_limit
            keys = keys[-self.history_limit :]
            logger.debug("notified_history_trimmed", evicted=evicted)
        self.state.notified_slots = keys
        self.save()

    def update_state(self, current_slots: Sequence[Slot]) -> None:
        """Record this run's full observation as the next run's baseline.

        Call exactly once per run, after diffing.
        """
        self.state.last_check = self._clock()
        self.state.previous_slots = list(current_slots)
        self.save()
        logger.info(
            "state_updated",
            last_check=self.state.last_check.isoformat(),
            previous_slots=len(self.state.previous_slots),
        )

    def clear_notified_slots(self) -> None:
        """Forget every notified key so all current slots can be reported again."""
        cleared = len(self.state.notified_slots)
        self.state.notified_slots = []
        self.save()
        logger.info("notified_history_cleared", cleared=cleared)

    def summary(self) -> StateSummary:
        return StateSummary(
            last_check=self.state.last_check,
            previous_slots_count=len(self.state.previous_slots),
            notified_slots_count=len(self.state.notified_slots),
        )
