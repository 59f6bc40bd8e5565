"""Single check run and polling loop.

One run: scrape → diff against the previous snapshot → drop already-notified
slots → notify (new availability always; "nothing available" subject to the
cooldown gate) → persist the observation as the next baseline.

The very first run only establishes the baseline and sends nothing.
"""

import time
from typing import Callable, Sequence

from slotwatch.gate import NotificationGate
from slotwatch.logging import get_logger
from slotwatch.models import CheckResult, RunOutcome, Slot
from slotwatch.notifier import NotificationSink
from slotwatch.scraper import Scraper
from slotwatch.store import SlotDiffStore
from slotwatch.utils import Clock, utc_now

log = get_logger(__name__)

TITLE_AVAILABLE = "🎉 Reservation Slots Available!"
TITLE_NONE = "✅ Check Complete - No Availability"
TITLE_FAILED = "⚠️ Reservation Check Failed"


def _describe_dates(dates: Sequence[str]) -> str:
    return ", ".join(dates) if dates else "all listed dates"


def run_check(
    *,
    scraper: Scraper,
    store: SlotDiffStore,
    gate: NotificationGate,
    notifier: NotificationSink,
    dates: Sequence[str],
    clock: Clock = utc_now,
) -> CheckResult:
    """Execute one availability check.

    Args:
        scraper: Slot source for `dates`.
        store: Availability state (previous snapshot + notified history).
        gate: Cooldown gate for "no availability" notifications.
        notifier: Notification sink; expected not to raise.
        dates: YYYY/MM/DD strings to check.
        clock: Timestamp source for the returned result.

    Returns:
        CheckResult describing what happened.

    Raises:
        Exception: Whatever the scraper raised, after a best-effort failure
            notification. No state is written in that case.
    """
    log.info("check_started", dates=len(dates))

    try:
        slots = scraper.scrape(dates)
    except Exception as e:
        log.error("scrape_failed", error=str(e), type=type(e).__name__)
        _notify_failure(notifier, e)
        raise

    available = [slot for slot in slots if slot.available]
    log.info(
        "check_scraped",
        total=len(slots),
        available=len(available),
        unavailable=len(slots) - len(available),
    )

    notified: list[Slot] = []
    if store.is_first_run():
        outcome = RunOutcome.BASELINE
        log.info("baseline_established", slots=len(slots))
    else:
        new_slots = store.find_new_availabilities(available)
        fresh = store.filter_notified_slots(new_slots)
        log.debug("check_diffed", new=len(new_slots), unnotified=len(fresh))

        if fresh:
            notifier.notify(
                TITLE_AVAILABLE,
                f"Found {len(fresh)} new available slot(s) for {_describe_dates(dates)}",
                fresh,
            )
            store.mark_as_notified(fresh)
            gate.record_notification(True)
            notified = fresh
            outcome = RunOutcome.NOTIFIED
        elif not available:
            if gate.allows_empty_notification():
                notifier.notify(
                    TITLE_NONE,
                    f"Checked {_describe_dates(dates)} - no available slots found at this time.",
                    [],
                )
                gate.record_notification(False)
                outcome = RunOutcome.NOTIFIED_EMPTY
            else:
                outcome = RunOutcome.SUPPRESSED
        else:
            outcome = RunOutcome.UNCHANGED

    store.update_state(slots)

    log.info("check_completed", outcome=outcome.value, notified=len(notified))
    return CheckResult(
        outcome=outcome,
        total_slots=len(slots),
        available_slots=len(available),
        notified=notified,
        checked_at=clock(),
    )


def _notify_failure(notifier: NotificationSink, error: Exception) -> None:
    try:
        notifier.notify(TITLE_FAILED, f"Error: {error}", [])
    except Exception as notify_error:  # noqa: BLE001
        log.error("failure_notification_failed", error=str(notify_error))


def poll(
    run_once: Callable[[], CheckResult],
    interval_minutes: float,
    *,
    max_runs: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[CheckResult]:
    """Run a check immediately, then every `interval_minutes`.

    A failed run is logged and polling continues.

    Args:
        run_once: Zero-argument callable performing one check.
        interval_minutes: Pause between runs.
        max_runs: Stop after this many runs (None = forever).
        sleep: Sleep function, seconds in.

    Returns:
        Results of the successful runs. Only collected when max_runs is set;
        an unbounded loop keeps nothing.

    Raises:
        ValueError: If interval_minutes is not positive.
    """
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")

    log.info("polling_started", interval_minutes=interval_minutes, max_runs=max_runs)
    results: list[CheckResult] = []
    runs = 0
    while max_runs is None or runs < max_runs:
        if runs:
            sleep(interval_minutes * 60)
        runs += 1
        try:
            result = run_once()
        except Exception as e:  # noqa: BLE001
            log.error("poll_check_failed", run=runs, error=str(e), type=type(e).__name__)
            continue
        if max_runs is not None:
            results.append(result)
    return results
