"""Check the reservation calendar export and notify on new availability.

Run with:  slotwatch
Poll:      slotwatch --poll --interval 5
Dates:     slotwatch --dates 2025/11/20,2025/11/21
Status:    slotwatch --status
Reset:     slotwatch --reset-notified
Scheduled: slotwatch --no-cooldown --json-logs

Exit codes:
  0 = success
  1 = check failed (error already notified and logged)
  2 = invalid option or configuration value
"""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from slotwatch.check import poll, run_check
from slotwatch.config import WatcherConfig, get_config
from slotwatch.gate import NotificationGate
from slotwatch.logging import get_logger, setup_logging
from slotwatch.models import CheckResult
from slotwatch.notifier import Notifier
from slotwatch.scraper import ExportFileScraper
from slotwatch.store import SlotDiffStore

log = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        prog="slotwatch",
        description="Notify when reservation calendar slots become available.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--dates",
        type=str,
        default=None,
        help="Comma-separated YYYY/MM/DD dates (default: DATES env or next DAYS_AHEAD days).",
    )
    parser.add_argument(
        "--slots-file",
        type=Path,
        default=None,
        help="Scraper JSON export to read (default: SLOTS_FILE env).",
    )
    parser.add_argument(
        "--no-cooldown",
        action="store_true",
        help="Always send 'no availability' notifications (scheduled runs).",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON logs.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL env or INFO).",
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--poll",
        action="store_true",
        help="Keep checking every --interval minutes until interrupted.",
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Print a summary of the stored state as JSON and exit.",
    )
    mode_group.add_argument(
        "--reset-notified",
        action="store_true",
        help="Forget which slots were already notified and exit.",
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Polling interval in minutes (default: POLL_INTERVAL_MINUTES env or 5).",
    )
    return parser.parse_args(argv)


def _apply_overrides(config: WatcherConfig, args: argparse.Namespace) -> WatcherConfig:
    updates: dict = {}
    if args.dates is not None:
        updates["dates"] = args.dates
    if args.slots_file is not None:
        updates["slots_file"] = args.slots_file
    if args.no_cooldown:
        updates["cooldown_enabled"] = False
    if args.json_logs:
        updates["log_json"] = True
    if args.log_level is not None:
        updates["log_level"] = args.log_level
    if args.interval is not None:
        updates["poll_interval_minutes"] = args.interval
    if not updates:
        return config
    # model_copy would skip the field constraints, so validate again
    return WatcherConfig.model_validate({**config.model_dump(), **updates})


def build_store(config: WatcherConfig) -> SlotDiffStore:
    return SlotDiffStore(config.state_file, history_limit=config.notified_history_limit)


def make_runner(config: WatcherConfig):
    """Return a zero-argument callable performing one check with `config`.

    State is reloaded from disk on every call.
    """
    policy = config.cooldown_policy()
    notifier = Notifier(
        config.notification_method,
        config.discord_webhook_url,
        source=config.notification_source,
        timeout=config.webhook_timeout_seconds,
    )
    scraper = ExportFileScraper(config.slots_file)

    def run_once() -> CheckResult:
        return run_check(
            scraper=scraper,
            store=build_store(config),
            gate=NotificationGate(config.cooldown_file, policy),
            notifier=notifier,
            dates=config.target_dates(),
        )

    return run_once


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        config = _apply_overrides(get_config(), args)
    except ValidationError as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    if args.status:
        print(build_store(config).summary().model_dump_json(indent=2))
        return 0

    if args.reset_notified:
        build_store(config).clear_notified_slots()
        return 0

    run_once = make_runner(config)
    log.info(
        "slotwatch_starting",
        target_url=config.target_url,
        slots_file=str(config.slots_file),
        cooldown_enabled=config.cooldown_enabled,
    )

    if args.poll:
        try:
            poll(run_once, config.poll_interval_minutes)
        except KeyboardInterrupt:
            log.info("polling_stopped")
        return 0

    try:
        result = run_once()
    except Exception as e:  # noqa: BLE001
        log.error("check_failed", error=str(e), type=type(e).__name__)
        return 1

    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
