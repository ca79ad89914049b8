"""
wt sweep / wt watch - Run the retention sweep once or on a timer.
"""

import logging
import threading

from worktrack.lib.config import EngineConfig
from worktrack.models import parse_timestamp
from worktrack.notifications import notify_sweep
from worktrack.store.json_store import JsonFileStore
from worktrack.workflow.retention import RetentionPolicy, SweepResult
from worktrack.workflow.scheduler import SweepScheduler

logger = logging.getLogger(__name__)


def format_sweep_result(result: SweepResult) -> str:
    """One-line summary of a sweep."""
    if not result.changed:
        return "No changes"
    parts = []
    if result.faded:
        parts.append(f"{len(result.faded)} marked expiring")
    if result.purged_expired:
        parts.append(f"{len(result.purged_expired)} expired item(s) removed")
    if result.purged_archived:
        parts.append(f"{len(result.purged_archived)} archived project(s) removed")
    return ", ".join(parts)


def _scheduler(config: EngineConfig, on_change=None) -> SweepScheduler:
    return SweepScheduler(
        JsonFileStore.from_config(config),
        interval=config.sweep_interval_seconds,
        policy=RetentionPolicy.from_config(config),
        on_change=on_change,
    )


def cmd_sweep(args, config: EngineConfig) -> int:
    """Run a single sweep, optionally as of a given instant."""
    now = None
    if getattr(args, 'at', None):
        try:
            now = parse_timestamp(args.at)
        except ValueError:
            print(f"ERROR: Invalid timestamp '{args.at}' (expected ISO-8601)")
            return 2

    result = _scheduler(config).run_once(now)
    if result is None:
        print("ERROR: Store unavailable, sweep skipped")
        return 2

    print(format_sweep_result(result))
    return 0


def cmd_watch(args, config: EngineConfig, stop_event: threading.Event | None = None) -> int:
    """Sweep on a timer until interrupted (Ctrl-C)."""
    def on_change(result: SweepResult) -> None:
        print(format_sweep_result(result), flush=True)
        if config.notifications and not args.quiet:
            notify_sweep(result)

    stop_event = stop_event or threading.Event()
    scheduler = _scheduler(config, on_change)

    print(f"Watching {config.store_path} (every {config.sweep_interval_seconds:g}s). Ctrl-C to stop.")
    scheduler.start(immediate=True)
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        print()
    finally:
        scheduler.stop()

    print("Stopped.")
    return 0
