"""
Periodic retention sweep.

SweepScheduler owns one background thread that runs the retention sweep
against a store at a fixed interval. It holds no business state: each tick is
load -> sweep -> save (if changed) -> notify, under the store's lock.

Usage:
    with SweepScheduler(store, interval=60, on_change=refresh_view):
        serve_forever()
"""

import logging
import threading
from datetime import datetime
from typing import Callable

from worktrack.lib.config import DEFAULT_SWEEP_INTERVAL_SECONDS
from worktrack.lib.errors import StoreUnavailable
from worktrack.models import utcnow
from worktrack.store.base import Store
from worktrack.workflow.retention import RetentionPolicy, SweepResult, sweep

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Drives the retention sweep on a repeating timer."""

    def __init__(
        self,
        store: Store,
        interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        policy: RetentionPolicy | None = None,
        on_change: Callable[[SweepResult], None] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.store = store
        self.interval = interval
        self.policy = policy or RetentionPolicy()
        self.on_change = on_change
        self.clock = clock

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self, now: datetime | None = None) -> SweepResult | None:
        """Run a single sweep.

        Returns the SweepResult, or None if the store was unavailable (the
        failure is logged; the next tick tries again).
        """
        now = now or self.clock()
        try:
            with self.store.transaction() as txn:
                result = sweep(txn.items, now, self.policy)
                if result.changed:
                    txn.commit(result.items)
        except StoreUnavailable as e:
            logger.warning(f"[SCHEDULER] Sweep skipped, store unavailable: {e}")
            return None

        if result.changed and self.on_change:
            try:
                self.on_change(result)
            except Exception as e:
                logger.exception(f"[SCHEDULER] on_change callback failed: {e}")

        return result

    def start(self, immediate: bool = False) -> None:
        """Start the timer thread.

        Each run gets its own stop event, so a thread left behind by a
        timed-out stop() still exits once its current tick returns.

        Args:
            immediate: Run the first sweep right away instead of after one interval

        Raises:
            RuntimeError: if already running
        """
        if self.running:
            raise RuntimeError("SweepScheduler already started")

        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._stop_event, immediate),
            name="worktrack-sweep",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"[SCHEDULER] Started, interval {self.interval:g}s")

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer thread and wait for it. Safe to call more than once.

        No tick starts after stop() returns; a tick already in progress is
        allowed to finish.
        """
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(f"[SCHEDULER] Tick still running after {timeout:g}s, thread exits when it returns")
        self._thread = None
        logger.info("[SCHEDULER] Stopped")

    def _tick(self) -> None:
        try:
            self.run_once()
        except Exception as e:
            # Keep the timer alive; the next tick starts from a fresh load
            logger.exception(f"[SCHEDULER] Sweep failed: {e}")

    def _loop(self, stop_event: threading.Event, immediate: bool) -> None:
        if immediate and not stop_event.is_set():
            self._tick()
        # wait() returns True once this run's stop() is called
        while not stop_event.wait(self.interval):
            self._tick()

    def __enter__(self) -> "SweepScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
