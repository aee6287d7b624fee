"""
BatchScheduler -- In-process timer driving the batch cycle.

Contract:
    Every ``interval_seconds`` the background thread calls ``tick()``:
    reconcile open batches, then run one cycle.  Missed ticks are not
    queued; an overrunning cycle makes the next tick a skip.

Invariants enforced:
    - Single flight (delegated to BatchCycle's guard).
    - Graceful shutdown: ``stop()`` lets the cycle in flight finish.

Non-goals:
    - NOT a distributed scheduler (no leader election).
"""

from __future__ import annotations

import threading

from darkpool_kernel.logging_config import get_logger

from darkpool_batch.domain.types import CycleResult
from darkpool_batch.services.cycle import BatchCycle

logger = get_logger("batch.scheduler")


class BatchScheduler:
    """Runs a BatchCycle on a fixed interval in a daemon thread."""

    def __init__(
        self,
        cycle: BatchCycle,
        interval_seconds: int = 30,
        reconcile_each_tick: bool = True,
    ):
        self._cycle = cycle
        self._interval = interval_seconds
        self._reconcile_each_tick = reconcile_each_tick
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> int:
        return self._interval

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def tick(self) -> CycleResult:
        """Reconcile, then run one cycle (public for testing)."""
        if self._reconcile_each_tick:
            self._cycle.reconcile()
        return self._cycle.run()

    def start(self) -> None:
        """Start the scheduler in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="batch-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("scheduler_started", extra={"interval_seconds": self._interval})

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current cycle to finish.

        Args:
            timeout: Max seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        """Background loop. Exits when stop_event is set."""
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("scheduler_tick_exception")
            self._stop_event.wait(timeout=self._interval)
