# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - SCHEDULER
# =============================================================================
#
# Idle -> Running -> Idle -> Running -> ...
#
# Runs a reconciliation cycle, waits for it to finish, sleeps a fixed
# interval, repeats. The interval is measured from the END of one cycle to
# the START of the next (cadence = interval + cycle duration).
#
# The stop signal is only observed while sleeping between cycles; a cycle
# that has started always runs to completion.
#
# =============================================================================

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Drives a Reconciler on a fixed interval on a single worker.

    Usage:
        scheduler = Scheduler(reconciler, interval_seconds=300)
        scheduler.run()          # blocking, until stop()
        # or
        scheduler.start()        # background thread
        scheduler.stop(); scheduler.join()
    """

    def __init__(
        self,
        reconciler,
        interval_seconds: float,
        stop_event: Optional[threading.Event] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.reconciler = reconciler
        self.interval_seconds = interval_seconds
        self._stop_event = stop_event or threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.cycles_run = 0
        self.last_result = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Run cycles until stopped (or max_cycles reached).

        Args:
            max_cycles: Optional upper bound on cycles (None = forever)

        Returns:
            Number of cycles executed by this call
        """
        logger.info(f"Scheduler started (interval={self.interval_seconds:g}s)")
        executed = 0

        while not self._stop_event.is_set():
            try:
                self.last_result = self.reconciler.run_cycle()
            except Exception:
                # Per-cycle errors never terminate the loop
                logger.exception("Unexpected error during cycle")
            executed += 1
            self.cycles_run += 1

            if max_cycles is not None and executed >= max_cycles:
                break

            if self._stop_event.wait(self.interval_seconds):
                break

        logger.info(f"Scheduler stopped after {executed} cycle(s)")
        return executed

    def start(self) -> threading.Thread:
        """Run the loop on a background daemon thread."""
        if self.running:
            raise RuntimeError("Scheduler is already running")
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, name="proposal-scheduler", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Request a stop; takes effect before the next cycle starts."""
        if not self._stop_event.is_set():
            logger.info("Scheduler stop requested")
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the background thread.

        Returns:
            True if the thread has finished
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()
