"""Sweep Scheduler - runs the retention sweeper on a fixed interval."""

import atexit
import logging
import threading
from datetime import timedelta
from typing import Optional

from login_sentinel.retention.sweeper import AlertRetentionSweeper, SweepResult

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Background thread that ticks the sweeper every `interval`.

    Every instance of a horizontally scaled deployment may run one of
    these; the sweeper's lease keeps deletion to one instance per tick.
    """

    def __init__(
        self,
        sweeper: AlertRetentionSweeper,
        interval: Optional[timedelta] = None,
        run_immediately: bool = False,
    ):
        self.sweeper = sweeper
        self.interval = interval or sweeper.config.sweep_interval
        self.run_immediately = run_immediately
        self.last_result: Optional[SweepResult] = None
        self.ticks = 0

        self._shutdown_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._shutdown_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="AlertRetentionSweep",
            daemon=True,
        )
        self._thread.start()
        atexit.register(self.shutdown)
        logger.info(f"Sweep scheduler started (interval={self.interval})")

    def _loop(self) -> None:
        if self.run_immediately:
            self._tick()
        while not self._shutdown_event.wait(self.interval.total_seconds()):
            self._tick()
        logger.info("Sweep scheduler stopped")

    def _tick(self) -> None:
        try:
            self.last_result = self.sweeper.run_once()
        except Exception as e:
            logger.error(f"Unexpected error in sweep scheduler: {e}")
        self.ticks += 1

    def shutdown(self, timeout: float = 5.0) -> None:
        self._shutdown_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Sweep scheduler did not stop cleanly")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
