"""Background Detection Dispatcher - fire-and-forget detection off the login path."""

import atexit
import logging
import queue
import threading
from dataclasses import dataclass
from typing import List, Optional, Union

from login_sentinel.common.constants import DispatchConstants
from login_sentinel.data.schemas.login_attempt import LoginAttempt
from login_sentinel.detection.brute_force import BruteForceMonitor
from login_sentinel.detection.detector import AnomalyDetector
from login_sentinel.monitoring.metrics import MetricsCollector

logger = logging.getLogger(__name__)

TASK_LOGIN = "login"
TASK_FAILED_ATTEMPT = "failed_attempt"


@dataclass(frozen=True)
class _Task:
    kind: str
    payload: Union[LoginAttempt, str]


class BackgroundDetectionDispatcher:
    """Runs detection on worker threads fed by a bounded queue.

    Submissions never block the caller. When the queue is full the task
    is dropped, logged and counted: under a login storm memory stays
    bounded and the next login acts as a natural retry.
    """

    DEFAULT_QUEUE_SIZE = DispatchConstants.QUEUE_SIZE
    DEFAULT_WORKERS = DispatchConstants.WORKERS
    DEFAULT_FLUSH_TIMEOUT = DispatchConstants.FLUSH_TIMEOUT_SECONDS

    def __init__(
        self,
        detector: AnomalyDetector,
        brute_force_monitor: Optional[BruteForceMonitor] = None,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        num_workers: int = DEFAULT_WORKERS,
        flush_timeout: float = DEFAULT_FLUSH_TIMEOUT,
        metrics: Optional[MetricsCollector] = None,
    ):
        """Initialize the dispatcher and start its workers.

        Args:
            detector: Per-user anomaly detector for successful logins
            brute_force_monitor: IP monitor for failed attempts. Failed
                attempts are ignored if not provided.
            max_queue_size: Maximum number of pending tasks.
            num_workers: Number of worker threads.
            flush_timeout: Timeout for draining the queue on shutdown.
            metrics: Optional collector for dropped-task counts.
        """
        self.detector = detector
        self.brute_force_monitor = brute_force_monitor
        self.max_queue_size = max_queue_size
        self.num_workers = num_workers
        self.flush_timeout = flush_timeout
        self.metrics = metrics

        self._queue: queue.Queue[_Task] = queue.Queue(maxsize=max_queue_size)

        # Shutdown coordination
        self._shutdown_event = threading.Event()
        self._workers: List[threading.Thread] = []

        # Statistics
        self._submitted = 0
        self._processed = 0
        self._dropped = 0
        self._failed = 0
        self._alerts_raised = 0
        self._stats_lock = threading.Lock()

        self._start_workers()
        atexit.register(self.shutdown)

    def _start_workers(self) -> None:
        for i in range(self.num_workers):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"DetectionWorker-{i}",
                daemon=True,
            )
            worker.start()
            self._workers.append(worker)
        logger.info(f"Background detection dispatcher started with {self.num_workers} workers")

    def _worker_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                task = self._queue.get(timeout=DispatchConstants.QUEUE_GET_TIMEOUT)
            except queue.Empty:
                continue

            try:
                self._run(task)
            finally:
                self._queue.task_done()

    def _run(self, task: _Task) -> None:
        try:
            if task.kind == TASK_LOGIN:
                raised = len(self.detector.detect_anomalies(task.payload))
            else:
                raised = 1 if self.brute_force_monitor.detect_brute_force(task.payload) else 0
            with self._stats_lock:
                self._processed += 1
                self._alerts_raised += raised
        except Exception as e:
            with self._stats_lock:
                self._failed += 1
            logger.error(f"Detection task {task.kind} failed: {type(e).__name__}: {e}")

    def _drain_queue(self) -> int:
        drained = 0
        while True:
            try:
                task = self._queue.get_nowait()
            except queue.Empty:
                break
            try:
                self._run(task)
                drained += 1
            finally:
                self._queue.task_done()
        return drained

    def _submit(self, task: _Task) -> bool:
        if self._shutdown_event.is_set():
            logger.warning(f"Dispatcher is shut down, dropping {task.kind} task")
            self._count_drop(task.kind)
            return False

        try:
            self._queue.put_nowait(task)
        except queue.Full:
            logger.error(f"Detection queue full, {task.kind} task dropped")
            self._count_drop(task.kind)
            return False

        with self._stats_lock:
            self._submitted += 1
        return True

    def _count_drop(self, kind: str) -> None:
        with self._stats_lock:
            self._dropped += 1
        if self.metrics is not None:
            self.metrics.record_dispatch_dropped(kind)

    def submit_login(self, attempt: LoginAttempt) -> bool:
        """Queue anomaly detection for a recorded login attempt.

        Failed or anonymous attempts are accepted but produce no alerts.

        Returns:
            True if queued, False if dropped.
        """
        return self._submit(_Task(TASK_LOGIN, attempt))

    def submit_failed_attempt(self, ip_address: str) -> bool:
        """Queue a brute-force check for an IP.

        Returns:
            True if queued, False if dropped or no monitor is configured.
        """
        if self.brute_force_monitor is None:
            return False
        return self._submit(_Task(TASK_FAILED_ATTEMPT, ip_address))

    def submit(self, attempt: LoginAttempt) -> bool:
        """Route a recorded attempt by outcome."""
        if attempt.is_success:
            return self.submit_login(attempt)
        return self.submit_failed_attempt(attempt.ip_address)

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop the workers, then run whatever is still queued.

        Args:
            timeout: Maximum time to wait per worker. Uses default if None.
        """
        if self._shutdown_event.is_set():
            return

        timeout = timeout if timeout is not None else self.flush_timeout

        logger.info("Shutting down background detection dispatcher...")
        self._shutdown_event.set()

        for worker in self._workers:
            if worker.is_alive():
                worker.join(timeout=timeout)
                if worker.is_alive():
                    logger.warning(f"{worker.name} did not stop cleanly")

        drained = self._drain_queue()
        if drained > 0:
            logger.info(f"Drained {drained} detection tasks during shutdown")

        stats = self.get_stats()
        logger.info(
            f"Detection dispatcher shutdown complete. "
            f"Processed: {stats['processed']}, "
            f"Dropped: {stats['dropped']}, "
            f"Failed: {stats['failed']}"
        )

    def flush(self) -> None:
        """Block until every queued task has been processed."""
        self._queue.join()

    def get_stats(self) -> dict:
        """Get dispatcher statistics."""
        with self._stats_lock:
            return {
                "submitted": self._submitted,
                "processed": self._processed,
                "dropped": self._dropped,
                "failed": self._failed,
                "alerts_raised": self._alerts_raised,
                "queue_size": self._queue.qsize(),
                "max_queue_size": self.max_queue_size,
            }

    @property
    def queue_size(self) -> int:
        """Current number of tasks in the queue."""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return not self._shutdown_event.is_set()
