"""Shared thread pool for rule evaluation and bounded history queries."""

import atexit
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from login_sentinel.common.constants import DetectionConstants

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Module-level shared executor for performance
_shared_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_shared_executor(max_workers: int = DetectionConstants.MAX_RULE_WORKERS) -> ThreadPoolExecutor:
    """Get or create the shared thread pool executor.

    Reuses a module-level executor to avoid thread creation overhead per login.
    """
    global _shared_executor

    with _executor_lock:
        if _shared_executor is None:
            _shared_executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix="RuleWorker"
            )
            atexit.register(shutdown_shared_executor)
            logger.info(f"Created shared rule executor with {max_workers} workers")

    return _shared_executor


def shutdown_shared_executor() -> None:
    """Shutdown the shared executor on process exit."""
    global _shared_executor
    with _executor_lock:
        if _shared_executor is not None:
            _shared_executor.shutdown(wait=True, cancel_futures=False)
            logger.info("Shared rule executor shutdown complete")
            _shared_executor = None


def call_with_timeout(
    fn: Callable[..., T],
    *args,
    timeout: float,
    executor: Optional[ThreadPoolExecutor] = None,
) -> T:
    """Run `fn` on the executor and wait at most `timeout` seconds.

    Raises:
        concurrent.futures.TimeoutError: If the call does not finish in time.
            The call itself keeps running to completion in the background.
    """
    pool = executor or get_shared_executor()
    return pool.submit(fn, *args).result(timeout=timeout)
