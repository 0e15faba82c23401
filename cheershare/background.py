import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class TaskTracker:
    """Runs fire-and-forget work off the request path.

    Every submitted task is registered until it finishes so shutdown can block
    on outstanding work (e.g. an SMS still being retried) before the process
    exits. Failures are logged; they never reach the request that queued them.
    """

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "cheershare-bg"):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._futures: Set[Future] = set()
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._futures)

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        future = self._executor.submit(self._run, fn, *args, **kwargs)
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._discard)
        return future

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every registered task is done. False on timeout."""
        with self._lock:
            futures = list(self._futures)
        if not futures:
            return True
        logger.info(f"Waiting for {len(futures)} background task(s) to complete")
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        self.wait()
        self._executor.shutdown(wait=True)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    @staticmethod
    def _run(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception:
            logger.exception(f"Background task {getattr(fn, '__qualname__', fn)} failed")
            return None
