"""Executor adapters implementing ExecutorPort."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


class InlineExecutor:
    """Runs every task immediately in the calling thread.

    Background cache writes therefore finish before the response is handed
    back, which keeps tests deterministic. Errors are captured on the
    returned future, never raised from submit().
    """

    def submit(
        self,
        fn: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> Future[object]:
        """Run fn now and return a completed future holding its outcome."""
        future: Future[object] = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future

    def __enter__(self) -> InlineExecutor:
        """Enter context manager."""
        return self

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        """Exit context manager (nothing to shut down)."""
        return None


class ThreadPoolExecutorAdapter:
    """ExecutorPort backed by a ThreadPoolExecutor.

    Fetch responses and their background cache writes run as separate
    tasks, so a write may still be in flight after the page got its
    response. Leaving the context manager waits for all of them.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        """Initialize the pool.

        Args:
            max_workers: Maximum number of worker threads. None uses default.
        """
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="klangreise"
        )

    def submit(
        self,
        fn: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> Future[object]:
        """Queue fn on the pool."""
        return self._executor.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks, optionally waiting for queued ones."""
        logger.debug("Shutting down executor (wait=%s)", wait)
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ThreadPoolExecutorAdapter:
        """Enter context manager."""
        return self

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        """Exit context manager, waiting for pending tasks."""
        self.shutdown(wait=True)
        return None
