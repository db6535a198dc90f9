"""Lifecycle and fetch events handed to the cache controller.

An event carries the extend-lifetime contract: every piece of asynchronous
work started on its behalf is registered with wait_until() so the host can
keep the task alive until that work settles.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, wait
from typing import TYPE_CHECKING

from klangreise.core.exceptions import LifecycleError


if TYPE_CHECKING:
    from klangreise.core.models import Request, Response


class ExtendableEvent:
    """An event whose lifetime can be extended by pending futures."""

    def __init__(self) -> None:
        self._pending: list[Future[object]] = []
        self._lock = threading.Lock()

    @property
    def pending(self) -> list[Future[object]]:
        """Futures registered through wait_until()."""
        with self._lock:
            return list(self._pending)

    def wait_until(self, future: Future[object]) -> None:
        """Keep the event alive until future settles."""
        with self._lock:
            self._pending.append(future)

    def settle(self, timeout: float | None = None) -> list[BaseException]:
        """Wait for all registered work and return the failures.

        Work registered while waiting is waited for as well.

        Args:
            timeout: Seconds to wait per round, None waits indefinitely.

        Returns:
            Exceptions raised by failed futures, empty when all succeeded.
        """
        seen: set[int] = set()
        while True:
            batch = [f for f in self.pending if id(f) not in seen]
            if not batch:
                break
            wait(batch, timeout=timeout)
            seen.update(id(f) for f in batch)

        errors: list[BaseException] = []
        for future in self.pending:
            if not future.done():
                continue
            exc = future.exception()
            if exc is not None:
                errors.append(exc)
        return errors


class FetchEvent(ExtendableEvent):
    """An intercepted request from a controlled page.

    Attributes:
        request: The request being made.
    """

    def __init__(self, request: Request) -> None:
        super().__init__()
        self.request = request
        self._response: Future[Response] | None = None

    @property
    def handled(self) -> bool:
        """Whether a handler called respond_with()."""
        return self._response is not None

    def respond_with(self, future: Future[Response]) -> None:
        """Answer the request with the result of future.

        Raises:
            LifecycleError: If the event was already responded to.
        """
        if self._response is not None:
            raise LifecycleError("responded", "respond twice to a fetch event")
        self._response = future

    def response(self, timeout: float | None = None) -> Response | None:
        """Return the response, or None when the event was not handled.

        Raises:
            RequestFailedError: If neither network nor cache could answer.
        """
        if self._response is None:
            return None
        return self._response.result(timeout=timeout)
