"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The cache controller
depends only on these protocols, never on a concrete browser storage
backend or network stack.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    import builtins
    from concurrent.futures import Future

    from klangreise.core.models import Request, Response

ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class NetworkPort(Protocol):
    """The network path to the site's origin server."""

    def fetch(self, request: Request) -> Response:
        """Perform the request against the origin.

        HTTP error statuses are returned as responses.

        Raises:
            NetworkError: If the origin cannot be reached.
        """
        ...


@runtime_checkable
class CacheStorePort(Protocol):
    """A single named cache store mapping requests to response snapshots."""

    @property
    def name(self) -> str:
        """The store name (a version tag)."""
        ...

    def match(self, request: Request) -> Response | None:
        """Return a fresh response for the stored entry, or None."""
        ...

    def put(self, request: Request, response: Response) -> None:
        """Store response for request, consuming the response body.

        Raises:
            CacheWriteError: If the request/response pair is not storable.
        """
        ...

    def delete(self, request: Request) -> bool:
        """Remove the entry for request.

        Returns:
            True if an entry was removed.
        """
        ...

    def keys(self) -> builtins.list[str]:
        """List the cache keys of all entries, in write order."""
        ...


@runtime_checkable
class CacheStoragePort(Protocol):
    """The collection of named cache stores for one origin."""

    def open(self, name: str) -> CacheStorePort:
        """Return the store called name, creating it if absent."""
        ...

    def has(self, name: str) -> bool:
        """Whether a store called name exists."""
        ...

    def delete(self, name: str) -> bool:
        """Drop the store called name with all of its entries.

        Returns:
            True if a store was removed.
        """
        ...

    def keys(self) -> builtins.list[str]:
        """List store names in creation order."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports install progress to the user.

    The controller uses this to report how many core assets have been
    fetched without depending on any specific UI library.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a task.

        Args:
            name: Human-readable name for the task.
            total: Total number of steps.

        Returns:
            A ProgressCallback to call with (completed, total).
        """
        ...

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name passed to start_task().
        """
        ...


class NullProgressReporter:
    """A ProgressReporter that produces no output.

    Used as the default when no progress reporting is desired.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:  # noqa: ARG002
        """Return a no-op callback."""
        return lambda _completed, _total: None

    def finish_task(self, name: str) -> None:
        """Do nothing."""
        _ = name  # Unused but required by protocol


@runtime_checkable
class ExecutorPort(Protocol):
    """Executor for lifecycle, fetch and background cache-write tasks.

    Abstracts over concurrent.futures executors so the controller can run
    inline in tests and on a thread pool in the CLI.
    """

    def submit(
        self, fn: Callable[..., object], *args: object, **kwargs: object
    ) -> Future[object]:  # type: ignore[name-defined, unused-ignore]
        """Submit a function for execution.

        Returns:
            Future representing the pending result.
        """
        ...

    def __enter__(self) -> ExecutorPort:
        """Enter context manager."""
        ...

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        """Exit context manager."""
        ...
