"""Domain exceptions for klangreise.

All library errors inherit from KlangreiseError, allowing callers to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


class KlangreiseError(Exception):
    """Base class for all klangreise exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class ConfigurationError(KlangreiseError):
    """Raised for configuration problems (invalid or unreadable settings)."""

    pass


class BuildError(KlangreiseError):
    """Raised when the static build cannot produce a deployable directory.

    Attributes:
        path: The file or directory that caused the failure.
    """

    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest checking the offending path."""
        return f"Check that {self.path} exists and is readable"


class NetworkError(KlangreiseError):
    """Raised when the origin cannot be reached for a request.

    HTTP error statuses are not network errors: a 404 is a response.

    Attributes:
        url: The request URL that failed.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        url: str,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest checking connectivity."""
        return f"Check connectivity to the origin serving {self.url}"


class CacheError(KlangreiseError):
    """Base class for cache-related errors."""

    pass


class CacheCorruptError(CacheError):
    """Raised when a stored entry is corrupt or unreadable.

    Attributes:
        store: Name of the cache store holding the entry.
        path: The path to the corrupt file.
    """

    def __init__(
        self,
        message: str,
        store: str,
        path: Path,
        cause: Exception | None = None,
    ) -> None:
        self.store = store
        self.path = path
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest dropping the corrupt store."""
        return f"Delete cache store '{self.store}' and reinstall"


class CacheWriteError(CacheError):
    """Raised when a request/response pair cannot be stored.

    Attributes:
        url: The request URL that was rejected.
    """

    def __init__(self, message: str, url: str) -> None:
        self.url = url
        super().__init__(message)


class BodyConsumedError(KlangreiseError):
    """Raised when a response body is read or cloned after being consumed."""

    @property
    def recovery_hint(self) -> str:
        """Suggest cloning before reading."""
        return "Call clone() before the body is read"


class InstallError(KlangreiseError):
    """Raised when core assets cannot be fetched during install.

    Attributes:
        version: The version tag that failed to install.
        failures: Mapping of core asset URL to failure reason.
    """

    def __init__(self, version: str, failures: dict[str, str]) -> None:
        self.version = version
        self.failures = failures
        urls = ", ".join(failures)
        super().__init__(f"Install of '{version}' failed for: {urls}")

    @property
    def recovery_hint(self) -> str:
        """Suggest rebuilding or fixing connectivity."""
        return "Make sure every core asset exists in the build and the origin is reachable"


class LifecycleError(KlangreiseError):
    """Raised when a lifecycle operation is not allowed in the current state.

    Attributes:
        state: The controller state when the operation was attempted.
        action: The attempted operation.
    """

    def __init__(self, state: str, action: str) -> None:
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while {state}")


class RequestFailedError(KlangreiseError):
    """Raised when neither the network nor the cache can answer a request.

    Attributes:
        url: The request URL.
        cause: The network error that triggered the fallback, if any.
    """

    def __init__(self, url: str, cause: Exception | None = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"No network or cached response for {url}")

    @property
    def recovery_hint(self) -> str:
        """Suggest reconnecting."""
        return "The resource is not available offline; reconnect and retry"
