"""Core domain models for klangreise.

These models are pure Python with no I/O dependencies. They describe the
requests a page makes, the responses it receives and the snapshots the
cache keeps of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Self
from urllib.parse import urldefrag, urljoin, urlsplit

from klangreise.core.exceptions import BodyConsumedError, CacheWriteError


_DEFAULT_PORTS = {"http": 80, "https": 443}


class RequestKind(StrEnum):
    """Classification of an intercepted request, selects the fetch strategy."""

    DOCUMENT = "document"
    MEDIA = "media"
    OTHER = "other"


class WorkerState(StrEnum):
    """Lifecycle states of a cache controller."""

    UNINSTALLED = "uninstalled"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


def origin_of(url: str) -> str:
    """Return the scheme://host[:port] origin of an absolute URL.

    Default ports are elided so that "http://example.com:80" and
    "http://example.com" compare equal.

    Args:
        url: Absolute URL.

    Returns:
        The origin string, lowercased scheme and host.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    port = parts.port
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


@dataclass(frozen=True, slots=True)
class Request:
    """An outgoing request made by a controlled page.

    Attributes:
        url: Absolute request URL.
        method: HTTP method, upper case.
        destination: What the page will use the response for ("document",
            "audio", "video", "script", "style", "image", "font", or "").

    Example:
        >>> req = Request.for_path("https://klangreise.example", "/index.html")
        >>> req.url
        'https://klangreise.example/index.html'
    """

    url: str
    method: str = "GET"
    destination: str = ""

    def __post_init__(self) -> None:
        """Validate request fields after initialization."""
        if not self.url:
            raise ValueError("Request url cannot be empty")
        parts = urlsplit(self.url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Request url must be absolute: {self.url}")
        try:
            origin_of(self.url)
        except ValueError as e:
            raise ValueError(f"Request url has an invalid port: {self.url}") from e
        if self.method != self.method.upper():
            raise ValueError(f"Request method must be upper case: {self.method}")

    @classmethod
    def for_path(cls, origin: str, path: str, destination: str = "") -> Self:
        """Build a GET request for a site-relative path under origin."""
        return cls(url=urljoin(origin, path), destination=destination)

    @property
    def origin(self) -> str:
        """Origin (scheme, host and port) of the request URL."""
        return origin_of(self.url)

    @property
    def path(self) -> str:
        """URL path, "/" when empty."""
        return urlsplit(self.url).path or "/"

    @property
    def cache_key(self) -> str:
        """Identity under which the request is stored: the URL sans fragment."""
        return urldefrag(self.url).url


class Response:
    """A response whose body can be read exactly once.

    Mirrors the single-read constraint of streamed HTTP bodies: whoever
    wants a second copy (the cache) must clone() before the page reads it.

    Attributes:
        status: HTTP status code.
        headers: Response headers with lower-cased names.
        url: URL the response was produced for.
        served_from: "network" or "cache".
    """

    __slots__ = ("_body", "_body_used", "headers", "served_from", "status", "url")

    def __init__(
        self,
        body: bytes = b"",
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
        url: str = "",
        served_from: str = "network",
    ) -> None:
        self._body = body
        self._body_used = False
        self.status = status
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.url = url
        self.served_from = served_from

    def __repr__(self) -> str:
        return (
            f"Response(status={self.status}, url={self.url!r}, "
            f"served_from={self.served_from!r})"
        )

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    @property
    def body_used(self) -> bool:
        """Whether the body has already been read."""
        return self._body_used

    @property
    def content_type(self) -> str | None:
        """Value of the Content-Type header, if any."""
        return self.headers.get("content-type")

    def read(self) -> bytes:
        """Consume and return the body.

        Raises:
            BodyConsumedError: If the body was already read.
        """
        if self._body_used:
            raise BodyConsumedError(f"Response body for {self.url} already read")
        self._body_used = True
        return self._body

    def clone(self) -> Response:
        """Return an independent, unread copy of this response.

        Raises:
            BodyConsumedError: If the body was already read.
        """
        if self._body_used:
            raise BodyConsumedError(f"Cannot clone consumed response for {self.url}")
        return Response(
            self._body,
            status=self.status,
            headers=dict(self.headers),
            url=self.url,
            served_from=self.served_from,
        )


@dataclass(frozen=True, slots=True)
class CachedEntry:
    """Snapshot of a response stored in a cache store.

    The body is captured at write time; every match() hands out a fresh,
    unread Response built from the snapshot.

    Attributes:
        url: Cache key of the request the entry answers.
        status: Stored HTTP status.
        headers: Stored headers (lower-cased names).
        body: Stored body bytes.
        cached_at: When the entry was written.
    """

    url: str
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    cached_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_response(cls, request: Request, response: Response) -> Self:
        """Snapshot response for request, consuming the response body.

        Raises:
            CacheWriteError: If the pair is not storable.
        """
        ensure_storable(request, response)
        return cls(
            url=request.cache_key,
            status=response.status,
            headers=dict(response.headers),
            body=response.read(),
        )

    def to_response(self) -> Response:
        """Build a fresh response from the snapshot."""
        return Response(
            self.body,
            status=self.status,
            headers=dict(self.headers),
            url=self.url,
            served_from="cache",
        )


def ensure_storable(request: Request, response: Response) -> None:
    """Check that a request/response pair may be written to a cache store.

    Only GET requests are cacheable and partial content is refused.

    Raises:
        CacheWriteError: If the pair cannot be stored.
    """
    if request.method != "GET":
        raise CacheWriteError(
            f"Only GET requests can be cached, got {request.method}",
            url=request.url,
        )
    if response.status == 206:
        raise CacheWriteError("Partial responses cannot be cached", url=request.url)
    if response.body_used:
        raise BodyConsumedError(f"Response body for {request.url} already read")
