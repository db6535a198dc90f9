"""Request classification for the fetch interceptor.

Both functions are pure: they look at one request and nothing else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from klangreise.core.models import RequestKind, origin_of


if TYPE_CHECKING:
    from klangreise.core.models import Request


MEDIA_DESTINATIONS = frozenset({"audio", "video"})
DOCUMENT_DESTINATIONS = frozenset({"document"})


def classify(request: Request) -> RequestKind:
    """Classify a request by its declared destination.

    Args:
        request: The intercepted request.

    Returns:
        MEDIA for audio/video, DOCUMENT for documents, OTHER for the rest.
    """
    destination = request.destination.lower()
    if destination in MEDIA_DESTINATIONS:
        return RequestKind.MEDIA
    if destination in DOCUMENT_DESTINATIONS:
        return RequestKind.DOCUMENT
    return RequestKind.OTHER


def should_intercept(request: Request, origin: str) -> bool:
    """Whether the controller handles request at all.

    Only same-origin GET requests are intercepted; everything else goes
    to the network untouched.

    Args:
        request: The outgoing request.
        origin: The controller's own origin.
    """
    if request.method != "GET":
        return False
    return request.origin == origin_of(origin)
