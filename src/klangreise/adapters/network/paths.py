"""URL path helpers shared by the network adapters."""

from __future__ import annotations

import mimetypes
from urllib.parse import unquote


INDEX_DOCUMENT = "index.html"


def object_key(url_path: str) -> str:
    """Map a URL path to a relative object key in a deployed build.

    "/" and paths ending in "/" resolve to their index document.

    Args:
        url_path: Path component of a request URL.

    Returns:
        Relative key such as "assets/images/icon-192.png".

    Raises:
        ValueError: If the path escapes the build root.
    """
    path = unquote(url_path or "/")
    if path.endswith("/"):
        path += INDEX_DOCUMENT
    parts = [p for p in path.split("/") if p]
    if any(p in {".", ".."} for p in parts):
        raise ValueError(f"Path escapes the site root: {url_path}")
    return "/".join(parts)


def content_type_for(key: str) -> str:
    """Guess a Content-Type for an object key."""
    guessed, _encoding = mimetypes.guess_type(key)
    if key.endswith(".webmanifest") or key.endswith("manifest.json"):
        return "application/manifest+json"
    return guessed or "application/octet-stream"
