"""Filesystem network adapter serving a local build directory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from klangreise.adapters.network.paths import INDEX_DOCUMENT, content_type_for, object_key
from klangreise.core.exceptions import NetworkError
from klangreise.core.models import Response, origin_of


if TYPE_CHECKING:
    from pathlib import Path

    from klangreise.core.models import Request


logger = logging.getLogger(__name__)


class FilesystemNetwork:
    """Network adapter answering requests from a build directory.

    Implements NetworkPort. Acts as the origin server for local
    development, the CLI and tests.

    Attributes:
        root: Build directory the origin serves.
        origin: Origin the directory is served under.
        offline: When True every fetch fails as if the network were down.
    """

    def __init__(self, root: Path, origin: str, *, offline: bool = False) -> None:
        self.root = root
        self.origin = origin_of(origin)
        self.offline = offline

    def fetch(self, request: Request) -> Response:
        """Serve request from the build directory.

        Args:
            request: Request for a URL under this origin.

        Returns:
            200 response with the file contents, 404 when the file is missing.

        Raises:
            NetworkError: When offline or when the request targets another origin.
        """
        if self.offline:
            raise NetworkError(f"Network unavailable: {request.url}", url=request.url)
        if request.origin != self.origin:
            raise NetworkError(
                f"Host not reachable from {self.origin}: {request.url}",
                url=request.url,
            )

        try:
            key = object_key(request.path)
        except ValueError:
            return Response(b"Forbidden", status=403, url=request.url)

        path = self.root / key
        if path.is_dir():
            key = f"{key}/{INDEX_DOCUMENT}" if key else INDEX_DOCUMENT
            path = self.root / key

        try:
            body = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            logger.debug("No file for %s under %s", request.url, self.root)
            return Response(
                b"Not Found",
                status=404,
                headers={"content-type": "text/plain"},
                url=request.url,
            )
        except OSError as e:
            raise NetworkError(f"Cannot read {path}", url=request.url, cause=e) from e

        return Response(
            body,
            status=200,
            headers={
                "content-type": content_type_for(key),
                "content-length": str(len(body)),
            },
            url=request.url,
        )
