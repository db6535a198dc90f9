"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
shared fixtures for the test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from klangreise.core.exceptions import NetworkError
from klangreise.core.models import Response


if TYPE_CHECKING:
    from pathlib import Path

    from klangreise.core.models import Request


ORIGIN = "https://klangreise.example"

CORE_BODIES = {
    "/": b"<html>home</html>",
    "/index.html": b"<html>home</html>",
    "/manifest.json": b'{"name": "Klangreise"}',
    "/assets/images/icon-192.png": b"png-192",
    "/assets/images/icon-512.png": b"png-512",
    "/assets/images/icon-180.png": b"png-180",
}


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, ports, and services")
    config.addinivalue_line("markers", "network: Network adapters (s3, filesystem)")
    config.addinivalue_line("markers", "cache: Cache storage adapters")
    config.addinivalue_line("markers", "build: Static build step")
    config.addinivalue_line("markers", "progress: Rich progress integration")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line(
        "markers", "tra: Test Responsibility Anchor (TRA) - namespace.Anchor format"
    )
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


class FakeNetwork:
    """Network double serving fixed bodies by path.

    Unknown paths answer 404. Setting offline makes every fetch raise
    NetworkError. counts records how often each path was requested.
    """

    def __init__(self, pages: dict[str, bytes] | None = None) -> None:
        self.pages = dict(CORE_BODIES if pages is None else pages)
        self.offline = False
        self.counts: dict[str, int] = {}

    def fetch(self, request: Request) -> Response:
        self.counts[request.path] = self.counts.get(request.path, 0) + 1
        if self.offline:
            raise NetworkError(f"offline: {request.url}", url=request.url)
        body = self.pages.get(request.path)
        if body is None:
            return Response(b"Not Found", status=404, url=request.url)
        return Response(
            body,
            status=200,
            headers={"Content-Type": "application/octet-stream"},
            url=request.url,
        )


@pytest.fixture
def fake_network() -> FakeNetwork:
    """Network double serving the default core assets."""
    return FakeNetwork()


@pytest.fixture
def memory_storage():
    """Empty in-memory cache storage."""
    from klangreise.adapters.cache import MemoryCacheStorage

    return MemoryCacheStorage()


@pytest.fixture
def controller(memory_storage, fake_network: FakeNetwork):
    """Uninstalled controller over memory storage and the fake network."""
    from klangreise import CacheController

    return CacheController(memory_storage, fake_network, origin=ORIGIN)


@pytest.fixture
def active_controller(controller):
    """Controller that has completed install and activate."""
    controller.install().result()
    controller.activate().result()
    return controller


@pytest.fixture
def site_dist(tmp_path: Path) -> Path:
    """Build directory holding every default core asset."""
    dist = tmp_path / "dist"
    images = dist / "assets" / "images"
    images.mkdir(parents=True)
    (dist / "index.html").write_bytes(CORE_BODIES["/index.html"])
    (dist / "manifest.json").write_bytes(CORE_BODIES["/manifest.json"])
    for size in ("192", "512", "180"):
        (images / f"icon-{size}.png").write_bytes(f"png-{size}".encode())
    return dist
