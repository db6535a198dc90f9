"""Error handling patterns with recovery hints.

This example demonstrates how to handle common errors and use
the recovery_hint property to provide actionable guidance.
"""

from pathlib import Path

from klangreise import (
    CacheController,
    FilesystemNetwork,
    InstallError,
    # Exceptions
    KlangreiseError,
    LifecycleError,
    MemoryCacheStorage,
    Request,
    RequestFailedError,
)


ORIGIN = "http://localhost:8000"

# A build directory missing some core assets
controller = CacheController(
    MemoryCacheStorage(),
    FilesystemNetwork(Path("incomplete-dist"), origin=ORIGIN),
    origin=ORIGIN,
)

# Pattern 1: Install failures list every asset that could not be fetched
try:
    controller.install().result()
except InstallError as e:
    print(f"Error: {e}")
    for url, reason in e.failures.items():
        print(f"  {url}: {reason}")
    print(f"Hint: {e.recovery_hint}")

# Pattern 2: Lifecycle misuse raises LifecycleError
try:
    controller.activate()
except LifecycleError as e:
    print(f"Error: {e}")  # Cannot activate while redundant

# Pattern 3: Catch-all using the base exception class
healthy = CacheController(
    MemoryCacheStorage(),
    FilesystemNetwork(Path("dist"), origin=ORIGIN, offline=True),
    origin=ORIGIN,
    core_assets=[],
)
healthy.install().result()
healthy.activate().result()
try:
    healthy.fetch(Request.for_path(ORIGIN, "/app.js", "script"))
except RequestFailedError as e:
    print(f"Offline and not cached: {e.url}")
except KlangreiseError as e:
    print(f"Error: {e}")
    if e.recovery_hint:
        print(f"Hint: {e.recovery_hint}")
