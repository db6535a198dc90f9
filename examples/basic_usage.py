"""Basic install, activate and fetch example.

This example shows the simplest usage pattern: wire a controller to a
cache storage and a network, run the lifecycle, and send requests
through it. The controller picks the strategy from each request's
destination.
"""

from pathlib import Path

from klangreise import (
    CacheController,
    FileCacheStorage,
    FilesystemNetwork,
    Request,
)


ORIGIN = "http://localhost:8000"

# Option 1: Manual wiring (full control over adapters)
# Use this when you need a custom network or storage backend
controller = CacheController(
    storage=FileCacheStorage(Path(".klangreise/cache")),
    network=FilesystemNetwork(Path("dist"), origin=ORIGIN),
    origin=ORIGIN,
)

# Option 2: Factory method (recommended for most cases)
# Reads klangreise.toml from the project root and wires the default adapters
# controller = CacheController.from_config(load_config())

# Install stores every core asset; any failure aborts the whole install
controller.install().result()

# Activate drops cache stores left behind by older versions
deleted = controller.activate().result()
print(f"Deleted stale stores: {deleted}")

# Navigations are network-first and refresh the stored copy
page = controller.fetch(Request.for_path(ORIGIN, "/", destination="document"))
print(f"{page.status} from {page.served_from}")

# Other assets are cache-first: the manifest was stored at install time
manifest = controller.fetch(Request.for_path(ORIGIN, "/manifest.json"))
print(f"manifest from {manifest.served_from}")
