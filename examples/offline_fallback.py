"""Offline behavior of the three request classes.

Simulates a network outage after install to show what each strategy
does without a connection:
- documents fall back to the stored page, then /index.html, then /
- other assets keep working when they were cached
- audio and video fail unless an entry happens to exist
"""

from pathlib import Path

from klangreise import (
    CacheController,
    FilesystemNetwork,
    MemoryCacheStorage,
    Request,
    RequestFailedError,
)


ORIGIN = "http://localhost:8000"

network = FilesystemNetwork(Path("dist"), origin=ORIGIN)
controller = CacheController(MemoryCacheStorage(), network, origin=ORIGIN)
controller.install().result()
controller.activate().result()

# Pull the plug
network.offline = True

# A page never visited before still opens: the stored /index.html answers
page = controller.fetch(Request.for_path(ORIGIN, "/kapitel-3", destination="document"))
print(f"document: {page.status} from {page.served_from} ({page.url})")

icon = controller.fetch(Request.for_path(ORIGIN, "/assets/images/icon-192.png", "image"))
print(f"icon: {icon.status} from {icon.served_from}")

try:
    controller.fetch(Request.for_path(ORIGIN, "/sounds/meer.mp3", destination="audio"))
except RequestFailedError as e:
    print(f"audio: {e}")
