"""In-memory cache storage adapter implementing CacheStoragePort."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from klangreise.core.models import CachedEntry


if TYPE_CHECKING:
    import builtins

    from klangreise.core.models import Request, Response


class MemoryCacheStore:
    """A named store keeping response snapshots in a dict.

    Safe for concurrent use; writes to the same key are last-write-wins.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._entries: dict[str, CachedEntry] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """The store name."""
        return self._name

    def match(self, request: Request) -> Response | None:
        """Return a fresh response for the stored entry, or None."""
        if request.method != "GET":
            return None
        with self._lock:
            entry = self._entries.get(request.cache_key)
        return entry.to_response() if entry is not None else None

    def put(self, request: Request, response: Response) -> None:
        """Snapshot response under the request's cache key."""
        entry = CachedEntry.from_response(request, response)
        with self._lock:
            self._entries.pop(entry.url, None)
            self._entries[entry.url] = entry

    def delete(self, request: Request) -> bool:
        """Remove the entry for request."""
        with self._lock:
            return self._entries.pop(request.cache_key, None) is not None

    def keys(self) -> builtins.list[str]:
        """List cache keys in write order."""
        with self._lock:
            return list(self._entries)

    def entry(self, key: str) -> CachedEntry | None:
        """Return the raw snapshot stored under key."""
        with self._lock:
            return self._entries.get(key)


class MemoryCacheStorage:
    """Cache storage living for the lifetime of the process.

    Used as the fake browser storage backend in tests and examples.
    """

    def __init__(self) -> None:
        self._stores: dict[str, MemoryCacheStore] = {}
        self._lock = threading.Lock()

    def open(self, name: str) -> MemoryCacheStore:
        """Return the store called name, creating it if absent."""
        with self._lock:
            store = self._stores.get(name)
            if store is None:
                store = MemoryCacheStore(name)
                self._stores[name] = store
            return store

    def has(self, name: str) -> bool:
        """Whether a store called name exists."""
        with self._lock:
            return name in self._stores

    def delete(self, name: str) -> bool:
        """Drop the store called name."""
        with self._lock:
            return self._stores.pop(name, None) is not None

    def keys(self) -> list[str]:
        """List store names in creation order."""
        with self._lock:
            return list(self._stores)
