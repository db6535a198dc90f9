"""File-based cache storage adapter implementing CacheStoragePort."""

from __future__ import annotations

import contextlib
import hashlib
import json
import os
import shutil
import tempfile
import threading
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote

from klangreise.core.exceptions import CacheCorruptError
from klangreise.core.models import CachedEntry


if TYPE_CHECKING:
    import builtins

    from klangreise.core.models import Request, Response


_STORE_MARKER = ".store.json"
_META_SUFFIX = ".meta.json"

# Writers to one entry serialize across every FileCacheStore instance
_entry_locks: dict[Path, threading.Lock] = {}
_entry_locks_guard = threading.Lock()


def _entry_lock(meta_path: Path) -> threading.Lock:
    with _entry_locks_guard:
        lock = _entry_locks.get(meta_path)
        if lock is None:
            lock = threading.Lock()
            _entry_locks[meta_path] = lock
        return lock


def _atomic_write(path: Path, data: bytes) -> None:
    """Write data to path via a temp file and rename."""
    with tempfile.NamedTemporaryFile(delete=False, dir=path.parent) as tmp_file:
        tmp_file.write(data)
        tmp_path = Path(tmp_file.name)
    try:
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


class FileCacheStore:
    """A named store persisted as a directory of entries.

    Each entry is a body file plus a .meta.json sidecar naming it. The
    sidecar is replaced atomically, so readers see either the old or the
    new entry, never a mix.

    Attributes:
        directory: Directory holding the entries.
    """

    def __init__(self, name: str, directory: Path) -> None:
        self._name = name
        self.directory = directory

    @property
    def name(self) -> str:
        """The store name."""
        return self._name

    def _entry_id(self, key: str) -> str:
        return hashlib.sha256(key.encode()).hexdigest()

    def _meta_path(self, key: str) -> Path:
        return self.directory / f"{self._entry_id(key)}{_META_SUFFIX}"

    def _read_meta(self, meta_path: Path) -> dict | None:
        try:
            with meta_path.open() as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise CacheCorruptError(
                f"Cache metadata corrupt in store '{self._name}'",
                store=self._name,
                path=meta_path,
                cause=e,
            ) from e

    def entry(self, key: str) -> CachedEntry | None:
        """Return the stored snapshot for key, or None.

        Raises:
            CacheCorruptError: If the metadata sidecar is unreadable.
        """
        meta = self._read_meta(self._meta_path(key))
        if meta is None:
            return None
        try:
            body = (self.directory / meta["body"]).read_bytes()
        except FileNotFoundError:
            # Replaced by a concurrent write between the two reads
            return None
        except KeyError as e:
            raise CacheCorruptError(
                f"Cache metadata incomplete in store '{self._name}'",
                store=self._name,
                path=self._meta_path(key),
                cause=e,
            ) from e
        return CachedEntry(
            url=meta["url"],
            status=meta["status"],
            headers=meta.get("headers", {}),
            body=body,
            cached_at=datetime.fromisoformat(meta["cached_at"]),
        )

    def match(self, request: Request) -> Response | None:
        """Return a fresh response for the stored entry, or None."""
        if request.method != "GET":
            return None
        entry = self.entry(request.cache_key)
        return entry.to_response() if entry is not None else None

    def put(self, request: Request, response: Response) -> None:
        """Persist a snapshot of response under the request's cache key."""
        entry = CachedEntry.from_response(request, response)
        entry_id = self._entry_id(entry.url)
        meta_path = self.directory / f"{entry_id}{_META_SUFFIX}"

        self.directory.mkdir(parents=True, exist_ok=True)
        body_name = f"{entry_id}.{uuid.uuid4().hex}.body"

        with _entry_lock(meta_path):
            _atomic_write(self.directory / body_name, entry.body)
            data = {
                "url": entry.url,
                "status": entry.status,
                "headers": entry.headers,
                "body": body_name,
                "cached_at": entry.cached_at.isoformat(),
                "written_ns": time.time_ns(),
            }
            _atomic_write(meta_path, json.dumps(data).encode())
            # Also sweeps bodies orphaned by interrupted writers
            self._remove_bodies(entry_id, keep=body_name)

    def _remove_bodies(self, entry_id: str, keep: str | None = None) -> None:
        for body_path in self.directory.glob(f"{entry_id}.*.body"):
            if body_path.name != keep:
                body_path.unlink(missing_ok=True)

    def delete(self, request: Request) -> bool:
        """Remove the entry for request."""
        meta_path = self._meta_path(request.cache_key)
        with _entry_lock(meta_path):
            meta = self._read_meta(meta_path)
            if meta is None:
                return False
            meta_path.unlink(missing_ok=True)
            self._remove_bodies(self._entry_id(request.cache_key))
        return True

    def keys(self) -> builtins.list[str]:
        """List cache keys in write order."""
        if not self.directory.exists():
            return []
        metas = []
        for meta_path in self.directory.glob(f"*{_META_SUFFIX}"):
            meta = self._read_meta(meta_path)
            if meta is not None:
                metas.append(meta)
        metas.sort(key=lambda m: m.get("written_ns", 0))
        return [m["url"] for m in metas]

    def statistics(self) -> dict[str, int]:
        """Get store statistics.

        Returns:
            Dictionary with 'entries' (number of entries) and 'total_size'
            (bytes on disk, sidecars included).
        """
        total_size = 0
        if not self.directory.exists():
            return {"entries": 0, "total_size": 0}

        for file_path in self.directory.iterdir():
            if file_path.is_file():
                with contextlib.suppress(OSError):
                    total_size += file_path.stat().st_size

        return {"entries": len(self.keys()), "total_size": total_size}


class FileCacheStorage:
    """Cache storage persisted under a directory, one subdirectory per store.

    Attributes:
        cache_dir: Directory where stores are kept.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize the storage with a directory path.

        Args:
            cache_dir: Directory where stores will be kept.
        """
        self.cache_dir = cache_dir

    def _store_dir(self, name: str) -> Path:
        if not name or name in {".", ".."}:
            raise ValueError(f"Invalid cache store name: {name!r}")
        return self.cache_dir / quote(name, safe="")

    def open(self, name: str) -> FileCacheStore:
        """Return the store called name, creating it if absent."""
        directory = self._store_dir(name)
        marker = directory / _STORE_MARKER
        if not marker.exists():
            directory.mkdir(parents=True, exist_ok=True)
            _atomic_write(
                marker,
                json.dumps({"name": name, "created_ns": time.time_ns()}).encode(),
            )
        return FileCacheStore(name, directory)

    def has(self, name: str) -> bool:
        """Whether a store called name exists."""
        return (self._store_dir(name) / _STORE_MARKER).exists()

    def delete(self, name: str) -> bool:
        """Drop the store called name with all of its entries."""
        directory = self._store_dir(name)
        if not directory.exists():
            return False
        shutil.rmtree(directory)
        return True

    def keys(self) -> list[str]:
        """List store names in creation order."""
        if not self.cache_dir.exists():
            return []

        stores: list[tuple[int, str]] = []
        for marker in self.cache_dir.glob(f"*/{_STORE_MARKER}"):
            try:
                data = json.loads(marker.read_text())
            except json.JSONDecodeError as e:
                raise CacheCorruptError(
                    "Cache store marker corrupt",
                    store=unquote(marker.parent.name),
                    path=marker,
                    cause=e,
                ) from e
            stores.append((data.get("created_ns", 0), data["name"]))
        return [name for _created, name in sorted(stores)]

    def size(self) -> int:
        """Calculate total size of all stores in bytes."""
        total_size = 0
        if not self.cache_dir.exists():
            return 0

        for file_path in self.cache_dir.rglob("*"):
            if file_path.is_file():
                with contextlib.suppress(OSError):
                    total_size += file_path.stat().st_size

        return total_size
