"""Cache storage adapters."""

from klangreise.adapters.cache.file_cache import FileCacheStorage, FileCacheStore
from klangreise.adapters.cache.memory import MemoryCacheStorage, MemoryCacheStore


__all__ = ["FileCacheStorage", "FileCacheStore", "MemoryCacheStorage", "MemoryCacheStore"]
