"""Core domain module for klangreise.

This module contains pure Python domain models and port definitions.
It has no I/O dependencies and can be tested in isolation.
"""

from klangreise.core.models import CachedEntry, Request, RequestKind, Response, WorkerState
from klangreise.core.ports import (
    CacheStoragePort,
    CacheStorePort,
    ExecutorPort,
    NetworkPort,
    ProgressReporter,
)


__all__ = [
    "CacheStoragePort",
    "CacheStorePort",
    "CachedEntry",
    "ExecutorPort",
    "NetworkPort",
    "ProgressReporter",
    "Request",
    "RequestKind",
    "Response",
    "WorkerState",
]
