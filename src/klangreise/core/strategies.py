"""Fetch strategy implementations for CacheController.

This module contains the per-classification fetch logic that the
controller delegates to. These are implementation details and should not
be used directly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from klangreise.core.exceptions import CacheCorruptError, NetworkError, RequestFailedError


if TYPE_CHECKING:
    from klangreise.core.models import Request, Response
    from klangreise.core.ports import CacheStorePort, NetworkPort

# Queues a cache write without waiting for it
ScheduleWrite = Callable[["Request", "Response"], None]

logger = logging.getLogger(__name__)


def _match(store: CacheStorePort, request: Request) -> Response | None:
    """Look request up in store, treating an unreadable entry as a miss."""
    try:
        return store.match(request)
    except CacheCorruptError as e:
        logger.warning("Ignoring corrupt cache entry for %s: %s", request.url, e)
        return None


def network_only_with_cache_fallback(
    request: Request,
    network: NetworkPort,
    store: CacheStorePort,
) -> Response:
    """Media strategy: network, then the store; never writes."""
    try:
        return network.fetch(request)
    except NetworkError as e:
        cached = _match(store, request)
        if cached is None:
            raise RequestFailedError(request.url, cause=e) from e
        logger.warning("Network failed for %s, serving cached media", request.url)
        return cached


def network_first(
    request: Request,
    network: NetworkPort,
    store: CacheStorePort,
    schedule_write: ScheduleWrite,
    fallbacks: Sequence[Request] = (),
) -> Response:
    """Document strategy: network with cache update, offline fallbacks."""
    try:
        response = network.fetch(request)
    except NetworkError as e:
        cached = _match(store, request)
        if cached is not None:
            logger.warning("Network failed for %s, serving cached copy", request.url)
            return cached
        for fallback in fallbacks:
            cached = _match(store, fallback)
            if cached is not None:
                logger.warning(
                    "Network failed for %s, serving offline fallback %s",
                    request.url,
                    fallback.url,
                )
                return cached
        raise RequestFailedError(request.url, cause=e) from e

    schedule_write(request, response.clone())
    return response


def cache_first(
    request: Request,
    network: NetworkPort,
    store: CacheStorePort,
    schedule_write: ScheduleWrite,
) -> Response:
    """Default strategy: the store, filled from the network on a miss."""
    cached = _match(store, request)
    if cached is not None:
        logger.debug("Cache hit for %s", request.url)
        return cached

    try:
        response = network.fetch(request)
    except NetworkError as e:
        raise RequestFailedError(request.url, cause=e) from e

    schedule_write(request, response.clone())
    return response
