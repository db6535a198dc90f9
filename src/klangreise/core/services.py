"""Core domain services for klangreise."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Sequence
from concurrent.futures import Future
from typing import TYPE_CHECKING

from klangreise.config import (
    CORE_ASSETS,
    DEFAULT_CACHE_VERSION,
    DEFAULT_ORIGIN,
    OFFLINE_FALLBACKS,
)
from klangreise.core import strategies
from klangreise.core.classification import classify, should_intercept
from klangreise.core.events import ExtendableEvent, FetchEvent
from klangreise.core.exceptions import InstallError, LifecycleError, NetworkError
from klangreise.core.models import Request, RequestKind, Response, WorkerState
from klangreise.core.ports import NullProgressReporter


if TYPE_CHECKING:
    from klangreise.config import SiteConfig
    from klangreise.core.ports import (
        CacheStoragePort,
        CacheStorePort,
        ExecutorPort,
        NetworkPort,
        ProgressReporter,
    )


logger = logging.getLogger(__name__)


class CacheController:
    """Applies the offline cache policy to every request of a site.

    Owns the lifecycle of the versioned cache store: install fills it with
    the core assets, activate drops every other version, and handle_fetch
    answers intercepted requests according to their classification.
    """

    def __init__(
        self,
        storage: CacheStoragePort,
        network: NetworkPort,
        *,
        version: str = DEFAULT_CACHE_VERSION,
        core_assets: Sequence[str] = CORE_ASSETS,
        origin: str = DEFAULT_ORIGIN,
        offline_fallbacks: Sequence[str] = OFFLINE_FALLBACKS,
        executor: ExecutorPort | None = None,
        state: WorkerState = WorkerState.UNINSTALLED,
    ) -> None:
        if not version:
            raise ValueError("Cache version cannot be empty")
        if executor is None:
            from klangreise.adapters.executor import InlineExecutor

            executor = InlineExecutor()

        self._storage = storage
        self._network = network
        self._executor = executor
        self._version = version
        self._core_assets = tuple(core_assets)
        self._origin = origin
        self._offline_fallbacks = tuple(offline_fallbacks)
        self._state = state
        self._lock = threading.Lock()
        self._skip_waiting_requested = False
        self._clients_claimed = False

    @classmethod
    def from_config(
        cls,
        config: SiteConfig,
        executor: ExecutorPort | None = None,
        state: WorkerState = WorkerState.UNINSTALLED,
        network: NetworkPort | None = None,
    ) -> CacheController:
        """Create a controller serving config.dist_dir with a file cache.

        Args:
            config: Resolved site configuration.
            executor: Optional executor, inline when omitted.
            state: Initial lifecycle state.
            network: Optional network adapter, the build directory when omitted.

        Returns:
            CacheController wired to FileCacheStorage and FilesystemNetwork.
        """
        from klangreise.adapters.cache import FileCacheStorage
        from klangreise.adapters.network import FilesystemNetwork

        if network is None:
            network = FilesystemNetwork(config.dist_dir, origin=config.origin)

        return cls(
            storage=FileCacheStorage(config.cache_dir),
            network=network,
            version=config.cache_version,
            core_assets=config.core_assets,
            origin=config.origin,
            offline_fallbacks=config.offline_fallbacks,
            executor=executor,
            state=state,
        )

    @property
    def version(self) -> str:
        """Version tag of the current cache store."""
        return self._version

    @property
    def origin(self) -> str:
        """Origin whose requests are intercepted."""
        return self._origin

    @property
    def state(self) -> WorkerState:
        """Current lifecycle state."""
        with self._lock:
            return self._state

    @property
    def skip_waiting_requested(self) -> bool:
        """Whether install asked to activate without waiting for old pages."""
        return self._skip_waiting_requested

    @property
    def clients_claimed(self) -> bool:
        """Whether activate took control of already-open pages."""
        return self._clients_claimed

    @property
    def store(self) -> CacheStorePort:
        """The current version's store, created if absent."""
        return self._storage.open(self._version)

    def _transition(
        self, allowed: set[WorkerState], target: WorkerState, action: str
    ) -> None:
        with self._lock:
            if self._state not in allowed:
                raise LifecycleError(self._state.value, action)
            logger.info("%s: %s -> %s", self._version, self._state, target)
            self._state = target

    def _settle_state(self, target: WorkerState) -> None:
        with self._lock:
            logger.info("%s: %s -> %s", self._version, self._state, target)
            self._state = target

    # Lifecycle

    def install(
        self,
        event: ExtendableEvent | None = None,
        progress: ProgressReporter | None = None,
    ) -> Future[object]:
        """Fetch and store every core asset in the current store.

        All-or-nothing: if any core asset cannot be fetched, nothing is
        written, the returned future fails with InstallError and the
        controller becomes redundant.

        Args:
            event: Event whose lifetime is extended until install completes.
            progress: Optional reporter for per-asset progress.

        Returns:
            Future resolving to None once the store is populated.

        Raises:
            LifecycleError: If the controller was already installed.
        """
        if event is None:
            event = ExtendableEvent()
        if progress is None:
            progress = NullProgressReporter()

        self._transition({WorkerState.UNINSTALLED}, WorkerState.INSTALLING, "install")
        self._skip_waiting_requested = True

        future = self._executor.submit(self._run_install, progress)
        event.wait_until(future)
        return future

    def _run_install(self, progress: ProgressReporter) -> None:
        # State settles before the future resolves so callers can chain activate()
        try:
            self._install_core_assets(progress)
        except BaseException:
            self._settle_state(WorkerState.REDUNDANT)
            raise
        self._settle_state(WorkerState.INSTALLED)

    def _install_core_assets(self, progress: ProgressReporter) -> None:
        store = self._storage.open(self._version)
        requests = [Request.for_path(self._origin, path) for path in self._core_assets]
        task = f"install {self._version}"
        total = len(requests)

        fetched: list[tuple[Request, Response]] = []
        failures: dict[str, str] = {}
        callback = progress.start_task(task, total)
        try:
            for done, request in enumerate(requests, 1):
                try:
                    response = self._network.fetch(request)
                except NetworkError as e:
                    failures[request.url] = str(e)
                else:
                    # Partial content is not storable, so it fails before any write
                    if response.ok and response.status != 206:
                        fetched.append((request, response))
                    else:
                        failures[request.url] = f"HTTP {response.status}"
                callback(done, total)
        finally:
            progress.finish_task(task)

        if failures:
            logger.error("Install of %s failed for %d asset(s)", self._version, len(failures))
            raise InstallError(self._version, failures)

        for request, response in fetched:
            store.put(request, response)
        logger.info("Installed %s with %d core assets", self._version, len(fetched))

    def activate(self, event: ExtendableEvent | None = None) -> Future[object]:
        """Delete every cache store not named by the current version.

        Args:
            event: Event whose lifetime is extended until eviction completes.

        Returns:
            Future resolving to the list of deleted store names.

        Raises:
            LifecycleError: If the controller is not installed.
        """
        if event is None:
            event = ExtendableEvent()

        self._transition({WorkerState.INSTALLED}, WorkerState.ACTIVATING, "activate")

        self._clients_claimed = True
        future = self._executor.submit(self._evict_stale_stores)
        event.wait_until(future)
        return future

    def _evict_stale_stores(self) -> list[str]:
        stale = [name for name in self._storage.keys() if name != self._version]
        for name in stale:
            self._storage.delete(name)
            logger.info("Deleted stale cache store %s", name)
        self._settle_state(WorkerState.ACTIVATED)
        return stale

    # Interception

    def handle_fetch(self, event: FetchEvent) -> None:
        """Respond to an intercepted request, or leave it to the network.

        Requests are left unhandled unless the controller is activated and
        the request is a same-origin GET.

        Args:
            event: The fetch event for the outgoing request.
        """
        request = event.request
        if self.state is not WorkerState.ACTIVATED:
            logger.debug("Not active, passing through %s", request.url)
            return
        if not should_intercept(request, self._origin):
            logger.debug("Passing through %s %s", request.method, request.url)
            return

        kind = classify(request)
        logger.debug("Intercepting %s as %s", request.url, kind)
        future = self._executor.submit(self._respond, event, kind)
        event.respond_with(future)  # type: ignore[arg-type]

    def _respond(self, event: FetchEvent, kind: RequestKind) -> Response:
        request = event.request
        store = self._storage.open(self._version)
        schedule_write = functools.partial(self._schedule_write, event)

        if kind is RequestKind.MEDIA:
            return strategies.network_only_with_cache_fallback(
                request, self._network, store
            )
        if kind is RequestKind.DOCUMENT:
            fallbacks = [
                Request.for_path(self._origin, path, destination="document")
                for path in self._offline_fallbacks
            ]
            return strategies.network_first(
                request, self._network, store, schedule_write, fallbacks
            )
        return strategies.cache_first(request, self._network, store, schedule_write)

    def _schedule_write(
        self, event: FetchEvent, request: Request, response: Response
    ) -> None:
        future = self._executor.submit(self._write, request, response)
        future.add_done_callback(functools.partial(self._log_write_failure, request))
        event.wait_until(future)

    def _write(self, request: Request, response: Response) -> None:
        self._storage.open(self._version).put(request, response)

    @staticmethod
    def _log_write_failure(request: Request, future: Future[object]) -> None:
        if future.cancelled():
            logger.warning("Cache write for %s was cancelled", request.url)
            return
        exc = future.exception()
        if exc is not None:
            logger.warning("Cache write for %s failed: %s", request.url, exc)

    def dispatch(self, request: Request) -> FetchEvent:
        """Create a fetch event for request and run it through handle_fetch()."""
        event = FetchEvent(request)
        self.handle_fetch(event)
        return event

    def fetch(self, request: Request, timeout: float | None = None) -> Response:
        """Make request as a controlled page would.

        Unhandled requests go straight to the network.

        Args:
            request: The outgoing request.
            timeout: Seconds to wait for an intercepted response.

        Returns:
            The response the page receives.

        Raises:
            RequestFailedError: If neither network nor cache could answer.
            NetworkError: If an unhandled request cannot reach the network.
        """
        event = self.dispatch(request)
        if not event.handled:
            return self._network.fetch(request)
        response = event.response(timeout=timeout)
        assert response is not None  # handled events always resolve
        return response
