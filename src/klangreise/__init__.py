"""klangreise - offline cache policy and static build for the Klangreise page.

The core is a cache controller reproducing a service worker: it installs the
site's core assets into a versioned cache store, evicts stale versions on
activation and answers every same-origin GET with a strategy chosen by the
request's destination.

Example:
    >>> from pathlib import Path
    >>> from klangreise import (
    ...     CacheController, FilesystemNetwork, MemoryCacheStorage, Request,
    ... )
    >>> controller = CacheController(
    ...     storage=MemoryCacheStorage(),
    ...     network=FilesystemNetwork(Path("dist"), origin="http://localhost:8000"),
    ... )
    >>> controller.install().result()
    >>> controller.activate().result()
    >>> response = controller.fetch(
    ...     Request.for_path("http://localhost:8000", "/", destination="document")
    ... )
"""

from klangreise.adapters.cache import FileCacheStorage, MemoryCacheStorage
from klangreise.adapters.executor import InlineExecutor, ThreadPoolExecutorAdapter
from klangreise.adapters.network import FilesystemNetwork, S3Network
from klangreise.config import (
    CORE_ASSETS,
    DEFAULT_CACHE_VERSION,
    SiteConfig,
    find_project_root,
    load_config,
)
from klangreise.core.events import ExtendableEvent, FetchEvent
from klangreise.core.exceptions import (
    BodyConsumedError,
    BuildError,
    CacheCorruptError,
    CacheError,
    CacheWriteError,
    ConfigurationError,
    InstallError,
    KlangreiseError,
    LifecycleError,
    NetworkError,
    RequestFailedError,
)
from klangreise.core.models import Request, RequestKind, Response, WorkerState
from klangreise.core.ports import (
    CacheStoragePort,
    CacheStorePort,
    NetworkPort,
    NullProgressReporter,
    ProgressReporter,
)
from klangreise.core.services import CacheController
from klangreise.progress import RichProgressReporter


__version__ = "0.1.0"

__all__ = [
    "CORE_ASSETS",
    "DEFAULT_CACHE_VERSION",
    "BodyConsumedError",
    "BuildError",
    "CacheController",
    "CacheCorruptError",
    "CacheError",
    "CacheStoragePort",
    "CacheStorePort",
    "CacheWriteError",
    "ConfigurationError",
    "ExtendableEvent",
    "FetchEvent",
    "FileCacheStorage",
    "FilesystemNetwork",
    "InlineExecutor",
    "InstallError",
    "KlangreiseError",
    "LifecycleError",
    "MemoryCacheStorage",
    "NetworkError",
    "NetworkPort",
    "NullProgressReporter",
    "ProgressReporter",
    "Request",
    "RequestFailedError",
    "RequestKind",
    "Response",
    "RichProgressReporter",
    "S3Network",
    "SiteConfig",
    "ThreadPoolExecutorAdapter",
    "WorkerState",
    "__version__",
    "find_project_root",
    "load_config",
]
