"""Configuration utilities for klangreise.

This module provides the site defaults, project root discovery and
loading of the optional klangreise.toml file.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from klangreise.core.exceptions import ConfigurationError


# Bump to invalidate every client cache on the next deployment
DEFAULT_CACHE_VERSION = "klangreise-v1"

CORE_ASSETS = (
    "/",
    "/index.html",
    "/manifest.json",
    "/assets/images/icon-192.png",
    "/assets/images/icon-512.png",
    "/assets/images/icon-180.png",
)

OFFLINE_FALLBACKS = ("/index.html", "/")

DEFAULT_ORIGIN = "http://localhost:8000"

CONFIG_FILENAME = "klangreise.toml"


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Resolved site configuration.

    Attributes:
        cache_version: Version tag naming the current cache store.
        origin: Origin the site is served from.
        core_assets: Paths that must be cached at install time.
        offline_fallbacks: Paths tried, in order, for offline documents.
        source: Single-page HTML source file.
        assets_dir: Static asset directory copied into the build.
        dist_dir: Build output directory.
        cache_dir: Directory holding the file-backed cache stores.
    """

    cache_version: str = DEFAULT_CACHE_VERSION
    origin: str = DEFAULT_ORIGIN
    core_assets: tuple[str, ...] = CORE_ASSETS
    offline_fallbacks: tuple[str, ...] = OFFLINE_FALLBACKS
    source: Path = Path("klangreise.html")
    assets_dir: Path = Path("assets")
    dist_dir: Path = Path("dist")
    cache_dir: Path = Path(".klangreise/cache")

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        if not self.cache_version:
            raise ConfigurationError("cache_version cannot be empty")
        if "://" not in self.origin:
            raise ConfigurationError(f"origin must be an absolute URL: {self.origin}")
        for path in (*self.core_assets, *self.offline_fallbacks):
            if not path.startswith("/"):
                raise ConfigurationError(f"Asset paths must start with '/': {path}")


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root directory by walking up from start directory.

    Searches for marker files in the following priority order:
    1. .klangreise - Explicit project marker
    2. klangreise.toml - Site configuration
    3. pyproject.toml - Python project root
    4. .git - Version control root

    Args:
        start: Directory to start searching from. If None, uses current directory.

    Returns:
        Path to project root directory. Returns start directory if no markers found.
    """
    if start is None:
        start = Path.cwd()

    markers = [".klangreise", CONFIG_FILENAME, "pyproject.toml", ".git"]
    current = start.resolve()

    for parent in [current, *current.parents]:
        for marker in markers:
            if (parent / marker).exists():
                return parent

    return start.resolve()


def _string_list(section: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"'{key}' must be a list of strings")
    return tuple(value)


def load_config(root: Path | None = None) -> SiteConfig:
    """Load site configuration from klangreise.toml under root.

    Missing file or keys fall back to the defaults. Relative paths are
    resolved against root.

    Args:
        root: Project root. If None, discovered from the current directory.

    Returns:
        The resolved SiteConfig.

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid values.
    """
    if root is None:
        root = find_project_root()

    data: dict[str, Any] = {}
    config_path = root / CONFIG_FILENAME
    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid {CONFIG_FILENAME}: {e}") from e

    site = data.get("site", {})
    paths = data.get("paths", {})
    if not isinstance(site, dict) or not isinstance(paths, dict):
        raise ConfigurationError("[site] and [paths] must be tables")

    defaults = SiteConfig()
    return SiteConfig(
        cache_version=str(site.get("cache_version", defaults.cache_version)),
        origin=str(site.get("origin", defaults.origin)),
        core_assets=_string_list(site, "core_assets", defaults.core_assets),
        offline_fallbacks=_string_list(
            site, "offline_fallbacks", defaults.offline_fallbacks
        ),
        source=root / paths.get("source", defaults.source),
        assets_dir=root / paths.get("assets", defaults.assets_dir),
        dist_dir=root / paths.get("dist", defaults.dist_dir),
        cache_dir=root / paths.get("cache", defaults.cache_dir),
    )
