"""Unit tests for configuration utilities.

These tests verify project root discovery and loading of klangreise.toml
into a SiteConfig.
"""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from klangreise.config import (
    CORE_ASSETS,
    DEFAULT_CACHE_VERSION,
    OFFLINE_FALLBACKS,
    SiteConfig,
    find_project_root,
    load_config,
)
from klangreise.core.exceptions import ConfigurationError


@pytest.mark.core
class TestFindProjectRoot:
    """Tests for find_project_root utility."""

    def test_finds_klangreise_marker(self, tmp_path: Path) -> None:
        """Should find directory containing .klangreise marker."""
        (tmp_path / ".klangreise").mkdir()
        subdir = tmp_path / "sub" / "deeper"
        subdir.mkdir(parents=True)

        assert find_project_root(start=subdir) == tmp_path

    def test_finds_config_file(self, tmp_path: Path) -> None:
        """Should find directory containing klangreise.toml."""
        (tmp_path / "klangreise.toml").write_text("")
        subdir = tmp_path / "assets"
        subdir.mkdir()

        assert find_project_root(start=subdir) == tmp_path

    def test_nearest_marker_wins(self, tmp_path: Path) -> None:
        """A nested project should shadow an outer one."""
        (tmp_path / ".git").mkdir()
        inner = tmp_path / "site"
        inner.mkdir()
        (inner / "pyproject.toml").write_text("")

        assert find_project_root(start=inner) == inner

    def test_falls_back_to_start(self, tmp_path: Path) -> None:
        """Without markers the start directory is returned."""
        subdir = tmp_path / "nothing"
        subdir.mkdir()

        result = find_project_root(start=subdir)

        # Some ancestor of tmp_path may carry a marker on developer machines
        assert result == subdir or subdir.is_relative_to(result)


@pytest.mark.core
class TestSiteConfig:
    """Tests for SiteConfig defaults and validation."""

    def test_defaults(self) -> None:
        """Defaults should describe the Klangreise site."""
        config = SiteConfig()

        assert config.cache_version == DEFAULT_CACHE_VERSION == "klangreise-v1"
        assert config.core_assets == CORE_ASSETS
        assert len(config.core_assets) == 6
        assert config.offline_fallbacks == OFFLINE_FALLBACKS == ("/index.html", "/")

    def test_rejects_empty_version(self) -> None:
        """An empty version tag is invalid."""
        with pytest.raises(ConfigurationError, match="cache_version"):
            SiteConfig(cache_version="")

    def test_rejects_relative_origin(self) -> None:
        """The origin must be an absolute URL."""
        with pytest.raises(ConfigurationError, match="origin"):
            SiteConfig(origin="localhost")

    def test_rejects_relative_asset_path(self) -> None:
        """Core asset paths must be site-absolute."""
        with pytest.raises(ConfigurationError, match="must start with"):
            SiteConfig(core_assets=("index.html",))


@pytest.mark.core
class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Without klangreise.toml all defaults apply, paths under root."""
        config = load_config(tmp_path)

        assert config.cache_version == DEFAULT_CACHE_VERSION
        assert config.dist_dir == tmp_path / "dist"
        assert config.cache_dir == tmp_path / ".klangreise" / "cache"
        assert config.source == tmp_path / "klangreise.html"

    def test_reads_site_and_paths(self, tmp_path: Path) -> None:
        """Values from [site] and [paths] override the defaults."""
        (tmp_path / "klangreise.toml").write_text(
            dedent("""
                [site]
                cache_version = "klangreise-v2"
                origin = "https://klangreise.example"
                core_assets = ["/", "/index.html"]

                [paths]
                source = "src/page.html"
                dist = "public"
            """)
        )

        config = load_config(tmp_path)

        assert config.cache_version == "klangreise-v2"
        assert config.origin == "https://klangreise.example"
        assert config.core_assets == ("/", "/index.html")
        assert config.offline_fallbacks == OFFLINE_FALLBACKS
        assert config.source == tmp_path / "src" / "page.html"
        assert config.dist_dir == tmp_path / "public"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Unparsable files raise ConfigurationError."""
        (tmp_path / "klangreise.toml").write_text("[site\ncache_version =")

        with pytest.raises(ConfigurationError, match="Invalid klangreise.toml"):
            load_config(tmp_path)

    def test_core_assets_must_be_list(self, tmp_path: Path) -> None:
        """A non-list core_assets value is rejected."""
        (tmp_path / "klangreise.toml").write_text('[site]\ncore_assets = "/"\n')

        with pytest.raises(ConfigurationError, match="list of strings"):
            load_config(tmp_path)

    def test_site_must_be_table(self, tmp_path: Path) -> None:
        """A scalar [site] key is rejected."""
        (tmp_path / "klangreise.toml").write_text('site = "x"\n')

        with pytest.raises(ConfigurationError, match="must be tables"):
            load_config(tmp_path)
