"""Static build step producing the deployable site directory.

Minification is delegated to minify-html; everything else here is
copying files into place.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import minify_html

from klangreise.adapters.network.paths import object_key
from klangreise.core.exceptions import BuildError


logger = logging.getLogger(__name__)

# Copied verbatim when found next to the HTML source
STATIC_FILES = ("manifest.json", "service-worker.js")


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Outcome of a build.

    Attributes:
        output: Path of the written index.html.
        input_size: Source size in bytes.
        output_size: Minified size in bytes.
        copied: Number of static files copied alongside.
    """

    output: Path
    input_size: int
    output_size: int
    copied: int = 0

    @property
    def saved_percent(self) -> float:
        """Size reduction in percent, 0.0 for an empty source."""
        if self.input_size <= 0:
            return 0.0
        return (1 - self.output_size / self.input_size) * 100


def minify(html: str) -> str:
    """Minify an HTML page including its inline CSS and JS."""
    return minify_html.minify(
        html,
        minify_css=True,
        minify_js=True,
        keep_closing_tags=True,
    )


def build_site(
    source: Path,
    out_dir: Path,
    assets_dir: Path | None = None,
    static_files: Iterable[str] = STATIC_FILES,
) -> BuildReport:
    """Build the deployable directory from a single HTML page.

    Args:
        source: The HTML page, written as out_dir/index.html.
        out_dir: Output directory, created if missing.
        assets_dir: Optional directory copied to out_dir/assets.
        static_files: Names of files next to source to copy as-is.

    Returns:
        A BuildReport with sizes.

    Raises:
        BuildError: If source or assets_dir is missing.
    """
    if not source.is_file():
        raise BuildError(f"Source file not found: {source}", path=source)
    if assets_dir is not None and not assets_dir.is_dir():
        raise BuildError(f"Assets directory not found: {assets_dir}", path=assets_dir)

    html = source.read_text(encoding="utf-8")
    result = minify(html)

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "index.html"
    out_path.write_text(result, encoding="utf-8")

    copied = 0
    for name in static_files:
        candidate = source.parent / name
        if candidate.is_file():
            shutil.copy2(candidate, out_dir / name)
            copied += 1

    if assets_dir is not None:
        target = out_dir / "assets"
        shutil.copytree(assets_dir, target, dirs_exist_ok=True)
        copied += sum(1 for p in target.rglob("*") if p.is_file())

    report = BuildReport(
        output=out_path,
        input_size=len(html.encode("utf-8")),
        output_size=len(result.encode("utf-8")),
        copied=copied,
    )
    logger.info(
        "Built %s (%d -> %d bytes)", out_path, report.input_size, report.output_size
    )
    return report


def missing_core_assets(out_dir: Path, core_assets: Sequence[str]) -> list[str]:
    """List core asset paths that a build directory cannot serve."""
    missing = []
    for path in core_assets:
        if not (out_dir / object_key(path)).is_file():
            missing.append(path)
    return missing
