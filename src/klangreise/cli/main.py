"""CLI commands for klangreise."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.logging import RichHandler

from klangreise.core.exceptions import ConfigurationError, InstallError, KlangreiseError


if TYPE_CHECKING:
    from klangreise.config import SiteConfig


app = typer.Typer(
    name="klangreise",
    help="Build the Klangreise page and exercise its offline cache policy.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def _main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging.",
    ),
) -> None:
    """Build the Klangreise page and exercise its offline cache policy."""
    _configure_logging(verbose)


def _fail(error: KlangreiseError) -> typer.Exit:
    """Echo an error with its recovery hint and return an Exit to raise."""
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    return typer.Exit(1)


def load_site_context() -> SiteConfig:
    """Load site configuration for CLI commands.

    Returns:
        The resolved SiteConfig.

    Raises:
        typer.Exit: If the configuration is invalid.
    """
    from klangreise.config import find_project_root, load_config

    try:
        return load_config(find_project_root())
    except ConfigurationError as e:
        raise _fail(e) from None


@app.command()
def build(
    source: str | None = typer.Argument(
        None,
        help="HTML page to build. Defaults to the configured source.",
    ),
    out: str | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Output directory. Defaults to the configured dist directory.",
    ),
    assets: str | None = typer.Option(
        None,
        "--assets",
        "-a",
        help="Static asset directory to copy. Defaults to the configured one if it exists.",
    ),
) -> None:
    """Minify the page and assemble the deployable directory."""
    from klangreise.build import build_site, missing_core_assets
    from klangreise.core.exceptions import BuildError

    config = load_site_context()
    source_path = Path(source) if source else config.source
    out_dir = Path(out) if out else config.dist_dir
    if assets:
        assets_dir: Path | None = Path(assets)
    elif config.assets_dir.is_dir():
        assets_dir = config.assets_dir
    else:
        assets_dir = None

    try:
        report = build_site(source_path, out_dir, assets_dir=assets_dir)
    except BuildError as e:
        raise _fail(e) from None

    typer.echo(f"Built {report.output}")
    typer.echo(
        f"Size: {_format_size(report.output_size)} "
        f"(was {_format_size(report.input_size)}, -{report.saved_percent:.1f}%)"
    )

    for path in missing_core_assets(out_dir, config.core_assets):
        typer.echo(f"Warning: core asset {path} is missing; install will fail", err=True)


@app.command()
def install(
    version: str | None = typer.Option(
        None,
        "--cache-version",
        help="Cache version tag. Defaults to the configured one.",
    ),
    workers: int = typer.Option(
        4,
        "--workers",
        "-w",
        help="Worker threads for install and cache writes.",
    ),
) -> None:
    """Install the core assets from the build and activate the cache."""
    from dataclasses import replace

    from klangreise import CacheController, RichProgressReporter
    from klangreise.adapters.executor import ThreadPoolExecutorAdapter

    config = load_site_context()
    if version:
        try:
            config = replace(config, cache_version=version)
        except ConfigurationError as e:
            raise _fail(e) from None

    with ThreadPoolExecutorAdapter(max_workers=workers) as executor:
        controller = CacheController.from_config(config, executor=executor)
        try:
            with RichProgressReporter() as progress:
                controller.install(progress=progress).result()
            deleted = controller.activate().result()
        except KlangreiseError as e:
            if isinstance(e, InstallError):
                for url, reason in e.failures.items():
                    typer.echo(f"  {url}: {reason}", err=True)
            raise _fail(e) from None

    typer.echo(f"Installed {config.cache_version} ({len(config.core_assets)} core assets)")
    for name in deleted:
        typer.echo(f"Deleted stale cache {name}")


@app.command()
def fetch(
    target: str = typer.Argument(..., help="URL or site path to request."),
    destination: str = typer.Option(
        "",
        "--destination",
        "-d",
        help="Request destination (document, audio, video, script, image, ...).",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Simulate a network outage.",
    ),
) -> None:
    """Send one request through the activated cache controller."""
    from klangreise import CacheController, Request, WorkerState
    from klangreise.adapters.cache import FileCacheStorage
    from klangreise.adapters.network import FilesystemNetwork

    config = load_site_context()
    if not FileCacheStorage(config.cache_dir).has(config.cache_version):
        typer.echo(f"Cache {config.cache_version} not installed. Run 'klangreise install' first.")
        raise typer.Exit(1)

    network = FilesystemNetwork(config.dist_dir, origin=config.origin, offline=offline)
    controller = CacheController.from_config(
        config, network=network, state=WorkerState.ACTIVATED
    )

    try:
        if "://" in target:
            request = Request(url=target, destination=destination)
        else:
            request = Request.for_path(config.origin, target, destination=destination)
        response = controller.fetch(request)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except KlangreiseError as e:
        raise _fail(e) from None

    body = response.read()
    typer.echo(f"{response.status} {request.url}")
    typer.echo(f"  Served from: {response.served_from}")
    typer.echo(f"  Content-Type: {response.content_type or 'unknown'}")
    typer.echo(f"  Size: {_format_size(len(body))}")


@app.command()
def deploy(
    bucket: str = typer.Argument(..., help="Target bucket URI (s3://bucket/prefix)."),
) -> None:
    """Upload the build directory to S3."""
    from klangreise import RichProgressReporter
    from klangreise.adapters.network import S3Network

    config = load_site_context()
    if not config.dist_dir.is_dir():
        typer.echo(f"Build directory {config.dist_dir} not found. Run 'klangreise build' first.")
        raise typer.Exit(1)

    try:
        network = S3Network(bucket, origin=config.origin)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    task = f"deploy {bucket}"
    try:
        with RichProgressReporter() as progress:
            callback = progress.start_task(task, 0)
            keys = network.publish(config.dist_dir, progress=callback)
            progress.finish_task(task)
    except KlangreiseError as e:
        raise _fail(e) from None

    typer.echo(f"Uploaded {len(keys)} files to {bucket}")


def _format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def main() -> None:
    """Entry point for the CLI."""
    app()
