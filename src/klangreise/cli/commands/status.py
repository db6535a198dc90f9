"""Status command for CLI."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from klangreise.adapters.cache import FileCacheStorage
from klangreise.cli.formatting import _format_state_with_color, _store_rows
from klangreise.cli.main import _fail, _format_size, app, load_site_context
from klangreise.core.exceptions import CacheCorruptError


@app.command()
def status(
    entries: bool = typer.Option(
        False,
        "--entries",
        "-e",
        help="List the cached URLs of the current store.",
    ),
) -> None:
    """Show cache stores (current/stale) with entry counts and sizes."""
    config = load_site_context()
    storage = FileCacheStorage(config.cache_dir)

    try:
        rows = _store_rows(storage, config.cache_version)
    except CacheCorruptError as e:
        raise _fail(e) from None

    if not rows:
        typer.echo("No cache stores found. Run 'klangreise install' to get started.")
        return

    # Build Rich table
    table = Table()
    table.add_column("Store")
    table.add_column("State")
    table.add_column("Entries", justify="right")
    table.add_column("Size", justify="right")

    for name, state, count, size in rows:
        table.add_row(name, _format_state_with_color(state), str(count), _format_size(size))

    console = Console(force_terminal=True)
    console.print(table)

    if entries and storage.has(config.cache_version):
        for key in storage.open(config.cache_version).keys():
            typer.echo(key)
