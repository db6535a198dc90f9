"""Shared formatting helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text


if TYPE_CHECKING:
    from klangreise.adapters.cache import FileCacheStorage


_STATE_COLORS = {
    "current": "green",
    "stale": "yellow",
}


def _format_state_with_color(state: str) -> Text:
    """Format a store state with color coding.

    Args:
        state: "current" or "stale".

    Returns:
        Rich Text object: green for current, yellow for stale, plain otherwise.
    """
    color = _STATE_COLORS.get(state, "")
    return Text(state, style=color) if color else Text(state)


def _store_rows(
    storage: FileCacheStorage, version: str
) -> list[tuple[str, str, int, int]]:
    """Collect (name, state, entries, size) for every store, creation order."""
    rows = []
    for name in storage.keys():
        stats = storage.open(name).statistics()
        state = "current" if name == version else "stale"
        rows.append((name, state, stats["entries"], stats["total_size"]))
    return rows
