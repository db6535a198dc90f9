"""Executor adapters for lifecycle, fetch and cache-write tasks."""

from klangreise.adapters.executor.executor import (
    InlineExecutor,
    ThreadPoolExecutorAdapter,
)


__all__ = ["InlineExecutor", "ThreadPoolExecutorAdapter"]
