"""Progress display adapters."""

from klangreise.progress.rich_progress import RichProgressReporter


__all__ = ["RichProgressReporter"]
