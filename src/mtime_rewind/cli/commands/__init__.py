"""CLI commands for mtime-rewind."""

from . import rewind

__all__ = ["rewind"]
