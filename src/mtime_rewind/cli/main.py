"""Main CLI entry point for mtime-rewind."""  # pragma: no cover

from mtime_rewind.cli.app import app  # pragma: no cover

# Register commands
from mtime_rewind.cli.commands import rewind  # pragma: no cover

__all__ = ["app", "rewind"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
