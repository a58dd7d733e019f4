"""Allow running as ``python -m mtime_rewind``."""  # pragma: no cover

from mtime_rewind.cli.main import app  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
