"""Command line interface for mtime-rewind."""
