"""mtime-rewind - rewind modification times of files whose content did not change."""

__version__ = "0.1.0"
