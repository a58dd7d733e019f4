"""Rules deciding which entries of the tree are skipped during a scan."""

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Set

from mtime_rewind.config import CACHE_DIR_TAG, RewindConfig

ExcludePredicate = Callable[[Path], bool]


def is_hidden(path: Path) -> bool:
    """Hidden entries follow the dot-file convention."""
    return path.name.startswith(".")


def is_cache_dir(path: Path, tag_name: str = CACHE_DIR_TAG) -> bool:
    """A directory holding a CACHEDIR.TAG file marks its whole subtree as cache.

    See https://bford.info/cachedir/ for the convention.
    """
    return (path / tag_name).is_file()


@dataclass
class ExclusionRules:
    """Exclusion policy applied to every entry below the root.

    Attributes:
        exclude_hidden: Skip files and directories whose name starts with '.'
        cache_dir_tag: Marker file name identifying cache directories
        ignore_patterns: fnmatch patterns matched against entry names
    """

    exclude_hidden: bool = True
    cache_dir_tag: str = CACHE_DIR_TAG
    ignore_patterns: Set[str] = field(default_factory=set)

    @classmethod
    def from_config(cls, config: RewindConfig) -> "ExclusionRules":
        return cls(
            exclude_hidden=config.exclude_hidden,
            cache_dir_tag=config.cache_dir_tag,
            ignore_patterns=set(config.ignore_patterns),
        )

    def should_exclude(self, path: Path) -> bool:
        """Check if an entry (and, for directories, its subtree) should be skipped.

        Args:
            path: File or directory below the root

        Returns:
            True if the entry should be ignored, False otherwise
        """
        if self.exclude_hidden and is_hidden(path):
            return True

        if any(fnmatch.fnmatch(path.name, pattern) for pattern in self.ignore_patterns):
            return True

        if self.cache_dir_tag and path.is_dir() and is_cache_dir(path, self.cache_dir_tag):
            return True

        return False
