"""Walk a root and fingerprint every tracked file."""

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from loguru import logger

from mtime_rewind.fingerprint import DEFAULT_ALGORITHM, DEFAULT_CHUNK_SIZE, compute_fingerprint
from mtime_rewind.ignore_utils import ExcludePredicate
from mtime_rewind.models import FileRecord, StateSnapshot


@dataclass
class ScanResult:
    """Result of scanning a directory."""

    # relative_path -> FileRecord
    files: StateSnapshot = field(default_factory=dict)
    # relative_path -> error message
    errors: Dict[str, str] = field(default_factory=dict)


def walk_files(root: Path, should_exclude: ExcludePredicate) -> Iterator[Path]:
    """
    Yield regular files below root in a stable order.

    Excluded directories are pruned so their subtree is never visited.
    Symlinks are neither followed nor yielded. The root itself is never
    passed to the predicate.
    """

    def on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot list {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_walk_error):
        current = Path(dirpath)
        dirnames[:] = sorted(d for d in dirnames if not should_exclude(current / d))
        for name in sorted(filenames):
            path = current / name
            if should_exclude(path):
                continue
            if path.is_symlink() or not path.is_file():
                logger.debug(f"Skipping non-regular file: {path}")
                continue
            yield path


class FileScanner:
    """Builds the current StateSnapshot of a root."""

    def __init__(
        self,
        should_exclude: ExcludePredicate,
        algorithm: str = DEFAULT_ALGORITHM,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        workers: int = 1,
    ):
        self.should_exclude = should_exclude
        self.algorithm = algorithm
        self.chunk_size = chunk_size
        self.workers = workers

    def observe(self, root: Path, path: Path) -> Tuple[str, Optional[FileRecord], Optional[str]]:
        """Fingerprint one file. Returns (relative_path, record, error)."""
        rel_path = path.relative_to(root).as_posix()
        try:
            # Paths must survive the trip through the UTF-8 state file
            rel_path.encode("utf-8")
        except UnicodeEncodeError:
            return rel_path, None, "File name is not valid UTF-8"

        try:
            fingerprint = compute_fingerprint(path, self.algorithm, self.chunk_size)
            # stat after hashing: a write racing the hash then shows up as a
            # content change on the next run instead of a bogus rewind
            mtime_ns = path.stat().st_mtime_ns
        except OSError as e:
            return rel_path, None, str(e)

        return rel_path, FileRecord(rel_path, fingerprint, mtime_ns), None

    def scan_directory(
        self, root: Path, extra_exclude: Optional[ExcludePredicate] = None
    ) -> ScanResult:
        """
        Scan root for files and their fingerprints.

        Unreadable or vanished files are left out of the snapshot and
        reported in ScanResult.errors.

        Args:
            root: Directory to scan
            extra_exclude: Predicate checked in addition to should_exclude

        Returns:
            ScanResult containing observed files and any errors
        """
        logger.info(f"Computing hashes under {root}...")

        def should_exclude(path: Path) -> bool:
            if extra_exclude is not None and extra_exclude(path):
                return True
            return self.should_exclude(path)

        paths = list(walk_files(root, should_exclude))

        if self.workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(lambda p: self.observe(root, p), paths))
        else:
            outcomes = [self.observe(root, p) for p in paths]

        result = ScanResult()
        for rel_path, record, error in outcomes:
            if record is None:
                result.errors[rel_path] = error or "unknown error"
                logger.warning(f"Failed to read {rel_path}: {error}")
                continue
            logger.debug(f"{rel_path} ({record.fingerprint.short}) mtime={record.mtime_ns}")
            result.files[rel_path] = record

        logger.info(f"Computed hashes for {len(result.files)} files")
        if result.errors:
            logger.warning(f"Encountered {len(result.errors)} errors while scanning")
        return result
