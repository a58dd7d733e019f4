"""Records and actions exchanged between the scanner, the engine and the applier."""

from dataclasses import dataclass
from typing import Dict, Union

from mtime_rewind.fingerprint import Fingerprint


@dataclass(frozen=True)
class FileRecord:
    """One observed or recorded file.

    Attributes:
        relative_path: POSIX style path relative to the scanned root
        fingerprint: Content hash
        mtime_ns: Modification time in nanoseconds since the epoch
    """

    relative_path: str
    fingerprint: Fingerprint
    mtime_ns: int


# relative_path -> FileRecord
StateSnapshot = Dict[str, FileRecord]


@dataclass(frozen=True)
class AdoptNew:
    """No previous record: the observation becomes the baseline."""

    path: str
    fingerprint: Fingerprint
    mtime_ns: int

    @property
    def baseline_mtime_ns(self) -> int:
        return self.mtime_ns


@dataclass(frozen=True)
class AdoptChanged:
    """Content changed: the observation becomes the baseline."""

    path: str
    fingerprint: Fingerprint
    mtime_ns: int

    @property
    def baseline_mtime_ns(self) -> int:
        return self.mtime_ns


@dataclass(frozen=True)
class Rewind:
    """Content unchanged but mtime moved: set it back to the previous value."""

    path: str
    fingerprint: Fingerprint
    previous_mtime_ns: int
    observed_mtime_ns: int

    @property
    def baseline_mtime_ns(self) -> int:
        # What the file holds once the rewind is applied
        return self.previous_mtime_ns


@dataclass(frozen=True)
class Unchanged:
    """Content and mtime both match the previous record."""

    path: str
    fingerprint: Fingerprint
    mtime_ns: int

    @property
    def baseline_mtime_ns(self) -> int:
        return self.mtime_ns


ReconciliationAction = Union[AdoptNew, AdoptChanged, Rewind, Unchanged]
