"""Persist the snapshot of the last run in a single file under the root."""

from pathlib import Path
from typing import Dict, Literal, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mtime_rewind.config import STATE_FILE_NAME
from mtime_rewind.fingerprint import DEFAULT_ALGORITHM, Fingerprint
from mtime_rewind.models import FileRecord, StateSnapshot
from mtime_rewind.utils.file_utils import StateFileError, write_file_atomic

STATE_VERSION = 1
NANOS_PER_SECOND = 1_000_000_000
# mtime_ns must fit the signed 64-bit value reported by stat
MIN_MTIME_SECONDS = -(2**63) // NANOS_PER_SECOND
MAX_MTIME_SECONDS = (2**63 - 1) // NANOS_PER_SECOND - 1


class StateEntry(BaseModel):
    """Serialized form of one FileRecord."""

    model_config = ConfigDict(extra="forbid")

    fingerprint: str
    mtime_seconds: int = Field(ge=MIN_MTIME_SECONDS, le=MAX_MTIME_SECONDS)
    mtime_nanos: int = Field(ge=0, lt=NANOS_PER_SECOND)

    @field_validator("fingerprint")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        try:
            Fingerprint.from_hex(v)
        except ValueError as e:
            raise ValueError(f"Invalid fingerprint {v!r}: {e}") from e
        return v.lower()

    @classmethod
    def from_record(cls, record: FileRecord) -> "StateEntry":
        # floor division keeps nanos positive for pre-epoch timestamps
        seconds, nanos = divmod(record.mtime_ns, NANOS_PER_SECOND)
        return cls(fingerprint=record.fingerprint.hex, mtime_seconds=seconds, mtime_nanos=nanos)

    def to_record(self, relative_path: str) -> FileRecord:
        return FileRecord(
            relative_path=relative_path,
            fingerprint=Fingerprint.from_hex(self.fingerprint),
            mtime_ns=self.mtime_seconds * NANOS_PER_SECOND + self.mtime_nanos,
        )


class StateFile(BaseModel):
    """Top level document of the state file."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = STATE_VERSION
    algorithm: str = DEFAULT_ALGORITHM
    root: Optional[str] = None
    files: Dict[str, StateEntry] = Field(default_factory=dict)


class StateStore:
    """Loads and saves StateSnapshots at a fixed name under a root."""

    def __init__(self, state_file_name: str = STATE_FILE_NAME, algorithm: str = DEFAULT_ALGORITHM):
        self.state_file_name = state_file_name
        self.algorithm = algorithm

    def path(self, root: Path) -> Path:
        return root / self.state_file_name

    def is_state_file(self, root: Path, path: Path) -> bool:
        """Check if path is this store's state file or one of its temporary files."""
        if path.parent != root:
            return False
        name = path.name
        # temporary names come from write_file_atomic
        return name == self.state_file_name or (
            name.startswith(f".{self.state_file_name}.") and name.endswith(".tmp")
        )

    def load(self, root: Path) -> Optional[StateSnapshot]:
        """
        Read the snapshot saved by the previous run.

        Args:
            root: Scanned root directory

        Returns:
            The snapshot, or None if no state file exists (first run)

        Raises:
            StateFileError: If the file exists but cannot be read or parsed
        """
        path = self.path(root)
        logger.info(f"Loading cached state from {path}")
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.info("No state file found, treating this as the first run")
            return None
        except OSError as e:
            raise StateFileError(f"Could not read state file {path}: {e}") from e

        try:
            document = StateFile.model_validate_json(raw)
        except ValueError as e:  # pydantic ValidationError included
            raise StateFileError(f"Corrupt or foreign state file {path}: {e}") from e

        if document.root is not None and document.root != str(root.resolve()):
            logger.warning(f"State file was written for root {document.root}, now used for {root}")

        if document.algorithm != self.algorithm:
            logger.warning(
                f"State file uses {document.algorithm} fingerprints, expected {self.algorithm}; "
                "all files will be treated as new"
            )
            return {}

        state = {rel: entry.to_record(rel) for rel, entry in document.files.items()}
        logger.info(f"Loaded state for {len(state)} files")
        return state

    def save(self, root: Path, state: StateSnapshot) -> Path:
        """
        Atomically replace the state file with the given snapshot.

        Args:
            root: Scanned root directory
            state: Snapshot to persist

        Returns:
            Path of the written state file

        Raises:
            StateWriteError: If the file cannot be written
        """
        path = self.path(root)
        document = StateFile(
            algorithm=self.algorithm,
            root=str(root.resolve()),
            files={rel: StateEntry.from_record(state[rel]) for rel in sorted(state)},
        )
        write_file_atomic(path, document.model_dump_json().encode("utf-8"))
        logger.info(f"Wrote {path}")
        return path
