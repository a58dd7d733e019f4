"""Content fingerprints used to decide whether a file's bytes changed."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

DEFAULT_ALGORITHM = "sha256"
DEFAULT_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class Fingerprint:
    """Opaque content hash. Only equality and hex serialization are meaningful."""

    digest: bytes

    def __post_init__(self):
        if not isinstance(self.digest, bytes) or not self.digest:
            raise ValueError("Fingerprint digest must be non-empty bytes")

    @classmethod
    def from_hex(cls, value: str) -> "Fingerprint":
        return cls(bytes.fromhex(value))

    @property
    def hex(self) -> str:
        return self.digest.hex()

    @property
    def short(self) -> str:
        """First 8 hex characters, for display."""
        return self.hex[:8]

    def __repr__(self) -> str:
        return f"Fingerprint({self.short})"


def compute_fingerprint(
    path: Path, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Fingerprint:
    """
    Hash the full byte content of a file.

    Args:
        path: File to read
        algorithm: hashlib algorithm name
        chunk_size: Bytes read per iteration

    Returns:
        Fingerprint of the content

    Raises:
        OSError: If the file cannot be opened or read
    """
    hasher = hashlib.new(algorithm)
    with path.open("rb") as f:
        # Read file in chunks to handle large files
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return Fingerprint(hasher.digest())
