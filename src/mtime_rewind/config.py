"""Configuration management for mtime-rewind."""

import hashlib
from pathlib import Path
from typing import Optional, Set

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mtime_rewind.fingerprint import DEFAULT_ALGORITHM, DEFAULT_CHUNK_SIZE

STATE_FILE_NAME = ".hashprint"
CACHE_DIR_TAG = "CACHEDIR.TAG"


class RewindConfig(BaseSettings):
    """Settings for a rewind run.

    Every field can be overridden with an ``MTIME_REWIND_`` prefixed
    environment variable, e.g. ``MTIME_REWIND_HASH_WORKERS=8``.
    """

    state_file_name: str = Field(
        default=STATE_FILE_NAME,
        description="Name of the state file written directly under the scanned root",
    )
    hash_algorithm: str = Field(
        default=DEFAULT_ALGORITHM,
        description="hashlib algorithm used to fingerprint file content",
    )
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0, description="Read size when hashing")
    hash_workers: int = Field(
        default=4, ge=1, description="Threads used to fingerprint files, 1 disables the pool"
    )

    exclude_hidden: bool = Field(
        default=True, description="Skip entries whose name starts with '.'"
    )
    cache_dir_tag: str = Field(
        default=CACHE_DIR_TAG,
        description="Marker file identifying cache directories whose subtree is skipped",
    )
    ignore_patterns: Set[str] = Field(
        default_factory=set, description="Extra fnmatch patterns matched against entry names"
    )

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="MTIME_REWIND_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("hash_algorithm")
    @classmethod
    def ensure_algorithm_available(cls, v: str) -> str:
        """Ensure hashlib provides the algorithm."""
        v = v.lower()
        # shake_* digests need an explicit length
        if v not in hashlib.algorithms_available or v.startswith("shake_"):
            raise ValueError(f"Unsupported hash algorithm: {v}")
        return v

    @field_validator("state_file_name")
    @classmethod
    def ensure_plain_name(cls, v: str) -> str:
        """The state file must live directly under the root."""
        if not v or Path(v).name != v:
            raise ValueError(f"State file name must be a plain file name: {v!r}")
        return v


# Load default config
config = RewindConfig()
