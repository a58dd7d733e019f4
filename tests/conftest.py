"""Common test fixtures."""

import os
from pathlib import Path

import pytest

from mtime_rewind.config import RewindConfig
from mtime_rewind.fingerprint import Fingerprint
from mtime_rewind.ignore_utils import ExclusionRules
from mtime_rewind.models import FileRecord
from mtime_rewind.scanner import FileScanner
from mtime_rewind.service import RewindService
from mtime_rewind.state_store import StateStore
from mtime_rewind.utils import setup_logging

# Fixed timestamps with a non-zero sub-second part
T0 = 1_600_000_000_123_456_789
T1 = 1_700_000_000_987_654_321


def write_file(path: Path, content: str = "test content") -> Path:
    """Create a file with given content, including parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def set_mtime(path: Path, mtime_ns: int) -> None:
    """Set both atime and mtime of a file."""
    os.utime(path, ns=(mtime_ns, mtime_ns))


def mtime(path: Path) -> int:
    return path.stat().st_mtime_ns


def fp(value: str) -> Fingerprint:
    """Build a fake fingerprint from a short label."""
    return Fingerprint(value.encode())


def record(path: str, fingerprint: str, mtime_ns: int) -> FileRecord:
    return FileRecord(relative_path=path, fingerprint=fp(fingerprint), mtime_ns=mtime_ns)


@pytest.fixture(autouse=True)
def reset_logging():
    """Point loguru back at the current stderr after CLI tests swap streams."""
    yield
    setup_logging("DEBUG")


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Directory scanned by the tool."""
    path = tmp_path / "root"
    path.mkdir()
    return path


@pytest.fixture
def test_config(monkeypatch) -> RewindConfig:
    # Isolate from the developer's environment
    for name in list(os.environ):
        if name.startswith("MTIME_REWIND_"):
            monkeypatch.delenv(name)
    return RewindConfig(hash_workers=1, _env_file=None)


@pytest.fixture
def state_store(test_config: RewindConfig) -> StateStore:
    return StateStore(test_config.state_file_name, test_config.hash_algorithm)


@pytest.fixture
def scanner(test_config: RewindConfig) -> FileScanner:
    return FileScanner(
        should_exclude=ExclusionRules.from_config(test_config).should_exclude,
        algorithm=test_config.hash_algorithm,
        chunk_size=test_config.chunk_size,
        workers=test_config.hash_workers,
    )


@pytest.fixture
def rewind_service(test_config: RewindConfig) -> RewindService:
    return RewindService(test_config)
