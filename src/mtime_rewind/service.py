"""Service wiring scanner, state store, engine and applier into one run."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from mtime_rewind.applier import ApplyReport, DryRunApplier, MtimeApplier, apply_rewinds
from mtime_rewind.config import RewindConfig
from mtime_rewind.ignore_utils import ExclusionRules
from mtime_rewind.reconcile import ReconcileResult, reconcile
from mtime_rewind.scanner import FileScanner
from mtime_rewind.state_store import StateStore
from mtime_rewind.utils.file_utils import FileError


class InvalidRootError(FileError):
    """Raised when the root does not exist or is not a directory."""

    pass


@dataclass
class RunReport:
    """Everything a run decided and did.

    Attributes:
        root: Scanned root
        state_path: State file location
        dry_run: Whether filesystem changes were suppressed
        first_run: No state file existed before this run
        reconcile: Actions and the resulting state
        apply: Rewinds applied and failed
        read_errors: Files skipped because they could not be hashed
    """

    root: Path
    state_path: Path
    dry_run: bool
    first_run: bool
    reconcile: ReconcileResult
    apply: ApplyReport
    read_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def failed_count(self) -> int:
        return len(self.read_errors) + len(self.apply.failed)


class RewindService:
    """Rewinds mtimes of files whose content did not change since the last run."""

    def __init__(
        self,
        config: RewindConfig,
        scanner: Optional[FileScanner] = None,
        state_store: Optional[StateStore] = None,
    ):
        self.config = config
        self.scanner = scanner or FileScanner(
            should_exclude=ExclusionRules.from_config(config).should_exclude,
            algorithm=config.hash_algorithm,
            chunk_size=config.chunk_size,
            workers=config.hash_workers,
        )
        self.state_store = state_store or StateStore(
            state_file_name=config.state_file_name, algorithm=config.hash_algorithm
        )

    def run(self, root: Path, dry_run: bool = False) -> RunReport:
        """
        Scan root, reconcile against the saved state and apply rewinds.

        In dry-run mode nothing on disk changes: neither mtimes nor the
        state file.

        Raises:
            InvalidRootError: If root is missing or not a directory
            StateFileError: If the existing state file is corrupt
            StateWriteError: If the new state cannot be saved
        """
        if not root.exists():
            raise InvalidRootError(f"Root does not exist: {root}")
        if not root.is_dir():
            raise InvalidRootError(f"Root is not a directory: {root}")

        previous = self.state_store.load(root)
        first_run = previous is None
        # The state file never counts as content, whatever the exclusion rules say
        scan = self.scanner.scan_directory(
            root, extra_exclude=lambda p: self.state_store.is_state_file(root, p)
        )

        result = reconcile(previous or {}, scan.files)
        logger.info(
            f"Found {len(result.adopted_new)} new, {len(result.adopted_changed)} modified, "
            f"{len(result.rewinds)} touched and {len(result.unchanged)} unchanged files"
        )
        for path in sorted(result.removed):
            logger.debug(f"No longer present: {path}")

        applier = DryRunApplier(root) if dry_run else MtimeApplier(root)
        applied = apply_rewinds(result.actions, applier)

        state_path = self.state_store.path(root)
        if dry_run:
            logger.warning("Dry mode, state file left untouched")
        else:
            # Failed rewinds keep their intended baseline so the next run retries them
            logger.info("Saving the new state...")
            state_path = self.state_store.save(root, result.new_state)

        return RunReport(
            root=root,
            state_path=state_path,
            dry_run=dry_run,
            first_run=first_run,
            reconcile=result,
            apply=applied,
            read_errors=scan.errors,
        )
