"""Decide, per file, whether to rewind, adopt or keep its modification time.

The engine is a pure function over two complete snapshots. It performs no I/O;
the caller applies the returned ``Rewind`` actions and persists ``new_state``.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

from mtime_rewind.models import (
    AdoptChanged,
    AdoptNew,
    FileRecord,
    ReconciliationAction,
    Rewind,
    StateSnapshot,
    Unchanged,
)


@dataclass
class ReconcileResult:
    """Actions decided for the current snapshot and the state to persist.

    Attributes:
        actions: One action per current file, ordered by path
        new_state: Baselines as they will be on disk once rewinds are applied
        removed: Paths recorded previously that are no longer present
    """

    actions: List[ReconciliationAction] = field(default_factory=list)
    new_state: StateSnapshot = field(default_factory=dict)
    removed: Set[str] = field(default_factory=set)

    @property
    def adopted_new(self) -> List[AdoptNew]:
        return [a for a in self.actions if isinstance(a, AdoptNew)]

    @property
    def adopted_changed(self) -> List[AdoptChanged]:
        return [a for a in self.actions if isinstance(a, AdoptChanged)]

    @property
    def rewinds(self) -> List[Rewind]:
        return [a for a in self.actions if isinstance(a, Rewind)]

    @property
    def unchanged(self) -> List[Unchanged]:
        return [a for a in self.actions if isinstance(a, Unchanged)]


def decide(previous: Optional[FileRecord], current: FileRecord) -> ReconciliationAction:
    """Pick the action for one file given its previous record, if any."""
    path = current.relative_path
    if previous is None:
        return AdoptNew(path, current.fingerprint, current.mtime_ns)
    if previous.fingerprint != current.fingerprint:
        return AdoptChanged(path, current.fingerprint, current.mtime_ns)
    if previous.mtime_ns == current.mtime_ns:
        return Unchanged(path, current.fingerprint, current.mtime_ns)
    return Rewind(
        path,
        current.fingerprint,
        previous_mtime_ns=previous.mtime_ns,
        observed_mtime_ns=current.mtime_ns,
    )


def reconcile(previous: StateSnapshot, current: StateSnapshot) -> ReconcileResult:
    """
    Compare the previous run's snapshot with the freshly scanned one.

    Args:
        previous: Snapshot loaded from the state file, empty on first run
        current: Snapshot built by scanning the root

    Returns:
        ReconcileResult with ordered actions and the state to persist
    """
    result = ReconcileResult()

    for path in sorted(current):
        action = decide(previous.get(path), current[path])
        result.actions.append(action)
        # Rewinds keep the previous mtime so the next run compares against
        # what is actually on disk after the rewind
        result.new_state[path] = FileRecord(
            relative_path=path,
            fingerprint=action.fingerprint,
            mtime_ns=action.baseline_mtime_ns,
        )

    result.removed = set(previous) - set(current)
    return result
