"""Physically set modification times for Rewind actions."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from loguru import logger

from mtime_rewind.models import ReconciliationAction, Rewind


class MtimeApplier:
    """Sets a file's mtime back to its baseline, leaving atime and content alone."""

    dry_run = False

    def __init__(self, root: Path):
        self.root = root

    def apply(self, action: Rewind) -> None:
        """
        Rewind one file.

        Raises:
            OSError: If the file vanished or its times cannot be changed
        """
        path = self.root / action.path
        atime_ns = path.stat().st_atime_ns
        os.utime(path, ns=(atime_ns, action.previous_mtime_ns))


class DryRunApplier(MtimeApplier):
    """Reports rewinds without touching the filesystem."""

    dry_run = True

    def apply(self, action: Rewind) -> None:
        logger.debug(f"Dry run, not rewinding {action.path}")


@dataclass
class ApplyReport:
    """Outcome of applying a batch of rewinds."""

    rewound: List[str] = field(default_factory=list)
    # path -> error message
    failed: Dict[str, str] = field(default_factory=dict)


def apply_rewinds(actions: Iterable[ReconciliationAction], applier: MtimeApplier) -> ApplyReport:
    """
    Apply every Rewind action, continuing past per-file failures.

    Args:
        actions: Actions produced by reconcile(); non-Rewind actions are skipped
        applier: Applier performing the filesystem change

    Returns:
        ApplyReport listing rewound and failed paths
    """
    report = ApplyReport()
    for action in actions:
        if not isinstance(action, Rewind):
            continue

        logger.info(
            f"Rewinding {action.path} from {action.observed_mtime_ns} to "
            f"{action.previous_mtime_ns} as its contents did not change"
        )
        try:
            applier.apply(action)
        except (OSError, OverflowError) as e:
            # OverflowError: baseline outside the platform time_t range
            logger.error(f"Failed to rewind {action.path}: {e}")
            report.failed[action.path] = str(e)
            continue
        report.rewound.append(action.path)

    if applier.dry_run:
        logger.warning(f"Dry mode, {len(report.rewound)} rewinds not applied")
    else:
        logger.info(f"{len(report.rewound)} files rewound")
    return report
