"""Test applying rewinds to the filesystem."""

import os
from pathlib import Path

from conftest import T0, T1, fp, mtime, set_mtime, write_file

from mtime_rewind.applier import DryRunApplier, MtimeApplier, apply_rewinds
from mtime_rewind.models import AdoptChanged, AdoptNew, Rewind, Unchanged


def test_apply_sets_mtime_and_keeps_atime(root: Path):
    path = write_file(root / "a.txt", "x")
    set_mtime(path, T1)
    atime_before = path.stat().st_atime_ns

    MtimeApplier(root).apply(Rewind("a.txt", fp("H"), previous_mtime_ns=T0, observed_mtime_ns=T1))

    assert mtime(path) == T0
    assert path.stat().st_atime_ns == atime_before
    assert path.read_text() == "x"


def test_apply_rewinds_skips_other_actions(root: Path):
    for name in ["new", "changed", "same", "touched"]:
        set_mtime(write_file(root / name), T1)

    actions = [
        AdoptChanged("changed", fp("C"), T1),
        AdoptNew("new", fp("N"), T1),
        Unchanged("same", fp("S"), T1),
        Rewind("touched", fp("T"), T0, T1),
    ]
    report = apply_rewinds(actions, MtimeApplier(root))

    assert report.rewound == ["touched"]
    assert report.failed == {}
    assert mtime(root / "touched") == T0
    for name in ["new", "changed", "same"]:
        assert mtime(root / name) == T1


def test_failures_do_not_abort_the_batch(root: Path):
    set_mtime(write_file(root / "a"), T1)
    set_mtime(write_file(root / "c"), T1)

    actions = [
        Rewind("a", fp("A"), T0, T1),
        Rewind("b-vanished", fp("B"), T0, T1),
        Rewind("c", fp("C"), T0, T1),
    ]
    report = apply_rewinds(actions, MtimeApplier(root))

    assert report.rewound == ["a", "c"]
    assert list(report.failed) == ["b-vanished"]
    assert mtime(root / "a") == T0
    assert mtime(root / "c") == T0


def test_dry_run_applier_touches_nothing(root: Path):
    path = write_file(root / "a")
    set_mtime(path, T1)

    report = apply_rewinds([Rewind("a", fp("A"), T0, T1)], DryRunApplier(root))

    assert report.rewound == ["a"]
    assert mtime(path) == T1


def test_out_of_range_baseline_is_a_failure(root: Path, monkeypatch):
    set_mtime(write_file(root / "a"), T1)
    set_mtime(write_file(root / "b"), T1)
    original_utime = os.utime

    def overflowing_utime(path, *args, **kwargs):
        if Path(path).name == "a":
            raise OverflowError("timestamp out of range for platform time_t")
        return original_utime(path, *args, **kwargs)

    monkeypatch.setattr(os, "utime", overflowing_utime)
    report = apply_rewinds(
        [Rewind("a", fp("A"), T0, T1), Rewind("b", fp("B"), T0, T1)], MtimeApplier(root)
    )

    assert report.rewound == ["b"]
    assert "time_t" in report.failed["a"]
    assert mtime(root / "b") == T0
