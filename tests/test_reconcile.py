"""Test the reconciliation engine."""

from conftest import T0, T1, fp, record

from mtime_rewind.models import AdoptChanged, AdoptNew, Rewind, Unchanged
from mtime_rewind.reconcile import decide, reconcile


def test_first_run_adopts_everything():
    """With no previous state every file becomes a new baseline."""
    current = {"a": record("a", "H", T0), "b/c": record("b/c", "G", T1)}

    result = reconcile({}, current)

    assert result.actions == [AdoptNew("a", fp("H"), T0), AdoptNew("b/c", fp("G"), T1)]
    assert result.new_state == current
    assert result.rewinds == []


def test_rewind_unchanged_content_with_newer_mtime():
    previous = {"f": record("f", "H", T0)}
    current = {"f": record("f", "H", T1)}

    result = reconcile(previous, current)

    assert result.actions == [Rewind("f", fp("H"), previous_mtime_ns=T0, observed_mtime_ns=T1)]
    # The stored baseline is the rewound value, not the observed one
    assert result.new_state == {"f": record("f", "H", T0)}


def test_rewind_when_mtime_moved_backwards():
    """Any mtime difference with equal content is rewound, not only advances."""
    previous = {"f": record("f", "H", T1)}
    current = {"f": record("f", "H", T0)}

    result = reconcile(previous, current)

    assert result.rewinds == [Rewind("f", fp("H"), T1, T0)]
    assert result.new_state["f"].mtime_ns == T1


def test_changed_content_is_adopted():
    previous = {"f": record("f", "H", T0)}
    current = {"f": record("f", "H2", T1)}

    result = reconcile(previous, current)

    assert result.actions == [AdoptChanged("f", fp("H2"), T1)]
    assert result.new_state == {"f": record("f", "H2", T1)}


def test_changed_content_adopted_even_with_older_mtime():
    previous = {"f": record("f", "H", T1)}
    current = {"f": record("f", "H2", T0)}

    result = reconcile(previous, current)

    assert result.adopted_changed == [AdoptChanged("f", fp("H2"), T0)]
    assert result.new_state["f"].mtime_ns == T0


def test_unchanged_file():
    previous = {"f": record("f", "H", T0)}

    result = reconcile(previous, {"f": record("f", "H", T0)})

    assert result.actions == [Unchanged("f", fp("H"), T0)]
    assert result.new_state == previous


def test_deleted_file_is_dropped_without_action():
    previous = {"gone": record("gone", "H", T0), "kept": record("kept", "K", T0)}
    current = {"kept": record("kept", "K", T0)}

    result = reconcile(previous, current)

    assert [a.path for a in result.actions] == ["kept"]
    assert "gone" not in result.new_state
    assert result.removed == {"gone"}


def test_reconcile_is_idempotent():
    """Feeding the produced state back in yields only Unchanged actions."""
    previous = {
        "same": record("same", "S", T0),
        "touched": record("touched", "T", T0),
        "edited": record("edited", "E", T0),
    }
    current = {
        "same": record("same", "S", T0),
        "touched": record("touched", "T", T1),
        "edited": record("edited", "E2", T1),
        "new": record("new", "N", T1),
    }

    first = reconcile(previous, current)
    # Simulate the filesystem after the rewinds were applied
    on_disk = {path: rec for path, rec in first.new_state.items()}
    second = reconcile(first.new_state, on_disk)

    assert all(isinstance(a, Unchanged) for a in second.actions)
    assert second.new_state == first.new_state


def test_actions_are_ordered_by_path():
    current = {p: record(p, p, T0) for p in ["z", "a", "m/b", "m/a"]}

    result = reconcile({}, current)

    assert [a.path for a in result.actions] == ["a", "m/a", "m/b", "z"]


def test_mixed_batch_views():
    previous = {
        "touched": record("touched", "T", T0),
        "edited": record("edited", "E", T0),
        "same": record("same", "S", T0),
    }
    current = {
        "touched": record("touched", "T", T1),
        "edited": record("edited", "E2", T0),
        "same": record("same", "S", T0),
        "new": record("new", "N", T1),
    }

    result = reconcile(previous, current)

    assert [a.path for a in result.rewinds] == ["touched"]
    assert [a.path for a in result.adopted_changed] == ["edited"]
    assert [a.path for a in result.unchanged] == ["same"]
    assert [a.path for a in result.adopted_new] == ["new"]


def test_decide_without_previous():
    assert decide(None, record("x", "H", T0)) == AdoptNew("x", fp("H"), T0)
