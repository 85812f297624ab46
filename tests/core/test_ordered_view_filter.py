"""Tests for exclusion filtering in OrderedView."""

import pytest

from livelist.core.filters import field_equals
from livelist.core.ordered_view import OrderedView
from livelist.core.ordering import Direction
from livelist.errors import KeyNotFoundError
from livelist.events.child_events import ChildAdded, ChildChanged, ChildMoved, ChildRemoved
from livelist.models.changes import Change, ChangeKind
from livelist.models.snapshot import Snapshot
from livelist.sources.memory import MemoryChildSource

is_done = field_equals("done", True)


def snap(key, **value):
    return Snapshot(key, value)


@pytest.fixture
def changes():
    return []


@pytest.fixture
def view(changes):
    view = OrderedView(MemoryChildSource(), observer=changes.append)
    return view


def add_all(view, *items):
    previous = None
    for key, value in items:
        view.apply_event(ChildAdded(Snapshot(key, value), previous))
        previous = key


def test_set_filter_removes_matches_and_emits_single_all(view, changes):
    add_all(view, ("a", {"done": False}), ("b", {"done": True}), ("c", {"done": False}))
    changes.clear()

    view.set_filter(is_done)

    assert view.keys() == ["a", "c"]
    assert view.is_filtered
    assert changes == [Change(ChangeKind.ALL, 0)]


def test_set_filter_removes_adjacent_matches(view):
    add_all(
        view,
        ("a", {"done": True}),
        ("b", {"done": True}),
        ("c", {"done": False}),
        ("d", {"done": True}),
        ("e", {"done": True}),
    )

    view.set_filter(is_done)

    assert view.keys() == ["c"]
    assert not any(is_done(item) for item in view)


def test_excluded_add_is_dropped_without_notification(view, changes):
    view.set_filter(is_done)
    changes.clear()

    view.apply_event(ChildAdded(snap("a", done=True), None))

    assert view.count() == 0
    assert changes == []
    assert view.hidden_keys() == ["a"]


def test_previous_key_of_hidden_child_resolves_to_visible_predecessor(view):
    view.set_filter(is_done)
    view.apply_event(ChildAdded(snap("a", done=False), None))
    view.apply_event(ChildAdded(snap("b", done=True), "a"))
    view.apply_event(ChildAdded(snap("c", done=False), "b"))
    view.apply_event(ChildAdded(snap("x", done=False), None))

    assert view.keys() == ["x", "a", "c"]


def test_changed_into_excluded_removes(view, changes):
    view.set_filter(is_done)
    add_all(view, ("a", {"done": False}), ("b", {"done": False}))
    changes.clear()

    view.apply_event(ChildChanged(snap("b", done=True), "a"))

    assert view.keys() == ["a"]
    assert changes == [Change(ChangeKind.REMOVED, 1)]


def test_changed_out_of_excluded_inserts(view, changes):
    view.set_filter(is_done)
    add_all(view, ("a", {"done": False}), ("b", {"done": True}), ("c", {"done": False}))
    changes.clear()

    view.apply_event(ChildChanged(snap("b", done=False), "a"))

    assert view.keys() == ["a", "b", "c"]
    assert changes == [Change(ChangeKind.ADDED, 1)]


def test_changed_hidden_child_stays_hidden_silently(view, changes):
    view.set_filter(is_done)
    add_all(view, ("a", {"done": True}))
    changes.clear()

    view.apply_event(ChildChanged(snap("a", done=True, note="x"), None))

    assert view.count() == 0
    assert changes == []


def test_removed_and_moved_hidden_children_are_silent(view, changes):
    view.set_filter(is_done)
    add_all(view, ("a", {"done": False}), ("b", {"done": True}))
    changes.clear()

    view.apply_event(ChildMoved(snap("b", done=True), None))
    view.apply_event(ChildRemoved(snap("b", done=True)))

    assert changes == []
    assert view.hidden_keys() == []
    with pytest.raises(KeyNotFoundError):
        view.apply_event(ChildRemoved(snap("b")))


def test_hidden_children_relinked_when_predecessor_removed(view):
    view.set_filter(is_done)
    add_all(view, ("a", {"done": False}), ("b", {"done": False}), ("c", {"done": True}))

    view.apply_event(ChildRemoved(snap("b")))
    view.apply_event(ChildAdded(snap("d", done=False), "c"))

    assert view.keys() == ["a", "d"]


def test_clearing_filter_restores_hidden_children_in_order(view, changes):
    add_all(
        view,
        ("a", {"done": True}),
        ("b", {"done": False}),
        ("c", {"done": True}),
        ("d", {"done": True}),
        ("e", {"done": False}),
    )
    view.set_filter(is_done)
    assert view.keys() == ["b", "e"]
    changes.clear()

    view.set_filter(None)

    assert view.keys() == ["a", "b", "c", "d", "e"]
    assert not view.is_filtered
    assert changes == [Change(ChangeKind.ALL, 0)]


def test_replacing_filter_restores_only_no_longer_excluded(view):
    add_all(
        view,
        ("a", {"done": True, "kind": "x"}),
        ("b", {"done": False, "kind": "y"}),
        ("c", {"done": False, "kind": "x"}),
    )
    view.set_filter(is_done)

    view.set_filter(field_equals("kind", "x"))

    assert view.keys() == ["b"]
    assert sorted(view.hidden_keys()) == ["a", "c"]


def test_filter_with_comparator(view):
    view.set_ordering("n", Direction.ASCENDING, int)
    add_all(
        view,
        ("a", {"n": 3, "done": False}),
        ("b", {"n": 1, "done": True}),
        ("c", {"n": 2, "done": False}),
    )
    view.set_filter(is_done)
    assert view.keys() == ["c", "a"]

    view.apply_event(ChildChanged(snap("b", n=1, done=False), None))

    assert view.keys() == ["b", "c", "a"]


def test_filter_invariant_over_stream(view):
    view.set_filter(is_done)
    source_items = [(f"k{i}", {"done": i % 3 == 0}) for i in range(12)]
    add_all(view, *source_items)

    assert all(not is_done(item) for item in view)
    assert view.count() == 8


@pytest.fixture
def tasks():
    return MemoryChildSource(
        [("a", {"done": False}), ("b", {"done": True}), ("c", {"done": False})]
    )


def test_restore_after_insert_next_to_hidden_child(tasks):
    view = OrderedView(tasks)
    view.set_filter(is_done)

    tasks.insert("d", {"done": False}, previous_key="a")
    view.set_filter(None)

    assert view.keys() == tasks.keys() == ["a", "d", "b", "c"]


def test_restore_after_predecessor_of_hidden_child_moves(tasks):
    view = OrderedView(tasks)
    view.set_filter(is_done)

    tasks.move("a", "c")
    view.set_filter(None)

    assert view.keys() == tasks.keys() == ["b", "c", "a"]


def test_restore_after_visible_child_between_hidden_ones_removed():
    source = MemoryChildSource(
        [
            ("a", {"done": False}),
            ("h1", {"done": True}),
            ("x", {"done": False}),
            ("h2", {"done": True}),
        ]
    )
    view = OrderedView(source)
    view.set_filter(is_done)

    source.remove("x")
    view.set_filter(None)

    assert view.keys() == source.keys() == ["a", "h1", "h2"]


def test_restore_follows_source_order_after_mixed_mutations():
    source = MemoryChildSource(
        [(f"k{i}", {"done": i % 2 == 0}) for i in range(6)]
    )
    view = OrderedView(source)
    view.set_filter(is_done)

    source.move("k1", "k4")
    source.insert("n", {"done": False}, previous_key="k2")
    source.remove("k3")
    source.move("k0", "k5")
    source.set("k4", {"done": False})

    assert view.keys() == [key for key in source.keys() if not source.get(key).value["done"]]

    view.set_filter(None)

    assert view.keys() == source.keys()
    assert view.hidden_keys() == []
