"""Tests for teardown, cancellation and reentrancy of OrderedView."""

import logging
from unittest.mock import Mock

import pytest

from livelist.core.ordered_view import OrderedView
from livelist.core.ordering import Direction
from livelist.errors import (
    ComparisonAnomaly,
    ReentrancyError,
    SourceCancelledError,
    ViewClosedError,
)
from livelist.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity
from livelist.events.bus import EventBus
from livelist.events.child_events import ChildAdded, SourceCancelled
from livelist.models.snapshot import Snapshot
from livelist.sources.memory import MemoryChildSource


def test_subscribes_on_construction_and_unsubscribes_on_teardown():
    source = MemoryChildSource()
    view = OrderedView(source)
    assert source.listener_count() == 1

    view.teardown()

    assert view.closed
    assert source.listener_count() == 0
    source.set("a", {})
    assert view.count() == 0


def test_teardown_is_idempotent():
    source = Mock()
    view = OrderedView(source)

    view.teardown()
    view.teardown()

    source.unsubscribe.assert_called_once_with(source.subscribe.return_value)


def test_events_in_flight_after_teardown_are_ignored():
    changes = []
    view = OrderedView(MemoryChildSource(), observer=changes.append)
    view.teardown()

    view.apply_event(ChildAdded(Snapshot("a", {}), "missing"))

    assert view.count() == 0
    assert changes == []


def test_configuration_after_teardown_is_rejected():
    view = OrderedView(MemoryChildSource())
    view.teardown()

    with pytest.raises(ViewClosedError):
        view.set_ordering("n")
    with pytest.raises(ViewClosedError):
        view.set_filter(lambda snapshot: False)
    with pytest.raises(ViewClosedError):
        view.reverse()


def test_cancellation_without_handler_is_raised():
    source = MemoryChildSource()
    view = OrderedView(source)
    cause = PermissionError("access revoked")

    with pytest.raises(SourceCancelledError) as excinfo:
        source.cancel("permission denied", cause)

    assert excinfo.value.cause is cause
    assert excinfo.value.__cause__ is cause
    assert view.cancelled is excinfo.value
    assert view.closed


def test_cancellation_is_forwarded_to_error_handler():
    bus = EventBus()
    published = []
    bus.subscribe(ErrorOccurredEvent, published.append)
    handler = ErrorHandler(logging.getLogger("test"), bus)
    owner = Mock()
    handler.register_owner_callback(owner)
    source = MemoryChildSource([("a", {})])
    view = OrderedView(source, error_handler=handler)

    source.cancel("permission denied")

    assert view.closed
    assert isinstance(view.cancelled, SourceCancelledError)
    assert len(published) == 1
    assert published[0].severity is ErrorSeverity.ERROR
    owner.assert_called_once_with(view.cancelled, ErrorSeverity.ERROR)
    # The data already received stays readable.
    assert view.keys() == ["a"]
    with pytest.raises(ViewClosedError):
        view.reverse()


def test_cancel_event_applied_directly():
    handler = Mock(spec=ErrorHandler)
    view = OrderedView(MemoryChildSource(), error_handler=handler)

    view.apply_event(SourceCancelled("gone"))

    handler.handle.assert_called_once()
    error, severity = handler.handle.call_args[0][:2]
    assert isinstance(error, SourceCancelledError)
    assert str(error) == "gone"
    assert severity is ErrorSeverity.ERROR


def test_comparison_anomalies_reach_error_handler_as_warnings():
    handler = Mock(spec=ErrorHandler)
    view = OrderedView(MemoryChildSource(), error_handler=handler)
    view.apply_event(ChildAdded(Snapshot("a", {"n": 1}), None))
    view.apply_event(ChildAdded(Snapshot("b", {}), "a"))

    view.set_ordering("n", Direction.ASCENDING, int)

    assert handler.handle.called
    error, severity = handler.handle.call_args[0][:2]
    assert isinstance(error, ComparisonAnomaly)
    assert severity is ErrorSeverity.WARNING
    assert handler.handle.call_args.kwargs["field_path"] == "n"
    assert handler.handle.call_args.kwargs["view"] == repr(view)


def test_observer_may_read_but_not_mutate():
    view = OrderedView(MemoryChildSource())
    seen = []

    def observer(change):
        seen.append(view.item_at(change.index).key)
        with pytest.raises(ReentrancyError):
            view.reverse()
        with pytest.raises(ReentrancyError):
            view.apply_event(ChildAdded(Snapshot("z", {}), None))

    view.set_change_observer(observer)
    view.apply_event(ChildAdded(Snapshot("a", {}), None))

    assert seen == ["a"]
    assert view.keys() == ["a"]
