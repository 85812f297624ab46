import pytest
from dataclasses import dataclass
from livelist.events.bus import Event, EventBus, Subscription

@dataclass(kw_only=True)
class SimpleEvent(Event):
    payload: str = ""

@dataclass(kw_only=True)
class _OtherEvent(Event):
    value: int = 0

def test_sync_subscribe_publish():
    bus = EventBus()
    received = []

    def handler(event: SimpleEvent):
        received.append(event.payload)

    bus.subscribe(SimpleEvent, handler)
    bus.publish(SimpleEvent(payload="hello"))

    assert len(received) == 1
    assert received[0] == "hello"

def test_multiple_handlers():
    bus = EventBus()
    count = 0

    def handler1(event):
        nonlocal count
        count += 1

    def handler2(event):
        nonlocal count
        count += 2

    bus.subscribe(SimpleEvent, handler1)
    bus.subscribe(SimpleEvent, handler2)

    bus.publish(SimpleEvent())

    assert count == 3

def test_handlers_only_see_their_event_type():
    bus = EventBus()
    texts, numbers = [], []
    bus.subscribe(SimpleEvent, lambda e: texts.append(e.payload))
    bus.subscribe(_OtherEvent, lambda e: numbers.append(e.value))

    bus.publish(SimpleEvent(payload="a"))
    bus.publish(_OtherEvent(value=42))

    assert texts == ["a"]
    assert numbers == [42]

def test_unsubscribe_and_cancel():
    bus = EventBus()
    called = []
    sub = bus.subscribe(SimpleEvent, lambda e: called.append(1))
    assert isinstance(sub, Subscription)
    assert bus.handler_count(SimpleEvent) == 1

    bus.unsubscribe(sub)
    bus.publish(SimpleEvent())
    assert called == []
    assert bus.handler_count(SimpleEvent) == 0

    other = bus.subscribe(SimpleEvent, lambda e: called.append(2))
    other.cancel()
    bus.publish(SimpleEvent())
    assert called == []

def test_failing_handler_does_not_block_others():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(SimpleEvent, broken)
    bus.subscribe(SimpleEvent, lambda e: received.append(e.payload))

    bus.publish(SimpleEvent(payload="still delivered"))

    assert received == ["still delivered"]
