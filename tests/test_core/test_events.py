import pytest
from enum import Enum, auto
from questengine.core.events import EventBus, Event, QuestEvent

class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()

def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT, data="test")

    assert len(received) == 1
    assert received[0].type == MockEvent.TEST_EVENT
    assert received[0]["data"] == "test"
    assert received[0].get("missing", 5) == 5

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 0

def test_event_priority(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("low"), priority=1, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("high"), priority=10, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("normal"), priority=5, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["high", "normal", "low"]

def test_equal_priority_keeps_subscription_order(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("first"), weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("second"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["first", "second"]

def test_event_consumption(event_bus):
    received = []

    def consumer(event):
        received.append("consumer")
        event.consume()

    def later_handler(event):
        received.append("later")

    event_bus.subscribe(MockEvent.TEST_EVENT, consumer, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, later_handler, priority=5)

    event = event_bus.publish(MockEvent.TEST_EVENT)

    assert received == ["consumer"]
    assert event.consumed

def test_one_shot_handler(event_bus):
    received = []

    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, one_shot=True, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1
    assert not event_bus.has_subscribers(MockEvent.TEST_EVENT)

def test_weak_handler_is_dropped(event_bus):
    received = []

    class Listener:
        def on_event(self, event):
            received.append(event)

    listener = Listener()
    event_bus.subscribe(MockEvent.TEST_EVENT, listener.on_event)
    event_bus.publish(MockEvent.TEST_EVENT)

    del listener
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1

def test_handler_exception_does_not_stop_dispatch(event_bus):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(MockEvent.TEST_EVENT, broken, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1

def test_publish_from_handler_is_queued(event_bus):
    order = []

    def first(event):
        order.append("test:start")
        event_bus.publish(MockEvent.OTHER_EVENT)
        order.append("test:end")

    event_bus.subscribe(MockEvent.TEST_EVENT, first)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: order.append("other"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["test:start", "test:end", "other"]

def test_clear_single_type(event_bus):
    event_bus.subscribe(QuestEvent.QUEST_ADDED, lambda e: None, weak=False)
    event_bus.subscribe(QuestEvent.QUEST_REMOVED, lambda e: None, weak=False)

    event_bus.clear(QuestEvent.QUEST_ADDED)

    assert not event_bus.has_subscribers(QuestEvent.QUEST_ADDED)
    assert event_bus.has_subscribers(QuestEvent.QUEST_REMOVED)

    event_bus.clear()
    assert not event_bus.has_subscribers(QuestEvent.QUEST_REMOVED)

def test_publish_event_object(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, weak=False)

    event = Event(type=MockEvent.TEST_EVENT, data={"value": 3})
    event_bus.publish_event(event)

    assert received == [event]

def test_unsubscribe_during_dispatch_sticks(event_bus):
    received = []

    def removed(event):
        received.append("removed")

    def remover(event):
        event_bus.unsubscribe(MockEvent.TEST_EVENT, removed)

    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, priority=10, one_shot=True, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, remover, priority=5)
    event_bus.subscribe(MockEvent.TEST_EVENT, removed, priority=1)

    event_bus.publish(MockEvent.TEST_EVENT)
    received.clear()
    event_bus.publish(MockEvent.TEST_EVENT)

    assert received == []
