import threading

import pytest

from labkit.events import (
    Event,
    EventDispatcher,
    EventHandler,
    HandlerAlreadyRegisteredError,
)


class _Handler(EventHandler):
    def __init__(self, handler_id):
        self.handler_id = handler_id

    def handle(self, event):
        pass


class _RecordingHandler(EventHandler):
    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def handle(self, event):
        with self._lock:
            self.events.append(event)


class _FailingHandler(EventHandler):
    def handle(self, event):
        raise RuntimeError("boom")


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def handlers():
    return _Handler(1), _Handler(2), _Handler(3)


@pytest.fixture
def event():
    return Event(name="test", payload="test")


@pytest.fixture
def event2():
    return Event(name="test2", payload="test2")


def test_register(dispatcher, handlers, event):
    h1, h2, _ = handlers
    dispatcher.register(event.name, h1)
    assert len(dispatcher.handlers_for(event.name)) == 1
    dispatcher.register(event.name, h2)
    registered = dispatcher.handlers_for(event.name)
    assert len(registered) == 2
    assert registered[0] is h1
    assert registered[1] is h2


def test_register_with_same_handler(dispatcher, handlers, event):
    h1, _, _ = handlers
    dispatcher.register(event.name, h1)
    assert len(dispatcher.handlers_for(event.name)) == 1
    with pytest.raises(HandlerAlreadyRegisteredError, match="handler already registered"):
        dispatcher.register(event.name, h1)
    assert len(dispatcher.handlers_for(event.name)) == 1


def test_clear(dispatcher, handlers, event, event2):
    h1, h2, h3 = handlers
    dispatcher.register(event.name, h1)
    dispatcher.register(event.name, h2)
    assert len(dispatcher.handlers_for(event.name)) == 2
    dispatcher.register(event2.name, h3)
    assert len(dispatcher.handlers_for(event2.name)) == 1

    dispatcher.clear()
    assert len(dispatcher) == 0
    assert dispatcher.handlers_for(event.name) == []


def test_has(dispatcher, handlers, event):
    h1, h2, h3 = handlers
    dispatcher.register(event.name, h1)
    dispatcher.register(event.name, h2)
    assert len(dispatcher.handlers_for(event.name)) == 2

    assert dispatcher.has(event.name, h1) is True
    assert dispatcher.has(event.name, h2) is True
    assert dispatcher.has(event.name, h3) is False
    assert dispatcher.has("unknown", h1) is False


def test_remove(dispatcher, handlers, event, event2):
    h1, h2, h3 = handlers
    dispatcher.register(event.name, h1)
    dispatcher.register(event.name, h2)
    dispatcher.register(event2.name, h3)

    dispatcher.remove(event.name, h1)
    remaining = dispatcher.handlers_for(event.name)
    assert len(remaining) == 1
    assert remaining[0] is h2

    dispatcher.remove(event.name, h2)
    assert len(dispatcher.handlers_for(event.name)) == 0

    dispatcher.remove(event2.name, h3)
    assert len(dispatcher.handlers_for(event2.name)) == 0


def test_remove_unknown_is_ignored(dispatcher, handlers, event):
    h1, h2, _ = handlers
    dispatcher.register(event.name, h1)
    dispatcher.remove(event.name, h2)
    dispatcher.remove("missing", h1)
    assert dispatcher.handlers_for(event.name) == [h1]


def test_dispatch(dispatcher, event):
    eh = _RecordingHandler()
    eh2 = _RecordingHandler()
    dispatcher.register(event.name, eh)
    dispatcher.register(event.name, eh2)

    dispatcher.dispatch(event)

    assert eh.events == [event]
    assert eh2.events == [event]


def test_dispatch_other_event_does_not_call(dispatcher, event, event2):
    eh = _RecordingHandler()
    dispatcher.register(event.name, eh)
    dispatcher.dispatch(event2)
    assert eh.events == []


def test_dispatch_propagates_handler_error(dispatcher, event):
    dispatcher.register(event.name, _FailingHandler())
    with pytest.raises(RuntimeError, match="boom"):
        dispatcher.dispatch(event)


def test_event_fields():
    ev = Event(name="order", payload={"id": 1})
    assert ev.name == "order"
    assert ev.payload == {"id": 1}
    assert ev.date_time.year >= 2020