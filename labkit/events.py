"""A small in-process event dispatcher."""

from __future__ import annotations

import abc
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

__all__ = [
    "Event",
    "EventHandler",
    "HandlerAlreadyRegisteredError",
    "EventDispatcher",
]


class HandlerAlreadyRegisteredError(ValueError):
    """Raised when a handler is registered twice for the same event."""

    def __init__(self, message: str = "handler already registered") -> None:
        super().__init__(message)


@dataclass
class Event:
    """A named event carrying an arbitrary payload."""

    name: str
    payload: Any = None
    date_time: datetime = field(default_factory=datetime.now)


class EventHandler(abc.ABC):
    """Something that reacts to a dispatched event."""

    @abc.abstractmethod
    def handle(self, event: Event) -> None:
        """React to ``event``."""


class EventDispatcher:
    """Keeps handlers per event name and runs them when an event is dispatched."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, event_name: str, handler: EventHandler) -> None:
        """Add ``handler`` for ``event_name``; the same handler may not be added twice."""
        if self.has(event_name, handler):
            raise HandlerAlreadyRegisteredError()
        self._handlers.setdefault(event_name, []).append(handler)

    def dispatch(self, event: Event) -> None:
        """Run every handler registered for the event concurrently and wait for all."""
        handlers = list(self._handlers.get(event.name, ()))
        if not handlers:
            return
        with ThreadPoolExecutor(max_workers=len(handlers)) as pool:
            futures = [pool.submit(handler.handle, event) for handler in handlers]
        for future in futures:
            future.result()

    def has(self, event_name: str, handler: EventHandler) -> bool:
        """Tell whether ``handler`` is registered for ``event_name``."""
        return any(h is handler for h in self._handlers.get(event_name, ()))

    def remove(self, event_name: str, handler: EventHandler) -> None:
        """Remove ``handler`` from ``event_name``; unknown handlers are ignored."""
        handlers = self._handlers.get(event_name)
        if handlers is None:
            return
        for position, h in enumerate(handlers):
            if h is handler:
                del handlers[position]
                return

    def clear(self) -> None:
        """Forget every registered handler."""
        self._handlers = {}

    def handlers_for(self, event_name: str) -> list[EventHandler]:
        """Return a copy of the handlers registered for ``event_name``, in order."""
        return list(self._handlers.get(event_name, ()))