"""Synchronous editor-event dispatch with explicit subscription handles."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class EventKind(Enum):
    DOCUMENT_CHANGED = "document_changed"
    RESIZED = "resized"
    SYMBOLS_READY = "symbols_ready"
    CURSOR_MOVED = "cursor_moved"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    buffer: int
    line: int | None = None
    done: bool = True


EventCallback = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    """Handle for one callback; cancelling it stops delivery."""

    bus: "EventBus"
    kind: EventKind
    buffer: int
    callback: EventCallback
    active: bool = field(default=True)

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.bus._unsubscribe(self)


class EventBus:
    """Per-(kind, buffer) subscriber lists, delivered in subscription order."""

    def __init__(self) -> None:
        self._subscribers: dict[tuple[EventKind, int], list[Subscription]] = {}

    def subscribe(self, kind: EventKind, buffer: int, callback: EventCallback) -> Subscription:
        subscription = Subscription(bus=self, kind=kind, buffer=buffer, callback=callback)
        self._subscribers.setdefault((kind, buffer), []).append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        key = (subscription.kind, subscription.buffer)
        subscribers = self._subscribers.get(key)
        if not subscribers:
            return
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            del self._subscribers[key]

    def subscriber_count(self, buffer: int, kind: EventKind | None = None) -> int:
        return sum(
            len(subs)
            for (current_kind, current_buffer), subs in self._subscribers.items()
            if current_buffer == buffer and (kind is None or current_kind is kind)
        )

    def emit(self, event: Event) -> None:
        for subscription in list(self._subscribers.get((event.kind, event.buffer), ())):
            if subscription.active:
                subscription.callback(event)

    def document_changed(self, buffer: int) -> None:
        self.emit(Event(EventKind.DOCUMENT_CHANGED, buffer))

    def resized(self, buffer: int) -> None:
        self.emit(Event(EventKind.RESIZED, buffer))

    def symbols_ready(self, buffer: int, done: bool = True) -> None:
        self.emit(Event(EventKind.SYMBOLS_READY, buffer, done=done))

    def cursor_moved(self, buffer: int, line: int) -> None:
        self.emit(Event(EventKind.CURSOR_MOVED, buffer, line=line))


__all__ = ["Event", "EventBus", "EventCallback", "EventKind", "Subscription"]
