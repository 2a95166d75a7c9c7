"""Per-buffer event wiring.

Attaching a buffer subscribes it to document changes, resizes, symbol
readiness and cursor moves. Edits go through the buffer's debouncer; cursor
moves go straight to its ``CursorHider``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .buffer import Buffer
from .cursor import CursorHider
from .debounce import Debouncer
from .events import Event, EventKind, Subscription
from .reconcile import ReconcileReport

if TYPE_CHECKING:
    from .engine import FlareEngine

logger = logging.getLogger(__name__)


@dataclass
class BufferState:
    """Per-buffer subscriptions, timer, cursor hider and last pass result."""

    buffer: Buffer
    debouncer: Debouncer
    hider: CursorHider
    subscriptions: list[Subscription] = field(default_factory=list)
    last_report: ReconcileReport | None = None


class AttachmentController:
    """Own the event subscriptions and per-buffer state of attached buffers."""

    def __init__(self, engine: "FlareEngine") -> None:
        self.engine = engine
        self.states: dict[int, BufferState] = {}

    def is_attached(self, buffer: Buffer) -> bool:
        return buffer.number in self.states

    def state_for(self, buffer: Buffer) -> BufferState | None:
        return self.states.get(buffer.number)

    def attach(self, buffer: Buffer) -> BufferState:
        """Subscribe ``buffer`` to flare updates; attaching twice is a no-op."""
        state = self.states.get(buffer.number)
        if state is not None:
            return state

        engine = self.engine
        state = BufferState(
            buffer=buffer,
            debouncer=Debouncer(engine.config.debounce_ms, loop=engine.loop),
            hider=CursorHider(engine.decorations, hide_above_flares=engine.config.hide_above_flares),
        )
        bus = engine.events
        number = buffer.number
        state.subscriptions = [
            bus.subscribe(EventKind.DOCUMENT_CHANGED, number, lambda event: self._on_document_changed(state, event)),
            bus.subscribe(EventKind.RESIZED, number, lambda event: self._on_resized(state, event)),
            bus.subscribe(EventKind.SYMBOLS_READY, number, lambda event: self._on_symbols_ready(state, event)),
            bus.subscribe(EventKind.CURSOR_MOVED, number, lambda event: self._on_cursor_moved(state, event)),
        ]
        self.states[number] = state
        logger.debug("attached buffer %d", number)
        return state

    def detach(self, buffer: Buffer) -> bool:
        """Drop subscriptions, pending work, hidden state and flares of ``buffer``."""
        state = self.states.pop(buffer.number, None)
        if state is not None:
            for subscription in state.subscriptions:
                subscription.cancel()
            state.subscriptions.clear()
            state.debouncer.cancel()
            state.hider.discard()
            logger.debug("detached buffer %d", buffer.number)
        self.engine.clear(buffer)
        return state is not None

    def detach_all(self) -> None:
        """Detach every attached buffer."""
        for state in list(self.states.values()):
            self.detach(state.buffer)

    def schedule_refresh(self, state: BufferState, delay_ms: int | None = None) -> None:
        """Queue a refresh through the buffer's debouncer, replacing any pending one."""
        state.debouncer.schedule(lambda: self.engine.refresh(state.buffer), delay_ms)

    def _on_document_changed(self, state: BufferState, _event: Event) -> None:
        self.schedule_refresh(state, self.engine.config.debounce_ms)

    def _on_resized(self, state: BufferState, _event: Event) -> None:
        """Refresh now, or after ``resize_debounce_ms`` when that is positive."""
        delay_ms = self.engine.config.resize_debounce_ms
        if delay_ms <= 0:
            self.engine.refresh(state.buffer)
            return
        self.schedule_refresh(state, delay_ms)

    def _on_symbols_ready(self, state: BufferState, event: Event) -> None:
        """Schedule one pass once the symbol payload reports completion."""
        if not event.done:
            return
        self.schedule_refresh(state, 0)

    def _on_cursor_moved(self, state: BufferState, event: Event) -> None:
        if event.line is None or not self.engine.cursor_emphasis(state.buffer):
            return
        state.hider.cursor_entered(state.buffer, event.line)


__all__ = ["AttachmentController", "BufferState"]
