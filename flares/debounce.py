"""Single-channel debounce timer on an asyncio-style event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerLoop(Protocol):
    """The part of ``asyncio.AbstractEventLoop`` the debouncer needs."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class Debouncer:
    """Coalesce rapid requests into one delayed call, last request wins.

    Only one timer is live at a time. Scheduling while a timer is pending
    cancels it, so the superseded action never runs.
    """

    def __init__(self, delay_ms: int = 500, loop: TimerLoop | None = None) -> None:
        self._delay_ms = delay_ms
        self._loop = loop
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, action: Callable[[], object], delay_ms: int | None = None) -> None:
        """Arm a one-shot timer for ``action``, replacing any pending one."""
        self.cancel()
        delay = self._delay_ms if delay_ms is None else delay_ms
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()

        handle: TimerHandle | None = None

        def fire() -> None:
            try:
                action()
            finally:
                if self._handle is handle:
                    self._handle = None

        handle = loop.call_later(max(0, delay) / 1000.0, fire)
        self._handle = handle

    def cancel(self) -> None:
        """Drop the pending action, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


__all__ = ["Debouncer", "TimerHandle", "TimerLoop"]
