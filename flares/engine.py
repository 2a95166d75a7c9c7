"""Flare engine context.

``FlareEngine`` owns everything that would otherwise be process-wide state:
configuration, the decoration backend, the symbol source, the event bus and
the per-buffer attachment state. Hosts build one engine and route editor
events into ``engine.events``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from .attach import AttachmentController, BufferState
from .buffer import Buffer
from .comments import collect_comment_regions
from .config import FlaresConfig, parse_content_tokens, parse_mode
from .debounce import TimerLoop
from .decorations import DecorationAPI
from .events import EventBus
from .formatter import DisplayFormatter
from .reconcile import ReconcileReport, Reconciler
from .renderer import FlareRenderer
from .symbols import SymbolSource, iter_regions
from .types import ContentToken, Layer, PresentationMode, Region

logger = logging.getLogger(__name__)


def _always(_buffer: Buffer) -> bool:
    return True


class FlareEngine:
    def __init__(
        self,
        decorations: DecorationAPI,
        symbol_source: SymbolSource,
        config: FlaresConfig | None = None,
        *,
        events: EventBus | None = None,
        loop: TimerLoop | None = None,
        cursor_emphasis: Callable[[Buffer], bool] | None = None,
    ) -> None:
        self.decorations = decorations
        self.symbol_source = symbol_source
        self.events = events if events is not None else EventBus()
        self.loop = loop
        self.cursor_emphasis = cursor_emphasis or _always
        self.attachments = AttachmentController(self)
        self._is_setup = False
        self.configure(config or FlaresConfig())

    def configure(self, config: FlaresConfig) -> None:
        """Swap configuration; already attached buffers pick it up on their next pass."""
        self.config = config
        self.formatter = DisplayFormatter(config)
        self.renderer = FlareRenderer(self.decorations, config)
        self.reconciler = Reconciler(self.renderer, self.formatter)
        for state in self.attachments.states.values():
            state.hider.hide_above_flares = config.hide_above_flares

    def setup(self, buffers: Iterable[Buffer]) -> list[Buffer]:
        """Attach every buffer whose symbol source provides symbols; runs once."""
        if self._is_setup:
            return []
        self._is_setup = True
        attached: list[Buffer] = []
        for buffer in buffers:
            if self.symbol_source.provides_symbols(buffer):
                self.attach(buffer)
                attached.append(buffer)
        return attached

    def on_symbol_provider_attached(self, buffer: Buffer) -> bool:
        """Host hook for a symbol provider appearing on ``buffer`` after setup."""
        if not self.symbol_source.provides_symbols(buffer):
            return False
        state = self.attach(buffer)
        self.attachments.schedule_refresh(state, 0)
        return True

    def attach(self, buffer: Buffer) -> BufferState:
        return self.attachments.attach(buffer)

    def detach(self, buffer: Buffer) -> bool:
        return self.attachments.detach(buffer)

    def collect_regions(self, buffer: Buffer) -> list[Region] | None:
        """Regions for the current snapshot, or ``None`` when symbols are unavailable."""
        config = self.config
        try:
            symbols = self.symbol_source.document_symbols(buffer, config.symbol_timeout_ms)
        except TimeoutError:
            logger.debug("symbol request timed out for buffer %d", buffer.number)
            return None
        except Exception as exc:
            logger.warning("symbol source failed for buffer %d: %s", buffer.number, exc)
            return None
        if symbols is None:
            return None

        regions = list(iter_regions(symbols, config.is_enabled, config.allows_nesting))
        if config.comments_enabled and config.comment_prefix:
            lines = (buffer.line(index) for index in range(buffer.line_count()))
            regions.extend(collect_comment_regions(lines, config.comment_prefix, config.comment_marker))
        return regions

    def refresh(
        self,
        buffer: Buffer,
        mode: PresentationMode | str | None = None,
        contents: Iterable[ContentToken | str] | None = None,
    ) -> ReconcileReport | None:
        """Run one reconciliation pass now.

        Returns ``None`` without touching existing flares when the symbol
        source has nothing for the buffer yet.
        """
        regions = self.collect_regions(buffer)
        if regions is None:
            logger.debug("symbols not ready for buffer %d; keeping current flares", buffer.number)
            return None

        report = self.reconciler.reconcile(
            buffer,
            regions,
            self.config.mode if mode is None else mode,
            self.config.display_contents if contents is None else contents,
        )
        state = self.attachments.state_for(buffer)
        if state is not None:
            state.last_report = report
            state.hider.rehide(buffer)
        return report

    def show(
        self,
        buffer: Buffer,
        mode: PresentationMode | str | None = None,
        contents: Iterable[ContentToken | str] | None = None,
    ) -> ReconcileReport | None:
        """Make ``mode``/``contents`` the active presentation, attach and render."""
        changes: dict[str, object] = {}
        if mode is not None:
            changes["mode"] = parse_mode(mode)
        if contents is not None:
            changes["display_contents"] = parse_content_tokens(contents)
        if changes:
            self.configure(self.config.replace(**changes))
        self.attach(buffer)
        return self.refresh(buffer)

    def hide(self, buffer: Buffer) -> None:
        """Stop tracking ``buffer`` and remove its flares."""
        self.detach(buffer)

    def clear(self, buffer: Buffer) -> None:
        for layer in Layer:
            self.decorations.clear(buffer, layer, 0, None)


__all__ = ["FlareEngine"]
