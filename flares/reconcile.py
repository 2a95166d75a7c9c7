"""Incremental flare reconciliation.

Clearing a whole buffer and repainting makes every flare blink. Instead the
pass walks the new regions in line order and only clears the gap between the
last reconciled line and the next region before painting it, then sweeps the
tail after the last region. Content flares pin to one line while background
fills span a body, so each layer keeps its own watermark.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .buffer import Buffer
from .config import parse_content_tokens, parse_mode
from .decorations import DecorationAPI
from .formatter import DisplayFormatter
from .renderer import FlareRenderer
from .types import ContentToken, Layer, PresentationMode, Region, sort_regions

logger = logging.getLogger(__name__)


@dataclass
class Watermark:
    """First line of a layer not yet reconciled in the current pass."""

    layer: Layer
    line: int = 0

    def clear_through(self, decorations: DecorationAPI, buffer: Buffer, last_line: int, report: "ReconcileReport") -> None:
        """Clear ``[line, last_line]`` when not already covered and advance past it."""
        if self.line > last_line:
            return
        decorations.clear(buffer, self.layer, self.line, last_line + 1)
        report.cleared.append((self.layer, self.line, last_line + 1))
        self.line = last_line + 1

    def sweep(self, decorations: DecorationAPI, buffer: Buffer, report: "ReconcileReport") -> None:
        """Clear everything from the watermark to the end of the buffer."""
        decorations.clear(buffer, self.layer, self.line, None)
        report.cleared.append((self.layer, self.line, None))


@dataclass
class ReconcileReport:
    """Outcome of one pass: painted and skipped region counts plus every cleared range."""

    painted: int = 0
    skipped: int = 0
    cleared: list[tuple[Layer, int, int | None]] = field(default_factory=list)

    def cleared_ranges(self, layer: Layer) -> list[tuple[int, int | None]]:
        """Cleared ``(start, end)`` ranges of one layer in clearing order."""
        return [(start, end) for current, start, end in self.cleared if current is layer]


class Reconciler:
    """Repaint a buffer's flares in place from a fresh list of regions.

    Content and background layers advance independent watermarks, so stale
    decorations are cleared just ahead of each paint instead of all at once.
    """

    def __init__(self, renderer: FlareRenderer, formatter: DisplayFormatter) -> None:
        self.renderer = renderer
        self.formatter = formatter

    @property
    def decorations(self) -> DecorationAPI:
        """Decoration backend shared with the renderer."""
        return self.renderer.decorations

    def _prepare(
        self,
        buffer: Buffer,
        regions: Iterable[Region],
        mode: PresentationMode,
        contents: Sequence[ContentToken],
        report: ReconcileReport,
    ) -> list[tuple[Region, str]]:
        """Sort regions, count invalid ones as skipped and format the rest before any paint."""
        line_count = buffer.line_count()
        prepared: list[tuple[Region, str]] = []
        for region in sort_regions(regions):
            if not region.is_valid(line_count):
                logger.debug("skipping region without usable position: %r", region)
                report.skipped += 1
                continue
            text = self.formatter.format_for_mode(region, contents, mode, buffer.line(region.start_line))
            prepared.append((region, text))
        return prepared

    def reconcile(
        self,
        buffer: Buffer,
        regions: Iterable[Region],
        mode: PresentationMode | str,
        contents: Iterable[ContentToken | str],
    ) -> ReconcileReport:
        """Bring the buffer's flares in line with ``regions``.

        Mode, content tokens and every flare text are resolved before the
        first decoration call, so a configuration error leaves the previous
        render untouched.
        """
        resolved_mode = parse_mode(mode)
        tokens = parse_content_tokens(contents)
        report = ReconcileReport()
        prepared = self._prepare(buffer, regions, resolved_mode, tokens, report)

        decorations = self.decorations
        content = Watermark(Layer.CONTENT)
        background = Watermark(Layer.BACKGROUND)
        for region, text in prepared:
            content.clear_through(decorations, buffer, region.start_line, report)
            background.clear_through(decorations, buffer, region.start_line, report)

            if self.formatter.config.has_background(region.kind):
                background.clear_through(decorations, buffer, region.end_line, report)
                self.renderer.paint_background(buffer, region)

            if self.renderer.paint(buffer, region, text, resolved_mode):
                report.painted += 1

        content.sweep(decorations, buffer, report)
        background.sweep(decorations, buffer, report)
        return report


__all__ = ["ReconcileReport", "Reconciler", "Watermark"]
