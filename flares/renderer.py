"""Paint one region's flare through the decoration API."""

from __future__ import annotations

import logging

from .buffer import Buffer
from .config import FlaresConfig
from .decorations import Decoration, DecorationAPI, DecorationStyle
from .types import Layer, PresentationMode, Region

logger = logging.getLogger(__name__)


class FlareRenderer:
    """Translate formatted flare text into decoration API calls for one region."""

    def __init__(self, decorations: DecorationAPI, config: FlaresConfig) -> None:
        self.decorations = decorations
        self.config = config

    def paint_background(self, buffer: Buffer, region: Region) -> int:
        """Fill ``[start_line, end_line]`` on the background layer."""
        return self.decorations.paint(
            buffer,
            Layer.BACKGROUND,
            Decoration(
                style=DecorationStyle.BACKGROUND_FILL,
                line=region.start_line,
                end_line=region.end_line,
                hl_group=self.config.background_hl_group,
                priority=self.config.highlight_priority,
            ),
        )

    def paint_inline(self, buffer: Buffer, line: int, text: str) -> list[int]:
        """Same-line highlight plus right-aligned overlay; empty text paints the highlight only."""
        handles = [
            self.decorations.paint(
                buffer,
                Layer.CONTENT,
                Decoration(
                    style=DecorationStyle.LINE_HIGHLIGHT,
                    line=line,
                    hl_group=self.config.background_hl_group,
                    priority=self.config.highlight_priority,
                ),
            )
        ]
        if text:
            handles.append(
                self.decorations.paint(
                    buffer,
                    Layer.CONTENT,
                    Decoration(
                        style=DecorationStyle.OVERLAY,
                        line=line,
                        text=text,
                        hl_group=self.config.content_hl_group,
                        priority=self.config.overlay_priority,
                    ),
                )
            )
        return handles

    def paint_above(self, buffer: Buffer, line: int, text: str) -> int | None:
        """Insert a full-width synthetic line above ``line``.

        ``line`` is 0-based; the 1-based target must be positive and inside
        the buffer or nothing is painted.
        """
        target = line + 1
        if target <= 0 or target > buffer.line_count():
            logger.debug("skipping synthetic line for out-of-range target %d", target)
            return None
        return self.decorations.paint(
            buffer,
            Layer.CONTENT,
            Decoration(
                style=DecorationStyle.VIRTUAL_LINE,
                line=line,
                text=text,
                hl_group=self.config.content_hl_group,
                priority=self.config.overlay_priority,
                pad_to=buffer.window_width(),
            ),
        )

    def paint(self, buffer: Buffer, region: Region, text: str, mode: PresentationMode) -> list[int]:
        """Paint the content flare for ``region`` in ``mode``; returns the new handles."""
        if mode is PresentationMode.ABOVE:
            handle = self.paint_above(buffer, region.start_line, text)
            return [] if handle is None else [handle]
        return self.paint_inline(buffer, region.start_line, text)


__all__ = ["FlareRenderer"]
