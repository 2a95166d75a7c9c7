"""Hide flares on the cursor line and restore them once the cursor leaves.

Each attached buffer owns one ``CursorHider``. Lines are ``Visible`` unless
they have a ``HiddenFlareRecord``; entering a line restores every other
hidden line first, so after a settled cursor move at most one line is
hidden. All calls go straight to the decoration API without debouncing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .buffer import Buffer
from .decorations import Decoration, DecorationAPI
from .types import Layer

logger = logging.getLogger(__name__)

HIDEABLE_LAYERS: tuple[Layer, ...] = (Layer.CONTENT, Layer.BACKGROUND)


@dataclass
class HiddenFlareRecord:
    line: int
    entries: list[tuple[Layer, Decoration]] = field(default_factory=list)


class CursorHider:
    def __init__(self, decorations: DecorationAPI, hide_above_flares: bool = True) -> None:
        self.decorations = decorations
        self.hide_above_flares = hide_above_flares
        self.hidden: dict[int, HiddenFlareRecord] = {}
        self.cursor_line: int | None = None

    @property
    def hidden_lines(self) -> list[int]:
        return sorted(self.hidden)

    def cursor_entered(self, buffer: Buffer, line: int) -> None:
        """Restore other hidden lines, then hide the flares anchored on ``line``."""
        self.cursor_line = line
        for hidden_line in [key for key in self.hidden if key != line]:
            self._restore(buffer, self.hidden.pop(hidden_line))
        self._hide(buffer, line)

    def restore_all(self, buffer: Buffer) -> None:
        """Repaint every hidden line and stop tracking the cursor."""
        self.cursor_line = None
        for hidden_line in list(self.hidden):
            self._restore(buffer, self.hidden.pop(hidden_line))

    def discard(self) -> None:
        """Forget hidden records without repainting them."""
        self.cursor_line = None
        self.hidden.clear()

    def rehide(self, buffer: Buffer) -> None:
        """Re-apply hiding after a reconciliation pass repainted the buffer.

        The pass repaints hidden lines from fresh regions, so the stored
        payloads are stale; they are replaced by whatever the pass painted.
        The cursor line is hidden again even when it had no flares before.
        """
        lines = set(self.hidden)
        self.hidden.clear()
        if self.cursor_line is not None:
            lines.add(self.cursor_line)
        for line in sorted(lines):
            if line < buffer.line_count():
                self._hide(buffer, line)

    def _hide(self, buffer: Buffer, line: int) -> None:
        record = self.hidden.get(line)
        if record is None:
            record = HiddenFlareRecord(line=line)
        for layer in HIDEABLE_LAYERS:
            for handle, decoration in self.decorations.query(buffer, layer, line, line + 1):
                if decoration.above and not self.hide_above_flares:
                    continue
                self.decorations.remove(buffer, layer, handle)
                record.entries.append((layer, decoration))
        if record.entries:
            self.hidden[line] = record

    def _restore(self, buffer: Buffer, record: HiddenFlareRecord) -> None:
        if record.line >= buffer.line_count():
            logger.debug("discarding hidden flares for missing line %d", record.line)
            return
        for layer, decoration in record.entries:
            self.decorations.paint(buffer, layer, decoration)


__all__ = ["CursorHider", "HiddenFlareRecord"]
