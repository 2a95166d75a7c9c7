"""Decoration payloads and the decoration API the engine paints through.

A ``Decoration`` is a value: two payloads describing the same text, group,
layer slot and position compare equal, which is what lets hidden flares be
restored verbatim. Paint calls return an integer handle that identifies
exactly one live decoration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Protocol

from .buffer import Buffer
from .text import pad_to_width
from .types import Layer


class DecorationStyle(Enum):
    LINE_HIGHLIGHT = "line_highlight"
    OVERLAY = "overlay"
    VIRTUAL_LINE = "virtual_line"
    BACKGROUND_FILL = "background_fill"


@dataclass(frozen=True)
class Decoration:
    style: DecorationStyle
    line: int
    end_line: int | None = None
    text: str = ""
    hl_group: str = ""
    priority: int = 1
    pad_to: int = 0

    @property
    def above(self) -> bool:
        """Whether this is a synthetic line drawn above its anchor line."""
        return self.style is DecorationStyle.VIRTUAL_LINE

    @property
    def last_line(self) -> int:
        return self.line if self.end_line is None else self.end_line

    @property
    def display_text(self) -> str:
        """Text as shown, padded to the window width for synthetic lines."""
        if self.style is DecorationStyle.VIRTUAL_LINE and self.pad_to > 0:
            return pad_to_width(self.text, self.pad_to)
        return self.text


class DecorationAPI(Protocol):
    """Host decoration primitives.

    Line ranges are half-open ``[start, end)``; ``end=None`` means through
    the end of the buffer. A decoration belongs to a range when its anchor
    line does.
    """

    def paint(self, buffer: Buffer, layer: Layer, decoration: Decoration) -> int: ...

    def clear(self, buffer: Buffer, layer: Layer, start: int = 0, end: int | None = None) -> int: ...

    def query(
        self,
        buffer: Buffer,
        layer: Layer,
        start: int = 0,
        end: int | None = None,
    ) -> list[tuple[int, Decoration]]: ...

    def remove(self, buffer: Buffer, layer: Layer, handle: int) -> bool: ...


def _in_range(line: int, start: int, end: int | None) -> bool:
    return line >= start and (end is None or line < end)


class DecorationStore:
    """In-memory ``DecorationAPI`` keyed by buffer number and layer."""

    def __init__(self) -> None:
        self._handles = count(1)
        self._marks: dict[tuple[int, Layer], dict[int, Decoration]] = {}

    def _layer(self, buffer: Buffer, layer: Layer) -> dict[int, Decoration]:
        return self._marks.setdefault((buffer.number, layer), {})

    def paint(self, buffer: Buffer, layer: Layer, decoration: Decoration) -> int:
        handle = next(self._handles)
        self._layer(buffer, layer)[handle] = decoration
        return handle

    def clear(self, buffer: Buffer, layer: Layer, start: int = 0, end: int | None = None) -> int:
        marks = self._layer(buffer, layer)
        stale = [handle for handle, deco in marks.items() if _in_range(deco.line, start, end)]
        for handle in stale:
            del marks[handle]
        return len(stale)

    def query(
        self,
        buffer: Buffer,
        layer: Layer,
        start: int = 0,
        end: int | None = None,
    ) -> list[tuple[int, Decoration]]:
        marks = self._layer(buffer, layer)
        found = [(handle, deco) for handle, deco in marks.items() if _in_range(deco.line, start, end)]
        found.sort(key=lambda item: (item[1].line, item[0]))
        return found

    def remove(self, buffer: Buffer, layer: Layer, handle: int) -> bool:
        return self._layer(buffer, layer).pop(handle, None) is not None

    def decorations(self, buffer: Buffer, layer: Layer | None = None) -> list[Decoration]:
        """All live payloads for ``buffer`` (optionally one layer), in line order."""
        layers = (layer,) if layer is not None else tuple(Layer)
        out: list[Decoration] = []
        for current in layers:
            out.extend(deco for _handle, deco in self.query(buffer, current))
        return out

    def on_line(self, buffer: Buffer, line: int, layer: Layer | None = None) -> list[Decoration]:
        layers = (layer,) if layer is not None else tuple(Layer)
        out: list[Decoration] = []
        for current in layers:
            out.extend(deco for _handle, deco in self.query(buffer, current, line, line + 1))
        return out


__all__ = ["Decoration", "DecorationAPI", "DecorationStore", "DecorationStyle"]
