"""Shared flare datatypes.

``Region`` is the engine's unit of work: one annotatable span derived from a
symbol or a comment. The enums are closed sets so configuration parsing is
the only place string values are interpreted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class SymbolKind(IntEnum):
    """Symbol kinds, numbered like the language-server protocol."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26
    # Not part of the protocol; produced by the comment source.
    COMMENT = 100

    @property
    def default_label(self) -> str:
        return self.name.replace("_", " ").title().replace(" ", "")


class PresentationMode(Enum):
    INLINE = "inline"
    ABOVE = "above"


class ContentToken(Enum):
    ICON = "icon"
    KIND = "kind"
    NAME = "name"


class Layer(Enum):
    """Independent decoration channels, reconciled on separate boundaries."""

    CONTENT = "content"
    BACKGROUND = "background"


@dataclass(frozen=True)
class Region:
    """One annotatable span of the current document snapshot."""

    kind: SymbolKind
    name: str
    start_line: int | None
    end_line: int | None

    def is_valid(self, line_count: int | None = None) -> bool:
        """Return whether both positions are usable line indexes."""
        start = self.start_line
        end = self.end_line
        if not isinstance(start, int) or not isinstance(end, int):
            return False
        if isinstance(start, bool) or isinstance(end, bool):
            return False
        if start < 0 or end < start:
            return False
        if line_count is not None and start >= line_count:
            return False
        return True


def sort_regions(regions) -> list[Region]:
    """Stable ascending sort by start line; invalid regions keep their slot at the end."""
    return sorted(
        regions,
        key=lambda region: region.start_line if isinstance(region.start_line, int) else float("inf"),
    )


__all__ = [
    "ContentToken",
    "Layer",
    "PresentationMode",
    "Region",
    "SymbolKind",
    "sort_regions",
]
