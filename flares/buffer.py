"""Buffer protocol consumed by the engine, plus an in-memory implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class Buffer(Protocol):
    """Minimal view of an editor buffer shown in a window."""

    number: int

    def line_count(self) -> int: ...

    def line(self, index: int) -> str: ...

    def window_width(self) -> int: ...


@dataclass
class TextBuffer:
    """List-of-lines buffer for tests and hosts that own their text."""

    number: int
    lines: list[str] = field(default_factory=list)
    width: int = 80
    path: str | None = None

    @classmethod
    def from_text(cls, number: int, text: str, **kwargs) -> "TextBuffer":
        return cls(number=number, lines=text.splitlines(), **kwargs)

    def line_count(self) -> int:
        return len(self.lines)

    def line(self, index: int) -> str:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return ""

    def window_width(self) -> int:
        return self.width

    def text(self) -> str:
        return "\n".join(self.lines)

    def set_lines(self, start: int, end: int, replacement: list[str]) -> None:
        """Replace lines ``[start, end)`` like ``nvim_buf_set_lines``."""
        self.lines[start:end] = list(replacement)


__all__ = ["Buffer", "TextBuffer"]
