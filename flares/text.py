"""Display-width helpers for synthetic flare lines."""

from __future__ import annotations

import re
import unicodedata

TAB_STOP = 8
_LEADING_WHITESPACE_RE = re.compile(r"^[ \t]*")


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def pad_to_width(text: str, width: int) -> str:
    """Right-pad ``text`` with spaces so it covers ``width`` display columns."""
    missing = width - display_width(text)
    if missing <= 0:
        return text
    return text + " " * missing


def leading_whitespace(line: str) -> str:
    """Return the literal leading spaces/tabs of ``line``."""
    match = _LEADING_WHITESPACE_RE.match(line)
    return match.group(0) if match else ""


__all__ = ["char_display_width", "display_width", "leading_whitespace", "pad_to_width"]
