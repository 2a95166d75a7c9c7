"""Comment-derived pseudo-symbols."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .types import Region, SymbolKind


def comment_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^\s*{re.escape(prefix)}\s*(.+)")


def collect_comment_regions(
    lines: Iterable[str],
    prefix: str,
    marker: str | None = None,
) -> list[Region]:
    """Return one single-line region per matching line comment.

    With ``marker`` set only comments whose text starts with it are kept and
    the marker is stripped from the display text.
    """
    if not prefix:
        return []
    pattern = comment_pattern(prefix)
    regions: list[Region] = []
    for line_idx, line in enumerate(lines):
        match = pattern.match(line)
        if match is None:
            continue
        text = match.group(1).rstrip()
        if marker:
            if not text.startswith(marker):
                continue
            text = text[len(marker):].strip()
        if not text:
            continue
        regions.append(Region(kind=SymbolKind.COMMENT, name=text, start_line=line_idx, end_line=line_idx))
    return regions


__all__ = ["collect_comment_regions", "comment_pattern"]
