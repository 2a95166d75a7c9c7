"""Flare text formatting."""

from __future__ import annotations

from collections.abc import Sequence

from .config import FlaresConfig
from .errors import FlaresConfigError
from .text import leading_whitespace as line_indent
from .types import ContentToken, PresentationMode, Region, SymbolKind


class DisplayFormatter:
    """Turn a region into flare text according to the configured contents."""

    def __init__(self, config: FlaresConfig) -> None:
        self.config = config

    def render_token(self, region: Region, token: ContentToken) -> str:
        if token is ContentToken.ICON:
            return self.config.icon_for(region.kind)
        if token is ContentToken.KIND:
            return self.config.label_for(region.kind)
        if token is ContentToken.NAME:
            return region.name
        raise FlaresConfigError(f"[Flares] Unknown display content: {token!r}")

    def format(
        self,
        region: Region,
        contents: Sequence[ContentToken],
        leading_whitespace: str | None = None,
    ) -> str:
        """Return flare text: each token followed by one space, in order.

        Comment regions carry their text verbatim. ``leading_whitespace`` is
        prefixed as given; callers pass it only for aligned synthetic lines.
        """
        if region.kind is SymbolKind.COMMENT:
            body = region.name
        else:
            body = "".join(f"{self.render_token(region, token)} " for token in contents)
        if leading_whitespace:
            return leading_whitespace + body
        return body

    def format_for_mode(
        self,
        region: Region,
        contents: Sequence[ContentToken],
        mode: PresentationMode,
        target_line_text: str,
    ) -> str:
        """Format with alignment applied when ``mode`` draws above the code."""
        prefix = None
        if mode is PresentationMode.ABOVE and self.config.align_above:
            prefix = line_indent(target_line_text)
        return self.format(region, contents, prefix)


__all__ = ["DisplayFormatter"]
