"""User-facing "show annotations" / "hide annotations" actions.

Argument lists come from the host's command line, already split into words:
``[mode] [content tokens...]`` where ``mode`` is ``inline``/``above`` or a
combined legacy name such as ``inline_icon_and_name``.
"""

from __future__ import annotations

from collections.abc import Sequence

from .buffer import Buffer
from .config import LEGACY_MODES, parse_content_tokens, parse_mode, resolve_legacy_mode
from .engine import FlareEngine
from .errors import FlaresConfigError
from .reconcile import ReconcileReport
from .types import ContentToken, PresentationMode


def parse_show_args(
    args: Sequence[str],
) -> tuple[PresentationMode | None, tuple[ContentToken, ...] | None]:
    """Split show-command words into (mode, tokens); ``None`` keeps the current value."""
    words = [word for word in args if word.strip()]
    if not words:
        return None, None

    head, rest = words[0], words[1:]
    legacy = resolve_legacy_mode(head)
    if legacy is not None:
        if rest:
            raise FlaresConfigError(f"[Flares] {head!r} does not take content tokens")
        return legacy

    if head.strip().lower() in {mode.value for mode in PresentationMode}:
        mode = parse_mode(head)
        return mode, (parse_content_tokens(rest) if rest else None)

    return None, parse_content_tokens(words)


def show_annotations(engine: FlareEngine, buffer: Buffer, args: Sequence[str] = ()) -> ReconcileReport | None:
    mode, tokens = parse_show_args(args)
    return engine.show(buffer, mode, tokens)


def hide_annotations(engine: FlareEngine, buffer: Buffer) -> None:
    engine.hide(buffer)


def complete_show_args(prefix: str = "") -> list[str]:
    """Completion candidates for the show command's arguments."""
    candidates = [mode.value for mode in PresentationMode]
    candidates.extend(LEGACY_MODES)
    candidates.extend(token.value for token in ContentToken)
    return [candidate for candidate in candidates if candidate.startswith(prefix)]


__all__ = [
    "complete_show_args",
    "hide_annotations",
    "parse_show_args",
    "show_annotations",
]
