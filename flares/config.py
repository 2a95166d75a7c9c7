"""Flare configuration and JSON config loading.

``FlaresConfig`` is an immutable value; derive variants with ``replace``.
A missing or malformed config file falls back to defaults. Unknown mode and
content token names raise ``FlaresConfigError``.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .errors import FlaresConfigError
from .types import ContentToken, PresentationMode, SymbolKind

APP_NAME = "flares"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

BACKGROUND_HL_GROUP = "FlaresBackground"
CONTENT_HL_GROUP = "FlaresComment"

DEFAULT_ICONS: dict[SymbolKind, str] = {
    SymbolKind.CLASS: "󰯲",
    SymbolKind.FUNCTION: "󰯻",
    SymbolKind.METHOD: "󰰐",
    SymbolKind.CONSTRUCTOR: "",
    SymbolKind.COMMENT: "󰅺",
}

LEGACY_MODES: dict[str, tuple[PresentationMode, tuple[ContentToken, ...]]] = {
    "above_kind": (PresentationMode.ABOVE, (ContentToken.KIND,)),
    "above_icon_and_name": (PresentationMode.ABOVE, (ContentToken.ICON, ContentToken.NAME)),
    "inline_icon_and_name": (PresentationMode.INLINE, (ContentToken.ICON, ContentToken.NAME)),
    "inline_icon": (PresentationMode.INLINE, (ContentToken.ICON,)),
    "inline_name": (PresentationMode.INLINE, (ContentToken.NAME,)),
    "inline_kind": (PresentationMode.INLINE, (ContentToken.KIND,)),
    "highlight_only": (PresentationMode.INLINE, ()),
}


@dataclass(frozen=True)
class FlaresConfig:
    mode: PresentationMode = PresentationMode.INLINE
    display_contents: tuple[ContentToken, ...] = (ContentToken.ICON, ContentToken.NAME)
    icons: Mapping[SymbolKind, str] = field(default_factory=lambda: dict(DEFAULT_ICONS))
    labels: Mapping[SymbolKind, str] = field(default_factory=dict)
    enabled_kinds: frozenset[SymbolKind] = frozenset(
        {SymbolKind.CLASS, SymbolKind.METHOD, SymbolKind.CONSTRUCTOR, SymbolKind.FUNCTION}
    )
    background_kinds: frozenset[SymbolKind] = frozenset({SymbolKind.CLASS})
    no_nesting_kinds: frozenset[SymbolKind] = frozenset({SymbolKind.FUNCTION})
    align_above: bool = True
    hide_above_flares: bool = True
    comments_enabled: bool = False
    comment_prefix: str | None = None
    comment_marker: str | None = None
    debounce_ms: int = 500
    resize_debounce_ms: int = 0
    symbol_timeout_ms: int = 500
    background_hl_group: str = BACKGROUND_HL_GROUP
    content_hl_group: str = CONTENT_HL_GROUP
    overlay_priority: int = 1
    highlight_priority: int = 10

    def icon_for(self, kind: SymbolKind) -> str:
        return self.icons.get(kind, "")

    def label_for(self, kind: SymbolKind) -> str:
        return self.labels.get(kind) or kind.default_label

    def is_enabled(self, kind: SymbolKind) -> bool:
        return kind in self.enabled_kinds

    def allows_nesting(self, kind: SymbolKind) -> bool:
        return kind not in self.no_nesting_kinds

    def has_background(self, kind: SymbolKind) -> bool:
        return kind in self.background_kinds

    def replace(self, **changes: object) -> "FlaresConfig":
        return dataclasses.replace(self, **changes)


def parse_mode(value: object) -> PresentationMode:
    """Convert a user value to ``PresentationMode`` or raise."""
    if isinstance(value, PresentationMode):
        return value
    if isinstance(value, str):
        try:
            return PresentationMode(value.strip().lower())
        except ValueError:
            pass
    raise FlaresConfigError(f"[Flares] Invalid display mode: {value!r}")


def parse_content_tokens(values: Iterable[object]) -> tuple[ContentToken, ...]:
    """Convert display-content values to tokens, failing on the first unknown one."""
    tokens: list[ContentToken] = []
    for value in values:
        if isinstance(value, ContentToken):
            tokens.append(value)
            continue
        if isinstance(value, str):
            try:
                tokens.append(ContentToken(value.strip().lower()))
                continue
            except ValueError:
                pass
        raise FlaresConfigError(f"[Flares] Unknown display content: {value!r}")
    return tuple(tokens)


def parse_kind(value: object) -> SymbolKind:
    """Accept an LSP kind number or a kind name such as ``"class"``."""
    if isinstance(value, SymbolKind):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return SymbolKind(value)
        except ValueError:
            pass
    if isinstance(value, str):
        key = value.strip().upper().replace(" ", "_")
        if key in SymbolKind.__members__:
            return SymbolKind[key]
    raise FlaresConfigError(f"[Flares] Unknown symbol kind: {value!r}")


def resolve_legacy_mode(name: str) -> tuple[PresentationMode, tuple[ContentToken, ...]] | None:
    """Map a combined mode name like ``inline_icon_and_name`` to (mode, tokens)."""
    return LEGACY_MODES.get(name.strip().lower())


def _kind_set(value: object, key: str) -> frozenset[SymbolKind]:
    if not isinstance(value, list):
        raise FlaresConfigError(f"[Flares] {key} must be a list of symbol kinds")
    return frozenset(parse_kind(item) for item in value)


def _kind_strings(value: object, key: str) -> dict[SymbolKind, str]:
    if not isinstance(value, dict):
        raise FlaresConfigError(f"[Flares] {key} must map symbol kinds to strings")
    out: dict[SymbolKind, str] = {}
    for raw_kind, text in value.items():
        if not isinstance(text, str):
            continue
        out[parse_kind(raw_kind)] = text
    return out


def _coerce_nonnegative_int(value: object, default: int) -> int:
    """Booleans and non-integers fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return max(0, value)


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value if value.strip() else None


def config_from_mapping(data: Mapping[str, object], base: FlaresConfig | None = None) -> FlaresConfig:
    """Build a config from user data layered over ``base`` (defaults when omitted)."""
    config = base or FlaresConfig()
    changes: dict[str, object] = {}

    raw_mode = data.get("mode")
    if raw_mode is not None:
        legacy = resolve_legacy_mode(raw_mode) if isinstance(raw_mode, str) else None
        if legacy is not None:
            changes["mode"], changes["display_contents"] = legacy
        else:
            changes["mode"] = parse_mode(raw_mode)

    raw_contents = data.get("display_contents")
    if raw_contents is not None:
        if not isinstance(raw_contents, list):
            raise FlaresConfigError("[Flares] display_contents must be a list")
        changes["display_contents"] = parse_content_tokens(raw_contents)

    if "icons" in data:
        icons = dict(config.icons)
        icons.update(_kind_strings(data["icons"], "icons"))
        changes["icons"] = icons
    if "labels" in data:
        changes["labels"] = _kind_strings(data["labels"], "labels")
    for key in ("enabled_kinds", "background_kinds", "no_nesting_kinds"):
        if key in data:
            changes[key] = _kind_set(data[key], key)

    for key in ("align_above", "hide_above_flares", "comments_enabled"):
        value = data.get(key)
        if isinstance(value, bool):
            changes[key] = value

    for key in ("comment_prefix", "comment_marker", "background_hl_group", "content_hl_group"):
        if key in data:
            text = _optional_str(data[key])
            if text is not None or key.startswith("comment_"):
                changes[key] = text

    for key in (
        "debounce_ms",
        "resize_debounce_ms",
        "symbol_timeout_ms",
        "overlay_priority",
        "highlight_priority",
    ):
        if key in data:
            changes[key] = _coerce_nonnegative_int(data[key], getattr(config, key))

    return config.replace(**changes) if changes else config


def load_config_data(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Path | None = None) -> FlaresConfig:
    """Load ``FlaresConfig`` from the user config file."""
    return config_from_mapping(load_config_data(path))


__all__ = [
    "BACKGROUND_HL_GROUP",
    "CONFIG_PATH",
    "CONTENT_HL_GROUP",
    "DEFAULT_ICONS",
    "FlaresConfig",
    "LEGACY_MODES",
    "config_from_mapping",
    "load_config",
    "load_config_data",
    "parse_content_tokens",
    "parse_kind",
    "parse_mode",
    "resolve_legacy_mode",
]
