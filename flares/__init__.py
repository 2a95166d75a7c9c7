"""Public package surface for flares.

Symbol annotations ("flares") kept in sync with an editor buffer: regions
come from a symbol source, the reconciler paints them through a decoration
backend, and the cursor hider keeps the cursor line uncluttered.
"""

from __future__ import annotations

from .buffer import Buffer, TextBuffer
from .config import FlaresConfig, load_config
from .decorations import Decoration, DecorationAPI, DecorationStore, DecorationStyle
from .engine import FlareEngine
from .errors import FlaresConfigError, FlaresError
from .events import Event, EventBus, EventKind
from .outline import OutlineSymbolSource
from .symbols import DocumentSymbol, SymbolSource
from .types import ContentToken, Layer, PresentationMode, Region, SymbolKind

__all__ = [
    "Buffer",
    "ContentToken",
    "Decoration",
    "DecorationAPI",
    "DecorationStore",
    "DecorationStyle",
    "DocumentSymbol",
    "Event",
    "EventBus",
    "EventKind",
    "FlareEngine",
    "FlaresConfig",
    "FlaresConfigError",
    "FlaresError",
    "Layer",
    "OutlineSymbolSource",
    "PresentationMode",
    "Region",
    "SymbolKind",
    "SymbolSource",
    "TextBuffer",
    "load_config",
]
