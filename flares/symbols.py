"""Symbol trees and their flattening into flare regions."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from .buffer import Buffer
from .types import Region, SymbolKind


@dataclass(frozen=True)
class Position:
    line: int
    character: int = 0


@dataclass(frozen=True)
class SymbolRange:
    start: Position
    end: Position


@dataclass(frozen=True)
class DocumentSymbol:
    kind: SymbolKind | int
    name: str
    range: SymbolRange | None
    children: tuple["DocumentSymbol", ...] = field(default_factory=tuple)

    @classmethod
    def from_lsp(cls, data: Mapping[str, object]) -> "DocumentSymbol":
        """Build from an LSP ``DocumentSymbol`` or ``SymbolInformation`` mapping.

        Missing or malformed ranges become ``None``; the region is then
        skipped at reconciliation instead of failing the whole tree.
        """
        raw_range = data.get("range")
        if raw_range is None:
            location = data.get("location")
            if isinstance(location, Mapping):
                raw_range = location.get("range")
        children = data.get("children")
        return cls(
            kind=_kind_from_lsp(data.get("kind")),
            name=str(data.get("name") or ""),
            range=_range_from_lsp(raw_range),
            children=tuple(
                cls.from_lsp(child) for child in children if isinstance(child, Mapping)
            )
            if isinstance(children, list)
            else (),
        )


def _kind_from_lsp(value: object) -> SymbolKind | int:
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return SymbolKind(value)
        except ValueError:
            return value
    return 0


def _position_from_lsp(value: object) -> Position | None:
    if not isinstance(value, Mapping):
        return None
    line = value.get("line")
    character = value.get("character", 0)
    if isinstance(line, bool) or not isinstance(line, int):
        return None
    if isinstance(character, bool) or not isinstance(character, int):
        character = 0
    return Position(line=line, character=character)


def _range_from_lsp(value: object) -> SymbolRange | None:
    if not isinstance(value, Mapping):
        return None
    start = _position_from_lsp(value.get("start"))
    end = _position_from_lsp(value.get("end"))
    if start is None:
        return None
    return SymbolRange(start=start, end=end or start)


class SymbolSource(Protocol):
    """Where document symbols come from (a language server, a parser...)."""

    def provides_symbols(self, buffer: Buffer) -> bool: ...

    def document_symbols(self, buffer: Buffer, timeout_ms: int) -> list[DocumentSymbol] | None:
        """Return the symbol tree, or ``None`` when it is not available yet."""
        ...


def iter_regions(
    symbols: Iterable[DocumentSymbol],
    is_enabled: Callable[[SymbolKind], bool],
    allows_nesting: Callable[[SymbolKind], bool],
) -> Iterator[Region]:
    """Yield regions depth-first, parents before their children.

    Enabled kinds become regions; a node's children are visited unless its
    kind disallows nesting. Calling again restarts the walk.
    """
    for symbol in symbols:
        kind = symbol.kind
        known = isinstance(kind, SymbolKind)
        if known and is_enabled(kind):
            if symbol.range is None:
                yield Region(kind=kind, name=symbol.name, start_line=None, end_line=None)
            else:
                yield Region(
                    kind=kind,
                    name=symbol.name,
                    start_line=symbol.range.start.line,
                    end_line=symbol.range.end.line,
                )
        if known and not allows_nesting(kind):
            continue
        yield from iter_regions(symbol.children, is_enabled, allows_nesting)


__all__ = [
    "DocumentSymbol",
    "Position",
    "SymbolRange",
    "SymbolSource",
    "iter_regions",
]
