"""Local symbol source for buffers without a language server.

Uses Tree-sitter when a parser package is installed and per-language regex
patterns otherwise. Regex matches carry no end position, so nesting and
body extents are recovered from indentation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .buffer import Buffer
from .symbols import DocumentSymbol, Position, SymbolRange
from .types import SymbolKind

logger = logging.getLogger(__name__)

LANGUAGE_BY_SUFFIX: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".rb": "ruby",
    ".lua": "lua",
    ".sh": "bash",
    ".bash": "bash",
}

KIND_BY_NODE_TYPE: dict[str, SymbolKind] = {
    "function_definition": SymbolKind.FUNCTION,
    "function_declaration": SymbolKind.FUNCTION,
    "function_item": SymbolKind.FUNCTION,
    "method_definition": SymbolKind.METHOD,
    "method_declaration": SymbolKind.METHOD,
    "method": SymbolKind.METHOD,
    "constructor_declaration": SymbolKind.CONSTRUCTOR,
    "class_definition": SymbolKind.CLASS,
    "class_declaration": SymbolKind.CLASS,
    "class_specifier": SymbolKind.CLASS,
    "class": SymbolKind.CLASS,
    "struct_item": SymbolKind.STRUCT,
    "struct_specifier": SymbolKind.STRUCT,
    "interface_declaration": SymbolKind.INTERFACE,
    "enum_item": SymbolKind.ENUM,
    "enum_declaration": SymbolKind.ENUM,
}
CONTAINER_KINDS = frozenset({SymbolKind.CLASS, SymbolKind.STRUCT, SymbolKind.INTERFACE})
CONSTRUCTOR_NAMES = frozenset({"__init__", "constructor", "initialize"})
IDENTIFIER_NODE_TYPES = {
    "identifier",
    "type_identifier",
    "property_identifier",
    "field_identifier",
    "constant",
}

MISSING_PARSER_ERROR = (
    "Tree-sitter parser package not found. Install tree-sitter-languages or tree-sitter-language-pack."
)

_JS_PATTERNS: tuple[tuple[SymbolKind, re.Pattern[str]], ...] = (
    (SymbolKind.CLASS, re.compile(r"^\s*(?:export\s+)?class\s+(?P<name>[A-Za-z_$][\w$]*)")),
    (
        SymbolKind.FUNCTION,
        re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+(?P<name>[A-Za-z_$][\w$]*)"),
    ),
    (
        SymbolKind.FUNCTION,
        re.compile(
            r"^\s*(?:export\s+)?(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*=\s*(?:async\s*)?\([^)]*\)\s*=>"
        ),
    ),
)

FALLBACK_PATTERNS_BY_LANGUAGE: dict[str, tuple[tuple[SymbolKind, re.Pattern[str]], ...]] = {
    "python": (
        (SymbolKind.CLASS, re.compile(r"^\s*class\s+(?P<name>[A-Za-z_]\w*)")),
        (SymbolKind.FUNCTION, re.compile(r"^\s*(?:async\s+)?def\s+(?P<name>[A-Za-z_]\w*)")),
    ),
    "javascript": _JS_PATTERNS,
    "typescript": _JS_PATTERNS,
    "tsx": _JS_PATTERNS,
    "go": (
        (SymbolKind.STRUCT, re.compile(r"^\s*type\s+(?P<name>[A-Za-z_]\w*)\s+struct\b")),
        (SymbolKind.INTERFACE, re.compile(r"^\s*type\s+(?P<name>[A-Za-z_]\w*)\s+interface\b")),
        (SymbolKind.FUNCTION, re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?(?P<name>[A-Za-z_]\w*)\s*\(")),
    ),
    "rust": (
        (SymbolKind.STRUCT, re.compile(r"^\s*(?:pub\s+)?struct\s+(?P<name>[A-Za-z_]\w*)\b")),
        (SymbolKind.ENUM, re.compile(r"^\s*(?:pub\s+)?enum\s+(?P<name>[A-Za-z_]\w*)\b")),
        (SymbolKind.FUNCTION, re.compile(r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+(?P<name>[A-Za-z_]\w*)\s*[(<]")),
    ),
    "ruby": (
        (SymbolKind.CLASS, re.compile(r"^\s*class\s+(?P<name>[A-Za-z_][\w:]*)")),
        (SymbolKind.FUNCTION, re.compile(r"^\s*def\s+(?P<name>[A-Za-z_][\w!?=]*)")),
    ),
    "lua": (
        (SymbolKind.FUNCTION, re.compile(r"^\s*(?:local\s+)?function\s+(?P<name>[A-Za-z_][\w\.:]*)")),
    ),
    "bash": (
        (SymbolKind.FUNCTION, re.compile(r"^\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*\(\)\s*\{")),
        (SymbolKind.FUNCTION, re.compile(r"^\s*function\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)\b")),
    ),
}

GENERIC_FALLBACK_PATTERNS: tuple[tuple[SymbolKind, re.Pattern[str]], ...] = (
    (SymbolKind.CLASS, re.compile(r"^\s*(?:export\s+)?class\s+(?P<name>[A-Za-z_][\w$]*)")),
    (SymbolKind.FUNCTION, re.compile(r"^\s*(?:async\s+)?def\s+(?P<name>[A-Za-z_]\w*)")),
    (SymbolKind.FUNCTION, re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+(?P<name>[A-Za-z_$][\w$]*)")),
)

_BLOCK_CLOSER_RE = re.compile(r"^\s*(?:[}\])]|end\b)")


def language_for_path(path: str | Path | None) -> str | None:
    """Map a file suffix to a Tree-sitter language name."""
    if path is None:
        return None
    return LANGUAGE_BY_SUFFIX.get(Path(path).suffix.lower())


@lru_cache(maxsize=32)
def load_parser(language_name: str):
    """Load a Tree-sitter parser using supported provider packages.

    Tries ``tree_sitter_languages`` first, then ``tree_sitter_language_pack``.
    Returns ``(parser, error_message)``.
    """
    errors: list[str] = []

    try:
        from tree_sitter_languages import get_parser

        return get_parser(language_name), None
    except ModuleNotFoundError:
        pass
    except Exception as exc:
        errors.append(f"Failed to load Tree-sitter parser for {language_name}: {exc}")

    try:
        from tree_sitter_language_pack import get_parser

        return get_parser(language_name), None
    except ModuleNotFoundError:
        pass
    except Exception as exc:
        errors.append(f"Failed to load Tree-sitter parser for {language_name}: {exc}")

    if errors:
        return None, errors[0]
    return None, MISSING_PARSER_ERROR


def _normalize_whitespace(text: str) -> str:
    """Collapse internal whitespace to single spaces for stable labels."""
    return re.sub(r"\s+", " ", text).strip()


def _node_text(source_bytes: bytes, node) -> str:
    """Decode source slice covered by a Tree-sitter node."""
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _name_from_node(source_bytes: bytes, node) -> str:
    """Best-effort symbol name from a definition node's name field or first identifier."""
    for field_name in ("name", "declarator"):
        child = node.child_by_field_name(field_name)
        if child is None:
            continue
        nested = child.child_by_field_name("name")
        if nested is not None:
            return _normalize_whitespace(_node_text(source_bytes, nested))
        return _normalize_whitespace(_node_text(source_bytes, child))

    for child in node.named_children:
        if child.type in IDENTIFIER_NODE_TYPES:
            return _normalize_whitespace(_node_text(source_bytes, child))

    return _normalize_whitespace(_node_text(source_bytes, node).split("\n", 1)[0])


def _refine_kind(kind: SymbolKind, name: str, in_container: bool) -> SymbolKind:
    """Functions inside classes become methods; constructor names become constructors."""
    if kind is SymbolKind.FUNCTION and in_container:
        kind = SymbolKind.METHOD
    if kind is SymbolKind.METHOD and name in CONSTRUCTOR_NAMES:
        return SymbolKind.CONSTRUCTOR
    return kind


def symbols_from_tree(source_bytes: bytes, root_node) -> list[DocumentSymbol]:
    """Convert a Tree-sitter syntax tree into a nested symbol tree."""

    def walk(node, in_container: bool) -> list[DocumentSymbol]:
        if node.type in {"decorated_definition", "decorated_declaration"}:
            definition = node.child_by_field_name("definition")
            if definition is not None:
                return walk(definition, in_container)

        kind = KIND_BY_NODE_TYPE.get(node.type)
        if kind is None:
            found: list[DocumentSymbol] = []
            for child in node.named_children:
                found.extend(walk(child, in_container))
            return found

        name = _name_from_node(source_bytes, node)
        kind = _refine_kind(kind, name, in_container)
        children: list[DocumentSymbol] = []
        for child in node.named_children:
            children.extend(walk(child, kind in CONTAINER_KINDS))
        start_line, start_col = node.start_point
        end_line, end_col = node.end_point
        return [
            DocumentSymbol(
                kind=kind,
                name=name,
                range=SymbolRange(
                    start=Position(int(start_line), int(start_col)),
                    end=Position(int(end_line), int(end_col)),
                ),
                children=tuple(children),
            )
        ]

    return walk(root_node, False)


def leading_indent_columns(text: str) -> int:
    """Return leading indentation width where tabs count as four columns."""
    count = 0
    for ch in text:
        if ch == " ":
            count += 1
        elif ch == "\t":
            count += 4
        else:
            break
    return count


def _body_end_line(lines: list[str], line_idx: int, indent: int) -> int:
    """Last line of the block opened at ``line_idx``, judged by indentation."""
    last = line_idx
    for idx in range(line_idx + 1, len(lines)):
        text = lines[idx]
        if not text.strip():
            continue
        if leading_indent_columns(text) <= indent:
            if _BLOCK_CLOSER_RE.match(text):
                last = idx
            break
        last = idx
    return last


@dataclass
class _Pending:
    kind: SymbolKind
    name: str
    line: int
    column: int
    indent: int
    end_line: int
    children: list[DocumentSymbol]

    def build(self) -> DocumentSymbol:
        return DocumentSymbol(
            kind=self.kind,
            name=self.name,
            range=SymbolRange(
                start=Position(self.line, self.column),
                end=Position(self.end_line, 0),
            ),
            children=tuple(self.children),
        )


def symbols_from_patterns(source: str, language_name: str | None, max_symbols: int = 2000) -> list[DocumentSymbol]:
    """Collect symbols line by line and nest them by indentation."""
    patterns = FALLBACK_PATTERNS_BY_LANGUAGE.get(language_name or "", GENERIC_FALLBACK_PATTERNS)
    lines = source.splitlines()
    roots: list[DocumentSymbol] = []
    stack: list[_Pending] = []
    seen = 0

    def close_until(indent: int, line_idx: int) -> None:
        while stack and (indent <= stack[-1].indent or stack[-1].end_line < line_idx):
            finished = stack.pop().build()
            (stack[-1].children if stack else roots).append(finished)

    for line_idx, line in enumerate(lines):
        for kind, pattern in patterns:
            match = pattern.match(line)
            if match is None:
                continue
            name = _normalize_whitespace(match.group("name"))
            if not name:
                continue
            indent = leading_indent_columns(line)
            close_until(indent, line_idx)
            in_container = bool(stack) and stack[-1].kind in CONTAINER_KINDS
            stack.append(
                _Pending(
                    kind=_refine_kind(kind, name, in_container),
                    name=name,
                    line=line_idx,
                    column=int(match.start("name")),
                    indent=indent,
                    end_line=_body_end_line(lines, line_idx, indent),
                    children=[],
                )
            )
            seen += 1
            break
        if seen >= max_symbols:
            break

    close_until(-1, len(lines))
    return roots


def buffer_source(buffer: Buffer) -> str:
    """Join buffer lines into the text handed to the parser."""
    return "\n".join(buffer.line(index) for index in range(buffer.line_count()))


class OutlineSymbolSource:
    """``SymbolSource`` backed by Tree-sitter with a regex fallback."""

    def __init__(self, language: str | None = None, max_symbols: int = 2000) -> None:
        self.language = language
        self.max_symbols = max_symbols
        self.last_error: str | None = None

    def language_for(self, buffer: Buffer) -> str | None:
        if self.language is not None:
            return self.language
        return language_for_path(getattr(buffer, "path", None))

    def provides_symbols(self, buffer: Buffer) -> bool:
        return self.language_for(buffer) is not None

    def document_symbols(self, buffer: Buffer, timeout_ms: int = 500) -> list[DocumentSymbol] | None:
        language_name = self.language_for(buffer)
        if language_name is None:
            self.last_error = "No grammar configured for this buffer."
            return None

        source = buffer_source(buffer)
        parser, parser_error = load_parser(language_name)
        if parser is None:
            self.last_error = parser_error
            return symbols_from_patterns(source, language_name, self.max_symbols)

        source_bytes = source.encode("utf-8", errors="replace")
        try:
            tree = parser.parse(source_bytes)
        except Exception as exc:
            logger.warning("Tree-sitter parse failed for %s: %s", language_name, exc)
            self.last_error = f"Tree-sitter parse failed: {exc}"
            return symbols_from_patterns(source, language_name, self.max_symbols)

        self.last_error = None
        return symbols_from_tree(source_bytes, tree.root_node)


__all__ = [
    "OutlineSymbolSource",
    "language_for_path",
    "load_parser",
    "symbols_from_patterns",
    "symbols_from_tree",
]
