"""Tests for config parsing, defaults, and JSON loading.

Malformed files fall back to defaults; unknown mode and token names fail
loudly instead of being dropped.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from flares import config
from flares.errors import FlaresConfigError
from flares.types import ContentToken, PresentationMode, Region, SymbolKind, sort_regions


class RegionTests(unittest.TestCase):
    def test_region_validity(self) -> None:
        self.assertTrue(Region(SymbolKind.CLASS, "A", 0, 3).is_valid())
        self.assertFalse(Region(SymbolKind.CLASS, "A", None, 3).is_valid())
        self.assertFalse(Region(SymbolKind.CLASS, "A", 4, 3).is_valid())
        self.assertFalse(Region(SymbolKind.CLASS, "A", -1, 3).is_valid())
        self.assertFalse(Region(SymbolKind.CLASS, "A", 5, 5).is_valid(line_count=5))

    def test_sort_regions_is_stable_for_same_start_line(self) -> None:
        comment = Region(SymbolKind.COMMENT, "note", 4, 4)
        function = Region(SymbolKind.FUNCTION, "f", 4, 9)
        first = Region(SymbolKind.CLASS, "A", 0, 2)
        self.assertEqual(sort_regions([comment, function, first]), [first, comment, function])

    def test_default_label_uses_kind_name(self) -> None:
        self.assertEqual(SymbolKind.FUNCTION.default_label, "Function")
        self.assertEqual(SymbolKind.TYPE_PARAMETER.default_label, "TypeParameter")


class ConfigParsingTests(unittest.TestCase):
    def test_parse_mode_accepts_enum_and_strings(self) -> None:
        self.assertIs(config.parse_mode("above"), PresentationMode.ABOVE)
        self.assertIs(config.parse_mode(" Inline "), PresentationMode.INLINE)
        self.assertIs(config.parse_mode(PresentationMode.ABOVE), PresentationMode.ABOVE)

    def test_parse_mode_rejects_unknown_values(self) -> None:
        with self.assertRaises(FlaresConfigError):
            config.parse_mode("sideways")
        with self.assertRaises(FlaresConfigError):
            config.parse_mode(3)

    def test_parse_content_tokens_keeps_order(self) -> None:
        self.assertEqual(
            config.parse_content_tokens(["name", "icon", ContentToken.KIND]),
            (ContentToken.NAME, ContentToken.ICON, ContentToken.KIND),
        )

    def test_parse_content_tokens_fails_on_unknown_token(self) -> None:
        with self.assertRaisesRegex(FlaresConfigError, "colour"):
            config.parse_content_tokens(["icon", "colour"])

    def test_parse_kind_accepts_numbers_and_names(self) -> None:
        self.assertIs(config.parse_kind(5), SymbolKind.CLASS)
        self.assertIs(config.parse_kind("method"), SymbolKind.METHOD)
        self.assertIs(config.parse_kind("enum member"), SymbolKind.ENUM_MEMBER)
        with self.assertRaises(FlaresConfigError):
            config.parse_kind("widget")
        with self.assertRaises(FlaresConfigError):
            config.parse_kind(True)

    def test_legacy_mode_sets_mode_and_contents(self) -> None:
        loaded = config.config_from_mapping({"mode": "above_icon_and_name"})
        self.assertIs(loaded.mode, PresentationMode.ABOVE)
        self.assertEqual(loaded.display_contents, (ContentToken.ICON, ContentToken.NAME))

        highlight_only = config.config_from_mapping({"mode": "highlight_only"})
        self.assertIs(highlight_only.mode, PresentationMode.INLINE)
        self.assertEqual(highlight_only.display_contents, ())

    def test_mapping_overrides_kinds_icons_and_timings(self) -> None:
        loaded = config.config_from_mapping(
            {
                "mode": "above",
                "display_contents": ["kind", "name"],
                "icons": {"class": "C"},
                "labels": {"function": "fn"},
                "enabled_kinds": ["class", 12],
                "background_kinds": [],
                "no_nesting_kinds": ["class"],
                "align_above": False,
                "debounce_ms": 250,
                "resize_debounce_ms": -5,
                "symbol_timeout_ms": "soon",
                "comment_prefix": "#",
                "comments_enabled": True,
            }
        )
        self.assertIs(loaded.mode, PresentationMode.ABOVE)
        self.assertEqual(loaded.display_contents, (ContentToken.KIND, ContentToken.NAME))
        self.assertEqual(loaded.icon_for(SymbolKind.CLASS), "C")
        self.assertEqual(loaded.icon_for(SymbolKind.METHOD), config.DEFAULT_ICONS[SymbolKind.METHOD])
        self.assertEqual(loaded.label_for(SymbolKind.FUNCTION), "fn")
        self.assertEqual(loaded.label_for(SymbolKind.CLASS), "Class")
        self.assertEqual(loaded.enabled_kinds, frozenset({SymbolKind.CLASS, SymbolKind.FUNCTION}))
        self.assertFalse(loaded.has_background(SymbolKind.CLASS))
        self.assertFalse(loaded.allows_nesting(SymbolKind.CLASS))
        self.assertFalse(loaded.align_above)
        self.assertEqual(loaded.debounce_ms, 250)
        self.assertEqual(loaded.resize_debounce_ms, 0)
        self.assertEqual(loaded.symbol_timeout_ms, 500)
        self.assertEqual(loaded.comment_prefix, "#")
        self.assertTrue(loaded.comments_enabled)

    def test_mapping_rejects_non_list_contents(self) -> None:
        with self.assertRaises(FlaresConfigError):
            config.config_from_mapping({"display_contents": "icon"})


class ConfigLoadingTests(unittest.TestCase):
    def test_missing_file_returns_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            with mock.patch("flares.config.CONFIG_PATH", path):
                self.assertEqual(config.load_config(), config.FlaresConfig())

    def test_malformed_file_returns_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(config.load_config(path), config.FlaresConfig())
            path.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(config.load_config(path), config.FlaresConfig())

    def test_file_values_are_applied(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"mode": "above", "display_contents": ["name"]}), encoding="utf-8")
            loaded = config.load_config(path)
        self.assertIs(loaded.mode, PresentationMode.ABOVE)
        self.assertEqual(loaded.display_contents, (ContentToken.NAME,))

    def test_unknown_token_in_file_fails_loudly(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"display_contents": ["icon", "emoji"]}), encoding="utf-8")
            with self.assertRaises(FlaresConfigError):
                config.load_config(path)


if __name__ == "__main__":
    unittest.main()
