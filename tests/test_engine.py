"""Engine context, attachment wiring and user commands."""

from __future__ import annotations

import unittest

from flares.commands import complete_show_args, hide_annotations, parse_show_args, show_annotations
from flares.config import FlaresConfig
from flares.decorations import DecorationStore, DecorationStyle
from flares.engine import FlareEngine
from flares.errors import FlaresConfigError
from flares.events import EventKind
from flares.types import ContentToken, Layer, PresentationMode, SymbolKind
from tests.fakes import FakeLoop, FakeSymbolSource, make_buffer, sym

FOO = sym(SymbolKind.FUNCTION, "foo", 0, 2)
BAR = sym(SymbolKind.METHOD, "bar", 5, 5)


class EngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.loop = FakeLoop()
        self.store = DecorationStore()
        self.source = FakeSymbolSource([FOO, BAR])
        self.cursor_emphasis = True
        self.config = FlaresConfig(
            mode=PresentationMode.ABOVE,
            icons={SymbolKind.FUNCTION: "F", SymbolKind.METHOD: "M"},
        )
        self.engine = FlareEngine(
            self.store,
            self.source,
            self.config,
            loop=self.loop,
            cursor_emphasis=lambda _buffer: self.cursor_emphasis,
        )
        self.buffer = make_buffer(line_count=12)

    def texts(self) -> list[tuple[int, str]]:
        return [(deco.line, deco.text) for deco in self.store.decorations(self.buffer, Layer.CONTENT)]


class RefreshTests(EngineTestCase):
    def test_refresh_renders_current_symbols(self) -> None:
        report = self.engine.refresh(self.buffer)
        self.assertEqual(report.painted, 2)
        self.assertEqual(self.texts(), [(0, "F foo "), (5, "M bar ")])

    def test_symbols_not_ready_keeps_previous_flares(self) -> None:
        self.engine.refresh(self.buffer)
        self.source.symbols = None
        self.assertIsNone(self.engine.refresh(self.buffer))
        self.assertEqual(self.texts(), [(0, "F foo "), (5, "M bar ")])

    def test_symbol_source_failure_is_logged_and_keeps_flares(self) -> None:
        self.engine.refresh(self.buffer)
        self.source.error = RuntimeError("server crashed")
        with self.assertLogs("flares.engine", level="WARNING") as logs:
            self.assertIsNone(self.engine.refresh(self.buffer))
        self.assertIn("server crashed", logs.output[0])
        self.assertEqual(len(self.texts()), 2)

    def test_timeout_is_treated_as_not_ready(self) -> None:
        self.source.error = TimeoutError()
        self.assertIsNone(self.engine.refresh(self.buffer))

    def test_comment_regions_join_symbol_regions(self) -> None:
        self.engine.configure(self.config.replace(comments_enabled=True, comment_prefix="#"))
        self.buffer.lines[3] = "# Helpers"
        self.engine.refresh(self.buffer)
        self.assertEqual(self.texts(), [(0, "F foo "), (3, "Helpers"), (5, "M bar ")])


class AttachmentTests(EngineTestCase):
    def test_attach_is_idempotent(self) -> None:
        first = self.engine.attach(self.buffer)
        second = self.engine.attach(self.buffer)
        self.assertIs(first, second)
        self.assertEqual(self.engine.events.subscriber_count(self.buffer.number), 4)

    def test_edits_are_debounced_into_one_pass(self) -> None:
        self.engine.attach(self.buffer)
        events = self.engine.events

        events.document_changed(self.buffer.number)
        self.loop.advance(0.2)
        self.source.symbols = [FOO]
        events.document_changed(self.buffer.number)
        self.loop.advance(0.4)
        self.assertEqual(self.source.calls, 0)

        self.loop.advance(0.1)
        self.assertEqual(self.source.calls, 1)
        self.assertEqual(self.texts(), [(0, "F foo ")])

    def test_resize_refreshes_immediately_by_default(self) -> None:
        self.engine.attach(self.buffer)
        self.engine.events.resized(self.buffer.number)
        self.assertEqual(self.source.calls, 1)

    def test_resize_uses_its_own_shorter_delay(self) -> None:
        self.engine.configure(self.config.replace(resize_debounce_ms=50))
        self.engine.attach(self.buffer)
        self.engine.events.resized(self.buffer.number)
        self.assertEqual(self.source.calls, 0)
        self.loop.advance(0.05)
        self.assertEqual(self.source.calls, 1)

    def test_symbols_ready_triggers_one_pass_on_completion(self) -> None:
        self.engine.attach(self.buffer)
        events = self.engine.events
        events.symbols_ready(self.buffer.number, done=False)
        self.loop.advance(1.0)
        self.assertEqual(self.source.calls, 0)

        events.symbols_ready(self.buffer.number, done=True)
        self.loop.advance(0)
        self.assertEqual(self.source.calls, 1)

    def test_cursor_moves_hide_and_restore_flares(self) -> None:
        self.engine.attach(self.buffer)
        self.engine.refresh(self.buffer)
        events = self.engine.events

        events.cursor_moved(self.buffer.number, 0)
        self.assertEqual(self.store.on_line(self.buffer, 0), [])
        events.cursor_moved(self.buffer.number, 10)
        self.assertEqual(self.store.on_line(self.buffer, 0)[0].text, "F foo ")

    def test_cursor_moves_ignored_without_cursor_emphasis(self) -> None:
        self.cursor_emphasis = False
        self.engine.attach(self.buffer)
        self.engine.refresh(self.buffer)
        self.engine.events.cursor_moved(self.buffer.number, 0)
        self.assertEqual(len(self.store.on_line(self.buffer, 0)), 1)

    def test_refresh_keeps_cursor_line_hidden(self) -> None:
        self.engine.attach(self.buffer)
        self.engine.refresh(self.buffer)
        self.engine.events.cursor_moved(self.buffer.number, 5)
        self.engine.refresh(self.buffer)
        self.assertEqual(self.store.on_line(self.buffer, 5), [])
        self.engine.events.cursor_moved(self.buffer.number, 1)
        self.assertEqual(len(self.store.on_line(self.buffer, 5)), 1)

    def test_flare_painted_under_cursor_is_hidden(self) -> None:
        self.source.symbols = [FOO]
        self.engine.attach(self.buffer)
        self.engine.refresh(self.buffer)
        events = self.engine.events
        events.cursor_moved(self.buffer.number, 7)

        self.source.symbols = [FOO, sym(SymbolKind.FUNCTION, "baz", 7, 8)]
        events.document_changed(self.buffer.number)
        self.loop.advance(0.5)
        self.assertEqual(self.store.on_line(self.buffer, 7), [])

        events.cursor_moved(self.buffer.number, 0)
        self.assertEqual([deco.text for deco in self.store.on_line(self.buffer, 7)], ["F baz "])

    def test_detach_drops_subscriptions_timer_and_flares(self) -> None:
        self.engine.attach(self.buffer)
        self.engine.refresh(self.buffer)
        self.engine.events.document_changed(self.buffer.number)

        self.assertTrue(self.engine.detach(self.buffer))
        self.assertEqual(self.store.decorations(self.buffer), [])
        self.assertEqual(self.engine.events.subscriber_count(self.buffer.number), 0)
        self.loop.advance(1.0)
        self.engine.events.document_changed(self.buffer.number)
        self.loop.advance(1.0)
        self.assertEqual(self.source.calls, 1)
        self.assertFalse(self.engine.detach(self.buffer))

    def test_detach_all(self) -> None:
        other = make_buffer(number=2)
        self.engine.attach(self.buffer)
        self.engine.attach(other)
        self.engine.attachments.detach_all()
        self.assertEqual(self.engine.attachments.states, {})

    def test_buffers_are_independent(self) -> None:
        other = make_buffer(number=2)
        self.engine.attach(self.buffer)
        self.engine.attach(other)
        self.engine.refresh(self.buffer)
        self.engine.refresh(other)
        self.engine.events.cursor_moved(other.number, 0)
        self.assertEqual(len(self.store.on_line(self.buffer, 0)), 1)
        self.assertEqual(self.store.on_line(other, 0), [])


class SetupTests(EngineTestCase):
    def test_setup_attaches_buffers_with_symbol_provider_once(self) -> None:
        attached = self.engine.setup([self.buffer])
        self.assertEqual(attached, [self.buffer])
        self.assertEqual(self.engine.setup([make_buffer(number=3)]), [])
        self.assertTrue(self.engine.attachments.is_attached(self.buffer))

    def test_setup_skips_buffers_without_provider(self) -> None:
        self.source.provides = False
        self.assertEqual(self.engine.setup([self.buffer]), [])
        self.assertFalse(self.engine.on_symbol_provider_attached(self.buffer))

    def test_provider_attached_later_schedules_a_pass(self) -> None:
        self.assertTrue(self.engine.on_symbol_provider_attached(self.buffer))
        self.loop.advance(0)
        self.assertEqual(self.source.calls, 1)
        self.assertEqual(len(self.texts()), 2)


class CommandTests(EngineTestCase):
    def test_parse_show_args(self) -> None:
        self.assertEqual(parse_show_args([]), (None, None))
        self.assertEqual(
            parse_show_args(["above", "kind", "name"]),
            (PresentationMode.ABOVE, (ContentToken.KIND, ContentToken.NAME)),
        )
        self.assertEqual(parse_show_args(["inline"]), (PresentationMode.INLINE, None))
        self.assertEqual(parse_show_args(["name"]), (None, (ContentToken.NAME,)))
        self.assertEqual(
            parse_show_args(["inline_icon"]),
            (PresentationMode.INLINE, (ContentToken.ICON,)),
        )

    def test_parse_show_args_rejects_bad_input(self) -> None:
        with self.assertRaises(FlaresConfigError):
            parse_show_args(["above", "glyph"])
        with self.assertRaises(FlaresConfigError):
            parse_show_args(["inline_kind", "name"])

    def test_show_and_hide_annotations(self) -> None:
        report = show_annotations(self.engine, self.buffer, ["inline", "name"])
        self.assertEqual(report.painted, 2)
        self.assertIs(self.engine.config.mode, PresentationMode.INLINE)
        overlays = [
            deco.text
            for deco in self.store.decorations(self.buffer, Layer.CONTENT)
            if deco.style is DecorationStyle.OVERLAY
        ]
        self.assertEqual(overlays, ["foo ", "bar "])
        self.assertEqual(self.engine.events.subscriber_count(self.buffer.number, EventKind.CURSOR_MOVED), 1)

        hide_annotations(self.engine, self.buffer)
        self.assertEqual(self.store.decorations(self.buffer), [])
        self.assertFalse(self.engine.attachments.is_attached(self.buffer))

    def test_show_with_bad_mode_changes_nothing(self) -> None:
        self.engine.show(self.buffer)
        before = self.store.decorations(self.buffer)
        with self.assertRaises(FlaresConfigError):
            show_annotations(self.engine, self.buffer, ["sideways"])
        self.assertEqual(self.store.decorations(self.buffer), before)
        self.assertIs(self.engine.config.mode, PresentationMode.ABOVE)

    def test_completion_candidates(self) -> None:
        self.assertEqual(complete_show_args("inl"), [
            "inline",
            "inline_icon_and_name",
            "inline_icon",
            "inline_name",
            "inline_kind",
        ])
        self.assertIn("highlight_only", complete_show_args())
        self.assertIn("icon", complete_show_args())


if __name__ == "__main__":
    unittest.main()
