"""Integration tests -- end-to-end parse -> layout -> render."""
from __future__ import annotations

import logging
import re

import pytest

from realize_sequence import (
    DiagramSyntaxError,
    RenderOptions,
    decode_url_code,
    default_style,
    encode_url_code,
    render_sequence,
)
from realize_sequence.styles import Font
from realize_sequence.types import Extent

CONVERSATION = (
    "title: Getting a diagram\n"
    "participant: You\n"
    "\n"
    "# the request\n"
    "You -> Browser\n"
    "  label: type diagram\n"
    "Browser ->>(2) Server\n"
    "Server --> Browser\n"
    "  label: png\n"
    "Browser ---> You\n"
    "You -> You\n"
    "  label: admire\n"
)


class TestRenderSequence:
    def test_renders_a_conversation_to_valid_svg(self):
        svg = render_sequence(CONVERSATION)
        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        for text in ("Getting a diagram", "You", "Browser", "Server", "type diagram", "png", "admire"):
            assert f">{text}</text>" in svg

    def test_every_signal_is_drawn(self):
        svg = render_sequence(CONVERSATION)
        assert svg.count("<g transform=") == 5
        assert svg.count("<rect") == 3

    def test_size_matches_view_box(self):
        svg = render_sequence("A -> B\n")
        m = re.search(r'viewBox="0 0 ([\d.]+) ([\d.]+)" width="([\d.]+)" height="([\d.]+)"', svg)
        assert m is not None
        assert m.group(1) == m.group(3)
        assert m.group(2) == m.group(4)

    def test_empty_source_renders_an_empty_frame(self):
        svg = render_sequence("")
        assert 'viewBox="0 0 50 50"' in svg

    def test_options_are_applied(self):
        svg = render_sequence("A -> B\n", RenderOptions(theme="github-dark", scale=2))
        assert "--bg:#0d1117" in svg

    def test_custom_measurer_and_style(self):
        class WideMeasurer:
            def measure(self, text: str, font: Font) -> Extent:
                return Extent(width=len(text) * 100, height=font.size)

        narrow = render_sequence("A -> B\nlabel: hi\n")
        wide = render_sequence("A -> B\nlabel: hi\n", style=default_style(), measurer=WideMeasurer())
        assert narrow != wide

    def test_logs_at_debug(self, caplog):
        caplog.set_level(logging.DEBUG, logger="realize_sequence")
        render_sequence("A -> B\n")
        loggers = {record.name for record in caplog.records}
        assert "realize_sequence.parser" in loggers
        assert "realize_sequence.layout" in loggers
        assert "realize_sequence.renderer" in loggers


class TestSyntaxErrors:
    def test_raises_with_a_diagnostic(self):
        with pytest.raises(DiagramSyntaxError) as excinfo:
            render_sequence("A -> B\nB ->\n")
        diagnostic = excinfo.value.diagnostic
        assert (diagnostic.line, diagnostic.column) == (2, 5)
        assert "expected destination participant alias" in diagnostic.message
        assert str(excinfo.value) == str(diagnostic)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            render_sequence("participant:\n")


class TestUrlCodes:
    def test_shared_diagram_renders_the_same(self):
        assert render_sequence(decode_url_code(encode_url_code(CONVERSATION))) == render_sequence(
            CONVERSATION
        )
