"""realize-sequence: turn a small sequence diagram language into positioned, renderable diagrams."""

from __future__ import annotations

from .types import (
    Diagram,
    Extent,
    Lifeline,
    Message,
    MessageProperties,
    ParsedDiagram,
    Participant,
    RenderOptions,
    Signal,
)
from .styles import EstimatingMeasurer, Font, Padding, Style, default_style
from .parser import ParseFailure, ParseResult, ParseSuccess, parse_diagram
from .layout import Measurer, layout
from .renderer import render_svg
from .diagnostics import Diagnostic, diagnose
from .codec import CodecError, decode_url_code, encode_url_code

__all__ = [
    "render_sequence",
    "parse_diagram",
    "layout",
    "render_svg",
    "diagnose",
    "default_style",
    "encode_url_code",
    "decode_url_code",
    "DiagramSyntaxError",
    "CodecError",
    "Diagnostic",
    "Diagram",
    "EstimatingMeasurer",
    "Extent",
    "Font",
    "Lifeline",
    "Measurer",
    "Message",
    "MessageProperties",
    "Padding",
    "ParsedDiagram",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "Participant",
    "RenderOptions",
    "Signal",
    "Style",
]


class DiagramSyntaxError(ValueError):
    """Diagram source that does not parse."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic


def render_sequence(
    code: str,
    options: RenderOptions | None = None,
    style: Style | None = None,
    measurer: Measurer | None = None,
) -> str:
    """Parse, lay out and render diagram source to an SVG string.

    Raises DiagramSyntaxError when the source does not parse.
    """
    result = parse_diagram(code)
    if isinstance(result, ParseFailure):
        diagnostic = diagnose(code, result)
        assert diagnostic is not None
        raise DiagramSyntaxError(diagnostic)

    if style is None:
        style = default_style()
    if measurer is None:
        measurer = EstimatingMeasurer()

    diagram = layout(result.diagram, measurer, style)
    return render_svg(diagram, style, options)
