from __future__ import annotations

import logging
import math

from .geometry import bottom, center_x, depad_box, distance, inclination_angle, right
from .styles import Font, LifelineStyle, SignalStyle, Style, default_style
from .theme import build_style_block, resolve_colors, svg_open_tag
from .types import Diagram, Extent, Lifeline, Point, RenderOptions, Signal

# ============================================================================
# Sequence diagram SVG renderer
#
# Renders a laid out diagram to an SVG string. All colors use CSS custom
# properties (var(--_xxx)) from the theme system.
#
# Render order (back to front):
#   1. Title
#   2. Lifelines (box, name, vertical guide line)
#   3. Signals (line or self loop, arrow head, label)
#
# Signals are drawn in their own coordinate frame: the origin sits where the
# arrow starts and the x axis points along the arrow, so delayed (slanted)
# signals only need a rotation.
# ============================================================================

logger = logging.getLogger(__name__)

# Corner radius of the self-message loop
LOOP_RADIUS = 5

# Width of the background-colored halo drawn behind labels
LABEL_HALO_WIDTH = 4


def render_svg(
    diagram: Diagram,
    style: Style | None = None,
    options: RenderOptions | None = None,
) -> str:
    """Render a laid out diagram as an SVG string.

    style must be the one the diagram was laid out with.
    """
    if style is None:
        style = default_style()
    if options is None:
        options = RenderOptions()

    colors = resolve_colors(
        options.theme,
        bg=options.bg,
        fg=options.fg,
        line=options.line,
        accent=options.accent,
        muted=options.muted,
        surface=options.surface,
        border=options.border,
    )

    parts: list[str] = [
        svg_open_tag(
            diagram.size,
            colors,
            options.transparent or False,
            options.scale or 1,
        ),
        build_style_block(style.lifeline.font.family),
    ]

    if diagram.title:
        parts.append(_render_title(diagram.title, diagram.size.width, style))

    for lifeline in diagram.lifelines:
        parts.append(_render_lifeline(lifeline, diagram.lifeline_height, style.lifeline))

    for signal in diagram.signals:
        parts.append(_render_signal(signal, style))

    parts.append("</svg>")
    logger.debug(
        "rendered %d lifelines and %d signals",
        len(diagram.lifelines),
        len(diagram.signals),
    )
    return "\n".join(parts)


# ============================================================================
# Component renderers
# ============================================================================


def _render_title(title: str, width: float, style: Style) -> str:
    y = style.frame.padding.top + style.title.padding.top + style.title.font.size
    return (
        f'<text x="{width / 2}" y="{y}" text-anchor="middle" '
        f'{_font_attrs(style.title.font)} fill="var(--_text)">{escape_xml(title)}</text>'
    )


def _render_lifeline(lifeline: Lifeline, height: float, style: LifelineStyle) -> str:
    """Render a lifeline box with its name and the guide line below it."""
    rect = depad_box(lifeline.box, style.margin)
    text = depad_box(rect, style.padding)
    x = center_x(lifeline.box)
    box_bottom = bottom(rect)

    return (
        f'<rect x="{rect.x}" y="{rect.y}" width="{rect.width}" height="{rect.height}" '
        f'fill="var(--_box-fill)" stroke="var(--_box-stroke)" '
        f'stroke-width="{style.box_line_width}" />\n'
        f'<text x="{text.x}" y="{bottom(text)}" {_font_attrs(style.font)} '
        f'fill="var(--_text)">{escape_xml(lifeline.name)}</text>\n'
        f'<line x1="{x}" y1="{box_bottom + 1}" x2="{x}" y2="{box_bottom + height}" '
        f'stroke="var(--_guide)" stroke-width="{style.line_width}" />'
    )


def _render_signal(signal: Signal, style: Style) -> str:
    signal_style = style.signal
    padded = depad_box(signal.box, signal_style.margin)

    if signal.direction == "none":
        start = Point(padded.x, bottom(padded))
        transform = f"translate({start.x},{start.y})"
        length = signal_style.font.size * 2
    else:
        # keep arrow tips clear of the lifeline guide lines
        inset = style.lifeline.line_width / 2 + 1
        left = padded.x + inset
        end = right(padded) - inset
        if signal.direction == "rtl":
            start = Point(left, bottom(padded) + signal.delay_height)
            finish = Point(end, bottom(padded))
        else:
            start = Point(left, bottom(padded))
            finish = Point(end, bottom(padded) + signal.delay_height)
        angle = math.degrees(inclination_angle(start, finish))
        transform = f"translate({start.x},{start.y}) rotate({angle})"
        length = distance(start, finish)

    parts = [f'<g transform="{transform}">']
    parts.append(_render_signal_line(signal, padded.height, length, signal_style))
    parts.append(_render_arrow_head(signal, length, signal_style))
    if signal.props.label:
        parts.append(_render_signal_label(signal, length, signal_style))
    parts.append("</g>")
    return "\n".join(parts)


def _render_signal_line(
    signal: Signal, height: float, length: float, style: SignalStyle
) -> str:
    dash = ""
    if signal.props.line == "dashed":
        dash = f' stroke-dasharray="{style.line_width * 5} {style.line_width * 5}"'
    elif signal.props.line == "dotted":
        dash = f' stroke-dasharray="{style.line_width * 2} {style.line_width * 2}"'
    stroke = f'fill="none" stroke="var(--_signal)" stroke-width="{style.line_width}"{dash}'

    if signal.direction != "none":
        return f'  <line x1="0" y1="0" x2="{length}" y2="0" {stroke} />'

    # out to the right, down past the delay, and back to the lifeline
    r = LOOP_RADIUS
    top = -height / 2
    end = signal.delay_height
    d = (
        f"M 0 {top} L {length - r} {top} Q {length} {top} {length} {top + r} "
        f"L {length} {end - r} Q {length} {end} {length - r} {end} L 0 {end}"
    )
    return f'  <path d="{d}" {stroke} />'


def _render_arrow_head(signal: Signal, length: float, style: SignalStyle) -> str:
    if signal.direction == "ltr":
        points = _arrow_points(style.arrow, False, Point(length, 0))
    elif signal.direction == "rtl":
        points = _arrow_points(style.arrow, True, Point(0, 0))
    else:
        points = _arrow_points(style.arrow, True, Point(0, signal.delay_height))

    coords = " ".join(f"{p.x},{p.y}" for p in points)
    if signal.props.head == "filled":
        return f'  <polygon points="{coords}" fill="var(--_arrow)" stroke="var(--_arrow)" />'
    return (
        f'  <polyline points="{coords}" fill="none" stroke="var(--_arrow)" '
        f'stroke-width="{style.line_width}" />'
    )


def _arrow_points(arrow: Extent, facing_left: bool, tip: Point) -> list[Point]:
    back = arrow.width if facing_left else -arrow.width
    return [
        Point(tip.x + back, tip.y - arrow.height),
        tip,
        Point(tip.x + back, tip.y + arrow.height),
    ]


def _render_signal_label(signal: Signal, length: float, style: SignalStyle) -> str:
    label = signal.props.label or ""
    if signal.direction == "none":
        # normal spacing and a little extra depending on font size
        x = style.margin.left + style.padding.left + style.font.size / 2
        # midpoint of the loop, one pixel above the line
        y = signal.delay_height / 2 - 1
        anchor = "start"
    else:
        x = length / 2
        y = -style.padding.bottom
        anchor = "middle"

    return (
        f'  <text x="{x}" y="{y}" text-anchor="{anchor}" {_font_attrs(style.font)} '
        f'fill="var(--_label)" stroke="var(--bg)" stroke-width="{LABEL_HALO_WIDTH}" '
        f'paint-order="stroke">{escape_xml(label)}</text>'
    )


# ============================================================================
# Utilities
# ============================================================================


def _font_attrs(font: Font) -> str:
    return (
        f'font-family="{escape_xml(font.family)}" font-size="{font.size}" '
        f'font-weight="{font.weight}" font-style="{font.style}"'
    )


def escape_xml(text: str) -> str:
    """Escape special XML characters in text content."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )
