from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .geometry import bottom, center_x, pad, right
from .styles import Font, LifelineStyle, SignalStyle, Style
from .types import (
    Box,
    Diagram,
    Direction,
    Extent,
    Lifeline,
    Message,
    ParsedDiagram,
    Participant,
    Signal,
)

# ============================================================================
# Sequence diagram layout engine
#
# Layout strategy:
#   1. Place lifeline boxes left to right, edge to edge, below the title
#   2. Treat the gaps between adjacent lifeline centers as segments and widen
#      them, message by message, until every label fits over its span. Extra
#      width always goes to the narrowest segments of the span first.
#   3. Move the lifelines to their widened positions and stack the signals
#      vertically in message order
# ============================================================================

logger = logging.getLogger(__name__)

# Vertical run in px per unit of message delay
DELAY_SCALE = 10


class Measurer(Protocol):
    """Something that can measure the extent of text."""

    def measure(self, text: str, font: Font) -> Extent: ...


@dataclass(slots=True)
class _Segment:
    """Distance from one lifeline's center to the next one's."""
    name: str
    width: float


@dataclass(slots=True)
class _Span:
    left: int
    right: int
    direction: Direction
    width: float


@dataclass(frozen=True, slots=True)
class _Allotment:
    # Width needed to raise the narrowest segments to the next narrowest;
    # None when every segment already has the same width
    space: float | None
    count: int


def layout(parsed: ParsedDiagram, measurer: Measurer, style: Style) -> Diagram:
    """Lay out a parsed diagram.

    Returns a fully positioned diagram ready for rendering.
    """
    title_box = _layout_title(style, measurer, parsed.title)

    lifelines = _layout_lifelines(parsed.participants, style.lifeline, measurer, title_box)

    signals, lifelines, center_right = _layout_signals(
        lifelines, parsed.messages, measurer, style
    )

    signals_height = sum(s.box.height + s.delay_height for s in signals)
    lifeline_height = (
        style.lifeline.margin.bottom + signals_height + style.signal.font.size
    )

    size = _compute_size(lifelines, lifeline_height, center_right, style, title_box)

    logger.debug(
        "laid out %d lifelines and %d signals in %sx%s",
        len(lifelines),
        len(signals),
        size.width,
        size.height,
    )

    return Diagram(
        size=size,
        title=parsed.title,
        lifelines=lifelines,
        signals=signals,
        lifeline_height=lifeline_height,
        center_right=center_right,
    )


# ============================================================================
# Title and lifelines
# ============================================================================


def _layout_title(style: Style, measurer: Measurer, title: str | None) -> Box:
    x = style.frame.padding.left
    y = style.frame.padding.top
    if not title:
        return Box(x=x, y=y, width=0, height=0)

    extent = pad(measurer.measure(title, style.title.font), style.title.padding)
    return Box(x=x, y=y, width=extent.width, height=extent.height)


def _layout_lifelines(
    participants: list[Participant],
    style: LifelineStyle,
    measurer: Measurer,
    title_box: Box,
) -> list[Lifeline]:
    """Lifelines laid out left to right, edge to edge.

    Every box has the same height and a width that follows its name. The
    spacing between them is adjusted later for the messages.
    """
    lifelines: list[Lifeline] = []
    next_left = title_box.x
    y = bottom(title_box)

    for participant in participants:
        width = measurer.measure(participant.name, style.font).width
        extent = pad(pad(Extent(width, style.font.size), style.padding), style.margin)
        box = Box(x=next_left, y=y, width=extent.width, height=extent.height)
        lifelines.append(Lifeline(name=participant.name, box=box))
        next_left = right(box)

    return lifelines


# ============================================================================
# Signals
# ============================================================================


def _layout_signals(
    lifelines: list[Lifeline],
    messages: list[Message],
    measurer: Measurer,
    style: Style,
) -> tuple[list[Signal], list[Lifeline], float]:
    if not lifelines or not messages:
        return [], lifelines, 0

    segments = _generate_segments(lifelines)
    spans = [
        _update_segments_for_message(segments, message, style.signal, measurer)
        for message in messages
    ]

    lifelines = _widen_lifelines(lifelines, segments)
    center_right = segments[-1].width

    return _create_signals(lifelines, messages, spans, style), lifelines, center_right


def _generate_segments(lifelines: list[Lifeline]) -> list[_Segment]:
    segments: list[_Segment] = []
    for idx, lifeline in enumerate(lifelines):
        width = 0.0
        if idx < len(lifelines) - 1:
            width = center_x(lifelines[idx + 1].box) - center_x(lifeline.box)
        segments.append(_Segment(name=lifeline.name, width=width))
    return segments


def self_message_width(style: SignalStyle) -> float:
    """Minimum width of a message from a lifeline to itself."""
    return style.font.size * 2 + style.arrow.width


def _update_segments_for_message(
    segments: list[_Segment],
    message: Message,
    style: SignalStyle,
    measurer: Measurer,
) -> _Span:
    span = _message_span(segments, message)

    required = 0.0
    if message.label:
        text_width = measurer.measure(message.label, style.font).width
        required = text_width + style.padding.horizontal + style.margin.horizontal
    if span.direction == "none":
        required = max(required, self_message_width(style))

    if required > span.width:
        widen(segments, span, required)

    if span.direction == "none":
        span.width = required
    else:
        span.width = max(span.width, required)
    return span


def _message_span(segments: list[_Segment], message: Message) -> _Span:
    index = {segment.name: idx for idx, segment in enumerate(segments)}
    idx_a = index[message.from_]
    idx_b = index[message.to]

    def width(start: int, end: int) -> float:
        return sum(segment.width for segment in segments[start:end])

    if idx_a < idx_b:
        return _Span(left=idx_a, right=idx_b, direction="ltr", width=width(idx_a, idx_b))
    if idx_a > idx_b:
        return _Span(left=idx_b, right=idx_a, direction="rtl", width=width(idx_b, idx_a))
    # a message to itself loops through the segment to its right
    return _Span(left=idx_a, right=idx_a, direction="none", width=width(idx_a, idx_a + 1))


def widen(segments: list[_Segment], span: _Span, width: float) -> None:
    """Grow the segments of span until their total reaches width.

    Extra width is handed to the narrowest segments first, so a segment never
    ends up wider than one that was wider before.
    """
    remaining = width - span.width
    if remaining <= 0:
        return

    # 'a -> a' has an empty span but uses the segment to its right
    end = span.left + 1 if span.right - span.left < 1 else span.right

    ordered = sorted(segments[span.left:end], key=lambda segment: segment.width)
    logger.debug(
        "widening %d segments from %s to %s", len(ordered), span.width, width
    )

    while remaining > 0:
        allotment = next_allotment(ordered)
        take = remaining
        if allotment.space is not None and remaining > allotment.space:
            take = allotment.space
        remaining -= take
        _allocate(ordered, allotment, take)


def next_allotment(segments: list[_Segment]) -> _Allotment:
    """Find the run of narrowest segments and the width that levels them
    with the next narrowest one. segments must be sorted by width.
    """
    first = segments[0].width
    for count in range(1, len(segments)):
        if segments[count].width > first:
            return _Allotment(space=(segments[count].width - first) * count, count=count)
    return _Allotment(space=None, count=len(segments))


def _allocate(segments: list[_Segment], allotment: _Allotment, take: float) -> None:
    add = take / allotment.count
    for segment in segments[:allotment.count]:
        segment.width += add


def _widen_lifelines(lifelines: list[Lifeline], segments: list[_Segment]) -> list[Lifeline]:
    """Move every lifeline after the first so that the distance between
    adjacent centers equals the segment between them."""
    widened = [lifelines[0]]
    center = center_x(lifelines[0].box)
    for idx in range(1, len(lifelines)):
        lifeline = lifelines[idx]
        center += segments[idx - 1].width
        x = center - lifeline.box.width / 2
        if x == lifeline.box.x:
            widened.append(lifeline)
            continue
        box = Box(x=x, y=lifeline.box.y, width=lifeline.box.width, height=lifeline.box.height)
        widened.append(Lifeline(name=lifeline.name, box=box))
    return widened


def _create_signals(
    lifelines: list[Lifeline],
    messages: list[Message],
    spans: list[_Span],
    style: Style,
) -> list[Signal]:
    signal_style = style.signal
    y = max(bottom(lifeline.box) for lifeline in lifelines)

    signals: list[Signal] = []
    for message, span in zip(messages, spans):
        left = center_x(lifelines[span.left].box)
        if span.direction == "none":
            width = span.width
        else:
            width = center_x(lifelines[span.right].box) - left

        height = (
            (signal_style.font.size if message.label or span.direction == "none" else 0.0)
            + signal_style.padding.vertical
            + signal_style.margin.vertical
        )
        delay_height = message.delay * DELAY_SCALE if message.delay else 0.0

        signals.append(
            Signal(
                box=Box(x=left, y=y, width=width, height=height),
                direction=span.direction,
                delay_height=delay_height,
                props=message.properties,
            )
        )
        y += height + delay_height

    return signals


def _compute_size(
    lifelines: list[Lifeline],
    lifeline_height: float,
    center_right: float,
    style: Style,
    title_box: Box,
) -> Extent:
    frame = style.frame.padding
    if not lifelines:
        return Extent(
            width=title_box.width + frame.horizontal,
            height=title_box.height + frame.vertical,
        )

    rightmost = lifelines[-1]
    diagram_right = max(right(rightmost.box), center_x(rightmost.box) + center_right)
    return Extent(
        width=max(title_box.width + frame.horizontal, diagram_right + frame.right),
        height=bottom(rightmost.box) + lifeline_height + frame.bottom,
    )
