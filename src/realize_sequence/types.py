from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# ============================================================================
# Parsed diagram -- logical structure extracted from diagram source
# ============================================================================

ArrowHead = Literal["filled", "empty"]
LineStyle = Literal["solid", "dashed", "dotted"]
Direction = Literal["ltr", "rtl", "none"]


@dataclass(frozen=True, slots=True)
class Participant:
    name: str


@dataclass(frozen=True, slots=True)
class MessageProperties:
    """Everything about a message except who sends and receives it."""
    head: ArrowHead
    line: LineStyle
    # Vertical run of the arrow, clamped to [0, 50]
    delay: float = 0
    label: str | None = None


@dataclass(frozen=True, slots=True)
class Message:
    from_: str
    to: str
    head: ArrowHead = "filled"
    line: LineStyle = "solid"
    delay: float = 0
    label: str | None = None

    @property
    def properties(self) -> MessageProperties:
        return MessageProperties(
            head=self.head, line=self.line, delay=self.delay, label=self.label
        )


@dataclass(frozen=True, slots=True)
class ParsedDiagram:
    """A parsed sequence diagram with ordered participants and messages."""
    title: str | None = None
    # Declared participants first, then the ones only mentioned in messages
    participants: list[Participant] = field(default_factory=list)
    # Messages in declaration order
    messages: list[Message] = field(default_factory=list)


# ============================================================================
# Geometry
# ============================================================================


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Extent:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Box:
    x: float
    y: float
    width: float
    height: float


# ============================================================================
# Positioned diagram -- after layout, ready for rendering
# ============================================================================


@dataclass(frozen=True, slots=True)
class Lifeline:
    """Header box of a participant; its guide line runs below the box."""
    name: str
    box: Box


@dataclass(frozen=True, slots=True)
class Signal:
    # Spans from the left lifeline's centerline to the right one's
    box: Box
    direction: Direction
    # Extra vertical run for delayed messages
    delay_height: float
    props: MessageProperties


@dataclass(frozen=True, slots=True)
class Diagram:
    size: Extent
    title: str | None = None
    lifelines: list[Lifeline] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    # Length of every lifeline's guide line below its box
    lifeline_height: float = 0
    # Width reserved to the right of the last lifeline's center
    center_right: float = 0


# ============================================================================
# Render options -- user-facing configuration
# ============================================================================


@dataclass(slots=True)
class RenderOptions:
    bg: str | None = None
    fg: str | None = None
    line: str | None = None
    accent: str | None = None
    muted: str | None = None
    surface: str | None = None
    border: str | None = None
    # Name of a palette in theme.THEMES, overridden by the colors above
    theme: str | None = None
    transparent: bool | None = None
    # Multiplier applied to the rendered width and height
    scale: float | None = None
