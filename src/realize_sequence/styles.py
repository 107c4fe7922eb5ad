from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .types import Extent

# ============================================================================
# Style configuration -- fonts, paddings and line widths used by layout and
# rendering.
# ============================================================================

FontWeight = Literal["normal", "bold"]
FontStyle = Literal["normal", "italic"]


@dataclass(frozen=True, slots=True)
class Font:
    family: str
    size: float
    style: FontStyle = "normal"
    weight: FontWeight = "normal"


@dataclass(frozen=True, slots=True)
class Padding:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    @classmethod
    def all(cls, padding: float) -> Padding:
        return cls(padding, padding, padding, padding)

    @classmethod
    def tb_lr(cls, tb: float, lr: float) -> Padding:
        return cls(top=tb, right=lr, bottom=tb, left=lr)

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


@dataclass(frozen=True, slots=True)
class FrameStyle:
    padding: Padding = field(default_factory=lambda: Padding.all(25))


@dataclass(frozen=True, slots=True)
class TitleStyle:
    padding: Padding = field(default_factory=lambda: Padding.all(25))
    font: Font = field(default_factory=lambda: Font("Helvetica", 36))


@dataclass(frozen=True, slots=True)
class LifelineStyle:
    padding: Padding = field(default_factory=lambda: Padding.all(10))
    margin: Padding = field(default_factory=lambda: Padding.all(10))
    font: Font = field(default_factory=lambda: Font("Helvetica", 16))
    box_line_width: float = 1
    line_width: float = 1


@dataclass(frozen=True, slots=True)
class SignalStyle:
    padding: Padding = field(default_factory=lambda: Padding(top=10, right=30, bottom=6, left=30))
    margin: Padding = field(default_factory=lambda: Padding.all(0))
    font: Font = field(default_factory=lambda: Font("Helvetica", 12))
    line_width: float = 1
    # Arrow head length (width) and half-spread (height)
    arrow: Extent = field(default_factory=lambda: Extent(width=15.0, height=6.0))


@dataclass(frozen=True, slots=True)
class Style:
    frame: FrameStyle = field(default_factory=FrameStyle)
    title: TitleStyle = field(default_factory=TitleStyle)
    lifeline: LifelineStyle = field(default_factory=LifelineStyle)
    signal: SignalStyle = field(default_factory=SignalStyle)


def default_style() -> Style:
    return Style()


# ============================================================================
# Font metrics -- character width estimates for proportional fonts.
# ============================================================================

# Average glyph width as a fraction of the font size
WIDTH_RATIOS: dict[str, float] = {
    "normal": 0.52,
    "bold": 0.58,
}


def estimate_text_width(text: str, font: Font) -> float:
    """Average character width in px for the font (proportional font)."""
    return len(text) * font.size * WIDTH_RATIOS.get(font.weight, WIDTH_RATIOS["normal"])


class EstimatingMeasurer:
    """Measurer that needs no font backend.

    Widths come from average glyph ratios and heights are the font size,
    which is close enough for sizing boxes around short labels.
    """

    def measure(self, text: str, font: Font) -> Extent:
        return Extent(width=estimate_text_width(text, font), height=font.size)
