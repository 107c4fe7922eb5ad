from __future__ import annotations

import math

from .styles import Padding
from .types import Box, Extent, Point

# ============================================================================
# Geometry helpers shared by layout and rendering
# ============================================================================


def pad(extent: Extent, padding: Padding) -> Extent:
    """Grow an extent by a padding."""
    return Extent(
        width=extent.width + padding.horizontal,
        height=extent.height + padding.vertical,
    )


def depad_box(box: Box, padding: Padding) -> Box:
    """Calculate a new box with the padding removed."""
    return Box(
        x=box.x + padding.left,
        y=box.y + padding.top,
        width=box.width - padding.horizontal,
        height=box.height - padding.vertical,
    )


def right(box: Box) -> float:
    return box.x + box.width


def bottom(box: Box) -> float:
    return box.y + box.height


def center_x(box: Box) -> float:
    return box.x + box.width / 2


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def inclination_angle(left: Point, end: Point) -> float:
    """Angle in radians, clockwise, of the line from left to end."""
    if end.x == left.x:
        return math.copysign(math.pi / 2, end.y - left.y) if end.y != left.y else 0.0
    return math.atan((end.y - left.y) / (end.x - left.x))
