from __future__ import annotations

from dataclasses import dataclass, fields, replace

from .types import Extent

# ============================================================================
# Diagram colors
#
# Colors reach the SVG as CSS custom properties on the root element. --bg and
# --fg are always set. Every drawing role reads a derived --_xxx property that
# falls back to a mix of the two, so a plain two-color palette already gives
# a readable diagram and an optional role color only recolors its own parts.
# ============================================================================


@dataclass(slots=True)
class DiagramColors:
    """Base colors plus optional role colors (None = derive from bg/fg)."""

    bg: str
    fg: str
    # Lifeline guides and signal lines
    line: str | None = None
    # Arrow heads
    accent: str | None = None
    # Signal label text
    muted: str | None = None
    # Lifeline box fill
    surface: str | None = None
    # Lifeline box outline
    border: str | None = None


DEFAULTS = {"bg": "#FFFFFF", "fg": "#000000"}

# derived property -> (role color that overrides it, % of --fg mixed into --bg)
ROLES: dict[str, tuple[str | None, int]] = {
    "_text": (None, 100),
    "_label": ("muted", 85),
    "_guide": ("line", 50),
    "_signal": ("line", 100),
    "_arrow": ("accent", 100),
    "_box-fill": ("surface", 0),
    "_box-stroke": ("border", 100),
}

THEMES: dict[str, DiagramColors] = {
    "paper": DiagramColors(bg="#FFFFFF", fg="#000000"),
    "zinc-dark": DiagramColors(bg="#18181B", fg="#FAFAFA"),
    "nord": DiagramColors(bg="#2e3440", fg="#d8dee9", line="#4c566a", accent="#88c0d0", muted="#616e88"),
    "github-light": DiagramColors(bg="#ffffff", fg="#1f2328", line="#d1d9e0", accent="#0969da", muted="#59636e"),
    "github-dark": DiagramColors(bg="#0d1117", fg="#e6edf3", line="#3d444d", accent="#4493f8", muted="#9198a1"),
    "solarized-light": DiagramColors(bg="#fdf6e3", fg="#657b83", line="#93a1a1", accent="#268bd2", muted="#93a1a1"),
}


def resolve_colors(theme: str | None = None, **overrides: str | None) -> DiagramColors:
    """Colors of a named theme (or the defaults) with the given overrides.

    Overrides that are None or empty leave the theme's color in place.
    """
    if theme is None:
        base = DiagramColors(**DEFAULTS)
    elif theme in THEMES:
        base = THEMES[theme]
    else:
        raise ValueError(f'Unknown theme "{theme}". Expected one of: {", ".join(THEMES)}')
    return replace(base, **{name: value for name, value in overrides.items() if value})


# ============================================================================
# SVG root and style block
# ============================================================================


def _derived_property(name: str, role: str | None, share: int) -> str:
    if share >= 100:
        mixed = "var(--fg)"
    elif share <= 0:
        mixed = "var(--bg)"
    else:
        mixed = f"color-mix(in srgb, var(--fg) {share}%, var(--bg))"
    value = f"var(--{role}, {mixed})" if role else mixed
    return f"    --{name}: {value};"


def build_style_block(font_family: str) -> str:
    """<style> element with the text font and the derived role properties."""
    derived = "\n".join(
        _derived_property(name, role, share) for name, (role, share) in ROLES.items()
    )
    return (
        "<style>\n"
        f"  text {{ font-family: '{font_family}', system-ui, sans-serif; }}\n"
        f"  svg {{\n{derived}\n  }}\n"
        "</style>"
    )


def svg_open_tag(
    size: Extent,
    colors: DiagramColors,
    transparent: bool = False,
    scale: float = 1,
) -> str:
    """Opening <svg> tag; the view box is the diagram size, the rendered
    size is scaled."""
    props = [
        f"--{field.name}:{getattr(colors, field.name)}"
        for field in fields(colors)
        if getattr(colors, field.name)
    ]
    if not transparent:
        props.append("background:var(--bg)")

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {size.width} {size.height}" '
        f'width="{size.width * scale}" height="{size.height * scale}" style="{";".join(props)}">'
    )
