"""Normalize raw glyph records into typed text items."""

import math
from typing import Iterable, Optional

from .config import LayoutConfig
from .fonts import resolve_font
from .glyphs import GlyphRecord, Quad
from .models import COLOR_FALLBACK, TextItem


def _is_finite(*values) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def to_hex_component(value: float) -> str:
    """Convert one 0-1 or 0-255 channel to two hex digits."""
    normalized = value if value > 1 else value * 255
    clamped = max(0, min(255, _round_half_up(normalized)))
    return f"{clamped:02x}"


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """
    Convert an RGB triple to ``#rrggbb``.

    Channels above 1 are taken as 0-255 values, the rest as 0-1 fractions.
    """
    return f"#{to_hex_component(r)}{to_hex_component(g)}{to_hex_component(b)}"


def color_to_hex(color, fallback: str = COLOR_FALLBACK) -> str:
    """Convert a possibly malformed color triple, falling back when invalid."""
    if not isinstance(color, (list, tuple)) or len(color) < 3:
        return fallback
    r, g, b = color[0], color[1], color[2]
    if not _is_finite(r, g, b):
        return fallback
    return rgb_to_hex(float(r), float(g), float(b))


def _usable_quad(quad: Optional[Quad]) -> bool:
    if quad is None or not _is_finite(*quad.ul, *quad.lr):
        return False
    (x, y), (x2, y2) = quad.ul, quad.lr
    return x2 > x and y2 > y


def glyph_box(glyph: GlyphRecord, font_size: float) -> tuple[float, float, float, float]:
    """
    Return (x, y, width, height) for a glyph.

    Uses the quad's upper-left and lower-right corners; a missing,
    non-finite or zero-area quad falls back to origin .. origin + size.
    """
    quad: Optional[Quad] = glyph.quad
    if _usable_quad(quad):
        x, y = quad.ul
        x2, y2 = quad.lr
    else:
        ox, oy = glyph.origin if _is_finite(*glyph.origin) else (0.0, 0.0)
        x, y = ox, oy
        x2, y2 = ox + font_size, oy + font_size
    return float(x), float(y), abs(x2 - x), abs(y2 - y)


def glyph_to_text_item(glyph: GlyphRecord, config: Optional[LayoutConfig] = None) -> Optional[TextItem]:
    """Convert one glyph to a TextItem, or None for whitespace."""
    config = config or LayoutConfig()
    if not glyph.char or not glyph.char.strip():
        return None

    font_size = glyph.size if _is_finite(glyph.size) and glyph.size > 0 else config.default_font_size
    x, y, width, height = glyph_box(glyph, font_size)
    family, weight = resolve_font(glyph.font)

    return TextItem(
        text=glyph.char,
        x=x,
        y=y,
        width=width,
        height=height,
        font_size=float(font_size),
        font_family=family,
        font_weight=weight,
        fill=color_to_hex(glyph.color, config.color_fallback),
        line_height=config.default_line_height,
    )


def glyphs_to_text_items(
    glyphs: Iterable[GlyphRecord],
    config: Optional[LayoutConfig] = None,
) -> list[TextItem]:
    """
    Normalize a page's glyph stream into a flat list of text items.

    Args:
        glyphs: Glyph records in extractor visitation order
        config: Layout configuration (defaults if None)

    Returns:
        One TextItem per non-whitespace glyph, in input order
    """
    config = config or LayoutConfig()
    items = (glyph_to_text_item(glyph, config) for glyph in glyphs)
    return [item for item in items if item is not None]
