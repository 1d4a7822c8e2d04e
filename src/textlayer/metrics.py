"""Font metric estimation for overlay sizing and text wrapping."""

import re
from typing import Optional

import pymupdf

from .fonts import pick_standard_font
from .layout import clamp_line_height
from .models import DEFAULT_LINE_HEIGHT, Size


LINE_BREAK = re.compile(r"\r?\n")
FALLBACK_CHAR_WIDTH = 0.5  # Average advance as a fraction of font size


def count_lines(text: str) -> int:
    return max(len(LINE_BREAK.split(text)), 1)


def text_length(text: str, font_size: float, fontname: str) -> float:
    """Advance width of text in a Base-14 font."""
    try:
        return pymupdf.get_text_length(text, fontname=fontname, fontsize=font_size)
    except (ValueError, RuntimeError):
        return font_size * (len(text) or 1) * FALLBACK_CHAR_WIDTH


def estimate_text_width(
    text: str,
    font_size: float,
    family: Optional[str] = None,
    weight: str = "normal",
) -> float:
    """
    Estimate the rendered width of a single line of text.

    Measures with the Base-14 face the family maps to; this is an estimate,
    not a measurement of the embedded font.
    """
    return text_length(text or " ", font_size, pick_standard_font(family, weight))


def wrap_text(text: str, max_width: float, font_size: float, fontname: str = "helv") -> list[str]:
    """
    Greedily wrap text at word boundaries to fit max_width.

    Explicit newlines are kept; a single word wider than max_width gets a
    line of its own.
    """
    lines: list[str] = []
    for paragraph in LINE_BREAK.split(text):
        words = paragraph.split(" ")
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if not current or text_length(candidate, font_size, fontname) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def normalize_line_height(
    text: str,
    provided: Optional[float],
    font_size: float,
    explicit_height: Optional[float] = None,
) -> float:
    """
    Pick a line-height ratio for a new overlay.

    A provided ratio already inside [1, 3] is kept; otherwise it is
    estimated from an explicit box height, else the default.
    """
    if isinstance(provided, (int, float)) and 1.0 <= provided <= 3.0:
        return float(provided)
    if font_size <= 0:
        return DEFAULT_LINE_HEIGHT
    if explicit_height and explicit_height > 0:
        return clamp_line_height(explicit_height / (count_lines(text) * font_size))
    return DEFAULT_LINE_HEIGHT


def content_bounds(
    text: str,
    font_size: float,
    line_height: float = DEFAULT_LINE_HEIGHT,
    padding: float = 0.0,
    family: Optional[str] = None,
    weight: str = "normal",
) -> Size:
    """Minimum box needed to show text without clipping."""
    lines = LINE_BREAK.split(text or "")
    longest = max((estimate_text_width(line, font_size, family, weight) for line in lines), default=0.0)
    line_count = max(len(lines), 1)
    return Size(
        width=max(longest + padding * 2, font_size),
        height=max(line_count * font_size * line_height + padding * 2, font_size),
    )
