"""Glyph stream adapter over PyMuPDF structured text.

See https://pymupdf.readthedocs.io/en/latest/textpage.html#page-dictionary
"""

from dataclasses import dataclass
from typing import Iterator, Optional

import pymupdf


Point = tuple[float, float]


@dataclass(frozen=True)
class Quad:
    """Character quadrilateral (upper/lower, left/right corners)."""
    ul: Point
    ur: Point
    ll: Point
    lr: Point

    @classmethod
    def from_bbox(cls, bbox: tuple[float, float, float, float]) -> "Quad":
        x0, y0, x1, y1 = bbox
        return cls(ul=(x0, y0), ur=(x1, y0), ll=(x0, y1), lr=(x1, y1))


@dataclass(frozen=True)
class GlyphRecord:
    """One character as reported by the structured-text walker."""

    char: str
    origin: Point
    font: Optional[str]
    size: float
    quad: Optional[Quad]
    color: Optional[tuple[float, ...]]  # RGB, 0-1 or 0-255


def span_color(value) -> Optional[tuple[float, float, float]]:
    """Convert a PyMuPDF sRGB integer into a 0-1 RGB triple."""
    if not isinstance(value, int):
        return None
    r, g, b = pymupdf.sRGB_to_rgb(value)
    return (r / 255.0, g / 255.0, b / 255.0)


def walk_rawdict(raw: dict) -> Iterator[GlyphRecord]:
    """
    Walk a ``page.get_text("rawdict")`` result character by character.

    Image blocks and spans without characters are skipped; the visitation
    order is the extractor's, not necessarily reading order.
    """
    for block in raw.get("blocks") or []:
        for line in block.get("lines") or []:
            for span in line.get("spans") or []:
                font = span.get("font")
                size = span.get("size", 0.0)
                color = span_color(span.get("color"))
                for ch in span.get("chars") or []:
                    bbox = ch.get("bbox")
                    yield GlyphRecord(
                        char=ch.get("c", ""),
                        origin=tuple(ch.get("origin") or (0.0, 0.0)),
                        font=font,
                        size=size,
                        quad=Quad.from_bbox(bbox) if bbox else None,
                        color=color,
                    )


def walk_page(page: pymupdf.Page) -> Iterator[GlyphRecord]:
    """Yield every glyph on a PyMuPDF page."""
    flags = pymupdf.TEXTFLAGS_RAWDICT | pymupdf.TEXT_PRESERVE_WHITESPACE
    raw = page.get_text("rawdict", flags=flags) or {}
    yield from walk_rawdict(raw)
