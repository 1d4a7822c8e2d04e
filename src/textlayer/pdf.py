"""PDF loading, glyph access and drawing using PyMuPDF."""

from pathlib import Path
from typing import Iterator

import pymupdf

from .glyphs import GlyphRecord, walk_page
from .metrics import wrap_text
from .models import MaskRect, Size, TextDraw


class PDFDocument:
    """Handles PDF loading, glyph extraction and overlay drawing."""

    def __init__(self, source: str | Path | bytes):
        """
        Open a PDF document.

        Args:
            source: Path to a PDF file, or the file's bytes
        """
        if isinstance(source, (bytes, bytearray)):
            self.path = None
            self._doc = pymupdf.open(stream=bytes(source), filetype="pdf")
        else:
            self.path = Path(source)
            self._doc = pymupdf.open(str(self.path))

    def __len__(self) -> int:
        return len(self._doc)

    def __enter__(self) -> "PDFDocument":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """Close the PDF document."""
        if self._doc is not None and not self._doc.is_closed:
            self._doc.close()

    def page_bounds(self, page_num: int) -> tuple[float, float, float, float]:
        """Page rectangle (x0, y0, x1, y1) in points."""
        rect = self._doc[page_num].rect
        return rect.x0, rect.y0, rect.x1, rect.y1

    def get_page_size(self, page_num: int) -> Size:
        """
        Get page dimensions in PDF points.

        Returns:
            Size of (width, height) in points
        """
        x0, y0, x1, y1 = self.page_bounds(page_num)
        return Size(x1 - x0, y1 - y0)

    def page_sizes(self) -> dict[int, Size]:
        """Sizes of all pages keyed by 0-based index."""
        return {i: self.get_page_size(i) for i in range(len(self))}

    def glyphs(self, page_num: int) -> Iterator[GlyphRecord]:
        """Iterate the structured glyph stream of one page."""
        yield from walk_page(self._doc[page_num])

    def draw_mask(self, page_num: int, mask: MaskRect, color: tuple[float, float, float] = (1, 1, 1)) -> None:
        """
        Draw an opaque, borderless rectangle.

        Args:
            page_num: Page index (0-based)
            mask: Rectangle in bottom-up page coordinates
            color: RGB fill (0-1 range), white by default
        """
        page = self._doc[page_num]
        page_height = page.rect.height
        top = page_height - (mask.rect_y + mask.height)
        rect = pymupdf.Rect(mask.rect_x, top, mask.rect_x + mask.width, top + mask.height)
        page.draw_rect(rect, color=None, fill=color, fill_opacity=1, width=0, overlay=True)

    def draw_text(self, page_num: int, draw: TextDraw) -> int:
        """
        Draw wrapped text starting at a bottom-up baseline.

        Lines wrap at draw.max_width and advance by draw.line_height.

        Returns:
            Number of lines drawn
        """
        page = self._doc[page_num]
        baseline = page.rect.height - draw.y
        lines = wrap_text(draw.text, draw.max_width, draw.size, draw.font)
        for i, line in enumerate(lines):
            if not line:
                continue
            page.insert_text(
                (draw.x, baseline + i * draw.line_height),
                line,
                fontsize=draw.size,
                fontname=draw.font,
                color=draw.color,
                fill_opacity=draw.opacity,
                overlay=True,
            )
        return len(lines)

    def to_bytes(self, deflate: bool = True) -> bytes:
        """Serialize the (possibly modified) document."""
        return self._doc.tobytes(garbage=3, deflate=deflate)


def load_pdf(source: str | Path | bytes) -> PDFDocument:
    """
    Load a PDF document.

    Args:
        source: Path to a PDF file, or its bytes

    Returns:
        PDFDocument instance
    """
    return PDFDocument(source)
