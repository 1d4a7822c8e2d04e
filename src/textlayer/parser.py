"""Page parsing pipeline: glyph stream -> ParsedPage."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import LayoutConfig, get_config
from .extract import glyphs_to_text_items
from .glyphs import GlyphRecord
from .layout import reconstruct_blocks
from .models import ParsedPage
from .pdf import load_pdf

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """The document could not be opened for extraction."""


def parse_page(
    glyphs: Iterable[GlyphRecord],
    bounds: tuple[float, float, float, float],
    page_number: int,
    config: Optional[LayoutConfig] = None,
) -> ParsedPage:
    """
    Reconstruct the paragraph blocks of one page.

    Args:
        glyphs: The page's glyph stream
        bounds: Page rectangle (x0, y0, x1, y1)
        page_number: 1-based page number
        config: Layout configuration (defaults if None)

    Returns:
        ParsedPage with blocks in top-to-bottom order
    """
    x0, y0, x1, y1 = bounds
    items = glyphs_to_text_items(glyphs, config)
    blocks = reconstruct_blocks(items, config)
    return ParsedPage(page_number=page_number, width=x1 - x0, height=y1 - y0, blocks=blocks)


def _parse_isolated(
    glyphs: list[GlyphRecord],
    bounds: tuple[float, float, float, float],
    page_number: int,
    config: LayoutConfig,
) -> ParsedPage:
    try:
        return parse_page(glyphs, bounds, page_number, config)
    except Exception:
        logger.exception("Layout reconstruction failed on page %d", page_number)
        x0, y0, x1, y1 = bounds
        return ParsedPage(page_number=page_number, width=x1 - x0, height=y1 - y0)


def parse_document(
    source: str | Path | bytes,
    config: Optional[LayoutConfig] = None,
    max_workers: int = 1,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> list[ParsedPage]:
    """
    Parse every page of a PDF into paragraph blocks.

    A page that fails is logged and returned without blocks; the other
    pages are unaffected.

    Args:
        source: Path to a PDF file, or its bytes
        config: Layout configuration (uses global config if None)
        max_workers: Pages reconstructed in parallel when > 1
        progress_callback: Optional callback(page_number, total_pages)

    Returns:
        One ParsedPage per document page, in page order
    """
    config = config or get_config().layout

    try:
        pdf = load_pdf(source)
    except Exception as e:
        raise ExtractionError(f"Unable to open document: {e}") from e

    # Glyphs are walked on this thread; the document is not shared across workers
    page_inputs: list[tuple[list[GlyphRecord], tuple[float, float, float, float], int]] = []
    with pdf:
        total = len(pdf)
        for i in range(total):
            bounds: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
            try:
                bounds = pdf.page_bounds(i)
                glyphs = list(pdf.glyphs(i))
            except Exception:
                logger.exception("Glyph extraction failed on page %d", i + 1)
                glyphs = []
            page_inputs.append((glyphs, bounds, i + 1))

    def run(args) -> ParsedPage:
        page = _parse_isolated(*args, config)
        if progress_callback:
            progress_callback(page.page_number, total)
        return page

    if max_workers > 1 and len(page_inputs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            pages = list(executor.map(run, page_inputs))
    else:
        pages = [run(args) for args in page_inputs]

    logger.debug("Parsed %d pages, %d blocks", len(pages), sum(len(p.blocks) for p in pages))
    return pages
