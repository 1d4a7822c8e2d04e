"""
Layout reconstruction: glyphs -> lines -> words -> paragraphs.

PDF text carries no paragraph structure, so it is rebuilt geometrically:
1. Cluster glyphs into lines by top-Y proximity (3 units)
2. Merge glyphs within each line into words (gap > 25% of font size)
3. Collapse each line to one record carrying its dominant style
4. Fold consecutive lines into paragraphs when alignment, font size,
   color and vertical gap agree and the previous line does not end in "."

Every step is a pure function over immutable input and returns new
collections, so pages never share state.
"""

import math
from dataclasses import replace
from typing import Iterable, Optional, Sequence

import numpy as np

from .config import LayoutConfig
from .models import (
    COLOR_FALLBACK,
    DEFAULT_LINE_HEIGHT,
    Line,
    ParagraphLine,
    ParsedBlock,
    TextItem,
)


DEFAULT_LINE_TOLERANCE = 3.0
WORD_GAP_RATIO = 0.25
MIN_LINE_HEIGHT = 1.0
MAX_LINE_HEIGHT = 3.0


def cluster_lines(items: Iterable[TextItem], tolerance: float = DEFAULT_LINE_TOLERANCE) -> list[Line]:
    """
    Group items into lines by vertical proximity.

    An item joins the first line whose representative y is within
    tolerance of its own top, otherwise it starts a new line.

    Args:
        items: Text items in any order
        tolerance: Maximum |dy| to join an existing line

    Returns:
        Lines sorted top to bottom, items within each line left to right
    """
    buckets: list[tuple[float, list[TextItem]]] = []
    for item in items:
        for line_y, members in buckets:
            if abs(line_y - item.y) <= tolerance:
                members.append(item)
                break
        else:
            buckets.append((item.y, [item]))

    lines = [
        Line(y=line_y, items=tuple(sorted(members, key=lambda it: it.x)))
        for line_y, members in buckets
    ]
    return sorted(lines, key=lambda ln: ln.y)


def _grow(word: TextItem, item: TextItem, separator: str) -> TextItem:
    """Append item to word, growing the box to the union of both."""
    x0 = min(word.x, item.x)
    y0 = min(word.y, item.y)
    x1 = max(word.right, item.right)
    y1 = max(word.bottom, item.bottom)
    return replace(
        word,
        text=word.text + separator + item.text,
        x=x0,
        y=y0,
        width=x1 - x0,
        height=y1 - y0,
    )


def merge_words(items: Sequence[TextItem], gap_ratio: float = WORD_GAP_RATIO) -> list[TextItem]:
    """
    Merge a line's items (sorted left to right) into words.

    Args:
        items: Items of one line, sorted by x
        gap_ratio: Fraction of font size above which a gap separates words

    Returns:
        One TextItem per word
    """
    words: list[TextItem] = []
    current: Optional[TextItem] = None

    for i, item in enumerate(items):
        if current is None:
            current = item
        else:
            gap = item.x - current.right
            separator = " " if gap > current.font_size * gap_ratio else ""
            current = _grow(current, item, separator)

        next_item = items[i + 1] if i + 1 < len(items) else None
        if next_item is None or (next_item.x - item.right) > item.font_size * gap_ratio:
            words.append(current)
            current = None

    return words


def merge_line_words(lines: Iterable[Line], gap_ratio: float = WORD_GAP_RATIO) -> list[Line]:
    """Apply word merging to each line, dropping lines left empty."""
    merged = []
    for line in lines:
        words = merge_words(line.items, gap_ratio)
        if words:
            merged.append(Line(y=line.y, items=tuple(words)))
    return merged


def to_paragraph_line(line: Line) -> ParagraphLine:
    """Collapse a merged line into a single record with its dominant style."""
    items = line.items
    first = items[0]
    return ParagraphLine(
        text=" ".join(it.text for it in items),
        min_x=min(it.x for it in items),
        max_x=max(it.right for it in items),
        y=line.y,
        height=max(it.height for it in items),
        font_size=max(it.font_size for it in items),
        font_family=first.font_family or "Helvetica",
        font_weight=first.font_weight or "normal",
        fill=first.fill or COLOR_FALLBACK,
        line_height=first.line_height or DEFAULT_LINE_HEIGHT,
    )


def clamp_line_height(
    value: float,
    default: float = DEFAULT_LINE_HEIGHT,
    low: float = MIN_LINE_HEIGHT,
    high: float = MAX_LINE_HEIGHT,
) -> float:
    """Clamp a line-height ratio to [low, high]; non-finite maps to default."""
    if not math.isfinite(value):
        value = default
    return min(max(value, low), high)


def derive_paragraph_line_height(
    lines: Sequence[ParagraphLine],
    block_height: float,
    config: Optional[LayoutConfig] = None,
) -> float:
    """
    Estimate a paragraph's line-height ratio.

    Single line: mean of the line's own ratio, height/fontSize and
    blockHeight/fontSize (finite positive candidates only).
    Multiple lines: mean vertical step blended 50/50 with
    blockHeight/lineCount, both over fontSize.

    Returns:
        Ratio clamped to [min_line_height, max_line_height]
    """
    config = config or LayoutConfig()
    default = config.default_line_height

    def clamp(value: float) -> float:
        return clamp_line_height(value, default, config.min_line_height, config.max_line_height)

    if not lines:
        return clamp(default)

    font_size = lines[0].font_size or 1.0

    with np.errstate(divide="ignore", invalid="ignore"):
        if len(lines) == 1:
            single = lines[0]
            candidates = np.array(
                [single.line_height, single.height / font_size, block_height / font_size],
                dtype=float,
            )
            candidates = candidates[np.isfinite(candidates) & (candidates > 0)]
            estimate = float(candidates.mean()) if candidates.size else default
            return clamp(estimate)

        ordered = sorted(lines, key=lambda ln: ln.y)
        steps = np.diff([ln.y for ln in ordered])
        steps = steps[steps > 0]

        if steps.size:
            avg_step = float(steps.mean())
        else:
            avg_step = block_height / max(len(lines) - 1, 1)
        avg_per_line = block_height / len(lines)
        blended = (avg_step / font_size + avg_per_line / font_size) / 2

    return clamp(blended if math.isfinite(blended) else default)


def _continues_paragraph(prev: ParagraphLine, cur: ParagraphLine, config: LayoutConfig) -> bool:
    max_font_size = max(prev.font_size, cur.font_size)
    align_threshold = max(config.align_tolerance, max_font_size * config.align_font_ratio)
    aligned = abs(prev.min_x - cur.min_x) <= align_threshold

    same_font_size = abs(prev.font_size - cur.font_size) <= config.font_size_tolerance
    same_color = prev.fill == cur.fill
    # TODO: abbreviations such as "Dr." still force a break here.
    hard_break = prev.text.strip().endswith(".")

    gap = cur.y - prev.y
    gap_threshold = max(prev.height, cur.height, max_font_size) + config.gap_tolerance
    close_enough = gap <= gap_threshold

    return aligned and same_font_size and same_color and not hard_break and close_enough


def flush_paragraph(lines: Sequence[ParagraphLine], config: Optional[LayoutConfig] = None) -> ParsedBlock:
    """Build a block from a paragraph's lines."""
    config = config or LayoutConfig()
    min_x = min(ln.min_x for ln in lines)
    max_x = max(ln.max_x for ln in lines)
    min_y = min(ln.y for ln in lines)
    height = max(ln.y + ln.height for ln in lines) - min_y
    first = lines[0]

    return ParsedBlock(
        text="\n".join(ln.text for ln in lines),
        x=min_x,
        y=min_y,
        width=max(0.0, max_x - min_x + config.block_width_calibration),
        height=height,
        font_size=first.font_size,
        font_family=first.font_family,
        font_weight=first.font_weight,
        line_height=derive_paragraph_line_height(lines, height, config),
        fill=first.fill,
    )


def group_paragraphs(
    lines: Sequence[ParagraphLine],
    config: Optional[LayoutConfig] = None,
) -> list[tuple[ParagraphLine, ...]]:
    """Split consecutive lines into paragraph groups."""
    config = config or LayoutConfig()
    groups: list[tuple[ParagraphLine, ...]] = []
    current: tuple[ParagraphLine, ...] = ()

    for line in lines:
        if current and _continues_paragraph(current[-1], line, config):
            current = current + (line,)
        else:
            if current:
                groups.append(current)
            current = (line,)

    if current:
        groups.append(current)
    return groups


def assemble_paragraphs(
    lines: Sequence[ParagraphLine],
    config: Optional[LayoutConfig] = None,
) -> list[ParsedBlock]:
    """
    Assemble finalized lines into paragraph blocks.

    Args:
        lines: Lines sorted top to bottom
        config: Layout thresholds (defaults if None)

    Returns:
        Blocks in line order; a trailing lone line becomes its own block
    """
    config = config or LayoutConfig()
    return [flush_paragraph(group, config) for group in group_paragraphs(lines, config)]


def reconstruct_blocks(
    items: Iterable[TextItem],
    config: Optional[LayoutConfig] = None,
) -> list[ParsedBlock]:
    """Run the full layout pipeline over one page's text items."""
    config = config or LayoutConfig()
    lines = cluster_lines(items, config.line_tolerance)
    merged = merge_line_words(lines, config.word_gap_ratio)
    paragraph_lines = [to_paragraph_line(line) for line in merged]
    return assemble_paragraphs(paragraph_lines, config)
