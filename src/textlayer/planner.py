"""
Save-time planning of mask and text draw instructions.

Each overlay becomes an independent pair: an opaque mask rectangle over
the original content, then the replacement text on top. Geometry is
converted from viewport pixels (top-down) to page points (bottom-up).
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .config import SaveConfig
from .fonts import pick_standard_font
from .geometry import normalize_rotation_steps, unrotate_ratio_rect
from .models import (
    DrawInstruction,
    MaskRect,
    Overlay,
    PageExport,
    Rect,
    SavePayload,
    Size,
    TextDraw,
)
from .snapshots import replay_bounds

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#?([0-9a-f]{6})$", re.IGNORECASE)


@dataclass(frozen=True)
class DerivedBounds:
    """An overlay's current geometry in page space."""
    rect_x: float
    rect_y: float  # Bottom-up
    width: float
    height: float
    baseline_y: float  # Bottom-up
    font_size: float

    @property
    def mask(self) -> MaskRect:
        return MaskRect(self.rect_x, self.rect_y, self.width, self.height)


def _finite(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def clamp01(value) -> float:
    if not _finite(value):
        return 0.0
    return min(1.0, max(0.0, float(value)))


def hex_to_rgb(value: Optional[str]) -> tuple[float, float, float]:
    """Parse ``#rrggbb`` into a 0-1 RGB triple; anything else is black."""
    match = _HEX_COLOR.match((value or "").strip())
    if not match:
        return (0.0, 0.0, 0.0)
    number = int(match.group(1), 16)
    return (
        ((number >> 16) & 255) / 255,
        ((number >> 8) & 255) / 255,
        (number & 255) / 255,
    )


def _to_bottom_up(rect: Rect, page_height: float) -> MaskRect:
    return MaskRect(
        rect_x=rect.left,
        rect_y=page_height - (rect.top + rect.height),
        width=rect.width,
        height=rect.height,
    )


def derive_bounds(
    overlay: Overlay,
    page: PageExport,
    page_width: float,
    page_height: float,
    config: Optional[SaveConfig] = None,
) -> Optional[DerivedBounds]:
    """
    Convert an overlay's current viewport rectangle into page space.

    Returns:
        DerivedBounds, or None when the viewport or the overlay is degenerate
    """
    config = config or SaveConfig()
    viewport_width = page.width if _finite(page.width) and page.width else page_width
    viewport_height = page.height if _finite(page.height) and page.height else page_height
    if not (_finite(viewport_width) and _finite(viewport_height)):
        return None
    if viewport_width <= 0 or viewport_height <= 0:
        return None

    left_ratio = clamp01(overlay.left / viewport_width if _finite(overlay.left) else math.nan)
    top_ratio = clamp01(overlay.top / viewport_height if _finite(overlay.top) else math.nan)
    width_ratio = clamp01(overlay.width / viewport_width if _finite(overlay.width) else math.nan)
    height_ratio = clamp01(overlay.height / viewport_height if _finite(overlay.height) else math.nan)

    if width_ratio <= 0 or height_ratio <= 0:
        return None

    normalized = unrotate_ratio_rect(
        Rect(left_ratio, top_ratio, width_ratio, height_ratio),
        normalize_rotation_steps(page.rotation),
    )

    left = normalized.left * page_width
    top = normalized.top * page_height
    width = normalized.width * page_width
    height = normalized.height * page_height
    if width <= 0 or height <= 0:
        return None

    vertical_scale = page_height / viewport_height
    scaled = overlay.font_size * vertical_scale if _finite(overlay.font_size) else math.nan
    if not _finite(scaled) or scaled == 0:
        scaled = config.fallback_font_size
    font_size = max(config.min_font_size, scaled)

    return DerivedBounds(
        rect_x=left,
        rect_y=page_height - (top + height),
        width=width,
        height=height,
        baseline_y=page_height - (top + font_size),
        font_size=font_size,
    )


def compute_mask_bounds(
    overlay: Overlay,
    page: PageExport,
    page_width: float,
    page_height: float,
) -> Optional[MaskRect]:
    """Mask rectangle replayed from the overlay's original-bounds snapshot."""
    if overlay.original_bounds is None:
        return None
    rect = replay_bounds(overlay.original_bounds, page.rotation, page_width, page_height)
    if rect is None:
        return None
    return _to_bottom_up(rect, page_height)


def resolve_line_height(ratio, config: Optional[SaveConfig] = None) -> float:
    config = config or SaveConfig()
    return float(ratio) if _finite(ratio) and ratio > 0 else config.default_line_height


def plan_overlay(
    overlay: Overlay,
    page: PageExport,
    page_width: float,
    page_height: float,
    config: Optional[SaveConfig] = None,
) -> Optional[DrawInstruction]:
    """
    Plan the mask + text pair for one overlay.

    Returns:
        DrawInstruction, or None when the overlay is blank or degenerate
    """
    config = config or SaveConfig()
    if not isinstance(overlay.text, str) or not overlay.text.strip():
        return None

    bounds = derive_bounds(overlay, page, page_width, page_height, config)
    if bounds is None:
        logger.debug("Skipping overlay on page %s: degenerate geometry", page.page_number)
        return None

    mask = compute_mask_bounds(overlay, page, page_width, page_height) or bounds.mask
    weight = "bold" if overlay.font_weight == "bold" else "normal"
    opacity = clamp01(overlay.opacity) if _finite(overlay.opacity) else 1.0

    text = TextDraw(
        x=bounds.rect_x,
        y=bounds.baseline_y,
        size=bounds.font_size,
        line_height=bounds.font_size * resolve_line_height(overlay.line_height, config),
        max_width=bounds.width,
        font=pick_standard_font(overlay.font_family, weight),
        color=hex_to_rgb(overlay.fill),
        text=overlay.text.replace("\r\n", "\n"),
        opacity=opacity,
    )
    return DrawInstruction(page_number=page.page_number, mask=mask, text=text)


def plan_page(
    page: PageExport,
    page_width: float,
    page_height: float,
    config: Optional[SaveConfig] = None,
) -> list[DrawInstruction]:
    """Plan every drawable overlay of one page."""
    instructions = []
    for overlay in page.overlays:
        instruction = plan_overlay(overlay, page, page_width, page_height, config)
        if instruction is not None:
            instructions.append(instruction)

    skipped = len(page.overlays) - len(instructions)
    if skipped:
        logger.info("Page %s: skipped %d of %d overlays", page.page_number, skipped, len(page.overlays))
    return instructions


def page_index(page_number) -> Optional[int]:
    """0-based document index for a 1-based page number, None if invalid."""
    if not _finite(page_number):
        return None
    return max(0, math.floor(page_number - 1))


def plan_save(
    payload: SavePayload,
    page_sizes: Mapping[int, Size],
    config: Optional[SaveConfig] = None,
) -> list[DrawInstruction]:
    """
    Plan all drawing for a save, in ascending page order.

    Args:
        payload: Exported overlay state of every page
        page_sizes: Intrinsic page size keyed by 0-based page index
        config: Save configuration (defaults if None)

    Returns:
        Instructions for every overlay that can be drawn
    """
    instructions: list[DrawInstruction] = []
    pages = sorted(
        (p for p in payload.pages if page_index(p.page_number) is not None),
        key=lambda p: p.page_number,
    )
    for page in pages:
        size = page_sizes.get(page_index(page.page_number))
        if size is None:
            logger.warning("Page %s is not in the document; skipping", page.page_number)
            continue
        instructions.extend(plan_page(page, size.width, size.height, config))
    return instructions
