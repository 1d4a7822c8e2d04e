"""Per-overlay bounds snapshots and their replay into page space."""

import math
from typing import Iterator, Optional

from .geometry import (
    bounds_from_points,
    normalize_rotation_steps,
    rect_corners,
    rotate_points,
    rotation_delta,
    viewport_to_page_ratios,
)
from .models import OriginalBounds, Rect, Size


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def capture_bounds(rect: Rect, viewport: Size, rotation: float) -> OriginalBounds:
    """
    Snapshot a viewport rectangle as page-relative ratios.

    The rectangle is normalized by the viewport and un-rotated, so the
    stored ratios describe the page as if it were shown unrotated.

    Args:
        rect: Overlay rectangle in viewport pixels
        viewport: Viewport size at capture time
        rotation: Viewport rotation in degrees at capture time

    Returns:
        OriginalBounds with capture_rotation in whole quarter turns (degrees)
    """
    if viewport.width <= 0 or viewport.height <= 0:
        raise ValueError(f"Cannot capture bounds in an empty viewport: {viewport}")
    steps = normalize_rotation_steps(rotation)
    ratios = viewport_to_page_ratios(rect, viewport, steps)
    return OriginalBounds(
        left_ratio=ratios.left,
        top_ratio=ratios.top,
        width_ratio=ratios.width,
        height_ratio=ratios.height,
        capture_rotation=steps * 90,
    )


def replay_bounds(
    bounds: OriginalBounds,
    current_rotation: float,
    page_width: float,
    page_height: float,
) -> Optional[Rect]:
    """
    Replay a snapshot against the page's intrinsic size.

    The snapshot's corners are rotated by the quarter turns elapsed since
    capture, re-bounded and scaled to page units.

    Returns:
        Page-space rectangle (top-down Y), or None when the snapshot is
        not finite or collapses to zero area
    """
    values = (bounds.left_ratio, bounds.top_ratio, bounds.width_ratio, bounds.height_ratio)
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        return None

    left = _clamp01(bounds.left_ratio)
    top = _clamp01(bounds.top_ratio)
    right = _clamp01(bounds.left_ratio + bounds.width_ratio)
    bottom = _clamp01(bounds.top_ratio + bounds.height_ratio)

    delta = rotation_delta(
        normalize_rotation_steps(bounds.capture_rotation),
        normalize_rotation_steps(current_rotation),
    )
    corners = rect_corners(Rect(left, top, right - left, bottom - top))
    normalized = bounds_from_points(rotate_points(corners, delta))

    width = normalized.width * page_width
    height = normalized.height * page_height
    if width <= 0 or height <= 0:
        return None

    return Rect(normalized.left * page_width, normalized.top * page_height, width, height)


class BoundsSnapshotStore:
    """
    Snapshots keyed by overlay id.

    A snapshot is taken the first time an overlay is activated and only
    replaced by an explicit recapture; replay reads it and never writes.
    """

    def __init__(self):
        self._snapshots: dict[str, OriginalBounds] = {}

    def __contains__(self, overlay_id: str) -> bool:
        return overlay_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[str]:
        return iter(self._snapshots)

    def get(self, overlay_id: str) -> Optional[OriginalBounds]:
        return self._snapshots.get(overlay_id)

    def capture(self, overlay_id: str, rect: Rect, viewport: Size, rotation: float) -> OriginalBounds:
        """Snapshot an overlay unless it already has one; return the stored snapshot."""
        existing = self._snapshots.get(overlay_id)
        if existing is not None:
            return existing
        return self.recapture(overlay_id, rect, viewport, rotation)

    def recapture(self, overlay_id: str, rect: Rect, viewport: Size, rotation: float) -> OriginalBounds:
        """Replace an overlay's snapshot with its current geometry."""
        snapshot = capture_bounds(rect, viewport, rotation)
        self._snapshots[overlay_id] = snapshot
        return snapshot

    def discard(self, overlay_id: str) -> None:
        self._snapshots.pop(overlay_id, None)

