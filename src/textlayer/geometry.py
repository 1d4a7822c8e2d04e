"""
Rotation-aware mapping between page space and viewport space.

All rotation reasoning happens on the unit square: a pixel rectangle is
normalized to viewport ratios, its four corners are rotated by a number of
quarter turns, the axis-aligned bounds of the rotated corners are taken and
scaled to the target size. Quarter turns map corners onto corners, so the
rotated bounds are exact.
"""

import math
from typing import Iterable

import numpy as np

from .models import Rect, Size


# steps -> (matrix, offset) such that rotate(p) = M @ p + offset
#   0: (x, y)   1: (1 - y, x)   2: (1 - x, 1 - y)   3: (y, 1 - x)
_ROTATIONS: dict[int, tuple[np.ndarray, np.ndarray]] = {
    0: (np.array([[1.0, 0.0], [0.0, 1.0]]), np.array([0.0, 0.0])),
    1: (np.array([[0.0, -1.0], [1.0, 0.0]]), np.array([1.0, 0.0])),
    2: (np.array([[-1.0, 0.0], [0.0, -1.0]]), np.array([1.0, 1.0])),
    3: (np.array([[0.0, 1.0], [-1.0, 0.0]]), np.array([0.0, 1.0])),
}


def normalize_rotation_steps(degrees: float) -> int:
    """Convert any degree value into quarter-turn steps in [0, 3]."""
    try:
        degrees = float(degrees)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(degrees):
        return 0
    return math.floor(degrees / 90 + 0.5) % 4


def rotation_delta(from_steps: int, to_steps: int) -> int:
    """Quarter turns needed to go from one rotation epoch to another."""
    return (to_steps - from_steps + 4) % 4


def rotate_points(points: np.ndarray, steps: int) -> np.ndarray:
    """Rotate an (N, 2) array of unit-square points by quarter turns."""
    matrix, offset = _ROTATIONS[steps % 4]
    return np.asarray(points, dtype=float) @ matrix.T + offset


def rect_corners(rect: Rect) -> np.ndarray:
    """Corners of a rectangle, clockwise from top-left."""
    return np.array([
        (rect.left, rect.top),
        (rect.right, rect.top),
        (rect.right, rect.bottom),
        (rect.left, rect.bottom),
    ], dtype=float)


def bounds_from_points(points: Iterable) -> Rect:
    """Axis-aligned bounds of a set of points."""
    pts = np.asarray(list(points), dtype=float)
    min_x, min_y = pts.min(axis=0)
    max_x, max_y = pts.max(axis=0)
    return Rect(
        float(min_x),
        float(min_y),
        float(max(0.0, max_x - min_x)),
        float(max(0.0, max_y - min_y)),
    )


def rotate_ratio_rect(rect: Rect, steps: int) -> Rect:
    """Rotate a rectangle in unit-square ratios and re-bound it."""
    if steps % 4 == 0:
        return rect
    return bounds_from_points(rotate_points(rect_corners(rect), steps))


def pixel_rect_to_ratios(rect: Rect, size: Size) -> Rect:
    """Normalize a pixel rectangle by a viewport size."""
    return Rect(
        rect.left / size.width,
        rect.top / size.height,
        rect.width / size.width,
        rect.height / size.height,
    )


def ratios_to_pixel_rect(ratios: Rect, size: Size) -> Rect:
    """Scale a ratio rectangle to a target size."""
    return Rect(
        ratios.left * size.width,
        ratios.top * size.height,
        ratios.width * size.width,
        ratios.height * size.height,
    )


def replay_rect(rect: Rect, from_viewport: Size, to_viewport: Size, delta_steps: int) -> Rect:
    """
    Carry a pixel rectangle from one viewport to another.

    Args:
        rect: Rectangle in from_viewport pixels
        from_viewport: Size the rectangle was expressed in
        to_viewport: Size of the target viewport
        delta_steps: Quarter turns between the two viewports

    Returns:
        Rectangle in to_viewport pixels
    """
    ratios = pixel_rect_to_ratios(rect, from_viewport)
    return ratios_to_pixel_rect(rotate_ratio_rect(ratios, delta_steps), to_viewport)


def viewport_size(page: Size, zoom: float, steps: int) -> Size:
    """Pixel size of a page rendered at zoom with the given rotation."""
    width, height = page.width * zoom, page.height * zoom
    if steps % 2:
        width, height = height, width
    return Size(width, height)


def page_to_viewport(rect: Rect, page: Size, zoom: float, steps: int) -> Rect:
    """Map a page-space rectangle into viewport pixels."""
    return replay_rect(rect, page, viewport_size(page, zoom, steps), steps)


def unrotate_ratio_rect(ratios: Rect, steps: int) -> Rect:
    """Undo a viewport rotation on a ratio rectangle, giving page-relative ratios."""
    return rotate_ratio_rect(ratios, (4 - steps % 4) % 4)


def viewport_to_page_ratios(rect: Rect, viewport: Size, steps: int) -> Rect:
    """Express a viewport pixel rectangle as ratios of the un-rotated page."""
    return unrotate_ratio_rect(pixel_rect_to_ratios(rect, viewport), steps)
