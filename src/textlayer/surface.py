"""
Per-page editing surface.

Holds the overlays of one page in viewport pixel space, keyed by stable
ids, and keeps their geometry consistent when the view is zoomed or
rotated. Snapshots are taken on first activation and travel with the
overlay into the export payload.
"""

import uuid
from dataclasses import replace
from typing import Optional

from .geometry import normalize_rotation_steps, page_to_viewport, replay_rect, rotation_delta, viewport_size
from .metrics import content_bounds, normalize_line_height
from .models import DEFAULT_LINE_HEIGHT, Overlay, PageExport, ParsedPage, Rect, SavePayload, Size
from .snapshots import BoundsSnapshotStore


DEFAULT_OVERLAY_WIDTH = 200.0
DEFAULT_FONT_SIZE = 24.0


class PageSurface:
    """Overlays of one page under the current zoom and rotation."""

    def __init__(
        self,
        page_number: int,
        page_width: float,
        page_height: float,
        zoom: float = 1.0,
        rotation: float = 0,
    ):
        self.page_number = page_number
        self.page_size = Size(page_width, page_height)
        self.zoom = zoom
        self.rotation = normalize_rotation_steps(rotation) * 90
        self.snapshots = BoundsSnapshotStore()
        self._overlays: dict[str, Overlay] = {}

    @property
    def rotation_steps(self) -> int:
        return normalize_rotation_steps(self.rotation)

    @property
    def viewport(self) -> Size:
        return viewport_size(self.page_size, self.zoom, self.rotation_steps)

    def __len__(self) -> int:
        return len(self._overlays)

    def __contains__(self, overlay_id: str) -> bool:
        return overlay_id in self._overlays

    def ids(self) -> list[str]:
        return list(self._overlays)

    def get(self, overlay_id: str) -> Overlay:
        try:
            return self._overlays[overlay_id]
        except KeyError:
            raise KeyError(f"Unknown overlay: {overlay_id}") from None

    def add_overlay(
        self,
        text: str,
        left: float,
        top: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
        font_size: float = DEFAULT_FONT_SIZE,
        font_family: str = "Helvetica",
        font_weight: str = "normal",
        line_height: Optional[float] = None,
        fill: str = "#000000",
        opacity: float = 1.0,
    ) -> str:
        """
        Create an overlay in viewport pixels.

        Missing height is derived from the line count; missing width
        defaults to 200px.

        Returns:
            The new overlay's id
        """
        ratio = normalize_line_height(text, line_height, font_size, height)
        if height is None:
            height = ratio * font_size * max(len(text.splitlines()), 1)
        overlay = Overlay(
            text=text,
            left=left,
            top=top,
            width=DEFAULT_OVERLAY_WIDTH if width is None else width,
            height=height,
            font_size=font_size,
            font_family=font_family,
            font_weight=font_weight,
            line_height=ratio,
            fill=fill,
            opacity=opacity,
        )
        overlay_id = uuid.uuid4().hex
        self._overlays[overlay_id] = overlay
        return overlay_id

    def seed_from_page(self, page: ParsedPage) -> list[str]:
        """Create one overlay per parsed block, mapped into the current viewport."""
        ids = []
        for block in page.blocks:
            rect = page_to_viewport(
                Rect(block.x, block.y, block.width, block.height),
                self.page_size,
                self.zoom,
                self.rotation_steps,
            )
            ids.append(self.add_overlay(
                text=block.text,
                left=rect.left,
                top=rect.top,
                width=rect.width,
                height=rect.height,
                font_size=block.font_size * self.zoom,
                font_family=block.font_family,
                font_weight=block.font_weight,
                line_height=block.line_height,
                fill=block.fill,
            ))
        return ids

    def activate(self, overlay_id: str) -> None:
        """Mark an overlay as selected, snapshotting it the first time."""
        overlay = self.get(overlay_id)
        self.snapshots.capture(overlay_id, overlay.rect, self.viewport, self.rotation)

    def move(self, overlay_id: str, left: float, top: float, recapture: bool = True) -> None:
        overlay = self.get(overlay_id)
        overlay.left, overlay.top = left, top
        if recapture:
            self.snapshots.recapture(overlay_id, overlay.rect, self.viewport, self.rotation)

    def resize(self, overlay_id: str, width: float, height: float) -> None:
        """Resize an overlay, never below the space its text needs."""
        overlay = self.get(overlay_id)
        needed = content_bounds(
            overlay.text,
            overlay.font_size,
            overlay.line_height or DEFAULT_LINE_HEIGHT,
            family=overlay.font_family,
            weight=overlay.font_weight,
        )
        overlay.width = max(width, needed.width)
        overlay.height = max(height, needed.height)

    def retype(self, overlay_id: str, text: str) -> None:
        self.get(overlay_id).text = text

    def delete(self, overlay_id: str) -> None:
        self._overlays.pop(overlay_id, None)
        self.snapshots.discard(overlay_id)

    def set_view(self, zoom: float, rotation: float) -> None:
        """
        Change zoom and rotation, replaying every overlay into the new viewport.

        Snapshots are left untouched.
        """
        old_viewport = self.viewport
        old_steps = self.rotation_steps
        zoom_scale = zoom / self.zoom if self.zoom else 1.0

        self.zoom = zoom
        self.rotation = normalize_rotation_steps(rotation) * 90
        delta = rotation_delta(old_steps, self.rotation_steps)
        new_viewport = self.viewport

        for overlay in self._overlays.values():
            rect = replay_rect(overlay.rect, old_viewport, new_viewport, delta)
            overlay.left, overlay.top, overlay.width, overlay.height = rect
            overlay.font_size *= zoom_scale

    def export(self) -> PageExport:
        """Export overlays and their snapshots for saving."""
        viewport = self.viewport
        overlays = [
            replace(overlay, original_bounds=self.snapshots.get(overlay_id))
            for overlay_id, overlay in self._overlays.items()
        ]
        return PageExport(
            page_number=self.page_number,
            width=viewport.width,
            height=viewport.height,
            rotation=self.rotation,
            overlays=overlays,
        )


def seed_payload(
    pages: list[ParsedPage],
    zoom: float = 1.0,
    rotation: float = 0,
    file_name: Optional[str] = None,
) -> SavePayload:
    """
    Build an export payload with every parsed block as an activated overlay.

    The result is what an editing session would export before any edit,
    so it can be hand-edited and passed back to a save.
    """
    exports = []
    for page in pages:
        surface = PageSurface(page.page_number, page.width, page.height, zoom, rotation)
        for overlay_id in surface.seed_from_page(page):
            surface.activate(overlay_id)
        exports.append(surface.export())
    return SavePayload(pages=exports, file_name=file_name)
