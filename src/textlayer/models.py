"""Data models for textlayer."""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional


DEFAULT_LINE_HEIGHT = 1.2
COLOR_FALLBACK = "#1a1a1a"


class Size(NamedTuple):
    """Width and height of a page or viewport."""
    width: float
    height: float


class Rect(NamedTuple):
    """Axis-aligned rectangle, origin top-left (pixels, points or ratios)."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class TextItem:
    """A single glyph, or a word merged from glyphs, in page units."""

    text: str
    x: float  # Left edge
    y: float  # Top edge
    width: float
    height: float
    font_size: float
    font_family: str
    font_weight: str  # "normal" or "bold"
    fill: str  # "#rrggbb"
    line_height: float = DEFAULT_LINE_HEIGHT

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class Line:
    """Items sharing a visual line, sorted left to right."""

    y: float  # Representative top
    items: tuple[TextItem, ...] = ()


@dataclass(frozen=True)
class ParagraphLine:
    """A finalized line with its dominant style."""

    text: str
    min_x: float
    max_x: float
    y: float
    height: float
    font_size: float
    font_family: str
    font_weight: str
    fill: str
    line_height: float = DEFAULT_LINE_HEIGHT


@dataclass(frozen=True)
class ParsedBlock:
    """A reconstructed paragraph of original page text."""

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float
    font_family: str
    font_weight: str
    line_height: float
    fill: str


@dataclass
class ParsedPage:
    """All blocks reconstructed from one page."""

    page_number: int  # 1-based
    width: float = 0.0  # Page width in points
    height: float = 0.0  # Page height in points
    blocks: list[ParsedBlock] = field(default_factory=list)


@dataclass(frozen=True)
class OriginalBounds:
    """
    Page-relative bounds of an overlay captured at a rotation epoch.

    Ratios are relative to the un-rotated page as seen at capture time
    and capture_rotation is in degrees (a multiple of 90).
    """

    left_ratio: float
    top_ratio: float
    width_ratio: float
    height_ratio: float
    capture_rotation: float = 0.0


@dataclass
class Overlay:
    """An editable text box in viewport pixel space."""

    text: str
    left: float
    top: float
    width: float
    height: float
    font_size: float = 16.0
    font_family: str = "Helvetica"
    font_weight: str = "normal"
    line_height: float = DEFAULT_LINE_HEIGHT
    fill: str = "#000000"
    opacity: float = 1.0
    original_bounds: Optional[OriginalBounds] = None

    @property
    def rect(self) -> Rect:
        return Rect(self.left, self.top, self.width, self.height)


@dataclass
class PageExport:
    """Overlay state of one page as exported by the editing surface."""

    page_number: int
    width: float  # Viewport width in pixels
    height: float  # Viewport height in pixels
    rotation: float = 0.0  # Degrees
    overlays: list[Overlay] = field(default_factory=list)


@dataclass
class SavePayload:
    """Everything needed to write edits back to a document."""

    pages: list[PageExport] = field(default_factory=list)
    file_name: Optional[str] = None

    @property
    def total_overlays(self) -> int:
        return sum(len(page.overlays) for page in self.pages)


@dataclass(frozen=True)
class MaskRect:
    """Mask rectangle in page space, bottom-up Y."""

    rect_x: float
    rect_y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextDraw:
    """Text draw geometry in page space, bottom-up Y (first baseline)."""

    x: float
    y: float
    size: float
    line_height: float
    max_width: float
    font: str  # Base-14 font name
    color: tuple[float, float, float]
    text: str
    opacity: float = 1.0


@dataclass(frozen=True)
class DrawInstruction:
    """A mask + text pair for one overlay."""

    page_number: int
    mask: MaskRect
    text: TextDraw
