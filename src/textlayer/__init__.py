"""textlayer - rebuild PDF text into editable blocks and write edits back."""

__version__ = "0.1.0"

from .models import (
    DrawInstruction,
    OriginalBounds,
    Overlay,
    PageExport,
    ParsedBlock,
    ParsedPage,
    SavePayload,
)
from .parser import parse_document, parse_page
from .apply import apply_overlays
from .surface import PageSurface

__all__ = [
    "DrawInstruction",
    "OriginalBounds",
    "Overlay",
    "PageExport",
    "ParsedBlock",
    "ParsedPage",
    "SavePayload",
    "parse_document",
    "parse_page",
    "apply_overlays",
    "PageSurface",
]
