"""Output formatters for parse results and export payloads."""

import json
from pathlib import Path
from typing import Optional, TextIO

from .models import OriginalBounds, Overlay, PageExport, ParsedBlock, ParsedPage, SavePayload


def block_to_dict(block: ParsedBlock) -> dict:
    return {
        "text": block.text,
        "x": block.x,
        "y": block.y,
        "width": block.width,
        "height": block.height,
        "fontSize": block.font_size,
        "fontFamily": block.font_family,
        "fontWeight": block.font_weight,
        "lineHeight": block.line_height,
        "fill": block.fill,
    }


def page_to_dict(page: ParsedPage) -> dict:
    return {
        "pageNumber": page.page_number,
        "width": page.width,
        "height": page.height,
        "blocks": [block_to_dict(b) for b in page.blocks],
    }


def pages_to_json(pages: list[ParsedPage]) -> dict:
    """
    Build the parse response document.

    JSON structure:
    {
        "pages": [
            {
                "pageNumber": 1,
                "width": 612.0,
                "height": 792.0,
                "blocks": [...]
            }
        ]
    }
    """
    return {"pages": [page_to_dict(p) for p in pages]}


def _bounds_to_dict(bounds: Optional[OriginalBounds]) -> Optional[dict]:
    if bounds is None:
        return None
    return {
        "leftRatio": bounds.left_ratio,
        "topRatio": bounds.top_ratio,
        "widthRatio": bounds.width_ratio,
        "heightRatio": bounds.height_ratio,
        "captureRotation": bounds.capture_rotation,
    }


def overlay_to_dict(overlay: Overlay) -> dict:
    data = {
        "text": overlay.text,
        "left": overlay.left,
        "top": overlay.top,
        "width": overlay.width,
        "height": overlay.height,
        "fontSize": overlay.font_size,
        "fontFamily": overlay.font_family,
        "fontWeight": overlay.font_weight,
        "lineHeight": overlay.line_height,
        "fill": overlay.fill,
        "opacity": overlay.opacity,
    }
    bounds = _bounds_to_dict(overlay.original_bounds)
    if bounds is not None:
        data["originalBounds"] = bounds
    return data


def page_export_to_dict(page: PageExport) -> dict:
    return {
        "pageNumber": page.page_number,
        "width": page.width,
        "height": page.height,
        "rotation": page.rotation,
        "overlays": [overlay_to_dict(o) for o in page.overlays],
    }


def payload_to_dict(payload: SavePayload) -> dict:
    """Serialize a save payload in the camelCase wire shape."""
    data = {"pages": [page_export_to_dict(p) for p in payload.pages]}
    if payload.file_name is not None:
        data["fileName"] = payload.file_name
    return data


def write_json(data: dict, output: str | Path | TextIO, indent: int = 2) -> None:
    """Write a JSON document to a path or an open text stream."""
    if isinstance(output, (str, Path)):
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
    else:
        json.dump(data, output, indent=indent, ensure_ascii=False)
