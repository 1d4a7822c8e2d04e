"""Apply edited overlays to a PDF by masking originals and drawing new text."""

import json
import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .config import SaveConfig, get_config
from .models import OriginalBounds, Overlay, PageExport, SavePayload
from .pdf import load_pdf
from .planner import page_index, plan_save

logger = logging.getLogger(__name__)


class SaveError(RuntimeError):
    """The save could not produce an output document."""


@dataclass
class SaveResult:
    """Output of a successful save."""
    data: bytes
    applied: int  # Overlays drawn
    modified: bool


def sanitize_file_name(name: Optional[str], fallback: str = "edited-document") -> str:
    """Reduce a user file name to a safe stem (no extension)."""
    if not name or not name.strip():
        return fallback
    stem = re.sub(r"\.pdf$", "", name.strip(), flags=re.IGNORECASE)
    safe = re.sub(r"-+", "-", re.sub(r"[^a-z0-9\-_]+", "-", stem, flags=re.IGNORECASE))
    return safe or fallback


def _number(value: Any, default: float = math.nan) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_original_bounds(data: Any) -> Optional[OriginalBounds]:
    if not isinstance(data, dict):
        return None
    return OriginalBounds(
        left_ratio=_number(data.get("leftRatio")),
        top_ratio=_number(data.get("topRatio")),
        width_ratio=_number(data.get("widthRatio")),
        height_ratio=_number(data.get("heightRatio")),
        capture_rotation=_number(data.get("captureRotation"), 0.0),
    )


def _parse_overlay(data: dict) -> Overlay:
    return Overlay(
        text=data.get("text") if isinstance(data.get("text"), str) else "",
        left=_number(data.get("left")),
        top=_number(data.get("top")),
        width=_number(data.get("width")),
        height=_number(data.get("height")),
        font_size=_number(data.get("fontSize")),
        font_family=data.get("fontFamily") or "Helvetica",
        font_weight="bold" if data.get("fontWeight") == "bold" else "normal",
        line_height=_number(data.get("lineHeight")),
        fill=data.get("fill") or "#000000",
        opacity=_number(data.get("opacity"), 1.0),
        original_bounds=_parse_original_bounds(data.get("originalBounds")),
    )


def _parse_page(data: dict) -> PageExport:
    overlays = data.get("overlays")
    return PageExport(
        page_number=_number(data.get("pageNumber")),
        width=_number(data.get("width"), 0.0),
        height=_number(data.get("height"), 0.0),
        rotation=_number(data.get("rotation"), 0.0),
        overlays=[_parse_overlay(o) for o in overlays if isinstance(o, dict)] if isinstance(overlays, list) else [],
    )


def parse_save_payload(data: Any) -> SavePayload:
    """
    Parse a camelCase save payload (as sent by the editing surface).

    Malformed overlays and pages are kept with NaN fields so planning
    skips them; only a payload that is not an object is rejected.

    Raises:
        SaveError: If the payload is not a JSON object
    """
    if not isinstance(data, dict):
        raise SaveError("Export payload must be a JSON object")
    pages = data.get("pages")
    file_name = data.get("fileName")
    return SavePayload(
        pages=[_parse_page(p) for p in pages if isinstance(p, dict)] if isinstance(pages, list) else [],
        file_name=file_name if isinstance(file_name, str) else None,
    )


def load_save_payload(path: Path) -> SavePayload:
    """Load a save payload from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SaveError(f"Unable to read export payload {path}: {e}") from e
    return parse_save_payload(data)


def apply_overlays(
    source: str | Path | bytes,
    payload: SavePayload,
    config: Optional[SaveConfig] = None,
) -> SaveResult:
    """
    Mask and redraw every overlay of a save payload onto the document.

    Args:
        source: Original PDF path or bytes
        payload: Exported overlay state
        config: Save configuration (uses global config if None)

    Returns:
        SaveResult with the new document bytes

    Raises:
        SaveError: If the document cannot be loaded, drawn on or serialized
    """
    config = config or get_config().save

    try:
        pdf = load_pdf(source)
    except Exception as e:
        raise SaveError(f"Unable to load source document: {e}") from e

    with pdf:
        instructions = plan_save(payload, pdf.page_sizes(), config)

        try:
            for instruction in instructions:
                index = page_index(instruction.page_number)
                pdf.draw_mask(index, instruction.mask, color=config.mask_color)
                pdf.draw_text(index, instruction.text)
        except Exception as e:
            raise SaveError(f"Unable to draw overlays: {e}") from e

        try:
            data = pdf.to_bytes(deflate=config.deflate)
        except Exception as e:
            raise SaveError(f"Unable to write output document: {e}") from e

    logger.info("Applied %d of %d overlays", len(instructions), payload.total_overlays)
    return SaveResult(data=data, applied=len(instructions), modified=bool(instructions))


def apply_overlays_to_file(
    pdf_path: Path,
    payload_path: Path,
    output_path: Path,
    config: Optional[SaveConfig] = None,
) -> int:
    """
    File-to-file variant of apply_overlays.

    Returns:
        Number of overlays applied
    """
    result = apply_overlays(pdf_path, load_save_payload(payload_path), config)
    Path(output_path).write_bytes(result.data)
    return result.applied
