"""FastAPI REST API for textlayer."""

import asyncio
import json
import logging
import tempfile
import uuid
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from . import __version__
from .apply import SaveError, apply_overlays, parse_save_payload, sanitize_file_name
from .config import get_config
from .models import ParsedPage
from .parser import ExtractionError, parse_document

logger = logging.getLogger(__name__)

# Thread pool for CPU-bound parse/save work
_executor = ThreadPoolExecutor(max_workers=get_config().server.max_workers)


app = FastAPI(
    title="textlayer API",
    description="Rebuild PDF text into editable blocks and write edits back",
    version=__version__,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlockResponse(CamelModel):
    """A reconstructed paragraph in page units."""

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


class PageResponse(CamelModel):
    """All blocks of one page."""

    page_number: int
    width: float
    height: float
    blocks: list[BlockResponse]


class ParseResponse(CamelModel):
    """Complete parse result."""

    pages: list[PageResponse]


class OriginalBoundsModel(CamelModel):
    left_ratio: float
    top_ratio: float
    width_ratio: float
    height_ratio: float
    capture_rotation: float = 0.0


class OverlayModel(CamelModel):
    """An editable overlay in viewport pixels."""

    text: str = ""
    left: float
    top: float
    width: float
    height: float
    font_size: float = 16.0
    font_family: str = "Helvetica"
    font_weight: str = "normal"
    line_height: float = 1.2
    fill: str = "#000000"
    opacity: float = 1.0
    original_bounds: Optional[OriginalBoundsModel] = None


class PageExportModel(CamelModel):
    page_number: int
    width: float = Field(description="Viewport width (pixels)")
    height: float = Field(description="Viewport height (pixels)")
    rotation: float = 0.0
    overlays: list[OverlayModel] = Field(default_factory=list)


class SavePayloadModel(CamelModel):
    """Export payload sent by the editing surface."""

    file_name: Optional[str] = None
    pages: list[PageExportModel] = Field(default_factory=list)


class SaveMode(str, Enum):
    PREVIEW = "preview"
    DOWNLOAD = "download"


class PreviewResponse(CamelModel):
    id: str
    preview_url: str
    file_name: str
    modified: bool


class HealthResponse(BaseModel):
    status: str
    version: str


def pages_to_response(pages: list[ParsedPage]) -> ParseResponse:
    """Convert internal ParsedPage models to the API response."""
    return ParseResponse(
        pages=[
            PageResponse(
                page_number=page.page_number,
                width=page.width,
                height=page.height,
                blocks=[
                    BlockResponse(
                        text=b.text,
                        x=b.x,
                        y=b.y,
                        width=b.width,
                        height=b.height,
                        font_size=b.font_size,
                        font_family=b.font_family,
                        font_weight=b.font_weight,
                        line_height=b.line_height,
                        fill=b.fill,
                    )
                    for b in page.blocks
                ],
            )
            for page in pages
        ]
    )


def preview_dir() -> Path:
    configured = get_config().server.preview_dir
    path = Path(configured) if configured else Path(tempfile.gettempdir()) / "textlayer" / "previews"
    path.mkdir(parents=True, exist_ok=True)
    return path


async def _read_pdf(file: UploadFile) -> bytes:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file provided")
    return content


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health."""
    return HealthResponse(status="ok", version=__version__)


@app.post("/parse", response_model=ParseResponse)
async def parse_pdf(file: UploadFile = File(..., description="PDF file to parse")):
    """
    Reconstruct paragraph blocks from every page of a PDF.

    Coordinates are page units with a top-left origin.
    """
    content = await _read_pdf(file)
    loop = asyncio.get_running_loop()
    try:
        pages = await loop.run_in_executor(_executor, parse_document, content)
    except ExtractionError as e:
        logger.error("/parse failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return pages_to_response(pages)


@app.post("/save")
async def save_pdf(
    file: UploadFile = File(..., description="Original PDF"),
    payload: str = Form(..., description="Export payload (JSON)"),
    mode: SaveMode = Query(SaveMode.PREVIEW, description="preview stores the result, download returns it"),
):
    """
    Mask original text and draw edited overlays onto the PDF.

    The save either fully succeeds or fails with an error message.
    """
    content = await _read_pdf(file)

    try:
        model = SavePayloadModel.model_validate_json(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid export payload: {e.errors()[0]['msg']}")

    export = parse_save_payload(json.loads(model.model_dump_json(by_alias=True)))

    loop = asyncio.get_running_loop()
    try:
        result = await loop.run_in_executor(_executor, apply_overlays, content, export)
    except SaveError as e:
        logger.error("/save failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    download_name = f"{sanitize_file_name(export.file_name)}-edited.pdf"

    if mode == SaveMode.DOWNLOAD:
        return Response(
            content=result.data,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{download_name}"'},
        )

    token = uuid.uuid4().hex
    (preview_dir() / f"{token}.pdf").write_bytes(result.data)
    return PreviewResponse(
        id=token,
        preview_url=f"/previews/{token}.pdf",
        file_name=download_name,
        modified=result.modified,
    ).model_dump(by_alias=True)


@app.get("/previews/{name}")
async def get_preview(name: str):
    """Serve a previously stored preview."""
    token = name.removesuffix(".pdf")
    if not token.isalnum():
        raise HTTPException(status_code=404, detail="Preview not found")
    path = preview_dir() / f"{token}.pdf"
    if not path.exists():
        raise HTTPException(status_code=404, detail="Preview not found")
    return FileResponse(path, media_type="application/pdf")


@app.get("/")
async def root():
    """API root - returns basic info."""
    return {
        "name": "textlayer API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
