"""Command line interface for textlayer."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .apply import SaveError, apply_overlays_to_file
from .output import pages_to_json, payload_to_dict, write_json
from .parser import ExtractionError, parse_document
from .surface import seed_payload


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """textlayer - rebuild, edit and rewrite PDF text blocks."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@main.command()
@click.argument("pdf_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    help="Output JSON path (default: stdout)"
)
@click.option(
    "--workers", "-w",
    type=int,
    default=1,
    help="Pages reconstructed in parallel (default: 1)"
)
@click.option(
    "--progress", "-p",
    is_flag=True,
    help="Show progress bar during parsing"
)
def parse(pdf_path: Path, output: Path | None, workers: int, progress: bool):
    """
    Reconstruct paragraph blocks from a PDF.

    PDF_PATH is the path to the input PDF file.
    """
    progress_bar = None
    try:
        def progress_callback(page_number, total):
            nonlocal progress_bar
            if progress_bar is None:
                progress_bar = click.progressbar(length=total, label="Parsing", file=sys.stderr)
            progress_bar.update(1)

        pages = parse_document(
            pdf_path,
            max_workers=workers,
            progress_callback=progress_callback if progress else None,
        )
        if progress_bar:
            progress_bar.render_finish()

        data = pages_to_json(pages)
        if output:
            write_json(data, output)
            total_blocks = sum(len(p.blocks) for p in pages)
            click.echo(f"Parsed {total_blocks} blocks from {len(pages)} pages to {output}", err=True)
        else:
            write_json(data, sys.stdout)
            click.echo()

    except ExtractionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("pdf_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    help="Output JSON path (default: stdout)"
)
@click.option(
    "--zoom", "-z",
    type=float,
    default=1.0,
    help="Viewport zoom the overlays are laid out at (default: 1.0)"
)
@click.option(
    "--rotation", "-r",
    type=float,
    default=0,
    help="Viewport rotation in degrees (default: 0)"
)
def export(pdf_path: Path, output: Path | None, zoom: float, rotation: float):
    """
    Write an editable export payload with one overlay per parsed block.

    PDF_PATH is the path to the input PDF file. Edit the payload's text
    and pass it to the save command.
    """
    try:
        pages = parse_document(pdf_path)
    except ExtractionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    payload = seed_payload(pages, zoom=zoom, rotation=rotation, file_name=pdf_path.name)
    data = payload_to_dict(payload)
    if output:
        write_json(data, output)
        click.echo(f"Exported {payload.total_overlays} overlays to {output}", err=True)
    else:
        write_json(data, sys.stdout)
        click.echo()


@main.command()
@click.argument("pdf_path", type=click.Path(exists=True, path_type=Path))
@click.argument("payload_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output PDF path"
)
def save(pdf_path: Path, payload_path: Path, output: Path):
    """
    Write edited overlays from a JSON export payload onto a PDF.

    PDF_PATH is the original PDF. PAYLOAD_PATH is the export payload JSON.
    """
    try:
        count = apply_overlays_to_file(pdf_path, payload_path, output)
        click.echo(f"Applied {count} overlays to {output}", err=True)
    except SaveError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option(
    "--host",
    default="127.0.0.1",
    help="Host to bind to (default: 127.0.0.1)"
)
@click.option(
    "--port",
    default=8000,
    type=int,
    help="Port to bind to (default: 8000)"
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload for development"
)
def serve(host: str, port: int, reload: bool):
    """Start the FastAPI REST server."""
    import uvicorn

    click.echo(f"Starting textlayer API server at http://{host}:{port}")
    click.echo("API docs available at /docs")

    uvicorn.run(
        "textlayer.api:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
