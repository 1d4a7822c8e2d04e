"""Tests for the command line interface."""

import json

import pymupdf
from click.testing import CliRunner

from textlayer.cli import main


class TestParseCommand:

    def test_writes_json(self, sample_pdf, tmp_path):
        output = tmp_path / "blocks.json"
        result = CliRunner().invoke(main, ["parse", str(sample_pdf), "-o", str(output)])
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["pages"][0]["blocks"][0]["text"] == "Hello World"

    def test_unreadable_pdf(self, tmp_path):
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"not a pdf")
        result = CliRunner().invoke(main, ["parse", str(bad)])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestSaveCommand:

    def test_applies_payload(self, sample_pdf, tmp_path):
        payload = tmp_path / "payload.json"
        payload.write_text(json.dumps({"pages": [{
            "pageNumber": 1, "width": 612, "height": 792,
            "overlays": [{"text": "Goodbye", "left": 72, "top": 88, "width": 200,
                          "height": 16, "fontSize": 12}],
        }]}))
        output = tmp_path / "out.pdf"

        result = CliRunner().invoke(main, ["save", str(sample_pdf), str(payload), "-o", str(output)])
        assert result.exit_code == 0, result.output

        doc = pymupdf.open(str(output))
        try:
            assert "Goodbye" in doc[0].get_text()
        finally:
            doc.close()


class TestExportCommand:

    def test_payload_feeds_save(self, sample_pdf, tmp_path):
        payload = tmp_path / "payload.json"
        runner = CliRunner()
        result = runner.invoke(main, ["export", str(sample_pdf), "-o", str(payload), "--rotation", "90"])
        assert result.exit_code == 0, result.output

        data = json.loads(payload.read_text())
        assert data["fileName"] == "sample.pdf"
        page = data["pages"][0]
        assert (page["width"], page["height"], page["rotation"]) == (792, 612, 90)
        overlay = page["overlays"][0]
        assert overlay["text"] == "Hello World"
        assert overlay["originalBounds"]["captureRotation"] == 90

        output = tmp_path / "out.pdf"
        result = runner.invoke(main, ["save", str(sample_pdf), str(payload), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert "Applied 1 overlays" in result.output
        assert output.read_bytes().startswith(b"%PDF")
