"""Tests for the REST API."""

import json

import pytest
from fastapi.testclient import TestClient

from textlayer.api import app
from textlayer.config import get_config


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(get_config().server, "preview_dir", str(tmp_path / "previews"))
    return TestClient(app)


@pytest.fixture
def payload():
    return {
        "fileName": "Quarterly Report.pdf",
        "pages": [{
            "pageNumber": 1,
            "width": 612,
            "height": 792,
            "rotation": 0,
            "overlays": [{
                "text": "Goodbye",
                "left": 72,
                "top": 88,
                "width": 200,
                "height": 16,
                "fontSize": 12,
                "originalBounds": {
                    "leftRatio": 0.1,
                    "topRatio": 0.1,
                    "widthRatio": 0.3,
                    "heightRatio": 0.02,
                    "captureRotation": 0,
                },
            }],
        }],
    }


def pdf_file(data: bytes):
    return {"file": ("sample.pdf", data, "application/pdf")}


class TestInfo:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "textlayer API"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestParseEndpoint:

    def test_parse(self, client, sample_pdf_bytes):
        response = client.post("/parse", files=pdf_file(sample_pdf_bytes))
        assert response.status_code == 200
        page = response.json()["pages"][0]
        assert page["pageNumber"] == 1
        assert page["width"] == 612
        block = page["blocks"][0]
        assert block["text"] == "Hello World"
        assert set(block) == {
            "text", "x", "y", "width", "height", "fontSize",
            "fontFamily", "fontWeight", "lineHeight", "fill",
        }

    def test_empty_upload(self, client):
        response = client.post("/parse", files=pdf_file(b""))
        assert response.status_code == 400

    def test_unreadable_pdf(self, client):
        response = client.post("/parse", files=pdf_file(b"not a pdf"))
        assert response.status_code == 500
        assert "Unable to open document" in response.json()["detail"]


class TestSaveEndpoint:

    def test_download(self, client, sample_pdf_bytes, payload):
        response = client.post(
            "/save",
            params={"mode": "download"},
            files=pdf_file(sample_pdf_bytes),
            data={"payload": json.dumps(payload)},
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="Quarterly-Report-edited.pdf"' in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_preview_then_fetch(self, client, sample_pdf_bytes, payload):
        response = client.post(
            "/save",
            files=pdf_file(sample_pdf_bytes),
            data={"payload": json.dumps(payload)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["modified"] is True
        assert body["fileName"] == "Quarterly-Report-edited.pdf"
        assert body["previewUrl"] == f"/previews/{body['id']}.pdf"

        preview = client.get(body["previewUrl"])
        assert preview.status_code == 200
        assert preview.content.startswith(b"%PDF")

    def test_nothing_to_draw(self, client, sample_pdf_bytes, payload):
        payload["pages"][0]["overlays"][0]["text"] = " "
        response = client.post(
            "/save",
            files=pdf_file(sample_pdf_bytes),
            data={"payload": json.dumps(payload)},
        )
        assert response.status_code == 200
        assert response.json()["modified"] is False

    @pytest.mark.parametrize("raw", ["{broken", "[]", json.dumps({"pages": [{"width": 1}]})])
    def test_invalid_payload(self, client, sample_pdf_bytes, raw):
        response = client.post("/save", files=pdf_file(sample_pdf_bytes), data={"payload": raw})
        assert response.status_code == 400

    def test_unreadable_pdf(self, client, payload):
        response = client.post(
            "/save",
            files=pdf_file(b"garbage"),
            data={"payload": json.dumps(payload)},
        )
        assert response.status_code == 500

    def test_unknown_preview(self, client):
        assert client.get("/previews/deadbeef.pdf").status_code == 404
        assert client.get("/previews/..%2Fsecret.pdf").status_code == 404
