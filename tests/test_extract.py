"""Tests for glyph normalization."""

import math

import pytest

from textlayer.config import LayoutConfig
from textlayer.extract import (
    color_to_hex,
    glyph_to_text_item,
    glyphs_to_text_items,
    rgb_to_hex,
)
from textlayer.glyphs import GlyphRecord, Quad, walk_rawdict


def glyph(char, x=10.0, y=20.0, size=12.0, font="Helvetica", color=(0, 0, 0), quad=True):
    return GlyphRecord(
        char=char,
        origin=(x, y + size),
        font=font,
        size=size,
        quad=Quad.from_bbox((x, y, x + size / 2, y + size)) if quad else None,
        color=color,
    )


class TestColor:

    def test_unit_and_byte_ranges_agree(self):
        assert rgb_to_hex(1, 0, 0) == "#ff0000"
        assert rgb_to_hex(255, 0, 0) == "#ff0000"

    def test_rounding(self):
        assert rgb_to_hex(0.5, 0.5, 0.5) == "#808080"

    @pytest.mark.parametrize("color", [None, (1, 0), "red", (math.nan, 0, 0), ("a", 0, 0)])
    def test_malformed_falls_back(self, color):
        assert color_to_hex(color) == "#1a1a1a"


class TestGlyphToTextItem:

    def test_whitespace_skipped(self):
        assert glyph_to_text_item(glyph(" ")) is None
        assert glyph_to_text_item(glyph("\t")) is None
        assert glyph_to_text_item(glyph("")) is None

    def test_box_from_quad(self):
        item = glyph_to_text_item(glyph("A", x=10, y=20, size=12))
        assert (item.x, item.y, item.width, item.height) == (10, 20, 6, 12)
        assert item.font_family == "Helvetica"
        assert item.fill == "#000000"

    def test_missing_quad_uses_origin(self):
        item = glyph_to_text_item(glyph("A", x=10, y=20, size=12, quad=False))
        assert (item.x, item.y) == (10, 32)
        assert item.width == 12
        assert item.height == 12

    def test_zero_area_quad_uses_origin(self):
        record = GlyphRecord(
            char="A", origin=(50, 100), font="Helvetica", size=12,
            quad=Quad.from_bbox((50, 100, 50, 100)), color=(0, 0, 0),
        )
        item = glyph_to_text_item(record)
        assert (item.x, item.y) == (50, 100)
        assert item.width == 12
        assert item.height == 12

    def test_bad_size_uses_default(self):
        item = glyph_to_text_item(glyph("A", size=0), LayoutConfig(default_font_size=14))
        assert item.font_size == 14

    def test_stream_keeps_order(self):
        items = glyphs_to_text_items([glyph("a"), glyph(" "), glyph("b")])
        assert [it.text for it in items] == ["a", "b"]


class TestWalkRawdict:

    def test_walks_chars(self):
        raw = {
            "blocks": [
                {"type": 1},  # image block
                {"lines": [{"spans": [{
                    "font": "ABCDEF+Georgia-Bold",
                    "size": 11.0,
                    "color": 0xFF0000,
                    "chars": [
                        {"c": "H", "origin": (5, 15), "bbox": (5, 4, 11, 16)},
                        {"c": "i", "origin": (11, 15), "bbox": (11, 4, 14, 16)},
                    ],
                }]}]},
            ]
        }
        glyphs = list(walk_rawdict(raw))
        assert [g.char for g in glyphs] == ["H", "i"]
        assert glyphs[0].color == (1.0, 0.0, 0.0)

        item = glyph_to_text_item(glyphs[0])
        assert item.font_family == "Georgia"
        assert item.font_weight == "bold"
        assert item.fill == "#ff0000"
