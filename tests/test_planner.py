"""Tests for mask and text draw planning."""

import logging
import math
from dataclasses import astuple

import pytest

from textlayer.config import SaveConfig
from textlayer.models import OriginalBounds, Overlay, PageExport, SavePayload, Size
from textlayer.planner import (
    derive_bounds,
    hex_to_rgb,
    page_index,
    plan_overlay,
    plan_page,
    plan_save,
)


PAGE_W, PAGE_H = 600.0, 800.0


def overlay(**kwargs):
    values = dict(text="Edited", left=60, top=80, width=120, height=40, font_size=20)
    values.update(kwargs)
    return Overlay(**values)


def page(*overlays, page_number=1, width=PAGE_W, height=PAGE_H, rotation=0):
    return PageExport(
        page_number=page_number,
        width=width,
        height=height,
        rotation=rotation,
        overlays=list(overlays),
    )


class TestHexToRgb:

    def test_valid(self):
        assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
        assert hex_to_rgb("00FF00") == (0.0, 1.0, 0.0)

    @pytest.mark.parametrize("value", [None, "", "red", "#fff", "#gggggg"])
    def test_invalid_is_black(self, value):
        assert hex_to_rgb(value) == (0.0, 0.0, 0.0)


class TestDeriveBounds:

    def test_unrotated(self):
        ov = overlay()
        bounds = derive_bounds(ov, page(ov), PAGE_W, PAGE_H)
        assert bounds.rect_x == pytest.approx(60)
        assert bounds.rect_y == pytest.approx(800 - (80 + 40))
        assert bounds.width == pytest.approx(120)
        assert bounds.height == pytest.approx(40)
        assert bounds.font_size == pytest.approx(20)
        assert bounds.baseline_y == pytest.approx(800 - (80 + 20))

    def test_zoomed_viewport_scales_font(self):
        ov = overlay(left=120, top=160, width=240, height=80, font_size=20)
        bounds = derive_bounds(ov, page(ov, width=1200, height=1600), PAGE_W, PAGE_H)
        assert bounds.rect_x == pytest.approx(60)
        assert bounds.width == pytest.approx(120)
        assert bounds.font_size == pytest.approx(10)

    def test_rotated_viewport_unrotates(self):
        # Viewport rotated 90: 800 wide, 600 tall; box at viewport top-right
        ov = overlay(left=720, top=0, width=80, height=60)
        bounds = derive_bounds(ov, page(ov, width=800, height=600, rotation=90), PAGE_W, PAGE_H)
        assert bounds.rect_x == pytest.approx(0)
        assert bounds.width == pytest.approx(60)
        assert bounds.height == pytest.approx(80)
        assert bounds.rect_y == pytest.approx(800 - 80)

    def test_tiny_font_floor(self):
        ov = overlay(font_size=0.1)
        assert derive_bounds(ov, page(ov), PAGE_W, PAGE_H).font_size == 0.5

    def test_invalid_font_uses_fallback(self):
        ov = overlay(font_size=math.nan)
        assert derive_bounds(ov, page(ov), PAGE_W, PAGE_H).font_size == 12

    def test_missing_viewport_uses_page_size(self):
        ov = overlay()
        bounds = derive_bounds(ov, page(ov, width=0, height=math.nan), PAGE_W, PAGE_H)
        assert bounds.rect_x == pytest.approx(60)


class TestPlanOverlay:

    def test_zero_width_skipped(self):
        ov = overlay(width=0)
        assert plan_overlay(ov, page(ov), PAGE_W, PAGE_H) is None

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_skipped(self, text):
        ov = overlay(text=text)
        assert plan_overlay(ov, page(ov), PAGE_W, PAGE_H) is None

    def test_nan_geometry_skipped(self):
        ov = overlay(left=math.nan, width=math.nan)
        assert plan_overlay(ov, page(ov), PAGE_W, PAGE_H) is None

    def test_mask_falls_back_to_current_rect(self):
        ov = overlay()
        instruction = plan_overlay(ov, page(ov), PAGE_W, PAGE_H)
        assert astuple(instruction.mask) == pytest.approx((60, 680, 120, 40))

    def test_mask_replays_original_bounds(self):
        ov = overlay(
            left=100, top=100, width=200, height=50,
            original_bounds=OriginalBounds(0.1, 0.1, 0.2, 0.05, capture_rotation=0),
        )
        instruction = plan_overlay(ov, page(ov, width=800, height=600, rotation=90), PAGE_W, PAGE_H)
        mask = instruction.mask
        assert mask.rect_x == pytest.approx(510)
        assert mask.rect_y == pytest.approx(560)
        assert mask.width == pytest.approx(30)
        assert mask.height == pytest.approx(160)

    def test_degenerate_snapshot_falls_back(self):
        ov = overlay(original_bounds=OriginalBounds(0.1, 0.1, 0.0, 0.05))
        instruction = plan_overlay(ov, page(ov), PAGE_W, PAGE_H)
        assert astuple(instruction.mask) == pytest.approx((60, 680, 120, 40))

    def test_text_draw(self):
        ov = overlay(
            text="Line one\r\nLine two",
            font_family="Georgia",
            font_weight="bold",
            fill="#0000ff",
            line_height=1.5,
            opacity=0.5,
        )
        text = plan_overlay(ov, page(ov), PAGE_W, PAGE_H).text
        assert text.text == "Line one\nLine two"
        assert text.font == "tibo"
        assert text.color == (0.0, 0.0, 1.0)
        assert text.line_height == pytest.approx(30)
        assert text.max_width == pytest.approx(120)
        assert text.opacity == 0.5
        assert (text.x, text.y) == pytest.approx((60, 700))

    @pytest.mark.parametrize("ratio", [math.nan, 0, -1])
    def test_invalid_line_height_defaults(self, ratio):
        ov = overlay(line_height=ratio)
        text = plan_overlay(ov, page(ov), PAGE_W, PAGE_H, SaveConfig()).text
        assert text.line_height == pytest.approx(20 * 1.2)


class TestPlanSave:

    def test_page_index(self):
        assert page_index(1) == 0
        assert page_index(3) == 2
        assert page_index(0) == 0
        assert page_index(math.nan) is None

    def test_pages_in_ascending_order(self):
        payload = SavePayload(pages=[
            page(overlay(text="second"), page_number=2),
            page(overlay(text="first"), page_number=1),
        ])
        sizes = {0: Size(PAGE_W, PAGE_H), 1: Size(PAGE_W, PAGE_H)}
        instructions = plan_save(payload, sizes)
        assert [i.text.text for i in instructions] == ["first", "second"]

    def test_missing_page_skipped(self, caplog):
        payload = SavePayload(pages=[page(overlay(), page_number=5)])
        with caplog.at_level(logging.WARNING, logger="textlayer.planner"):
            assert plan_save(payload, {0: Size(PAGE_W, PAGE_H)}) == []
        assert "not in the document" in caplog.text

    def test_plan_page_skips_only_bad_overlays(self):
        pg = page(overlay(), overlay(width=0), overlay(text=""))
        assert len(plan_page(pg, PAGE_W, PAGE_H)) == 1
