"""Tests for text metric estimation."""

import pymupdf
import pytest

from textlayer.metrics import (
    content_bounds,
    count_lines,
    estimate_text_width,
    normalize_line_height,
    wrap_text,
)


class TestWrapText:

    def test_fits_on_one_line(self):
        assert wrap_text("one two three", 1000, 12) == ["one two three"]

    def test_wraps_at_words(self):
        assert wrap_text("one two three", 1, 12) == ["one", "two", "three"]

    def test_keeps_explicit_breaks(self):
        assert wrap_text("one\ntwo", 1000, 12) == ["one", "two"]
        assert wrap_text("one\r\n\ntwo", 1000, 12) == ["one", "", "two"]

    def test_partial_wrap(self):
        width = pymupdf.get_text_length("one two", fontname="helv", fontsize=12)
        assert wrap_text("one two three", width, 12) == ["one two", "three"]


class TestMeasurement:

    def test_count_lines(self):
        assert count_lines("") == 1
        assert count_lines("a\nb\r\nc") == 3

    def test_width_uses_standard_face(self):
        expected = pymupdf.get_text_length("Hello", fontname="cour", fontsize=10)
        assert estimate_text_width("Hello", 10, "Courier New") == pytest.approx(expected)

    def test_content_bounds(self):
        size = content_bounds("a\nb", 12, 1.5)
        assert size.height == pytest.approx(36)
        assert size.width >= 12

    def test_content_bounds_empty_text(self):
        size = content_bounds("", 20)
        assert size.width >= 20
        assert size.height == pytest.approx(24)


class TestNormalizeLineHeight:

    def test_provided_in_range_kept(self):
        assert normalize_line_height("a", 2.0, 12) == 2.0

    def test_estimated_from_height(self):
        assert normalize_line_height("a\nb", None, 10, 30) == pytest.approx(1.5)

    def test_estimate_clamped(self):
        assert normalize_line_height("a", 9.0, 10, 500) == 3.0

    def test_default(self):
        assert normalize_line_height("a", None, 12) == 1.2
        assert normalize_line_height("a", None, 0, 30) == 1.2
