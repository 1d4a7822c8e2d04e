"""Tests for YAML configuration loading."""

import pytest

from textlayer.config import TextLayerConfig, load_config


class TestLoadConfig:

    def test_defaults_file(self):
        config = load_config()
        assert config.layout.line_tolerance == 3.0
        assert config.layout.gap_tolerance == 18.0
        assert config.save.mask_color == (1.0, 1.0, 1.0)

    def test_partial_override(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("layout:\n  gap_tolerance: 24\nserver:\n  max_workers: 4\n")
        config = load_config(path)
        assert config.layout.gap_tolerance == 24
        assert config.layout.word_gap_ratio == 0.25
        assert config.server.max_workers == 4
        assert config.save == TextLayerConfig().save

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == TextLayerConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")
