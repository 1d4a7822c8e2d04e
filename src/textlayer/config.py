"""Configuration loader for textlayer layout and save settings."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class LayoutConfig:
    """Layout reconstruction thresholds (page units)."""
    line_tolerance: float = 3.0
    word_gap_ratio: float = 0.25  # Fraction of font size that separates words
    align_tolerance: float = 10.0
    align_font_ratio: float = 1.5
    font_size_tolerance: float = 0.5
    gap_tolerance: float = 18.0
    block_width_calibration: float = 4.0
    default_line_height: float = 1.2
    min_line_height: float = 1.0
    max_line_height: float = 3.0
    default_font_size: float = 12.0
    color_fallback: str = "#1a1a1a"


@dataclass
class SaveConfig:
    """Save-time drawing configuration."""
    mask_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    default_line_height: float = 1.2
    min_font_size: float = 0.5
    fallback_font_size: float = 12.0
    deflate: bool = True


@dataclass
class ServerConfig:
    """REST server configuration."""
    preview_dir: Optional[str] = None  # Defaults to <tmp>/textlayer/previews
    max_workers: int = 2


@dataclass
class TextLayerConfig:
    """Root configuration object."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    save: SaveConfig = field(default_factory=SaveConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "textlayer.yaml"


def load_config(config_path: Optional[Path | str] = None) -> TextLayerConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default config/textlayer.yaml

    Returns:
        TextLayerConfig object with all settings
    """
    if config_path is None:
        if DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH
        else:
            return TextLayerConfig()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return _parse_config(data)


def _parse_config(data: dict) -> TextLayerConfig:
    """Parse configuration from dict."""
    config = TextLayerConfig()

    if "layout" in data:
        lay = data["layout"] or {}
        defaults = LayoutConfig()
        config.layout.line_tolerance = lay.get("line_tolerance", defaults.line_tolerance)
        config.layout.word_gap_ratio = lay.get("word_gap_ratio", defaults.word_gap_ratio)
        config.layout.align_tolerance = lay.get("align_tolerance", defaults.align_tolerance)
        config.layout.align_font_ratio = lay.get("align_font_ratio", defaults.align_font_ratio)
        config.layout.font_size_tolerance = lay.get("font_size_tolerance", defaults.font_size_tolerance)
        config.layout.gap_tolerance = lay.get("gap_tolerance", defaults.gap_tolerance)
        config.layout.block_width_calibration = lay.get(
            "block_width_calibration", defaults.block_width_calibration
        )
        config.layout.default_line_height = lay.get("default_line_height", defaults.default_line_height)
        config.layout.min_line_height = lay.get("min_line_height", defaults.min_line_height)
        config.layout.max_line_height = lay.get("max_line_height", defaults.max_line_height)
        config.layout.default_font_size = lay.get("default_font_size", defaults.default_font_size)
        config.layout.color_fallback = lay.get("color_fallback", defaults.color_fallback)

    if "save" in data:
        s = data["save"] or {}
        defaults = SaveConfig()
        config.save.mask_color = tuple(s.get("mask_color", defaults.mask_color))
        config.save.default_line_height = s.get("default_line_height", defaults.default_line_height)
        config.save.min_font_size = s.get("min_font_size", defaults.min_font_size)
        config.save.fallback_font_size = s.get("fallback_font_size", defaults.fallback_font_size)
        config.save.deflate = s.get("deflate", defaults.deflate)

    if "server" in data:
        srv = data["server"] or {}
        config.server.preview_dir = srv.get("preview_dir")
        config.server.max_workers = srv.get("max_workers", 2)

    return config


# Global config instance (lazy loaded)
_config: Optional[TextLayerConfig] = None


def get_config(config_path: Optional[Path | str] = None) -> TextLayerConfig:
    """
    Get the global configuration instance.

    Args:
        config_path: If provided, reload config from this path

    Returns:
        TextLayerConfig instance
    """
    global _config
    if _config is None or config_path is not None:
        _config = load_config(config_path)
    return _config
