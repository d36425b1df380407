"""Export configuration with YAML overrides."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

MM_TO_PT = 72.0 / 25.4


@dataclass
class PageConfig:
    """Fixed page geometry for the paginated PDF, in millimetres."""

    width_mm: float = 210.0
    height_mm: float = 297.0
    render_width_px: int = 820
    padding_px: int = 40
    scale: int = 2

    @property
    def width_pt(self) -> float:
        return self.width_mm * MM_TO_PT

    @property
    def height_pt(self) -> float:
        return self.height_mm * MM_TO_PT


@dataclass
class DocxConfig:
    max_heading_level: int = 3
    code_font: str = "Courier New"
    code_size_pt: float = 10.0
    code_shading: str = "F5F5F4"
    accent_color: str = "2563EB"
    rule_color: str = "D6D3D1"
    indent_in: float = 0.5
    table_separator: str = "  |  "


@dataclass
class SlidesConfig:
    font_face: str = "Arial"
    code_font: str = "Courier New"
    title_color: str = "1C1917"
    body_color: str = "44403C"
    code_color: str = "E7E5E4"
    code_fill: str = "1C1917"
    background: str = "FFFFFF"


@dataclass
class WatermarkConfig:
    text: str = "Made with Inkess"
    style: str = "text-align:center;font-size:11px;color:#aaa;"

    def markdown_block(self) -> str:
        """Markdown appended to free-tier documents before rendering."""

        return f'\n\n---\n\n<p style="{self.style}">{self.text}</p>\n'


@dataclass
class ExportConfig:
    """Top-level export settings. Defaults match the desktop application."""

    default_theme: str = "github"
    dark_themes: List[str] = field(default_factory=lambda: ["dark"])
    stylesheets: List[str] = field(default_factory=list)
    page: PageConfig = field(default_factory=PageConfig)
    docx: DocxConfig = field(default_factory=DocxConfig)
    slides: SlidesConfig = field(default_factory=SlidesConfig)
    watermark: WatermarkConfig = field(default_factory=WatermarkConfig)
    base_dir: Optional[str] = None

    def is_dark(self, theme: str) -> bool:
        return theme in self.dark_themes

    def resolve_stylesheets(self) -> List[str]:
        """Configured stylesheet sources with relative paths anchored at ``base_dir``."""

        resolved: List[str] = []
        for source in self.stylesheets:
            if "://" in source or source.startswith("//"):
                resolved.append(source)
                continue
            candidate = Path(source).expanduser()
            if not candidate.is_absolute() and self.base_dir:
                candidate = Path(self.base_dir) / candidate
            resolved.append(str(candidate))
        return resolved


def _apply_overrides(target: Any, data: Dict[str, Any], prefix: str = "") -> None:
    known = {f.name: f for f in fields(target)}
    for key, value in data.items():
        if key not in known or key == "base_dir":
            logger.warning("Ignoring unknown config key: %s%s", prefix, key)
            continue
        current = getattr(target, key)
        if is_dataclass(current):
            if not isinstance(value, dict):
                raise ValueError(f"Config section '{prefix}{key}' must be a mapping")
            _apply_overrides(current, value, prefix=f"{prefix}{key}.")
        else:
            setattr(target, key, value)


def load_export_config(path: Union[str, Path]) -> ExportConfig:
    """Load an ``ExportConfig`` from YAML, starting from the built-in defaults.

    Args:
        path: YAML file; sections mirror the dataclass fields
            (``page``, ``docx``, ``slides``, ``watermark``, ...)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level or a section is not a mapping
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Export config not found: {config_path}")

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Export config must be a mapping: {config_path}")

    config = ExportConfig()
    _apply_overrides(config, data)
    config.base_dir = str(config_path.parent.resolve())
    logger.debug("Loaded export config from %s", config_path)
    return config


__all__ = [
    "DocxConfig",
    "ExportConfig",
    "PageConfig",
    "SlidesConfig",
    "WatermarkConfig",
    "load_export_config",
]
