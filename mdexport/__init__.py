"""
mdexport - Markdown document export to HTML, PDF, Word and PowerPoint.

RECOMMENDED: Use ExportDispatcher (or export_file) as the single entry point.
"""

from .core import (
    EmptyDocument,
    ExportConfig,
    ExportError,
    ExportFailed,
    ExportInProgress,
    UnsupportedFormat,
    load_export_config,
)
from .export import ExportDispatcher, ExportFormat, export_file
from .render import render_markdown

__version__ = "0.1.0"

__all__ = [
    "EmptyDocument",
    "ExportConfig",
    "ExportDispatcher",
    "ExportError",
    "ExportFailed",
    "ExportFormat",
    "ExportInProgress",
    "UnsupportedFormat",
    "export_file",
    "load_export_config",
    "render_markdown",
]
