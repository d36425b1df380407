"""
Export module for HTML/PDF/DOCX/PPTX output.

Provides:
- Theme CSS extraction for standalone documents
- HTML walker producing the normalized document tree
- python-docx renderer for Word output
- Raster-paginated PDF via Playwright + PyMuPDF
- Markdown slide segmentation and python-pptx renderer
- ExportDispatcher tying the exporters to the I/O collaborators
"""

from .backends import BackendUnavailable
from .dispatcher import (
    ExportDispatcher,
    ExportFormat,
    ExportTarget,
    apply_watermark,
    export_file,
    resolve_target,
)
from .docx_renderer import build_docx
from .html_document import build_html_document, build_raster_html, render_html_document
from .html_walker import extract_runs, walk_html
from .pdf_raster import (
    PlaywrightRasterizer,
    RasterImage,
    RasterizationError,
    Rasterizer,
    build_pdf,
    export_pdf_bytes,
    page_count,
    page_offsets,
    scaled_height,
)
from .pptx_renderer import build_pptx
from .slides import parse_markdown_to_slides
from .styles import extract_theme_css, iter_stylesheet_rules

__all__ = [
    "BackendUnavailable",
    "ExportDispatcher",
    "ExportFormat",
    "ExportTarget",
    "apply_watermark",
    "export_file",
    "resolve_target",
    "build_docx",
    "build_html_document",
    "build_raster_html",
    "render_html_document",
    "extract_runs",
    "walk_html",
    "PlaywrightRasterizer",
    "RasterImage",
    "RasterizationError",
    "Rasterizer",
    "build_pdf",
    "export_pdf_bytes",
    "page_count",
    "page_offsets",
    "scaled_height",
    "build_pptx",
    "parse_markdown_to_slides",
    "extract_theme_css",
    "iter_stylesheet_rules",
]
