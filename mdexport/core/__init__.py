"""
mdexport core - data models, errors and configuration.
"""

from .config import (
    DocxConfig,
    ExportConfig,
    PageConfig,
    SlidesConfig,
    WatermarkConfig,
    load_export_config,
)
from .document import (
    BlockNode,
    BlockType,
    Blockquote,
    Bullet,
    CodeBlock,
    Heading,
    ListBlock,
    ListItem,
    Paragraph,
    Rule,
    Run,
    RunFormat,
    Slide,
    SlideDeck,
    Table,
)
from .errors import (
    EmptyDocument,
    ExportError,
    ExportFailed,
    ExportInProgress,
    UnsupportedFormat,
)

__all__ = [
    # Config
    "DocxConfig",
    "ExportConfig",
    "PageConfig",
    "SlidesConfig",
    "WatermarkConfig",
    "load_export_config",
    # Document
    "BlockNode",
    "BlockType",
    "Blockquote",
    "Bullet",
    "CodeBlock",
    "Heading",
    "ListBlock",
    "ListItem",
    "Paragraph",
    "Rule",
    "Run",
    "RunFormat",
    "Slide",
    "SlideDeck",
    "Table",
    # Errors
    "EmptyDocument",
    "ExportError",
    "ExportFailed",
    "ExportInProgress",
    "UnsupportedFormat",
]
