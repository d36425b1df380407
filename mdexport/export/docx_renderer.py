"""DOCX export from the normalized document tree.

Every block kind maps to one or more flat paragraphs. Lists, quotes and code
are expressed with indentation, borders and shading rather than Word
numbering or tables, so the output opens the same way in every editor.
"""

from __future__ import annotations

import io
import logging
import re
from typing import Iterable, Optional, Sequence

from mdexport.core.config import DocxConfig
from mdexport.core.document import (
    BlockNode,
    BlockType,
    Run,
)
from mdexport.export.backends import load_docx

logger = logging.getLogger(__name__)

BULLET_GLYPH = "• "

# characters XML 1.0 cannot carry, even escaped
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def xml_safe(text: str) -> str:
    return _XML_ILLEGAL.sub("", text)


def _docx_title(title: str) -> str:
    return title[:-3] if title.lower().endswith(".md") else title


def _add_runs(paragraph, runs: Iterable[Run], cfg: DocxConfig) -> None:
    docx = load_docx()
    for item in runs:
        run = paragraph.add_run(xml_safe(item.text))
        if item.bold:
            run.bold = True
        if item.italic:
            run.italic = True
        if item.is_code:
            run.font.name = cfg.code_font
            run.font.size = docx.shared.Pt(cfg.code_size_pt)
        if item.is_link:
            run.font.color.rgb = docx.shared.RGBColor.from_string(cfg.accent_color.upper())
            run.font.underline = True


def _set_border(paragraph, side: str, color: str, size: int) -> None:
    docx = load_docx()
    qn = docx.oxml.ns.qn
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = p_pr.find(qn("w:pBdr"))
    if p_bdr is None:
        p_bdr = docx.oxml.OxmlElement("w:pBdr")
        p_pr.append(p_bdr)
    edge = docx.oxml.OxmlElement(f"w:{side}")
    edge.set(qn("w:val"), "single")
    edge.set(qn("w:sz"), str(size))
    edge.set(qn("w:space"), "4")
    edge.set(qn("w:color"), color)
    p_bdr.append(edge)


def _set_shading(paragraph, fill: str) -> None:
    docx = load_docx()
    qn = docx.oxml.ns.qn
    shd = docx.oxml.OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    paragraph._p.get_or_add_pPr().append(shd)


def _indent(paragraph, inches: float) -> None:
    paragraph.paragraph_format.left_indent = load_docx().shared.Inches(inches)


def _append_block(doc, block: BlockNode, cfg: DocxConfig) -> int:
    """Append one block; returns the number of paragraphs written."""

    kind = block.block_type
    if kind == BlockType.HEADING:
        level = max(1, min(block.level, cfg.max_heading_level))
        para = doc.add_heading(level=level)
        _add_runs(para, block.runs, cfg)
        return 1

    if kind == BlockType.PARAGRAPH:
        _add_runs(doc.add_paragraph(), block.runs, cfg)
        return 1

    if kind == BlockType.BLOCKQUOTE:
        para = doc.add_paragraph()
        # border before indent keeps w:pBdr ahead of w:ind inside w:pPr
        _set_border(para, "left", cfg.accent_color, 6)
        _indent(para, cfg.indent_in)
        _add_runs(para, block.runs, cfg)
        return 1

    if kind == BlockType.LIST:
        for item in block.items:
            para = doc.add_paragraph()
            _indent(para, cfg.indent_in * (item.indent_level + 1))
            if not block.ordered:
                para.add_run(BULLET_GLYPH)
            _add_runs(para, item.runs, cfg)
        return len(block.items)

    if kind == BlockType.CODE:
        for line in block.lines:
            para = doc.add_paragraph()
            _set_shading(para, cfg.code_shading)
            _add_runs(para, [Run(text=line or " ", is_code=True)], cfg)
        return len(block.lines)

    if kind == BlockType.RULE:
        para = doc.add_paragraph()
        _set_border(para, "bottom", cfg.rule_color, 1)
        return 1

    if kind == BlockType.TABLE:
        for row in block.rows:
            doc.add_paragraph().add_run(xml_safe(cfg.table_separator.join(row)))
        return len(block.rows)

    raise ValueError(f"Unknown block type: {kind}")


def build_docx(
    blocks: Sequence[BlockNode],
    title: str,
    config: Optional[DocxConfig] = None,
) -> bytes:
    """Build a complete DOCX package in memory.

    Args:
        blocks: Normalized document tree in document order
        title: Display name; a trailing ``.md`` is dropped for the core title
        config: DOCX styling options

    Returns:
        The ``.docx`` bytes. Nothing is written to disk here.
    """
    cfg = config or DocxConfig()
    docx = load_docx()
    doc = docx.Document()
    doc.core_properties.title = xml_safe(_docx_title(title))

    written = 0
    for block in blocks:
        written += _append_block(doc, block, cfg)

    buf = io.BytesIO()
    doc.save(buf)
    logger.info("Built DOCX: %s blocks → %s paragraphs", len(blocks), written)
    return buf.getvalue()


__all__ = ["BULLET_GLYPH", "build_docx", "xml_safe"]
