"""PPTX export of a slide deck with python-pptx."""

from __future__ import annotations

import io
import logging
from typing import Optional, Sequence

from mdexport.core.config import SlidesConfig
from mdexport.core.document import Bullet, Slide
from mdexport.export.backends import load_pptx

logger = logging.getLogger(__name__)

# 16:9 wide layout, in inches
SLIDE_WIDTH = 13.333
SLIDE_HEIGHT = 7.5
BLANK_LAYOUT = 6

CONTENT_LEFT = 0.8
CONTENT_WIDTH = 11.5
TITLE_TOP, TITLE_HEIGHT = 0.5, 0.8
BODY_TOP, BODY_HEIGHT = 1.6, 5.0
CODE_TOP_AFTER_BULLETS, CODE_HEIGHT = 5.2, 1.8


def _presentation_title(title: str) -> str:
    return title[:-3] if title.lower().endswith(".md") else title


def _rgb(color: str):
    return load_pptx().dml.color.RGBColor.from_string(color.upper())


def _set_background(slide, color: str) -> None:
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = _rgb(color)


def _text_box(slide, left: float, top: float, width: float, height: float, anchor=None):
    pptx = load_pptx()
    Inches = pptx.util.Inches
    box = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
    tf = box.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = anchor if anchor is not None else pptx.enum.text.MSO_ANCHOR.TOP
    return box


def _style_run(run, *, face: str, size: float, color: str, bold: bool = False) -> None:
    run.font.name = face
    run.font.size = load_pptx().util.Pt(size)
    run.font.bold = bold
    run.font.color.rgb = _rgb(color)


def _add_bullet_marker(paragraph, level: int) -> None:
    pptx = load_pptx()
    qn = pptx.oxml.ns.qn
    p_pr = paragraph._p.get_or_add_pPr()
    indent = pptx.util.Pt(18 + level * 12)
    p_pr.set("marL", str(int(indent)))
    p_pr.set("indent", str(-int(pptx.util.Pt(18))))
    p_pr.append(p_pr.makeelement(qn("a:buChar"), {"char": "•"}))


def _add_bullets(slide, bullets: Sequence[Bullet], cfg: SlidesConfig) -> None:
    pptx = load_pptx()
    tf = _text_box(slide, CONTENT_LEFT, BODY_TOP, CONTENT_WIDTH, BODY_HEIGHT).text_frame
    for idx, bullet in enumerate(bullets):
        p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
        p.level = bullet.level
        p.space_after = pptx.util.Pt(6)
        _add_bullet_marker(p, bullet.level)
        run = p.add_run()
        run.text = bullet.text
        _style_run(run, face=cfg.font_face, size=16 - bullet.level * 2, color=cfg.body_color)


def _add_code(slide, code: str, top: float, cfg: SlidesConfig) -> None:
    box = _text_box(slide, CONTENT_LEFT, top, CONTENT_WIDTH, CODE_HEIGHT)
    box.fill.solid()
    box.fill.fore_color.rgb = _rgb(cfg.code_fill)
    tf = box.text_frame
    for idx, line in enumerate(code.split("\n")):
        p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
        run = p.add_run()
        run.text = line
        _style_run(run, face=cfg.code_font, size=11, color=cfg.code_color)


def _add_slide(prs, slide_data: Slide, cfg: SlidesConfig) -> None:
    slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
    _set_background(slide, cfg.background)

    if slide_data.title:
        tf = _text_box(slide, CONTENT_LEFT, TITLE_TOP, CONTENT_WIDTH, TITLE_HEIGHT).text_frame
        run = tf.paragraphs[0].add_run()
        run.text = slide_data.title
        _style_run(run, face=cfg.font_face, size=28, color=cfg.title_color, bold=True)

    if slide_data.bullets:
        _add_bullets(slide, slide_data.bullets, cfg)

    if slide_data.code:
        top = CODE_TOP_AFTER_BULLETS if slide_data.bullets else BODY_TOP
        _add_code(slide, slide_data.code, top, cfg)


def _add_title_slide(prs, text: str, cfg: SlidesConfig) -> None:
    pptx = load_pptx()
    slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
    _set_background(slide, cfg.background)
    box = _text_box(
        slide, CONTENT_LEFT, 2.5, CONTENT_WIDTH, 1.5,
        anchor=pptx.enum.text.MSO_ANCHOR.MIDDLE,
    )
    p = box.text_frame.paragraphs[0]
    p.alignment = pptx.enum.text.PP_ALIGN.CENTER
    run = p.add_run()
    run.text = text
    _style_run(run, face=cfg.font_face, size=36, color=cfg.title_color, bold=True)


def build_pptx(
    deck: Sequence[Slide],
    title: str,
    config: Optional[SlidesConfig] = None,
    *,
    title_slide: Optional[str] = None,
) -> bytes:
    """Build a PPTX package in memory.

    Args:
        deck: Slides in order; each renders title, bullets, then code
        title: Display name used for the presentation core title
        config: Fonts and colours
        title_slide: When given, a centered title-only slide with this text is
            appended after the deck slides

    Returns:
        The ``.pptx`` bytes
    """
    cfg = config or SlidesConfig()
    pptx = load_pptx()
    prs = pptx.Presentation()
    prs.slide_width = pptx.util.Inches(SLIDE_WIDTH)
    prs.slide_height = pptx.util.Inches(SLIDE_HEIGHT)
    prs.core_properties.title = _presentation_title(title)

    for slide_data in deck:
        _add_slide(prs, slide_data, cfg)
    if title_slide is not None:
        _add_title_slide(prs, title_slide, cfg)

    buf = io.BytesIO()
    prs.save(buf)
    logger.info("Built PPTX: %s slides", len(prs.slides))
    return buf.getvalue()


__all__ = ["build_pptx"]
