"""Split raw Markdown into slide records.

Works on the Markdown source, not on rendered HTML: level-1/2 headings start
slides, level-3/4 headings and list items become bullets, fenced code is
attached to the slide it appears in.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from mdexport.core.document import Bullet, Slide, SlideDeck

logger = logging.getLogger(__name__)

SLIDE_HEADING = re.compile(r"^(#{1,2})\s+(.+)")
SUB_HEADING = re.compile(r"^#{3,4}\s+(.+)")
LIST_ITEM = re.compile(r"^(\s*)([-*+]|\d+\.)\s+(.+)")
FENCE = "```"
MAX_BULLET_LEVEL = 2

_BOLD = re.compile(r"\*\*(.+?)\*\*")
_CODE = re.compile(r"`(.+?)`")


def strip_inline_markers(text: str) -> str:
    """Remove literal ``**bold**`` and `` `code` `` markers."""

    return _CODE.sub(r"\1", _BOLD.sub(r"\1", text))


def bullet_level(indent: str) -> int:
    return min(len(indent) // 2, MAX_BULLET_LEVEL)


def _is_structural_only(trimmed: str) -> bool:
    return trimmed.startswith(FENCE) or trimmed.startswith("---") or trimmed.startswith("|")


def parse_markdown_to_slides(markdown: str) -> SlideDeck:
    """Segment ``markdown`` into slides in a single line-oriented pass.

    Returns an empty deck when nothing slide-worthy is present; the caller
    decides how to present that case.
    """

    slides: SlideDeck = []
    current: Optional[Slide] = None
    code_lines: Optional[List[str]] = None

    def flush_code() -> None:
        if current is not None and code_lines:
            current.append_code("\n".join(code_lines))

    for line in markdown.split("\n"):
        if code_lines is not None:
            if line.startswith(FENCE):
                flush_code()
                code_lines = None
            else:
                code_lines.append(line)
            continue

        heading = SLIDE_HEADING.match(line)
        if heading:
            if current is not None:
                slides.append(current)
            current = Slide(title=heading.group(2).strip())
            continue

        trimmed = line.strip()
        if current is None:
            if not trimmed:
                continue
            if _is_structural_only(trimmed) and not line.startswith(FENCE):
                continue
            current = Slide()

        if line.startswith(FENCE):
            code_lines = []
            continue

        sub_heading = SUB_HEADING.match(line)
        if sub_heading:
            current.bullets.append(Bullet(text=sub_heading.group(1).strip(), level=0))
            continue

        item = LIST_ITEM.match(line)
        if item:
            current.bullets.append(
                Bullet(text=strip_inline_markers(item.group(3)), level=bullet_level(item.group(1)))
            )
            continue

        if trimmed and not _is_structural_only(trimmed):
            current.bullets.append(Bullet(text=strip_inline_markers(trimmed), level=0))

    # unterminated fence runs to end of input
    flush_code()
    if current is not None:
        slides.append(current)

    logger.debug("Segmented markdown into %s slides", len(slides))
    return slides


__all__ = [
    "bullet_level",
    "parse_markdown_to_slides",
    "strip_inline_markers",
]
