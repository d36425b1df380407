"""Intermediate document structures for the export pipeline.

Two independent representations live here:

* the *normalized document tree* (``BlockNode`` family) produced by the HTML
  walker and consumed by the DOCX emitter;
* the *slide deck* (``Slide``/``Bullet``) produced directly from Markdown by the
  slide segmenter.

Both are built once per export call, read once and then discarded, so every
type is a frozen dataclass holding tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Tuple, Union


class BlockType(str, Enum):
    """Block kinds recognised by the HTML walker."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    CODE = "code"
    RULE = "rule"
    TABLE = "table"


@dataclass(frozen=True, slots=True)
class Run:
    """A span of text carrying inherited inline formatting flags."""

    text: str
    bold: bool = False
    italic: bool = False
    is_code: bool = False
    is_link: bool = False


@dataclass(frozen=True, slots=True)
class RunFormat:
    """Formatting accumulated while descending through inline elements.

    ``with_flags`` only ever switches flags on, so a nested element can never
    drop formatting set by an ancestor.
    """

    bold: bool = False
    italic: bool = False
    is_code: bool = False
    is_link: bool = False

    def with_flags(self, **flags: bool) -> "RunFormat":
        enabled = {name: True for name, value in flags.items() if value}
        return replace(self, **enabled) if enabled else self

    def make_run(self, text: str) -> Run:
        return Run(
            text=text,
            bold=self.bold,
            italic=self.italic,
            is_code=self.is_code,
            is_link=self.is_link,
        )


def _runs_text(runs: Tuple[Run, ...]) -> str:
    return "".join(run.text for run in runs)


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    runs: Tuple[Run, ...] = ()
    block_type: BlockType = field(default=BlockType.HEADING, init=False)

    @property
    def text(self) -> str:
        return _runs_text(self.runs)


@dataclass(frozen=True, slots=True)
class Paragraph:
    runs: Tuple[Run, ...] = ()
    block_type: BlockType = field(default=BlockType.PARAGRAPH, init=False)

    @property
    def text(self) -> str:
        return _runs_text(self.runs)


@dataclass(frozen=True, slots=True)
class ListItem:
    runs: Tuple[Run, ...] = ()
    indent_level: int = 0

    @property
    def text(self) -> str:
        return _runs_text(self.runs)


@dataclass(frozen=True, slots=True)
class ListBlock:
    ordered: bool
    items: Tuple[ListItem, ...] = ()
    block_type: BlockType = field(default=BlockType.LIST, init=False)

    @property
    def text(self) -> str:
        return "".join(item.text for item in self.items)


@dataclass(frozen=True, slots=True)
class Blockquote:
    runs: Tuple[Run, ...] = ()
    block_type: BlockType = field(default=BlockType.BLOCKQUOTE, init=False)

    @property
    def text(self) -> str:
        return _runs_text(self.runs)


@dataclass(frozen=True, slots=True)
class CodeBlock:
    lines: Tuple[str, ...] = ()
    block_type: BlockType = field(default=BlockType.CODE, init=False)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True, slots=True)
class Rule:
    block_type: BlockType = field(default=BlockType.RULE, init=False)

    @property
    def text(self) -> str:
        return ""


@dataclass(frozen=True, slots=True)
class Table:
    """Lossy projection of an HTML table: plain cell strings in document order.

    A caption (or other table-level text) becomes a one-cell row; a nested
    table stays inside the text of its enclosing cell.
    """

    rows: Tuple[Tuple[str, ...], ...] = ()
    block_type: BlockType = field(default=BlockType.TABLE, init=False)

    @property
    def text(self) -> str:
        return "".join("".join(row) for row in self.rows)


BlockNode = Union[Heading, Paragraph, ListBlock, Blockquote, CodeBlock, Rule, Table]


@dataclass(frozen=True, slots=True)
class Bullet:
    text: str
    level: int = 0


@dataclass(slots=True)
class Slide:
    """One slide record. Mutable only while the segmenter is filling it."""

    title: str = ""
    bullets: List[Bullet] = field(default_factory=list)
    code: str = ""

    def append_code(self, code: str) -> None:
        self.code = f"{self.code}\n{code}" if self.code else code


SlideDeck = List[Slide]


__all__ = [
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
]
