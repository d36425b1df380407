"""Walk sanitized HTML into the normalized document tree.

Only the fragment's direct children are treated as blocks. Each tag has a
handler; anything without one becomes a paragraph so that every piece of
visible text ends up in exactly one block.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Doctype, ProcessingInstruction

from mdexport.core.document import (
    BlockNode,
    Blockquote,
    CodeBlock,
    Heading,
    ListBlock,
    ListItem,
    Paragraph,
    Rule,
    Run,
    RunFormat,
    Table,
)

logger = logging.getLogger(__name__)

_SKIPPED_STRINGS = (Comment, Doctype, ProcessingInstruction)
_LIST_TAGS = ("ul", "ol")
_CELL_TAGS = ("th", "td")
_ROW_GROUP_TAGS = ("thead", "tbody", "tfoot", "table")

_INLINE_FLAGS: Dict[str, Dict[str, bool]] = {
    "strong": {"bold": True},
    "b": {"bold": True},
    "em": {"italic": True},
    "i": {"italic": True},
    "code": {"is_code": True},
    "a": {"is_link": True},
}


def _is_text(node: object) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, _SKIPPED_STRINGS)


def extract_runs(
    node: Tag,
    fmt: RunFormat = RunFormat(),
    *,
    skip: Iterable[str] = (),
) -> List[Run]:
    """Depth-first run extraction with additive format inheritance.

    Args:
        node: Element whose descendants are converted
        fmt: Formatting inherited from ancestors
        skip: Child tag names whose subtrees are left out (used for nested lists)
    """

    skipped = set(skip)
    runs: List[Run] = []
    for child in node.children:
        if _is_text(child):
            text = str(child)
            if text:
                runs.append(fmt.make_run(text))
            continue
        if not isinstance(child, Tag) or child.name in skipped:
            continue
        if child.name == "br":
            runs.append(fmt.make_run("\n"))
            continue
        flags = _INLINE_FLAGS.get(child.name)
        child_fmt = fmt.with_flags(**flags) if flags else fmt
        runs.extend(extract_runs(child, child_fmt, skip=skipped))
    return runs


def _strip_edges(runs: List[Run]) -> tuple[Run, ...]:
    """Drop whitespace-only edge runs and trim the outer text of a block."""

    start, end = 0, len(runs)
    while start < end and not runs[start].text.strip():
        start += 1
    while end > start and not runs[end - 1].text.strip():
        end -= 1
    kept = list(runs[start:end])
    if kept:
        kept[0] = replace(kept[0], text=kept[0].text.lstrip())
        kept[-1] = replace(kept[-1], text=kept[-1].text.rstrip())
    return tuple(kept)


def _heading(node: Tag) -> BlockNode:
    return Heading(level=int(node.name[1]), runs=_strip_edges(extract_runs(node)))


def _paragraph(node: Tag) -> BlockNode:
    return Paragraph(runs=_strip_edges(extract_runs(node)))


def _blockquote(node: Tag) -> BlockNode:
    return Blockquote(runs=_strip_edges(extract_runs(node)))


def _outer_lists(node: Tag) -> Iterator[Tag]:
    """Lists below ``node`` that are not themselves inside another such list."""

    for child in node.children:
        if not isinstance(child, Tag):
            continue
        if child.name in _LIST_TAGS:
            yield child
        else:
            yield from _outer_lists(child)


def _collect_item(container: Tag, depth: int, items: List[ListItem]) -> None:
    # extract_runs stops at exactly the lists _outer_lists yields
    runs = _strip_edges(extract_runs(container, skip=_LIST_TAGS))
    if runs or container.name == "li":
        items.append(ListItem(runs=runs, indent_level=depth))
    for nested in _outer_lists(container):
        _collect_list_items(nested, depth + 1, items)


def _collect_list_items(list_node: Tag, depth: int, items: List[ListItem]) -> None:
    for child in list_node.children:
        if _is_text(child):
            text = str(child).strip()
            if text:
                items.append(ListItem(runs=(Run(text=text),), indent_level=depth))
        elif not isinstance(child, Tag):
            continue
        elif child.name in _LIST_TAGS:
            _collect_list_items(child, depth + 1, items)
        else:
            # li elements and stray children alike become items of this level
            _collect_item(child, depth, items)


def _list(node: Tag) -> BlockNode:
    items: List[ListItem] = []
    _collect_list_items(node, 0, items)
    return ListBlock(ordered=node.name == "ol", items=tuple(items))


def _code(node: Tag) -> BlockNode:
    text = node.get_text()
    if text.endswith("\n"):
        text = text[:-1]
    return CodeBlock(lines=tuple(text.split("\n")))


def _rule(_node: Tag) -> BlockNode:
    return Rule()


def _row_cells(row: Tag) -> Tuple[str, ...]:
    cells = []
    for child in row.children:
        if _is_text(child):
            text = str(child).strip()
            if text:
                cells.append(text)
        elif isinstance(child, Tag):
            # a nested table stays inside its cell's text
            text = child.get_text().strip()
            if text or child.name in _CELL_TAGS:
                cells.append(text)
    return tuple(cells)


def _collect_rows(node: Tag, rows: List[Tuple[str, ...]]) -> None:
    for child in node.children:
        if _is_text(child):
            text = str(child).strip()
            if text:
                rows.append((text,))
        elif not isinstance(child, Tag):
            continue
        elif child.name == "tr":
            rows.append(_row_cells(child))
        elif child.name in _ROW_GROUP_TAGS:
            _collect_rows(child, rows)
        else:
            # caption and other table-level content become one-cell rows
            text = child.get_text().strip()
            if text:
                rows.append((text,))


def _table(node: Tag) -> BlockNode:
    rows: List[Tuple[str, ...]] = []
    _collect_rows(node, rows)
    return Table(rows=tuple(rows))


BlockHandler = Callable[[Tag], BlockNode]

_HANDLERS: Dict[str, BlockHandler] = {
    **{f"h{level}": _heading for level in range(1, 7)},
    "p": _paragraph,
    "blockquote": _blockquote,
    "ul": _list,
    "ol": _list,
    "pre": _code,
    "hr": _rule,
    "table": _table,
}


def walk_html(fragment: Union[str, BeautifulSoup, Tag]) -> List[BlockNode]:
    """Convert a block-level HTML fragment into ordered block nodes."""

    root = BeautifulSoup(fragment, "html.parser") if isinstance(fragment, str) else fragment
    blocks: List[BlockNode] = []
    for child in root.children:
        if _is_text(child):
            text = str(child)
            if text.strip():
                blocks.append(Paragraph(runs=(Run(text=text.strip()),)))
            continue
        if not isinstance(child, Tag):
            continue
        handler: Optional[BlockHandler] = _HANDLERS.get(child.name)
        if handler is None:
            logger.debug("No handler for <%s>, treating as paragraph", child.name)
            handler = _paragraph
        blocks.append(handler(child))
    logger.debug("Walked HTML into %s blocks", len(blocks))
    return blocks


__all__ = ["extract_runs", "walk_html"]
