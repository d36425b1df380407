"""Markdown to sanitized HTML rendering.

Raw HTML is allowed in the source (the free-tier watermark is an HTML block),
so the rendered output is passed through a small BeautifulSoup sanitizer that
removes executable content before any exporter sees it.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from bs4 import BeautifulSoup, Comment
from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)

_FORBIDDEN_TAGS = ("script", "style", "iframe", "object", "embed", "frame", "frameset")
_URL_ATTRS = ("href", "src", "action", "formaction", "xlink:href")
_UNSAFE_URL = re.compile(r"^(javascript|vbscript|data:text/html)")
# browsers drop ASCII whitespace and control characters inside a URL scheme
_URL_NOISE = re.compile(r"[\x00-\x20\x7f]")


def escape_html(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _highlight(code: str, lang: str, _attrs: str) -> str:
    lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
    return f'<pre class="hljs"><code{lang_class}>{escape_html(code)}</code></pre>'


@lru_cache(maxsize=1)
def _parser() -> MarkdownIt:
    md = MarkdownIt(
        "commonmark",
        {"html": True, "typographer": True, "highlight": _highlight},
    )
    md.enable(["table", "strikethrough", "replacements", "smartquotes"])
    return md


def _is_unsafe_url(value: str) -> bool:
    return bool(_UNSAFE_URL.match(_URL_NOISE.sub("", value).lower()))


def sanitize_html(html: str) -> str:
    """Strip scripts, event handlers and script URLs from rendered HTML."""

    soup = BeautifulSoup(html, "html.parser")
    removed = 0

    for tag_name in _FORBIDDEN_TAGS:
        for element in soup.find_all(tag_name):
            element.decompose()
            removed += 1

    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()

    for element in soup.find_all(True):
        for attr in list(element.attrs):
            if attr.lower().startswith("on"):
                del element[attr]
                removed += 1
            elif attr.lower() in _URL_ATTRS and _is_unsafe_url(str(element[attr])):
                del element[attr]
                removed += 1

    if removed:
        logger.debug("Sanitizer removed %s unsafe elements/attributes", removed)
    return str(soup)


def render_markdown(source: str) -> str:
    """Render Markdown into sanitized HTML. Pure and deterministic."""

    return sanitize_html(_parser().render(source))


__all__ = ["escape_html", "render_markdown", "sanitize_html"]
