"""Theme stylesheet extraction for standalone exports.

Scans stylesheet sources for rules that belong to the active theme (or to the
code-highlighting palette) and returns them as one CSS blob. Sources that
cannot be read are skipped: remote stylesheets are treated like cross-origin
sheets in a browser and never fetched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Tuple

import tinycss2

logger = logging.getLogger(__name__)

BUNDLED_STYLESHEET = Path(__file__).resolve().parents[1] / "styles" / "themes.css"
HIGHLIGHT_CLASS = ".hljs"


def theme_selector(theme: str) -> str:
    return f".theme-{theme}"


def _is_remote(source: str) -> bool:
    return source.startswith("//") or "://" in source


def _read_source(source: str) -> Optional[str]:
    if _is_remote(source):
        logger.debug("Skipping remote stylesheet: %s", source)
        return None
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping unreadable stylesheet %s: %s", source, exc)
        return None


def iter_stylesheet_rules(sources: Iterable[str]) -> Iterator[Tuple[str, str, str]]:
    """Yield ``(source, match_text, rule_css)`` for every rule of readable sheets.

    ``match_text`` is the selector for qualified rules and the full rule text
    for at-rules such as ``@media``.
    """

    for source in sources:
        css_text = _read_source(str(source))
        if css_text is None:
            continue
        rules = tinycss2.parse_stylesheet(css_text, skip_comments=True, skip_whitespace=True)
        for rule in rules:
            if rule.type == "error":
                logger.debug("Parse error in %s: %s", source, rule.message)
                continue
            rule_css = rule.serialize().strip()
            if rule.type == "qualified-rule":
                match_text = tinycss2.serialize(rule.prelude)
            else:
                match_text = rule_css
            yield str(source), match_text, rule_css


def default_stylesheets(extra: Sequence[str] = ()) -> list[str]:
    return [str(BUNDLED_STYLESHEET), *extra]


def extract_theme_css(theme: str, stylesheets: Optional[Sequence[str]] = None) -> str:
    """Collect the CSS rules relevant to ``theme``.

    Args:
        theme: Theme identifier (``github``, ``minimal``, ``dark``, ...)
        stylesheets: Sources to scan; defaults to the bundled theme sheet

    Returns:
        Matching rule texts joined by newlines, in source and rule order
    """
    sources = list(stylesheets) if stylesheets is not None else default_stylesheets()
    selector = theme_selector(theme)
    rules = [
        rule_css
        for _, match_text, rule_css in iter_stylesheet_rules(sources)
        if selector in match_text or HIGHLIGHT_CLASS in match_text
    ]
    logger.debug("Extracted %s CSS rules for theme %s", len(rules), theme)
    return "\n".join(rules)


__all__ = [
    "BUNDLED_STYLESHEET",
    "default_stylesheets",
    "extract_theme_css",
    "iter_stylesheet_rules",
    "theme_selector",
]
