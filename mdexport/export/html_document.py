"""Standalone themed HTML documents built from rendered Markdown."""

from __future__ import annotations

from typing import Optional

from mdexport.render.markdown import escape_html

_ROOT_VARS = (
    ":root{--bg:#f8f8f7;--surface:#fff;--text:#1c1917;--text-2:#78716c;--text-3:#a8a29e;"
    "--border:#e7e5e4;--border-s:#ececea;--sidebar-bg:#f2f1ef;--color-accent:#2563eb;}"
)
_DARK_VARS = (
    '[data-theme="dark"] { --bg:#1a1918;--surface:#242220;--text:#e7e5e4;--text-2:#a8a29e;'
    "--text-3:#78716c;--border:#3a3836;--border-s:#2e2c2a;--sidebar-bg:#1f1e1c;"
    "--color-accent:#60a5fa; }"
)
_BODY_CSS = (
    "body{margin:0;padding:40px;background:var(--bg);color:var(--text);"
    'font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",sans-serif;}'
)

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en"{theme_attr}>
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>
{css}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def article_html(html: str, theme: str) -> str:
    return f'<article class="md-body theme-{escape_html(theme)}">{html}</article>'


def build_html_document(
    html: str,
    theme: str,
    title: str,
    *,
    theme_css: str = "",
    dark: bool = False,
) -> str:
    """Return a complete HTML document wrapping the rendered article."""

    css_parts = [_ROOT_VARS]
    if dark:
        css_parts.append(_DARK_VARS)
    css_parts.extend([_BODY_CSS, ".content{max-width:820px;margin:0 auto;}", theme_css])
    body = '<div class="content">\n' + article_html(html, theme) + "\n</div>"
    return _HTML_TEMPLATE.format(
        theme_attr=' data-theme="dark"' if dark else "",
        title=escape_html(title),
        css="\n".join(part for part in css_parts if part),
        body=body,
    )


def build_raster_html(
    html: str,
    theme: str,
    *,
    theme_css: str = "",
    width_px: int = 820,
    padding_px: int = 40,
    background: str = "#ffffff",
    container_id: str = "export-container",
) -> str:
    """Off-screen page holding a fixed-width container for rasterization."""

    css = "\n".join(
        part
        for part in (
            _ROOT_VARS,
            f"html,body{{margin:0;padding:0;background:{background};}}",
            f"#{container_id}{{width:{width_px}px;padding:{padding_px}px;"
            f"background:{background};box-sizing:content-box;}}",
            theme_css,
        )
        if part
    )
    body = f'<div id="{container_id}">' + article_html(html, theme) + "</div>"
    return _HTML_TEMPLATE.format(theme_attr="", title="export", css=css, body=body)


def render_html_document(
    markdown: str,
    theme: str,
    title: str,
    renderer,
    theme_css: Optional[str] = None,
    dark: bool = False,
) -> bytes:
    """Render Markdown and wrap it into UTF-8 encoded standalone HTML."""

    document = build_html_document(
        renderer(markdown),
        theme,
        title,
        theme_css=theme_css or "",
        dark=dark,
    )
    return document.encode("utf-8")


__all__ = [
    "article_html",
    "build_html_document",
    "build_raster_html",
    "render_html_document",
]
