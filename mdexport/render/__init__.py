"""Markdown rendering collaborator."""

from .markdown import escape_html, render_markdown, sanitize_html

__all__ = ["escape_html", "render_markdown", "sanitize_html"]
