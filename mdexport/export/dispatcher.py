"""Export dispatcher: single entry point for all four output formats.

Validates the document, resolves the default destination, applies the
free-tier watermark, routes to the matching exporter and normalizes every
downstream failure into ``ExportFailed``. Each exporter builds its complete
payload in memory; the writer is called once, at the very end.
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Set, Union

from mdexport.core.config import ExportConfig, WatermarkConfig
from mdexport.core.errors import (
    EmptyDocument,
    ExportFailed,
    ExportInProgress,
    UnsupportedFormat,
)
from mdexport.export.docx_renderer import build_docx
from mdexport.export.html_document import render_html_document
from mdexport.export.html_walker import walk_html
from mdexport.export.pdf_raster import PlaywrightRasterizer, Rasterizer, export_pdf_bytes
from mdexport.export.pptx_renderer import build_pptx
from mdexport.export.slides import parse_markdown_to_slides
from mdexport.export.styles import default_stylesheets, extract_theme_css
from mdexport.io.collaborators import (
    ByteWriter,
    FileFilter,
    FixedPathPrompt,
    LocalFileWriter,
    SavePrompt,
)
from mdexport.render.markdown import render_markdown

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_NAME = "document"
_EXTENSION = re.compile(r"\.\w+$")


class ExportFormat(str, Enum):
    """Supported export formats."""

    HTML = "HTML"
    PDF = "PDF"
    DOCX = "DOCX"
    PPTX = "PPTX"

    @property
    def extension(self) -> str:
        return _FORMAT_INFO[self][0]

    @property
    def file_filter(self) -> FileFilter:
        return FileFilter(_FORMAT_INFO[self][1], (self.extension,))

    @property
    def status(self) -> str:
        return _FORMAT_INFO[self][2]

    @classmethod
    def parse(cls, value: Union[str, "ExportFormat"]) -> "ExportFormat":
        """Accept exactly HTML, PDF, DOCX or PPTX; callers normalize user input."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFormat(value) from None


_FORMAT_INFO: Dict[ExportFormat, tuple] = {
    ExportFormat.HTML: ("html", "HTML", "Exported as HTML"),
    ExportFormat.PDF: ("pdf", "PDF", "Exported as PDF"),
    ExportFormat.DOCX: ("docx", "Word", "Exported as Word"),
    ExportFormat.PPTX: ("pptx", "PowerPoint", "Exported as PPT"),
}


@dataclass(frozen=True)
class ExportTarget:
    """Names derived from the source path for one export."""

    display_name: str
    stem: str
    default_path: str


def resolve_target(source_path: Optional[str], fmt: ExportFormat) -> ExportTarget:
    """Default output path: source directory + stem + format extension."""

    raw = source_path or DEFAULT_SOURCE_NAME
    split_at = max(raw.rfind("/"), raw.rfind("\\"))
    directory, base_name = raw[: split_at + 1], raw[split_at + 1 :]
    stem = _EXTENSION.sub("", base_name)
    return ExportTarget(
        display_name=base_name,
        stem=stem,
        default_path=f"{directory}{stem}.{fmt.extension}",
    )


def apply_watermark(markdown: str, is_pro: bool, watermark: Optional[WatermarkConfig] = None) -> str:
    if is_pro:
        return markdown
    return markdown + (watermark or WatermarkConfig()).markdown_block()


# Documents with an export running in this process, shared by every dispatcher.
_in_flight: Set[str] = set()
_in_flight_lock = threading.Lock()


@contextmanager
def exclusive_export(source: str) -> Iterator[None]:
    """Hold the per-document latch for the duration of one export.

    Raises:
        ExportInProgress: If ``source`` is already being exported
    """
    with _in_flight_lock:
        if source in _in_flight:
            raise ExportInProgress(source)
        _in_flight.add(source)
    try:
        yield
    finally:
        with _in_flight_lock:
            _in_flight.discard(source)


def _without_md(name: str) -> str:
    return name[:-3] if name.endswith(".md") else name


class ExportDispatcher:
    """Route export requests to the format exporters.

    Example:
        >>> dispatcher = ExportDispatcher(prompt=FixedPathPrompt("out/notes.docx"))
        >>> dispatcher.export("DOCX", "# Notes", "github", "notes.md")
        'Exported as Word'
    """

    def __init__(
        self,
        renderer: Callable[[str], str] = render_markdown,
        prompt: Optional[SavePrompt] = None,
        writer: Optional[ByteWriter] = None,
        rasterizer: Optional[Rasterizer] = None,
        config: Optional[ExportConfig] = None,
    ):
        self.renderer = renderer
        self.prompt = prompt or FixedPathPrompt()
        self.writer = writer or LocalFileWriter()
        self.config = config or ExportConfig()
        self._rasterizer = rasterizer

    @property
    def rasterizer(self) -> Rasterizer:
        if self._rasterizer is None:
            self._rasterizer = PlaywrightRasterizer(scale=self.config.page.scale)
        return self._rasterizer

    def export(
        self,
        fmt: Union[str, ExportFormat],
        markdown: str,
        theme: Optional[str],
        source_path: Optional[str],
        is_pro: bool = True,
    ) -> Optional[str]:
        """Export ``markdown`` in ``fmt``.

        Returns:
            The status message, or ``None`` when the destination prompt was
            cancelled (nothing is written in that case)

        Raises:
            EmptyDocument: If the trimmed Markdown is empty
            UnsupportedFormat: If ``fmt`` is not HTML, PDF, DOCX or PPTX
            ExportInProgress: If the same document is already being exported
            ExportFailed: For any rendering, packing or write failure
        """
        if not markdown or not markdown.strip():
            raise EmptyDocument()
        export_format = ExportFormat.parse(fmt)
        theme = theme or self.config.default_theme
        target = resolve_target(source_path, export_format)
        content = apply_watermark(markdown, is_pro, self.config.watermark)

        with exclusive_export(source_path or DEFAULT_SOURCE_NAME):
            try:
                path = self.prompt(target.default_path, export_format.file_filter)
                if not path:
                    logger.info("%s export cancelled", export_format.value)
                    return None
                data = self._build(export_format, content, theme, target)
                self.writer(path, data)
            except Exception as exc:
                logger.exception("%s export failed: %s", export_format.value, exc)
                raise ExportFailed() from exc

        logger.info("%s export written: %s (%s bytes)", export_format.value, path, len(data))
        return export_format.status

    def _theme_css(self, theme: str) -> str:
        return extract_theme_css(theme, default_stylesheets(self.config.resolve_stylesheets()))

    def _build(self, fmt: ExportFormat, content: str, theme: str, target: ExportTarget) -> bytes:
        cfg = self.config
        if fmt is ExportFormat.HTML:
            return render_html_document(
                content,
                theme,
                target.display_name,
                self.renderer,
                theme_css=self._theme_css(theme),
                dark=cfg.is_dark(theme),
            )
        if fmt is ExportFormat.PDF:
            return export_pdf_bytes(
                content,
                theme,
                self.renderer,
                self.rasterizer,
                theme_css=self._theme_css(theme),
                config=cfg,
            )
        if fmt is ExportFormat.DOCX:
            blocks = walk_html(self.renderer(content))
            return build_docx(blocks, target.display_name, cfg.docx)
        if fmt is ExportFormat.PPTX:
            deck = parse_markdown_to_slides(content)
            title_slide = None if deck else _without_md(target.display_name)
            return build_pptx(deck, target.display_name, cfg.slides, title_slide=title_slide)
        raise UnsupportedFormat(fmt)


def export_file(
    fmt: Union[str, ExportFormat],
    markdown: str,
    theme: Optional[str],
    file_path: Optional[str],
    is_pro: bool = True,
    *,
    prompt: Optional[SavePrompt] = None,
    writer: Optional[ByteWriter] = None,
    renderer: Callable[[str], str] = render_markdown,
    rasterizer: Optional[Rasterizer] = None,
    config: Optional[ExportConfig] = None,
) -> Optional[str]:
    """One-shot wrapper around :class:`ExportDispatcher`.

    The in-progress latch is process-wide, so overlapping calls for the same
    ``file_path`` are rejected even across separate wrappers.
    """

    dispatcher = ExportDispatcher(
        renderer=renderer,
        prompt=prompt,
        writer=writer,
        rasterizer=rasterizer,
        config=config,
    )
    return dispatcher.export(fmt, markdown, theme, file_path, is_pro=is_pro)


__all__ = [
    "ExportDispatcher",
    "ExportFormat",
    "ExportTarget",
    "apply_watermark",
    "exclusive_export",
    "export_file",
    "resolve_target",
]
