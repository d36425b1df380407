"""Error taxonomy surfaced by the export dispatcher."""

from __future__ import annotations


class ExportError(Exception):
    """Base class for every error an export call can raise."""


class EmptyDocument(ExportError):
    """The Markdown source is empty or whitespace-only."""

    def __init__(self, message: str = "Cannot export empty document") -> None:
        super().__init__(message)


class UnsupportedFormat(ExportError):
    """The requested format is not one of HTML, PDF, DOCX or PPTX."""

    def __init__(self, fmt: object) -> None:
        self.format = fmt
        super().__init__(f"Unsupported format: {fmt}")


class ExportFailed(ExportError):
    """Catch-all for rendering, packing and I/O failures.

    The original exception is kept as ``__cause__`` for logging only; the
    message shown to callers never carries emitter internals.
    """

    def __init__(self, message: str = "Export failed, please retry") -> None:
        super().__init__(message)


class ExportInProgress(ExportError):
    """Another export of the same document has not finished yet."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"Export already in progress: {source}")


__all__ = [
    "EmptyDocument",
    "ExportError",
    "ExportFailed",
    "ExportInProgress",
    "UnsupportedFormat",
]
