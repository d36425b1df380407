"""Pytest fixtures for mdexport tests (collaborators, fake rasterizer, sample docs)."""

import io
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from mdexport.export.pdf_raster import RasterImage
from mdexport.io.collaborators import FileFilter


def make_png(width: int, height: int, color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


class RecordingPrompt:
    """Prompt double that records every call and answers with ``answer``.

    ``answer=None`` accepts the suggested default path.
    """

    def __init__(self, answer: Optional[str] = None, cancel: bool = False):
        self.answer = answer
        self.cancel = cancel
        self.calls: List[Tuple[str, FileFilter]] = []

    def __call__(self, default_path: str, file_filter: FileFilter) -> Optional[str]:
        self.calls.append((default_path, file_filter))
        if self.cancel:
            return None
        return self.answer or default_path


class RecordingWriter:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.writes: List[Tuple[str, bytes]] = []

    def __call__(self, path: str, data: bytes) -> None:
        if self.error is not None:
            raise self.error
        self.writes.append((path, data))

    @property
    def data(self) -> bytes:
        assert len(self.writes) == 1
        return self.writes[0][1]


class FakeRasterizer:
    """Records the HTML it is asked to lay out and returns a blank PNG."""

    def __init__(self, width: int = 100, height: int = 300):
        self.width = width
        self.height = height
        self.calls: List[Tuple[str, int]] = []

    def render(self, html: str, width: int) -> RasterImage:
        self.calls.append((html, width))
        return RasterImage.from_png(make_png(self.width, self.height))


@pytest.fixture
def prompt() -> RecordingPrompt:
    return RecordingPrompt()


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def sample_markdown() -> str:
    return (
        "# Release Notes\n"
        "\n"
        "Intro with **bold**, *italic* and `code` plus a [link](https://example.com).\n"
        "\n"
        "## Changes\n"
        "\n"
        "- first\n"
        "  - nested\n"
        "- second\n"
        "\n"
        "> quoted text\n"
        "\n"
        "```python\n"
        "print(1)\n"
        "\n"
        "x = 2\n"
        "```\n"
        "\n"
        "---\n"
        "\n"
        "| Name | Value |\n"
        "|------|-------|\n"
        "| a    | 1     |\n"
    )
