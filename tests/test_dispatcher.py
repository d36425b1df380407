"""Tests for the export dispatcher."""

import io
from unittest.mock import MagicMock

import pytest

from conftest import FakeRasterizer, RecordingPrompt, RecordingWriter
from mdexport.core.errors import (
    EmptyDocument,
    ExportFailed,
    ExportInProgress,
    UnsupportedFormat,
)
from mdexport.export.dispatcher import (
    ExportDispatcher,
    ExportFormat,
    apply_watermark,
    export_file,
    resolve_target,
)
from mdexport.render import render_markdown

WATERMARK = "Made with Inkess"


@pytest.fixture
def dispatcher(prompt, writer, rasterizer) -> ExportDispatcher:
    return ExportDispatcher(prompt=prompt, writer=writer, rasterizer=rasterizer)


# ============================================================================
# Validation
# ============================================================================


@pytest.mark.parametrize("markdown", ["", "   ", "\n\t\n"])
@pytest.mark.parametrize("fmt", ["HTML", "PDF", "DOCX", "PPTX", "RTF"])
def test_empty_document_never_reaches_collaborators(markdown, fmt):
    renderer = MagicMock()
    prompt, writer, rasterizer = RecordingPrompt(), RecordingWriter(), FakeRasterizer()
    dispatcher = ExportDispatcher(renderer=renderer, prompt=prompt, writer=writer, rasterizer=rasterizer)

    with pytest.raises(EmptyDocument, match="Cannot export empty document"):
        dispatcher.export(fmt, markdown, "github", "a.md")

    renderer.assert_not_called()
    assert prompt.calls == []
    assert writer.writes == []
    assert rasterizer.calls == []


def test_unsupported_format(dispatcher, prompt, writer):
    with pytest.raises(UnsupportedFormat, match="Unsupported format: RTF"):
        dispatcher.export("RTF", "# x", "github", "a.md")
    assert prompt.calls == []
    assert writer.writes == []


def test_format_parsing_accepts_exact_ids_only():
    assert ExportFormat.parse("DOCX") is ExportFormat.DOCX
    assert ExportFormat.parse(ExportFormat.PDF) is ExportFormat.PDF
    for loose in ("docx", " PPTX ", "Html", None):
        with pytest.raises(UnsupportedFormat):
            ExportFormat.parse(loose)


def test_lowercase_format_is_rejected_before_any_collaborator(dispatcher, prompt, writer):
    with pytest.raises(UnsupportedFormat, match="Unsupported format: html"):
        dispatcher.export("html", "# x", "github", "a.md")
    assert prompt.calls == []
    assert writer.writes == []


# ============================================================================
# Destination and cancellation
# ============================================================================


@pytest.mark.parametrize(
    "source, fmt, expected",
    [
        ("docs/notes.md", ExportFormat.PDF, "docs/notes.pdf"),
        ("C:\\docs\\a.b.md", ExportFormat.DOCX, "C:\\docs\\a.b.docx"),
        ("README", ExportFormat.HTML, "README.html"),
        (None, ExportFormat.PPTX, "document.pptx"),
    ],
)
def test_default_path(source, fmt, expected):
    assert resolve_target(source, fmt).default_path == expected


def test_prompt_receives_default_path_and_filter(dispatcher, prompt):
    dispatcher.export("DOCX", "# x", "github", "docs/notes.md")
    default_path, file_filter = prompt.calls[0]
    assert default_path == "docs/notes.docx"
    assert file_filter.name == "Word"
    assert file_filter.extensions == ("docx",)


@pytest.mark.parametrize("fmt", list(ExportFormat))
def test_cancelled_prompt_writes_nothing(fmt, writer, rasterizer):
    dispatcher = ExportDispatcher(prompt=RecordingPrompt(cancel=True), writer=writer, rasterizer=rasterizer)
    assert dispatcher.export(fmt, "# x", "github", "a.md") is None
    assert writer.writes == []
    assert rasterizer.calls == []


def test_chosen_path_is_used(writer):
    dispatcher = ExportDispatcher(prompt=RecordingPrompt(answer="/tmp/x.html"), writer=writer)
    dispatcher.export("HTML", "# x", "github", "a.md")
    assert writer.writes[0][0] == "/tmp/x.html"


# ============================================================================
# Formats
# ============================================================================


@pytest.mark.parametrize(
    "fmt, status",
    [("HTML", "Exported as HTML"), ("DOCX", "Exported as Word"), ("PPTX", "Exported as PPT")],
)
def test_status_messages(fmt, status, dispatcher):
    if fmt != "HTML":
        pytest.importorskip(fmt.lower())
    assert dispatcher.export(fmt, "# x", "github", "a.md") == status


def test_pdf_status(dispatcher):
    pytest.importorskip("fitz")
    assert dispatcher.export("PDF", "# x", "github", "a.md") == "Exported as PDF"


def test_html_document_is_standalone(dispatcher, writer):
    dispatcher.export("HTML", "# Hello", "minimal", "notes.md")
    html = writer.data.decode("utf-8")
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>notes.md</title>" in html
    assert 'class="md-body theme-minimal"' in html
    assert ".theme-minimal" in html
    assert ".theme-github" not in html
    assert "<h1>Hello</h1>" in html


def test_dark_html_sets_theme_attribute(dispatcher, writer):
    dispatcher.export("HTML", "# Hello", "dark", "notes.md")
    html = writer.data.decode("utf-8")
    assert '<html lang="en" data-theme="dark">' in html
    assert "--color-accent:#60a5fa" in html


def test_missing_theme_uses_default(dispatcher, writer):
    dispatcher.export("HTML", "# Hello", None, "notes.md")
    assert "theme-github" in writer.data.decode("utf-8")


def test_docx_export_survives_control_characters(dispatcher, writer):
    docx = pytest.importorskip("docx")
    status = dispatcher.export("DOCX", "# T\n\npage\x0cbreak \x08 here", "github", "a.md")
    assert status == "Exported as Word"
    texts = [p.text for p in docx.Document(io.BytesIO(writer.data)).paragraphs]
    assert any("pagebreak" in text and "here" in text for text in texts)


def test_pptx_without_slide_content_gets_title_slide(dispatcher, writer):
    pptx = pytest.importorskip("pptx")
    dispatcher.export("PPTX", "---\n", "github", "docs/notes.md")
    prs = pptx.Presentation(io.BytesIO(writer.data))
    assert len(prs.slides) == 1
    assert prs.slides[0].shapes[0].text_frame.text == "notes"


# ============================================================================
# Watermark
# ============================================================================


def test_apply_watermark():
    assert apply_watermark("doc", is_pro=True) == "doc"
    marked = apply_watermark("doc", is_pro=False)
    assert marked.startswith("doc\n\n---\n\n")
    assert WATERMARK in marked


def _exported_text(fmt: str, data: bytes, rasterizer: FakeRasterizer) -> str:
    if fmt == "HTML":
        return data.decode("utf-8")
    if fmt == "PDF":
        return rasterizer.calls[-1][0]
    if fmt == "DOCX":
        docx = pytest.importorskip("docx")
        return "\n".join(p.text for p in docx.Document(io.BytesIO(data)).paragraphs)
    pptx = pytest.importorskip("pptx")
    prs = pptx.Presentation(io.BytesIO(data))
    return "\n".join(
        shape.text_frame.text for slide in prs.slides for shape in slide.shapes if shape.has_text_frame
    )


@pytest.mark.parametrize("fmt", ["HTML", "PDF", "DOCX", "PPTX"])
@pytest.mark.parametrize("is_pro", [True, False])
def test_watermark_only_for_free_tier(fmt, is_pro, prompt, rasterizer):
    backend = {"PDF": "fitz", "DOCX": "docx", "PPTX": "pptx"}.get(fmt)
    if backend:
        pytest.importorskip(backend)
    writer = RecordingWriter()
    dispatcher = ExportDispatcher(prompt=prompt, writer=writer, rasterizer=rasterizer)

    dispatcher.export(fmt, "# Doc\n\nbody text", "github", "doc.md", is_pro=is_pro)

    text = _exported_text(fmt, writer.data, rasterizer)
    assert "body text" in text
    assert (WATERMARK in text) is (not is_pro)


# ============================================================================
# Failures and re-entrancy
# ============================================================================


def test_renderer_failure_is_wrapped(prompt, writer):
    def broken(_markdown):
        raise RuntimeError("parser exploded")

    dispatcher = ExportDispatcher(renderer=broken, prompt=prompt, writer=writer)
    with pytest.raises(ExportFailed, match="Export failed, please retry") as info:
        dispatcher.export("HTML", "# x", "github", "a.md")
    assert isinstance(info.value.__cause__, RuntimeError)
    assert "exploded" not in str(info.value)
    assert writer.writes == []


def test_writer_failure_is_wrapped(prompt):
    dispatcher = ExportDispatcher(prompt=prompt, writer=RecordingWriter(error=OSError("disk full")))
    with pytest.raises(ExportFailed) as info:
        dispatcher.export("HTML", "# x", "github", "a.md")
    assert isinstance(info.value.__cause__, OSError)


def test_rasterizer_failure_is_wrapped(prompt, writer):
    failing = MagicMock()
    failing.render.side_effect = RuntimeError("no browser")
    dispatcher = ExportDispatcher(prompt=prompt, writer=writer, rasterizer=failing)
    with pytest.raises(ExportFailed):
        dispatcher.export("PDF", "# x", "github", "a.md")
    assert writer.writes == []


class ReentrantPrompt:
    """Starts more exports from inside the first prompt call."""

    def __init__(self):
        self.dispatcher = None
        self.calls = 0
        self.rejected = []

    def __call__(self, default_path, file_filter):
        self.calls += 1
        if self.calls == 1:
            try:
                self.dispatcher.export("HTML", "# again", "github", "a.md")
            except ExportInProgress as exc:
                self.rejected.append(exc)
            self.dispatcher.export("HTML", "# other", "github", "b.md")
        return default_path


def test_second_export_of_same_document_is_rejected_while_running(writer):
    prompt = ReentrantPrompt()
    dispatcher = ExportDispatcher(prompt=prompt, writer=writer)
    prompt.dispatcher = dispatcher

    assert dispatcher.export("HTML", "# first", "github", "a.md") == "Exported as HTML"
    assert len(prompt.rejected) == 1
    assert prompt.rejected[0].source == "a.md"
    # a different document is not blocked by the running export
    assert [path for path, _ in writer.writes] == ["b.html", "a.html"]

    # latch released once the first export finished
    assert dispatcher.export("HTML", "# later", "github", "a.md") == "Exported as HTML"


def test_latch_holds_across_separate_export_file_calls(writer):
    rejected = []

    def overlapping_prompt(default_path, file_filter):
        try:
            export_file("HTML", "# again", "github", "a.md", prompt=RecordingPrompt(), writer=writer)
        except ExportInProgress as exc:
            rejected.append(exc)
        return default_path

    status = export_file("HTML", "# first", "github", "a.md", prompt=overlapping_prompt, writer=writer)

    assert status == "Exported as HTML"
    assert [exc.source for exc in rejected] == ["a.md"]
    assert len(writer.writes) == 1


def test_latch_is_shared_between_dispatchers(writer):
    other = ExportDispatcher(prompt=RecordingPrompt(), writer=writer)
    rejected = []

    def overlapping_prompt(default_path, file_filter):
        try:
            other.export("DOCX", "# again", "github", "a.md")
        except ExportInProgress as exc:
            rejected.append(exc)
        return default_path

    ExportDispatcher(prompt=overlapping_prompt, writer=writer).export("HTML", "# x", "github", "a.md")
    assert len(rejected) == 1


def test_export_file_one_shot(writer):
    status = export_file("HTML", "# x", "github", "a.md", prompt=RecordingPrompt(), writer=writer)
    assert status == "Exported as HTML"
    assert writer.writes[0][0] == "a.html"


def test_custom_renderer_is_used(prompt, writer):
    dispatcher = ExportDispatcher(
        renderer=lambda md: "<p>CUSTOM</p>" + render_markdown(md), prompt=prompt, writer=writer
    )
    dispatcher.export("HTML", "# x", "github", "a.md")
    assert "<p>CUSTOM</p>" in writer.data.decode("utf-8")
