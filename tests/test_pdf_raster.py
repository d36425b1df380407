"""Tests for raster pagination and the Playwright rasterizer."""

import math
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeRasterizer, make_png
from mdexport.core.config import ExportConfig, PageConfig
from mdexport.export.backends import BackendUnavailable
from mdexport.export.pdf_raster import (
    PlaywrightRasterizer,
    RasterImage,
    RasterizationError,
    build_pdf,
    export_pdf_bytes,
    page_count,
    page_offsets,
    scaled_height,
)
from mdexport.render import render_markdown


# ============================================================================
# Pagination arithmetic
# ============================================================================


def test_scaled_height_keeps_aspect_ratio():
    assert scaled_height(1640, 820, 210) == pytest.approx(420)


def test_scaled_height_rejects_zero_width():
    with pytest.raises(RasterizationError):
        scaled_height(100, 0, 210)


def test_page_offsets_for_650_on_297():
    assert page_offsets(650, 297) == [0.0, -297.0, -594.0]
    assert page_count(650, 297) == 3


def test_exact_multiple_does_not_add_blank_page():
    assert len(page_offsets(594, 297)) == 2
    assert page_count(594, 297) == 2


def test_short_image_is_single_page():
    assert page_offsets(10, 297) == [0.0]
    assert page_count(0, 297) == 1


@pytest.mark.parametrize("img_h", [1, 296.9, 297, 297.1, 1000, 5000.5])
def test_offset_count_matches_ceiling(img_h):
    offsets = page_offsets(img_h, 297)
    assert len(offsets) == max(1, math.ceil(img_h / 297))
    assert offsets == [-297.0 * i for i in range(len(offsets))]


def test_page_offsets_rejects_non_positive_page():
    with pytest.raises(ValueError):
        page_offsets(100, 0)


# ============================================================================
# PDF assembly
# ============================================================================


def test_build_pdf_pages_and_size():
    fitz = pytest.importorskip("fitz")
    page = PageConfig()
    # 100x300 px scales to ~1786pt on a 595pt-wide page: 3 A4 pages
    data = build_pdf(RasterImage.from_png(make_png(100, 300)), page)

    doc = fitz.open(stream=data, filetype="pdf")
    try:
        assert doc.page_count == 3
        first = doc[0].rect
        assert first.width == pytest.approx(page.width_pt, abs=0.5)
        assert first.height == pytest.approx(page.height_pt, abs=0.5)
        assert all(len(p.get_images()) == 1 for p in doc)
    finally:
        doc.close()


def test_export_pdf_bytes_renders_container_at_fixed_width():
    pytest.importorskip("fitz")
    rasterizer = FakeRasterizer(width=100, height=50)
    data = export_pdf_bytes("# Title", "github", render_markdown, rasterizer)

    assert data.startswith(b"%PDF")
    html, width = rasterizer.calls[0]
    assert width == 900
    assert 'id="export-container"' in html
    assert "width:820px;padding:40px" in html
    assert "theme-github" in html
    assert "#ffffff" in html


def test_dark_theme_uses_dark_background():
    pytest.importorskip("fitz")
    rasterizer = FakeRasterizer(width=100, height=50)
    export_pdf_bytes("text", "dark", render_markdown, rasterizer, config=ExportConfig())
    html, _ = rasterizer.calls[0]
    assert "background:#1a1918" in html


def test_rasterization_failure_creates_no_pages():
    failing = MagicMock()
    failing.render.side_effect = RasterizationError("no browser")
    with patch("mdexport.export.pdf_raster.build_pdf") as build:
        with pytest.raises(RasterizationError):
            export_pdf_bytes("text", "github", render_markdown, failing)
    build.assert_not_called()


# ============================================================================
# Playwright rasterizer
# ============================================================================


def _fake_playwright(png: bytes):
    api = MagicMock()
    api.Error = type("Error", (Exception,), {})
    p = api.sync_playwright.return_value.__enter__.return_value
    browser = p.chromium.launch.return_value
    page = browser.new_page.return_value
    page.locator.return_value.screenshot.return_value = png
    return api, browser, page


def test_playwright_rasterizer_captures_container():
    api, browser, page = _fake_playwright(make_png(1800, 400))
    with patch("mdexport.export.pdf_raster.load_playwright", return_value=api):
        image = PlaywrightRasterizer(scale=2).render("<html></html>", 900)

    assert (image.width, image.height) == (1800, 400)
    browser.new_page.assert_called_once_with(
        viewport={"width": 900, "height": 800}, device_scale_factor=2
    )
    page.locator.assert_called_once_with("#export-container")
    browser.close.assert_called_once()


def test_playwright_errors_become_rasterization_errors():
    api, browser, page = _fake_playwright(b"")
    page.set_content.side_effect = api.Error("crashed")
    with patch("mdexport.export.pdf_raster.load_playwright", return_value=api):
        with pytest.raises(RasterizationError):
            PlaywrightRasterizer().render("<html></html>", 900)
    browser.close.assert_called_once()


@pytest.mark.slow
def test_playwright_smoke():
    rasterizer = PlaywrightRasterizer()
    html = '<div id="export-container" style="width:200px;height:100px">hi</div>'
    try:
        image = rasterizer.render(html, 300)
    except (BackendUnavailable, RasterizationError) as exc:
        pytest.skip(f"Chromium not available: {exc}")
    assert image.width == 400
    assert image.height == 200
