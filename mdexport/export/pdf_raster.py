"""Paginated PDF export through a single tall raster image.

The themed article is rendered off-screen at a fixed width, captured as one
PNG and then placed on successive fixed-size pages. Every page shows the same
image shifted upward by one page height, so each page reveals the next slice
without cropping or re-encoding anything.
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from PIL import Image

from mdexport.core.config import ExportConfig, PageConfig
from mdexport.export.backends import load_fitz, load_playwright
from mdexport.export.html_document import build_raster_html

logger = logging.getLogger(__name__)

CONTAINER_ID = "export-container"
LIGHT_BACKGROUND = "#ffffff"
DARK_BACKGROUND = "#1a1918"


class RasterizationError(Exception):
    """Raised when the off-screen rendering cannot be captured."""
    pass


@dataclass(frozen=True)
class RasterImage:
    """PNG bytes plus their pixel dimensions."""

    png: bytes
    width: int
    height: int

    @classmethod
    def from_png(cls, png: bytes) -> "RasterImage":
        with Image.open(io.BytesIO(png)) as img:
            width, height = img.size
        return cls(png=png, width=width, height=height)


class Rasterizer(Protocol):
    """Layout-and-raster capability: ``render(html, width) -> image``."""

    def render(self, html: str, width: int) -> RasterImage:
        ...


class PlaywrightRasterizer:
    """Rasterize HTML with headless Chromium.

    Attributes:
        scale: Device scale factor used for print sharpness (default: 2)
        selector: Element captured from the page; the off-screen container
        wait_until: Playwright load state awaited before capturing
    """

    def __init__(
        self,
        scale: int = 2,
        selector: str = f"#{CONTAINER_ID}",
        wait_until: str = "load",
    ):
        self.scale = scale
        self.selector = selector
        self.wait_until = wait_until

    def render(self, html: str, width: int) -> RasterImage:
        playwright_api = load_playwright()
        try:
            with playwright_api.sync_playwright() as p:
                browser = p.chromium.launch()
                try:
                    page = browser.new_page(
                        viewport={"width": width, "height": 800},
                        device_scale_factor=self.scale,
                    )
                    page.set_content(html, wait_until=self.wait_until)
                    png = page.locator(self.selector).screenshot(type="png")
                finally:
                    browser.close()
        except playwright_api.Error as exc:
            logger.error("Playwright rasterization failed: %s", exc)
            raise RasterizationError("Playwright rasterization failed") from exc

        image = RasterImage.from_png(png)
        logger.debug("Rasterized container: %sx%s px", image.width, image.height)
        return image


def scaled_height(canvas_height: float, canvas_width: float, page_width: float) -> float:
    """Height of the image once scaled to the page width, in page units."""

    if canvas_width <= 0:
        raise RasterizationError(f"Invalid raster width: {canvas_width}")
    return canvas_height * page_width / canvas_width


def page_offsets(img_height: float, page_height: float) -> List[float]:
    """Vertical placement offsets, one per page.

    Page 1 places the image at 0; another page is added while
    ``img_height - page_height * pages_placed > 0``, each shifted up by one
    more page height. The length is ``ceil(img_height / page_height)`` (at
    least one page).
    """

    if page_height <= 0:
        raise ValueError(f"page_height must be positive, got {page_height}")
    offsets = [0.0]
    remaining = img_height - page_height
    while remaining > 0:
        offsets.append(-page_height * len(offsets))
        remaining -= page_height
    return offsets


def page_count(img_height: float, page_height: float) -> int:
    return max(1, math.ceil(img_height / page_height))


def build_pdf(image: RasterImage, page: Optional[PageConfig] = None) -> bytes:
    """Place ``image`` across as many pages as its scaled height needs."""

    geometry = page or PageConfig()
    fitz = load_fitz()

    page_w = geometry.width_pt
    page_h = geometry.height_pt
    img_h = scaled_height(image.height, image.width, page_w)
    offsets = page_offsets(img_h, page_h)

    doc = fitz.open()
    try:
        for offset in offsets:
            pdf_page = doc.new_page(width=page_w, height=page_h)
            # PDF page space grows downward from the top edge
            pdf_page.insert_image(
                fitz.Rect(0, offset, page_w, offset + img_h),
                stream=image.png,
                keep_proportion=False,
            )
        data = doc.tobytes(deflate=True)
    finally:
        doc.close()

    logger.info("Built PDF: %s pages (image height %.1fpt)", len(offsets), img_h)
    return data


def export_pdf_bytes(
    markdown: str,
    theme: str,
    renderer: Callable[[str], str],
    rasterizer: Rasterizer,
    theme_css: str = "",
    config: Optional[ExportConfig] = None,
) -> bytes:
    """Render, rasterize and paginate ``markdown`` into PDF bytes.

    Any rasterization error propagates before a single page is created.
    """
    cfg = config or ExportConfig()
    geometry = cfg.page
    background = DARK_BACKGROUND if cfg.is_dark(theme) else LIGHT_BACKGROUND

    container_html = build_raster_html(
        renderer(markdown),
        theme,
        theme_css=theme_css,
        width_px=geometry.render_width_px,
        padding_px=geometry.padding_px,
        background=background,
        container_id=CONTAINER_ID,
    )
    viewport_width = geometry.render_width_px + 2 * geometry.padding_px
    image = rasterizer.render(container_html, viewport_width)
    return build_pdf(image, geometry)


__all__ = [
    "PlaywrightRasterizer",
    "RasterImage",
    "RasterizationError",
    "Rasterizer",
    "build_pdf",
    "export_pdf_bytes",
    "page_count",
    "page_offsets",
    "scaled_height",
]
