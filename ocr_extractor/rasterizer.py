"""
Page Rasterizer
===============
Renders a single page into a raster buffer using PyMuPDF pixmaps.
"""

from __future__ import annotations

import logging

import fitz  # PyMuPDF

from .document import Document
from .errors import RenderError
from .models import PageImage, PixelFormat

logger = logging.getLogger(__name__)

MIN_SCALE = 0.5
MAX_SCALE = 4.0


def validate_scale(scale: float) -> float:
    if not MIN_SCALE <= scale <= MAX_SCALE:
        raise ValueError(
            f"scale must be within [{MIN_SCALE}, {MAX_SCALE}], got {scale}"
        )
    return float(scale)


class PageRasterizer:
    """
    Renders pages at a multiple of their native point size.

    A scale of 1.0 yields 72 DPI, 2.0 yields 144 DPI. Each call allocates
    a fresh buffer; nothing is cached.
    """

    def __init__(self, pixel_format: PixelFormat = PixelFormat.RGB):
        self.pixel_format = pixel_format

    def render(self, document: Document, page_index: int, scale: float) -> PageImage:
        scale = validate_scale(scale)
        colorspace = (
            fitz.csGRAY if self.pixel_format == PixelFormat.GRAY else fitz.csRGB
        )

        with document.page(page_index) as page:
            try:
                pix = page.get_pixmap(
                    matrix=fitz.Matrix(scale, scale),
                    colorspace=colorspace,
                    alpha=False,
                )
                image = PageImage(
                    width=pix.width,
                    height=pix.height,
                    pixel_format=self.pixel_format,
                    page_index=page_index,
                    samples=bytes(pix.samples),
                )
            except Exception as e:
                raise RenderError(
                    f"Cannot render page {page_index}: {e}", page_index
                ) from e

        logger.debug(
            f"Rendered page {page_index} at x{scale} "
            f"({image.width}x{image.height} {self.pixel_format.name})"
        )
        return image
