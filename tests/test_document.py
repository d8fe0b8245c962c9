"""
Document handle, rasterizer and native text extractor tests, run against
real PDFs built in memory with PyMuPDF.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import fitz
import pytest

from helpers import build_pdf_bytes

from ocr_extractor.document import Document, open_document
from ocr_extractor.errors import (
    DocumentClosedError,
    DocumentOpenError,
    EmptyDocumentError,
    PageNotFoundError,
    RenderError,
)
from ocr_extractor.models import PixelFormat
from ocr_extractor.native_text import extract_native
from ocr_extractor.rasterizer import PageRasterizer


# ═══════════════════════════════════════════════════════════════════════════════
# DOCUMENT
# ═══════════════════════════════════════════════════════════════════════════════


class TestOpenDocument:
    """Test resolving sources into Document handles."""

    def test_open_path(self, make_pdf):
        path = make_pdf(["one", "two", None])
        doc = open_document(path)
        assert doc.page_count == 3
        assert doc.name == path.name
        assert doc.is_closed is False
        doc.close()
        assert doc.is_closed is True

    def test_open_bytes(self):
        doc = open_document(build_pdf_bytes(["only"]))
        assert doc.page_count == 1
        assert doc.name == "<bytes>"
        doc.close()

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentOpenError):
            open_document(tmp_path / "missing.pdf")

    def test_garbage_bytes(self):
        with pytest.raises(DocumentOpenError):
            open_document(b"definitely not a pdf")

    def test_zero_pages(self):
        handle = MagicMock()
        handle.page_count = 0
        with pytest.raises(EmptyDocumentError):
            open_document(Document(handle, name="empty.pdf"))
        handle.close.assert_called_once()

    def test_closed_handle_rejected(self, open_pdf):
        doc = open_pdf(["x"])
        doc.close()
        with pytest.raises(DocumentClosedError):
            open_document(doc)

    def test_image_opens_as_single_page(self, tmp_path):
        pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 40, 30), False)
        pix.clear_with(255)
        image_path = tmp_path / "scan.png"
        pix.save(str(image_path))

        doc = open_document(image_path)
        assert doc.page_count == 1
        assert extract_native(doc, 1) == ""
        doc.close()

    def test_close_is_idempotent(self, open_pdf):
        doc = open_pdf(["x"])
        doc.close()
        doc.close()
        assert doc.is_closed

    def test_context_manager_closes(self):
        with open_document(build_pdf_bytes(["x"])) as doc:
            assert not doc.is_closed
        assert doc.is_closed


class TestPageAccess:

    def test_out_of_range(self, open_pdf):
        doc = open_pdf(["a", "b"])
        with pytest.raises(PageNotFoundError):
            with doc.page(0):
                pass
        with pytest.raises(PageNotFoundError):
            with doc.page(3):
                pass

    def test_access_after_close(self, open_pdf):
        doc = open_pdf(["a"])
        doc.close()
        with pytest.raises(DocumentClosedError):
            with doc.page(1):
                pass


# ═══════════════════════════════════════════════════════════════════════════════
# RASTERIZER
# ═══════════════════════════════════════════════════════════════════════════════


class TestPageRasterizer:
    """Test page rendering."""

    def test_scale_multiplies_point_size(self, open_pdf):
        doc = open_pdf([None], width=200, height=100)
        image = PageRasterizer().render(doc, 1, 2.0)

        assert (image.width, image.height) == (400, 200)
        assert image.page_index == 1
        assert image.pixel_format == PixelFormat.RGB
        assert len(image.samples) == 400 * 200 * 3

    def test_gray_format(self, open_pdf):
        doc = open_pdf([None], width=200, height=100)
        image = PageRasterizer(PixelFormat.GRAY).render(doc, 1, 1.0)

        assert (image.width, image.height) == (200, 100)
        assert len(image.samples) == 200 * 100
        assert image.to_pil().mode == "L"

    def test_each_call_allocates_new_buffer(self, open_pdf):
        doc = open_pdf(["text"])
        rasterizer = PageRasterizer()
        first = rasterizer.render(doc, 1, 1.0)
        second = rasterizer.render(doc, 1, 1.0)
        assert first is not second
        assert first.samples == second.samples

    @pytest.mark.parametrize("scale", [0.1, 0.49, 4.01, 10.0])
    def test_scale_out_of_range(self, open_pdf, scale):
        doc = open_pdf([None])
        with pytest.raises(ValueError):
            PageRasterizer().render(doc, 1, scale)

    def test_page_not_found(self, open_pdf):
        doc = open_pdf([None, None])
        with pytest.raises(PageNotFoundError):
            PageRasterizer().render(doc, 5, 2.0)

    def test_decode_failure(self, open_pdf):
        doc = open_pdf([None])
        with patch.object(fitz.Page, "get_pixmap", side_effect=RuntimeError("corrupt")):
            with pytest.raises(RenderError):
                PageRasterizer().render(doc, 1, 2.0)


# ═══════════════════════════════════════════════════════════════════════════════
# NATIVE TEXT
# ═══════════════════════════════════════════════════════════════════════════════


class TestNativeText:
    """Test embedded text extraction."""

    def test_single_run(self, open_pdf):
        doc = open_pdf(["Hello"])
        assert extract_native(doc, 1) == "Hello"

    def test_runs_joined_with_single_space(self, open_pdf):
        doc = open_pdf([["Hello", "World"]])
        assert extract_native(doc, 1) == "Hello World"

    def test_blank_page_returns_empty_string(self, open_pdf):
        doc = open_pdf(["first", None])
        assert extract_native(doc, 2) == ""

    def test_page_not_found(self, open_pdf):
        doc = open_pdf(["a"])
        with pytest.raises(PageNotFoundError):
            extract_native(doc, 2)

    def test_decode_failure(self, open_pdf):
        doc = open_pdf(["a"])
        with patch.object(fitz.Page, "get_text", side_effect=RuntimeError("bad stream")):
            with pytest.raises(RenderError):
                extract_native(doc, 1)
