"""Shared test doubles and document builders."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Optional, Union

import fitz  # PyMuPDF

from ocr_extractor.engines.base import RecognitionEngine
from ocr_extractor.errors import RenderError
from ocr_extractor.models import PageImage, Recognition
from ocr_extractor.rasterizer import PageRasterizer

PageContent = Union[str, list[str], None]


def build_pdf_bytes(pages: list[PageContent], width: float = 200, height: float = 100) -> bytes:
    """
    Build a PDF in memory.

    Each entry is the native text of a page: a string, a list of separate
    text runs, or None for a blank (scanned-looking) page.
    """
    doc = fitz.open()
    for content in pages:
        page = doc.new_page(width=width, height=height)
        runs = [content] if isinstance(content, str) else (content or [])
        for i, run in enumerate(runs):
            page.insert_text((10, 20 + 15 * i), run, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


def write_pdf(path: Path, pages: list[PageContent], **kwargs) -> Path:
    path.write_bytes(build_pdf_bytes(pages, **kwargs))
    return path


class FakeEngine(RecognitionEngine):
    """
    Scripted recognition engine.

    `outcomes` maps page index to a Recognition or an exception to raise;
    pages not listed get `default`. Calls are recorded in `calls`.
    """

    name = "fake"

    def __init__(
        self,
        outcomes: Optional[dict] = None,
        default: Optional[Recognition] = None,
        delays: Optional[dict[int, float]] = None,
        languages=None,
    ):
        super().__init__(languages)
        self.outcomes = outcomes or {}
        self.default = default or Recognition(text="scanned", confidence=0.8)
        self.delays = delays or {}
        self.calls: list[int] = []
        self.images: list[PageImage] = []
        self._lock = threading.Lock()

    def recognize(self, image: PageImage, language: str) -> Recognition:
        self.check_language(language, image.page_index)
        with self._lock:
            self.calls.append(image.page_index)
            self.images.append(image)
        if image.page_index in self.delays:
            time.sleep(self.delays[image.page_index])
        outcome = self.outcomes.get(image.page_index, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FailingRasterizer(PageRasterizer):
    """Raises RenderError for the given pages, renders the rest."""

    def __init__(self, failing_pages: set[int]):
        super().__init__()
        self.failing_pages = failing_pages
        self.rendered: list[int] = []
        self._lock = threading.Lock()

    def render(self, document, page_index, scale):
        if page_index in self.failing_pages:
            raise RenderError(f"Corrupt page object {page_index}", page_index)
        with self._lock:
            self.rendered.append(page_index)
        return super().render(document, page_index, scale)
