from __future__ import annotations

import pytest

from helpers import FakeEngine, build_pdf_bytes, write_pdf

from ocr_extractor.document import open_document


@pytest.fixture
def make_pdf(tmp_path):
    """Factory: make_pdf(["Hello", None, ...]) -> path of a written PDF."""
    counter = {"n": 0}

    def _make(pages, **kwargs):
        counter["n"] += 1
        return write_pdf(tmp_path / f"doc_{counter['n']}.pdf", pages, **kwargs)

    return _make


@pytest.fixture
def open_pdf():
    """Factory: open_pdf(["Hello", None]) -> open Document, closed at teardown."""
    opened = []

    def _open(pages, **kwargs):
        doc = open_document(build_pdf_bytes(pages, **kwargs))
        opened.append(doc)
        return doc

    yield _open
    for doc in opened:
        doc.close()


@pytest.fixture
def fake_engine():
    return FakeEngine()
