"""
Document Handle
===============
Read-only wrapper over a PyMuPDF document. PDFs and single images
(PNG, JPEG, TIFF, ...) both open as paginated documents.

PyMuPDF objects must not be used from several threads at once, so every
page access goes through `Document.page()`, which holds the handle lock
for the duration of the block.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import fitz  # PyMuPDF

from .errors import (
    DocumentClosedError,
    DocumentOpenError,
    EmptyDocumentError,
    PageNotFoundError,
    RenderError,
)

logger = logging.getLogger(__name__)

DocumentSource = Union[str, os.PathLike, bytes, "Document"]


class Document:
    """
    Paginated source owned by one extraction call.

    Attributes:
        name: Display name (file name, or "<bytes>").
        page_count: Number of pages, fixed once opened.
    """

    def __init__(self, handle: fitz.Document, name: str = "<document>"):
        self._handle = handle
        self._lock = threading.Lock()
        self._closed = False
        self.name = name
        self.page_count = handle.page_count

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def metadata(self) -> dict:
        with self._lock:
            self._ensure_open()
            return dict(self._handle.metadata or {})

    def close(self):
        """Close the underlying handle. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._handle.close()
        logger.debug(f"Closed document {self.name}")

    def check_page_index(self, page_index: int):
        if not 1 <= page_index <= self.page_count:
            raise PageNotFoundError(
                f"Page {page_index} outside [1, {self.page_count}]",
                page_index,
            )

    @contextmanager
    def page(self, page_index: int) -> Iterator[fitz.Page]:
        """
        Yield the PyMuPDF page for a 1-based index while holding the lock.

        Raises:
            PageNotFoundError: If the index is out of range.
            RenderError: If the page object cannot be loaded.
            DocumentClosedError: If the document was closed.
        """
        self.check_page_index(page_index)
        with self._lock:
            self._ensure_open()
            try:
                page = self._handle.load_page(page_index - 1)
            except Exception as e:
                raise RenderError(
                    f"Cannot load page {page_index}: {e}", page_index
                ) from e
            yield page

    def _ensure_open(self):
        if self._closed:
            raise DocumentClosedError(f"Document {self.name} is closed")

    def __enter__(self) -> "Document":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Document {self.name!r} pages={self.page_count} {state}>"


def open_document(
    source: DocumentSource, filetype: Optional[str] = None
) -> Document:
    """
    Resolve a path, a byte buffer, or an existing handle into a Document.

    Args:
        source: Filesystem path, raw bytes, or an open Document.
        filetype: Optional type hint for byte buffers ("pdf", "png", ...).

    Raises:
        DocumentOpenError: If the source cannot be opened.
        EmptyDocumentError: If the document has no pages.
    """
    if isinstance(source, Document):
        if source.is_closed:
            raise DocumentClosedError(f"Document {source.name} is closed")
        doc = source
    elif isinstance(source, (bytes, bytearray)):
        try:
            handle = fitz.open(stream=bytes(source), filetype=filetype or "pdf")
        except Exception as e:
            raise DocumentOpenError(f"Cannot open document from bytes: {e}") from e
        doc = Document(handle, name="<bytes>")
    else:
        path = Path(source)
        if not path.exists():
            raise DocumentOpenError(f"Document not found: {path}")
        try:
            handle = fitz.open(str(path), filetype=filetype)
        except Exception as e:
            raise DocumentOpenError(f"Cannot open document {path}: {e}") from e
        doc = Document(handle, name=path.name)

    if doc.page_count < 1:
        doc.close()
        raise EmptyDocumentError(f"Document {doc.name} has no pages")

    logger.debug(f"Opened {doc.name} ({doc.page_count} pages)")
    return doc
