"""
Error Taxonomy
==============
Page-scoped errors are recorded on the affected PageResult and never stop the
rest of the document. Document-scoped errors abort the whole extraction.
"""

from __future__ import annotations

from typing import Optional

from .models import ErrorKind


class ExtractionError(Exception):
    """Base class for all extraction errors."""


# ─── Page-scoped ──────────────────────────────────────────────────────────────


class PageExtractionError(ExtractionError):
    """A failure confined to a single page."""

    kind: ErrorKind = ErrorKind.RECOGNITION_FAILURE

    def __init__(self, message: str, page_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.page_index = page_index


class PageNotFoundError(PageExtractionError):
    kind = ErrorKind.PAGE_NOT_FOUND


class RenderError(PageExtractionError):
    """Page content could not be decoded."""

    kind = ErrorKind.RENDER_FAILURE


class UnsupportedLanguageError(PageExtractionError):
    kind = ErrorKind.UNSUPPORTED_LANGUAGE

    def __init__(self, language: str, page_index: Optional[int] = None):
        super().__init__(f"Unsupported language: {language!r}", page_index)
        self.language = language


class RecognitionError(PageExtractionError):
    """Engine crash, malformed image, timeout or missing backend."""

    kind = ErrorKind.RECOGNITION_FAILURE


class ExtractionCancelled(PageExtractionError):
    """The page was never dispatched because the caller cancelled."""

    kind = ErrorKind.CANCELLED


# ─── Document-scoped ──────────────────────────────────────────────────────────


class DocumentError(ExtractionError):
    """A failure that invalidates the whole document."""


class DocumentOpenError(DocumentError):
    pass


class EmptyDocumentError(DocumentError):
    pass


class DocumentClosedError(DocumentError):
    pass
