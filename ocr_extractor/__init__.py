"""
OCR Extractor
=============
Page-level text extraction for native and scanned documents.

Architecture:
    - Document: Read-only handle over a PyMuPDF document (PDF or image)
    - Page Rasterizer: Renders one page into a pixel buffer at a given scale
    - Native Text Extractor: Pulls embedded text spans without rendering
    - Recognition Engines: Pluggable OCR backends (Tesseract, PaddleOCR)
    - Page Pipeline: Native-first, OCR-fallback processing of a single page
    - Extraction Coordinator: Worker pool, progress, cancellation, report

Version: 1.0.0
"""

__version__ = "1.0.0"

from .coordinator import CancelToken, ExtractionCoordinator, extract
from .config import ExtractionOptions, WhitespacePolicy
from .models import (
    ErrorKind,
    ExtractionReport,
    PageError,
    PageResult,
    ProgressEvent,
    SourceKind,
)

__all__ = [
    "CancelToken",
    "ErrorKind",
    "ExtractionCoordinator",
    "ExtractionOptions",
    "ExtractionReport",
    "PageError",
    "PageResult",
    "ProgressEvent",
    "SourceKind",
    "WhitespacePolicy",
    "extract",
]
