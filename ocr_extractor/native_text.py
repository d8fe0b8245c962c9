"""
Native Text Extractor
=====================
Reads embedded text spans straight from the page content stream.
"""

from __future__ import annotations

import logging

from .document import Document
from .errors import RenderError

logger = logging.getLogger(__name__)


def extract_native(document: Document, page_index: int) -> str:
    """
    Join every embedded text span on the page with single spaces.

    Spans are taken in the order they are stored in the document, which is
    not necessarily visual reading order. Pages without embedded text
    return an empty string.
    """
    with document.page(page_index) as page:
        try:
            page_dict = page.get_text("dict", sort=False)
        except Exception as e:
            raise RenderError(
                f"Cannot read text of page {page_index}: {e}", page_index
            ) from e

    runs = []
    for block in page_dict.get("blocks", []):
        if block.get("type") != 0:  # 0 = text, 1 = image
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if text:
                    runs.append(text)

    logger.debug(f"Page {page_index}: {len(runs)} native text runs")
    return " ".join(runs)
