"""
Page Pipeline
=============
Native-first processing of a single page:

    native text ──(non-empty)──────────────────────────▶ PageResult(native)
        │
        └─(empty / force_ocr)─▶ rasterize ─▶ recognize ─▶ PageResult(recognized)

Page-scoped failures at any stage are folded into PageResult.error so the
caller can move on to the next page. Document-scoped errors propagate.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ExtractionOptions, WhitespacePolicy
from .document import Document
from .engines.base import RecognitionEngine
from .errors import (
    DocumentError,
    PageExtractionError,
    RecognitionError,
    RenderError,
    UnsupportedLanguageError,
)
from .languages import is_supported
from .models import PageResult, SourceKind, Stage
from .native_text import extract_native
from .rasterizer import PageRasterizer

logger = logging.getLogger(__name__)


class PagePipeline:
    """
    Turns one page into a PageResult.

    Safe to share between worker threads: it holds no per-page state.
    """

    def __init__(
        self,
        engine: RecognitionEngine,
        rasterizer: Optional[PageRasterizer] = None,
    ):
        self.engine = engine
        self.rasterizer = rasterizer or PageRasterizer()

    def process_page(
        self, document: Document, page_index: int, options: ExtractionOptions
    ) -> PageResult:
        stage = Stage.NATIVE
        try:
            if not options.force_ocr:
                text = extract_native(document, page_index)
                if self._has_native_text(text, options.whitespace_policy):
                    logger.debug(f"Page {page_index}: native text ({len(text)} chars)")
                    return PageResult(
                        page_index=page_index,
                        text=text,
                        source=SourceKind.NATIVE,
                    )

            stage = Stage.RECOGNIZE
            # The options table binds even when the engine's own table is wider
            if not is_supported(options.language, options.languages):
                raise UnsupportedLanguageError(options.language, page_index)
            self.engine.check_language(options.language, page_index)

            stage = Stage.RASTERIZE
            image = self.rasterizer.render(document, page_index, options.scale)

            stage = Stage.RECOGNIZE
            recognition = self.engine.recognize(image, options.language)

        except DocumentError:
            raise
        except PageExtractionError as e:
            return self._failed(page_index, stage, e)
        except Exception as e:
            # Unexpected errors are attributed to the stage they came from
            wrapped = (
                RecognitionError(str(e), page_index)
                if stage == Stage.RECOGNIZE
                else RenderError(str(e), page_index)
            )
            logger.debug(f"Page {page_index}: unexpected error", exc_info=True)
            return self._failed(page_index, stage, wrapped)

        logger.debug(
            f"Page {page_index}: recognized {len(recognition.text)} chars "
            f"(confidence {recognition.confidence:.2f})"
        )
        return PageResult(
            page_index=page_index,
            text=recognition.text,
            confidence=recognition.confidence,
            source=SourceKind.RECOGNIZED,
            words=recognition.words,
        )

    @staticmethod
    def _has_native_text(text: str, policy: WhitespacePolicy) -> bool:
        if policy == WhitespacePolicy.KEEP_NATIVE:
            return bool(text)
        return bool(text.strip())

    @staticmethod
    def _failed(page_index: int, stage: Stage, error: PageExtractionError) -> PageResult:
        logger.warning(
            f"Page {page_index} failed at {stage.value}: "
            f"{error.kind.value}: {error.message}"
        )
        return PageResult.failure(page_index, error.kind, stage, error.message)
