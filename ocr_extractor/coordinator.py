"""
Extraction Coordinator
======================
Drives the Page Pipeline across every page of a document.

Usage:
    coordinator = ExtractionCoordinator()
    report = coordinator.extract("scan.pdf", ExtractionOptions(language="vie"))

Architecture:
    open_document → bounded ThreadPoolExecutor (one PagePipeline call per
    task) → results[page_index - 1] → ExtractionReport

Guarantees:
    - Exactly one PageResult per page, in page order
    - Page failures never abort other pages
    - Document failures abort before (or stop) dispatch and are raised
    - The document is closed on every exit path, after all workers return
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Optional, Union

from .config import ExtractionOptions
from .document import Document, DocumentSource, open_document
from .engines.base import RecognitionEngine
from .engines.factory import EngineName, create_engine
from .errors import ExtractionCancelled
from .models import (
    ExtractionReport,
    PageResult,
    ProgressEvent,
    Stage,
)
from .pipeline import PagePipeline
from .rasterizer import PageRasterizer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class CancelToken:
    """Cooperative cancellation signal, checked between pages."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ExtractionCoordinator:
    """
    Runs page extraction over a worker pool.

    Args:
        engine: Recognition engine to use. When omitted, one is built from
            `options.engine` and `options.languages` on each call.
        rasterizer: Custom rasterizer; defaults to one using
            `options.pixel_format`.
    """

    def __init__(
        self,
        engine: Optional[RecognitionEngine] = None,
        rasterizer: Optional[PageRasterizer] = None,
    ):
        self.engine = engine
        self.rasterizer = rasterizer

    def extract(
        self,
        source: DocumentSource,
        options: Optional[ExtractionOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ExtractionReport:
        """
        Extract text from every page of a document.

        Args:
            source: Path, bytes, or an open Document. The coordinator takes
                ownership of the document and closes it before returning.
            options: Extraction options (defaults apply when omitted).
            on_progress: Called once per completed page from the calling
                thread. Completion order is not page order.
            cancel: Optional token; once set, no further pages are dispatched.

        Returns:
            ExtractionReport with one result per page.

        Raises:
            DocumentOpenError: If the source cannot be opened.
            EmptyDocumentError: If the document has no pages.
            DocumentClosedError: If the handle is invalidated mid-run.
        """
        options = options or ExtractionOptions()
        engine = self.engine or create_engine(options.engine, languages=options.languages)
        pipeline = PagePipeline(
            engine, self.rasterizer or PageRasterizer(options.pixel_format)
        )

        start_time = time.time()
        document = open_document(source)
        try:
            logger.info(
                f"Extracting {document.name}: {document.page_count} pages, "
                f"language={options.language}, engine={engine.name}, "
                f"force_ocr={options.force_ocr}"
            )
            results = self._run_pool(document, pipeline, options, on_progress, cancel)
        finally:
            document.close()

        missing = [i for i, r in enumerate(results, start=1) if r is None]
        for page_index in missing:
            error = ExtractionCancelled(
                "Extraction cancelled before page was dispatched", page_index
            )
            results[page_index - 1] = PageResult.failure(
                page_index, error.kind, Stage.DISPATCH, error.message
            )

        report = ExtractionReport(
            results=results,
            total_pages=len(results),
            language=options.language,
            cancelled=bool(missing),
        )

        elapsed = time.time() - start_time
        logger.info(
            f"Extraction complete in {elapsed:.2f}s — "
            f"{report.native_pages} native, {report.recognized_pages} recognized, "
            f"{report.failed_pages} failed"
            + (f" ({len(missing)} cancelled)" if missing else "")
        )
        return report

    def _run_pool(
        self,
        document: Document,
        pipeline: PagePipeline,
        options: ExtractionOptions,
        on_progress: Optional[ProgressCallback],
        cancel: Optional[CancelToken],
    ) -> list[Optional[PageResult]]:
        total = document.page_count
        workers = min(options.workers, total)
        results: list[Optional[PageResult]] = [None] * total
        next_pages = iter(range(1, total + 1))
        in_flight: dict[Future, int] = {}
        completed = 0

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="ocr-page"
        ) as pool:

            def dispatch():
                while len(in_flight) < workers:
                    if cancel is not None and cancel.cancelled:
                        return
                    page_index = next(next_pages, None)
                    if page_index is None:
                        return
                    future = pool.submit(
                        pipeline.process_page, document, page_index, options
                    )
                    in_flight[future] = page_index

            dispatch()
            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in sorted(done, key=in_flight.get):
                    page_index = in_flight.pop(future)
                    # Document-scoped errors re-raise here; leaving the
                    # executor block waits for the remaining in-flight pages.
                    result = future.result()
                    results[page_index - 1] = result
                    completed += 1

                    if on_progress:
                        on_progress(ProgressEvent(
                            completed=completed, total=total, result=result
                        ))
                dispatch()

        if cancel is not None and cancel.cancelled and completed < total:
            logger.info(f"Cancelled after {completed}/{total} pages")
        return results


def extract(
    source: DocumentSource,
    language: str = "eng",
    scale: float = 2.0,
    force_ocr: bool = False,
    concurrency: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelToken] = None,
    engine: Union[EngineName, str, RecognitionEngine] = EngineName.TESSERACT,
    **option_kwargs,
) -> ExtractionReport:
    """Convenience wrapper: build options and run one extraction."""
    engine_instance = engine if isinstance(engine, RecognitionEngine) else None
    options = ExtractionOptions(
        language=language,
        scale=scale,
        force_ocr=force_ocr,
        concurrency=concurrency,
        engine=EngineName.TESSERACT if engine_instance else engine,
        **option_kwargs,
    )
    coordinator = ExtractionCoordinator(engine=engine_instance)
    return coordinator.extract(source, options, on_progress=on_progress, cancel=cancel)
