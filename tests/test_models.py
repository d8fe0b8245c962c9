"""
Model and summary tests: PageResult, ExtractionReport aggregates,
serialization and ReportSummary statistics.
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from ocr_extractor.models import (
    ErrorKind,
    ExtractionReport,
    PageImage,
    PageResult,
    PixelFormat,
    ProgressEvent,
    SourceKind,
    Stage,
)
from ocr_extractor.summary import summarize


def _native(page_index, text="native text"):
    return PageResult(page_index=page_index, text=text, source=SourceKind.NATIVE)


def _recognized(page_index, confidence, text="ocr text"):
    return PageResult(
        page_index=page_index,
        text=text,
        confidence=confidence,
        source=SourceKind.RECOGNIZED,
    )


def _failed(page_index, kind=ErrorKind.RENDER_FAILURE, stage=Stage.RASTERIZE):
    return PageResult.failure(page_index, kind, stage, "boom")


# ═══════════════════════════════════════════════════════════════════════════════
# PAGE RESULT
# ═══════════════════════════════════════════════════════════════════════════════


class TestPageResult:
    """Test PageResult model."""

    def test_native_result_has_no_confidence(self):
        result = _native(1, "Hello")
        assert result.source == SourceKind.NATIVE
        assert result.confidence is None
        assert result.failed is False

    def test_failure_factory(self):
        result = _failed(3)
        assert result.failed is True
        assert result.text == ""
        assert result.confidence is None
        assert result.source is None
        assert result.error.kind == ErrorKind.RENDER_FAILURE
        assert result.error.stage == Stage.RASTERIZE

    def test_immutable(self):
        result = _native(1)
        with pytest.raises(ValidationError):
            result.text = "changed"

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            _recognized(1, 1.5)

    def test_page_index_is_one_based(self):
        with pytest.raises(ValidationError):
            _native(0)


class TestPageImage:
    """Test the raster buffer dataclass."""

    def test_to_pil_gray(self):
        image = PageImage(
            width=4,
            height=2,
            pixel_format=PixelFormat.GRAY,
            page_index=1,
            samples=bytes(8),
        )
        pil = image.to_pil()
        assert pil.size == (4, 2)
        assert pil.mode == "L"

    def test_to_pil_rgb(self):
        image = PageImage(
            width=3,
            height=3,
            pixel_format=PixelFormat.RGB,
            page_index=2,
            samples=bytes([255] * 27),
        )
        pil = image.to_pil()
        assert pil.mode == "RGB"
        assert pil.getpixel((0, 0)) == (255, 255, 255)


# ═══════════════════════════════════════════════════════════════════════════════
# EXTRACTION REPORT
# ═══════════════════════════════════════════════════════════════════════════════


class TestExtractionReport:
    """Test aggregate fields of ExtractionReport."""

    def test_average_over_recognized_pages_only(self):
        report = ExtractionReport(
            results=[_native(1), _recognized(2, 0.9), _recognized(3, 0.7), _failed(4)],
            total_pages=4,
        )
        assert report.average_confidence == pytest.approx(0.8)
        assert report.failed_pages == 1
        assert report.native_pages == 1
        assert report.recognized_pages == 2

    def test_average_undefined_for_all_native(self):
        report = ExtractionReport(results=[_native(1), _native(2)], total_pages=2)
        assert report.average_confidence is None

    def test_average_undefined_when_all_failed(self):
        report = ExtractionReport(results=[_failed(1), _failed(2)], total_pages=2)
        assert report.average_confidence is None
        assert report.failed_pages == 2

    def test_full_text_skips_empty_pages(self):
        report = ExtractionReport(
            results=[_native(1, "Hello"), _failed(2), _recognized(3, 0.9, "World")],
            total_pages=3,
        )
        assert report.full_text == "Hello\n\nWorld"

    def test_json_serialization(self):
        report = ExtractionReport(
            results=[_native(1, "Hello"), _recognized(2, 0.92, "World"), _failed(3)],
            total_pages=3,
            language="eng",
        )
        data = json.loads(report.model_dump_json())

        assert data["total_pages"] == 3
        assert data["failed_pages"] == 1
        assert data["average_confidence"] == pytest.approx(0.92)
        assert data["results"][0]["source"] == "native"
        assert data["results"][0]["confidence"] is None
        assert data["results"][2]["error"]["kind"] == "RenderFailure"
        assert data["results"][2]["error"]["stage"] == "rasterize"


class TestProgressEvent:

    def test_page_index_shortcut(self):
        event = ProgressEvent(completed=1, total=3, result=_native(2))
        assert event.page_index == 2


# ═══════════════════════════════════════════════════════════════════════════════
# SUMMARY
# ═══════════════════════════════════════════════════════════════════════════════


class TestSummary:
    """Test ReportSummary statistics."""

    def test_distribution_buckets(self):
        report = ExtractionReport(
            results=[
                _recognized(1, 0.97),
                _recognized(2, 0.88),
                _recognized(3, 0.75),
                _recognized(4, 0.40),
                _native(5),
            ],
            total_pages=5,
        )
        summary = summarize(report)

        assert summary.distribution.excellent == 1
        assert summary.distribution.good == 1
        assert summary.distribution.fair == 1
        assert summary.distribution.poor == 1
        assert summary.low_confidence_pages == [4]
        assert summary.high_confidence_pages == 1
        assert summary.native_pages == 1
        assert summary.success_rate == 100.0

    def test_error_breakdown_and_cancelled(self):
        report = ExtractionReport(
            results=[
                _native(1),
                _failed(2),
                _failed(3, ErrorKind.CANCELLED, Stage.DISPATCH),
                _failed(4, ErrorKind.CANCELLED, Stage.DISPATCH),
            ],
            total_pages=4,
            cancelled=True,
        )
        summary = summarize(report)

        assert summary.failed_pages == 3
        assert summary.cancelled_pages == 2
        assert summary.error_breakdown == {"RenderFailure": 1, "Cancelled": 2}
        assert summary.success_rate == 25.0
        assert summary.average_confidence is None
