"""
Report Summary
==============
Confidence statistics over an ExtractionReport, for display and triage:
    - Pages recognized / native / failed / cancelled
    - Low- and high-confidence page counts
    - Confidence distribution buckets (excellent, good, fair, poor)

Only recognized pages carry a confidence; native pages are counted as
successful but stay out of the distribution.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from .models import ErrorKind, ExtractionReport

logger = logging.getLogger(__name__)

LOW_CONFIDENCE = 0.70
HIGH_CONFIDENCE = 0.90
EXCELLENT_CONFIDENCE = 0.95
GOOD_CONFIDENCE = 0.85


class ConfidenceDistribution(BaseModel):
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


class ReportSummary(BaseModel):
    """Aggregated statistics for one extraction report."""
    total_pages: int = 0
    native_pages: int = 0
    recognized_pages: int = 0
    failed_pages: int = 0
    cancelled_pages: int = 0
    average_confidence: Optional[float] = None
    low_confidence_pages: list[int] = Field(default_factory=list)
    high_confidence_pages: int = 0
    distribution: ConfidenceDistribution = Field(
        default_factory=ConfidenceDistribution
    )
    error_breakdown: dict[str, int] = Field(default_factory=dict)

    @computed_field
    @property
    def success_rate(self) -> float:
        if self.total_pages == 0:
            return 0.0
        succeeded = self.total_pages - self.failed_pages
        return round(succeeded / self.total_pages * 100, 2)


def summarize(report: ExtractionReport) -> ReportSummary:
    """Build a ReportSummary from a finished report."""
    summary = ReportSummary(
        total_pages=report.total_pages,
        native_pages=report.native_pages,
        recognized_pages=report.recognized_pages,
        failed_pages=report.failed_pages,
        average_confidence=report.average_confidence,
    )

    for result in report.results:
        if result.error is not None:
            kind = result.error.kind.value
            summary.error_breakdown[kind] = summary.error_breakdown.get(kind, 0) + 1
            if result.error.kind == ErrorKind.CANCELLED:
                summary.cancelled_pages += 1
            continue

        conf = result.confidence
        if conf is None:
            continue

        if conf < LOW_CONFIDENCE:
            summary.low_confidence_pages.append(result.page_index)
        if conf >= HIGH_CONFIDENCE:
            summary.high_confidence_pages += 1

        if conf >= EXCELLENT_CONFIDENCE:
            summary.distribution.excellent += 1
        elif conf >= GOOD_CONFIDENCE:
            summary.distribution.good += 1
        elif conf >= LOW_CONFIDENCE:
            summary.distribution.fair += 1
        else:
            summary.distribution.poor += 1

    if summary.low_confidence_pages:
        logger.info(
            f"{len(summary.low_confidence_pages)} pages below "
            f"{LOW_CONFIDENCE:.0%} confidence: {summary.low_confidence_pages}"
        )
    return summary
