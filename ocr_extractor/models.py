"""
Data Models
===========
Pydantic models for per-page extraction output and the aggregate report.
All result models are serializable to JSON for whatever storage layer the
caller uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ─── Enums ────────────────────────────────────────────────────────────────────


class SourceKind(str, Enum):
    """Where the text of a page came from."""
    NATIVE = "native"
    RECOGNIZED = "recognized"


class ErrorKind(str, Enum):
    """Page-scoped failure kinds."""
    PAGE_NOT_FOUND = "PageNotFound"
    RENDER_FAILURE = "RenderFailure"
    UNSUPPORTED_LANGUAGE = "UnsupportedLanguage"
    RECOGNITION_FAILURE = "RecognitionFailure"
    CANCELLED = "Cancelled"


class Stage(str, Enum):
    """Pipeline stage a page error originated from."""
    NATIVE = "native"
    RASTERIZE = "rasterize"
    RECOGNIZE = "recognize"
    DISPATCH = "dispatch"


class PixelFormat(str, Enum):
    RGB = "RGB"
    GRAY = "L"


# ─── Raster Buffer ────────────────────────────────────────────────────────────


# Plain dataclass: buffers can be tens of megabytes and are never serialized.
@dataclass(frozen=True)
class PageImage:
    """A decoded raster of one page. Transient, never persisted."""

    width: int
    height: int
    pixel_format: PixelFormat
    page_index: int  # 1-indexed
    samples: bytes

    def to_pil(self):
        """Return the buffer as a Pillow image."""
        from PIL import Image

        return Image.frombytes(
            self.pixel_format.value, (self.width, self.height), self.samples
        )


# ─── Recognition Output ───────────────────────────────────────────────────────


class RecognizedWord(BaseModel):
    """A single recognized word with its position in image pixels."""
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    bbox: tuple[float, float, float, float] = Field(
        description="Bounding box as (x0, y0, x1, y1)"
    )


class Recognition(BaseModel):
    """Return value of a recognition engine for one page image."""
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    words: list[RecognizedWord] = Field(default_factory=list)


# ─── Page Result ──────────────────────────────────────────────────────────────


class PageError(BaseModel):
    """Descriptor of a page that could not be extracted."""
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    stage: Stage
    message: str = ""


class PageResult(BaseModel):
    """
    Outcome for one page. Immutable once produced.

    Native pages carry no confidence; failed pages carry an error and
    neither a source nor a confidence.
    """
    model_config = ConfigDict(frozen=True)

    page_index: int = Field(ge=1)
    text: str = ""
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    source: Optional[SourceKind] = None
    error: Optional[PageError] = None
    words: list[RecognizedWord] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(
        cls, page_index: int, kind: ErrorKind, stage: Stage, message: str = ""
    ) -> "PageResult":
        return cls(
            page_index=page_index,
            error=PageError(kind=kind, stage=stage, message=message),
        )


# ─── Progress ─────────────────────────────────────────────────────────────────


class ProgressEvent(BaseModel):
    """Emitted once per completed page, in completion order."""
    completed: int = Field(ge=0)
    total: int = Field(ge=1)
    result: PageResult

    @property
    def page_index(self) -> int:
        return self.result.page_index


# ─── Report ───────────────────────────────────────────────────────────────────


class ExtractionReport(BaseModel):
    """
    Final aggregate of an extraction run.

    `results` always holds exactly one entry per page, in page order,
    failed and cancelled pages included.
    """
    results: list[PageResult] = Field(default_factory=list)
    total_pages: int = Field(ge=1)
    language: str = "eng"
    cancelled: bool = False

    @computed_field
    @property
    def failed_pages(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @computed_field
    @property
    def average_confidence(self) -> Optional[float]:
        scores = [r.confidence for r in self.results if r.confidence is not None]
        if not scores:
            return None
        return sum(scores) / len(scores)

    @computed_field
    @property
    def recognized_pages(self) -> int:
        return sum(1 for r in self.results if r.source == SourceKind.RECOGNIZED)

    @computed_field
    @property
    def native_pages(self) -> int:
        return sum(1 for r in self.results if r.source == SourceKind.NATIVE)

    @property
    def full_text(self) -> str:
        return "\n\n".join(r.text for r in self.results if r.text)
