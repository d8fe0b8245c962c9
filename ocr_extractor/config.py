"""
Configuration
=============
Extraction options and logging setup. Options are always passed explicitly
into the pipeline; environment defaults are applied only by `from_env()`
at the process boundary.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from .engines.factory import EngineName
from .languages import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from .models import PixelFormat
from .rasterizer import validate_scale

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class WhitespacePolicy(str, Enum):
    """How to treat native text that contains only whitespace."""
    RECOGNIZE = "recognize"  # treat as empty, fall through to OCR
    KEEP_NATIVE = "keep-native"  # accept it as the page's native text


def default_concurrency() -> int:
    return os.cpu_count() or 1


@dataclass
class ExtractionOptions:
    """Options for one extraction run."""

    language: str = DEFAULT_LANGUAGE
    scale: float = 2.0
    force_ocr: bool = False

    # Worker pool size; None => os.cpu_count()
    concurrency: Optional[int] = None

    # Recognition backend and the language table it accepts
    engine: EngineName = EngineName.TESSERACT
    languages: Mapping[str, str] = field(
        default_factory=lambda: dict(SUPPORTED_LANGUAGES)
    )

    whitespace_policy: WhitespacePolicy = WhitespacePolicy.RECOGNIZE
    pixel_format: PixelFormat = PixelFormat.RGB

    def __post_init__(self) -> None:
        self.scale = validate_scale(self.scale)
        self.engine = EngineName(self.engine)
        self.whitespace_policy = WhitespacePolicy(self.whitespace_policy)
        self.pixel_format = PixelFormat(self.pixel_format)
        if self.concurrency is not None and self.concurrency < 1:
            raise ValueError("concurrency must be a positive integer")
        if not self.language:
            raise ValueError("language must be a non-empty code")

    @property
    def workers(self) -> int:
        return self.concurrency or default_concurrency()

    @classmethod
    def from_env(cls, **overrides) -> "ExtractionOptions":
        """
        Build options from OCR_* environment variables.

        Explicit keyword overrides that are not None win over the environment.
        """
        env = os.environ
        values = {
            "language": env.get("OCR_LANGUAGE", DEFAULT_LANGUAGE),
            "scale": float(env.get("OCR_SCALE", "2.0")),
            "force_ocr": env.get("OCR_FORCE", "").lower() in ("1", "true", "yes"),
            "engine": env.get("OCR_ENGINE", EngineName.TESSERACT.value),
        }
        if env.get("OCR_CONCURRENCY"):
            values["concurrency"] = int(env["OCR_CONCURRENCY"])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Attach console (and optional file) handlers to the package logger."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    package_logger = logging.getLogger("ocr_extractor")
    package_logger.setLevel(level)

    if not package_logger.handlers:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        package_logger.addHandler(console)
    else:
        for handler in package_logger.handlers:
            handler.setLevel(level)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        package_logger.addHandler(file_handler)
