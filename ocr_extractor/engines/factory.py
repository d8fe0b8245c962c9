from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional

from .base import RecognitionEngine
from .paddle import PaddleOcrEngine
from .tesseract import TesseractEngine


class EngineName(str, Enum):
    """Recognition backend identifiers."""
    TESSERACT = "tesseract"
    PADDLE = "paddle"


ENGINE_MAP: dict[EngineName, type[RecognitionEngine]] = {
    EngineName.TESSERACT: TesseractEngine,
    EngineName.PADDLE: PaddleOcrEngine,
}


def create_engine(
    name: EngineName | str,
    languages: Optional[Mapping[str, str]] = None,
    **kwargs,
) -> RecognitionEngine:
    """
    Build the engine selected at configuration time.

    Raises:
        ValueError: If the name is not a known backend.
    """
    engine_name = EngineName(name)
    return ENGINE_MAP[engine_name](languages=languages, **kwargs)
