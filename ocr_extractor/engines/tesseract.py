"""
Tesseract Engine
================
Tesseract OCR through pytesseract, parsed from word-level `image_to_data`
output. Per-word scores (0..100, -1 for non-word rows) are averaged into a
single page confidence.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import pytesseract

from ..errors import RecognitionError
from ..languages import split_language
from ..models import PageImage, Recognition, RecognizedWord
from .base import RecognitionEngine

logger = logging.getLogger(__name__)


def _normalize_confidence(raw_conf) -> Optional[float]:
    try:
        conf = float(raw_conf)
    except (TypeError, ValueError):
        return None
    if conf < 0:
        return None
    return max(0.0, min(1.0, conf / 100.0))


class TesseractEngine(RecognitionEngine):
    """
    Args:
        languages: Supported language table (code -> display name).
        psm: Optional Tesseract page segmentation mode.
        timeout: Seconds before Tesseract is killed (0 = no limit).
    """

    name = "tesseract"

    def __init__(
        self,
        languages: Optional[Mapping[str, str]] = None,
        psm: Optional[int] = None,
        timeout: float = 0,
    ):
        super().__init__(languages)
        self.psm = psm
        self.timeout = timeout

    def recognize(self, image: PageImage, language: str) -> Recognition:
        self.check_language(language, image.page_index)
        language = "+".join(split_language(language))

        config = f"--psm {self.psm}" if self.psm is not None else ""
        try:
            data = pytesseract.image_to_data(
                image.to_pil(),
                lang=language,
                config=config,
                output_type=pytesseract.Output.DICT,
                timeout=self.timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionError(
                f"tesseract binary not found: {e}", image.page_index
            ) from e
        except Exception as e:
            # TesseractError, or RuntimeError on timeout
            raise RecognitionError(
                f"Tesseract failed on page {image.page_index}: {e}",
                image.page_index,
            ) from e

        return self._build_recognition(data)

    def _build_recognition(self, data: dict) -> Recognition:
        lines: dict[tuple[int, int, int], list[str]] = {}
        words: list[RecognizedWord] = []
        scores: list[float] = []

        for i, raw_text in enumerate(data.get("text", [])):
            text = (raw_text or "").strip()
            conf = _normalize_confidence(data["conf"][i])
            if not text or conf is None:
                continue

            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(text)
            scores.append(conf)

            left, top = data["left"][i], data["top"][i]
            words.append(RecognizedWord(
                text=text,
                confidence=conf,
                bbox=(left, top, left + data["width"][i], top + data["height"][i]),
            ))

        text = "\n".join(" ".join(line) for line in lines.values())
        confidence = sum(scores) / len(scores) if scores else 0.0
        return Recognition(text=text, confidence=confidence, words=words)
