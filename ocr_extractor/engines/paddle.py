"""
PaddleOCR Engine
================
Alternative backend for complex layouts and CJK scripts. PaddleOCR is an
optional dependency (`pip install ocr-extractor[paddle]`) and is imported
lazily the first time a page is recognized.
"""

from __future__ import annotations

import logging
import threading
from typing import Mapping, Optional

from ..errors import RecognitionError
from ..languages import split_language
from ..models import PageImage, Recognition, RecognizedWord
from .base import RecognitionEngine

logger = logging.getLogger(__name__)

# Tesseract-style code -> PaddleOCR model name
PADDLE_LANGUAGE_CODES = {
    "eng": "en",
    "vie": "vi",
    "fra": "fr",
    "deu": "german",
    "spa": "es",
    "chi_sim": "ch",
    "jpn": "japan",
    "kor": "korean",
}


class PaddleOcrEngine(RecognitionEngine):
    """
    One PaddleOCR model per language, built on first use and reused.

    PaddleOCR predictors are not thread-safe, so calls into a model are
    serialized by that model's lock. Different languages still run in
    parallel.
    """

    name = "paddle"

    def __init__(
        self,
        languages: Optional[Mapping[str, str]] = None,
        use_angle_cls: bool = True,
    ):
        super().__init__(languages)
        self.use_angle_cls = use_angle_cls
        self._models: dict[str, object] = {}
        self._models_lock = threading.Lock()
        self._ocr_locks: dict[str, threading.Lock] = {}

    def supports(self, language: str) -> bool:
        # PaddleOCR loads a single recognition model per instance
        parts = split_language(language)
        return (
            len(parts) == 1
            and parts[0] in self.languages
            and parts[0] in PADDLE_LANGUAGE_CODES
        )

    def _get_model(self, language: str):
        with self._models_lock:
            model = self._models.get(language)
            if model is None:
                try:
                    from paddleocr import PaddleOCR
                except ImportError as e:
                    raise RecognitionError(
                        "PaddleOCR not installed. Install with: "
                        "pip install ocr-extractor[paddle]"
                    ) from e
                logger.info(f"Loading PaddleOCR model for {language}")
                model = PaddleOCR(
                    use_angle_cls=self.use_angle_cls,
                    lang=PADDLE_LANGUAGE_CODES[language],
                    show_log=False,
                )
                self._models[language] = model
            return model

    def _ocr_lock(self, language: str) -> threading.Lock:
        with self._models_lock:
            return self._ocr_locks.setdefault(language, threading.Lock())

    def recognize(self, image: PageImage, language: str) -> Recognition:
        self.check_language(language, image.page_index)
        language = split_language(language)[0]

        try:
            import numpy as np

            model = self._get_model(language)
            pixels = np.array(image.to_pil().convert("RGB"))
            with self._ocr_lock(language):
                result = model.ocr(pixels, cls=self.use_angle_cls)
        except RecognitionError:
            raise
        except Exception as e:
            raise RecognitionError(
                f"PaddleOCR failed on page {image.page_index}: {e}",
                image.page_index,
            ) from e

        if not result or not result[0]:
            return Recognition(text="", confidence=0.0)

        lines = []
        words = []
        for box, (text, conf) in result[0]:
            conf = max(0.0, min(1.0, float(conf)))
            xs = [p[0] for p in box]
            ys = [p[1] for p in box]
            lines.append(text)
            words.append(RecognizedWord(
                text=text,
                confidence=conf,
                bbox=(min(xs), min(ys), max(xs), max(ys)),
            ))

        confidence = sum(w.confidence for w in words) / len(words)
        return Recognition(
            text="\n".join(lines).strip(), confidence=confidence, words=words
        )
