from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from ..errors import UnsupportedLanguageError
from ..languages import SUPPORTED_LANGUAGES, is_supported
from ..models import PageImage, Recognition


class RecognitionEngine(ABC):
    """
    OCR backend abstraction.

    Engines must:
    - Reject language codes they do not support (no silent fallback)
    - Return a page-level confidence normalized to [0, 1]
    - Raise RecognitionError for any internal failure
    """

    name: str = "engine"

    def __init__(self, languages: Optional[Mapping[str, str]] = None):
        self.languages = dict(languages if languages is not None else SUPPORTED_LANGUAGES)

    def supports(self, language: str) -> bool:
        return is_supported(language, self.languages)

    def check_language(self, language: str, page_index: Optional[int] = None):
        if not self.supports(language):
            raise UnsupportedLanguageError(language, page_index)

    @abstractmethod
    def recognize(self, image: PageImage, language: str) -> Recognition:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} languages={sorted(self.languages)}>"
