"""
Supported Languages
===================
Language codes accepted as recognition hints. Codes follow Tesseract's
three-letter traineddata names; engines translate them as needed.
"""

from __future__ import annotations

from typing import Mapping

SUPPORTED_LANGUAGES: Mapping[str, str] = {
    "eng": "English",
    "vie": "Vietnamese",
    "fra": "French",
    "deu": "German",
    "spa": "Spanish",
    "chi_sim": "Chinese (Simplified)",
    "jpn": "Japanese",
    "kor": "Korean",
}

DEFAULT_LANGUAGE = "eng"


def split_language(language: str) -> list[str]:
    """Split a combined hint such as "eng+vie" into its parts."""
    return [part.strip() for part in language.split("+") if part.strip()]


def is_supported(language: str, languages: Mapping[str, str]) -> bool:
    parts = split_language(language)
    return bool(parts) and all(part in languages for part in parts)
