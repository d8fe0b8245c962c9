from .base import RecognitionEngine
from .factory import ENGINE_MAP, EngineName, create_engine
from .paddle import PaddleOcrEngine
from .tesseract import TesseractEngine

__all__ = [
    "ENGINE_MAP",
    "EngineName",
    "PaddleOcrEngine",
    "RecognitionEngine",
    "TesseractEngine",
    "create_engine",
]
