"""Captcha resolution subsystem.

Main components:
- CaptchaResolver: cache lookup, then races OCR profiles and ranks the results
- CaptchaCache: bounded, time-expiring store of solved captchas
- RecognitionPool: round-robin pool of OCR engine handles
- TesseractEngine: one Tesseract handle driven through pytesseract
"""

from .cache import CaptchaCache, CaptchaCacheEntry, hash_image
from .engines import TesseractEngine, build_tesseract_config
from .interfaces import (
    EngineOutput,
    ICaptchaResolver,
    IRecognitionEngine,
    RecognitionAttemptResult,
)
from .pool import RecognitionPool
from .preprocessing import preprocess_for_ocr
from .resolver import CaptchaResolver, select_best_result

__all__ = [
    "CaptchaCache",
    "CaptchaCacheEntry",
    "hash_image",
    "TesseractEngine",
    "build_tesseract_config",
    "EngineOutput",
    "ICaptchaResolver",
    "IRecognitionEngine",
    "RecognitionAttemptResult",
    "RecognitionPool",
    "preprocess_for_ocr",
    "CaptchaResolver",
    "select_best_result",
]
