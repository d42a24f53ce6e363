"""Tesseract-backed recognition engine.

Each ``TesseractEngine`` is one handle of the recognition pool. Parameter
profiles use Tesseract's own variable names (``tessedit_pageseg_mode``,
``tessedit_ocr_engine_mode``, ``tessedit_char_whitelist`` ...) and are turned
into a command line for every call, so a handle carries no mutable state
between calls.
"""

import io
from typing import Dict, List

import pytesseract
from PIL import Image
from pytesseract import Output

from ..config.logger import logger
from ..errors import RecognitionEngineError
from .interfaces import EngineOutput, IRecognitionEngine, merge_profiles

# Parameters passed as dedicated flags rather than ``-c name=value``
_FLAG_PARAMETERS = {
    "tessedit_pageseg_mode": "--psm",
    "tessedit_ocr_engine_mode": "--oem",
}


def build_tesseract_config(parameters: Dict[str, str]) -> str:
    """Translate a parameter profile into a Tesseract config string."""
    parts: List[str] = []
    for name, flag in _FLAG_PARAMETERS.items():
        if name in parameters:
            parts.append(f"{flag} {parameters[name]}")
    for name, value in parameters.items():
        if name in _FLAG_PARAMETERS:
            continue
        parts.append(f"-c {name}={value}")
    return " ".join(parts)


class TesseractEngine(IRecognitionEngine):
    """One Tesseract engine handle.

    Args:
        defaults: Baseline parameter profile applied to every call.
        language: Tesseract language pack.

    Raises:
        RecognitionEngineError: If the Tesseract binary is not available.
    """

    def __init__(self, defaults: Dict[str, str], language: str = "eng"):
        self.defaults = dict(defaults)
        self.language = language
        try:
            self.version = str(pytesseract.get_tesseract_version())
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise RecognitionEngineError(f"Tesseract engine unavailable: {e}") from e
        self._closed = False

    def recognize(self, image: bytes, parameters: Dict[str, str]) -> EngineOutput:
        if self._closed:
            raise RecognitionEngineError("Engine handle has been terminated")

        profile = merge_profiles(self.defaults, parameters)
        with Image.open(io.BytesIO(image)) as img:
            data = pytesseract.image_to_data(
                img,
                lang=self.language,
                config=build_tesseract_config(profile),
                output_type=Output.DICT,
            )

        words: List[str] = []
        confidences: List[float] = []
        for raw_text, raw_conf in zip(data.get("text", []), data.get("conf", [])):
            text = (raw_text or "").strip()
            if not text:
                continue
            conf = float(raw_conf)
            # -1 marks layout rows without recognized text
            if conf < 0:
                continue
            words.append(text)
            confidences.append(conf)

        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return EngineOutput(text="".join(words), confidence=confidence)

    def terminate(self) -> None:
        if not self._closed:
            self._closed = True
            logger.debug("tesseract_engine_terminated")
