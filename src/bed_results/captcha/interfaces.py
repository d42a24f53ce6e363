"""Interfaces for the captcha system.

The resolver depends on a text-recognition engine only through
``IRecognitionEngine`` and is itself consumed through ``ICaptchaResolver``,
so both sides can be replaced by test doubles.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class EngineOutput:
    """Raw output of one engine call: recognized text and 0-100 confidence."""
    text: str
    confidence: float


@dataclass(frozen=True)
class RecognitionAttemptResult:
    """One profile's result for one captcha image.

    Attributes:
        text: Recognized text restricted to the captcha alphabet.
        confidence: Engine confidence on a 0-100 scale.
        elapsed_ms: Wall time spent in the engine call.
        profile_index: Position of the profile in the resolver's profile list.
    """
    text: str
    confidence: float
    elapsed_ms: int
    profile_index: int = 0


class IRecognitionEngine(ABC):
    """A single text-recognition engine handle.

    Calls are blocking; the recognition pool runs them off the event loop.
    """

    @abstractmethod
    def recognize(self, image: bytes, parameters: Dict[str, str]) -> EngineOutput:
        """Recognize the text in ``image`` using the given parameter profile."""
        pass

    @abstractmethod
    def terminate(self) -> None:
        """Release any resources held by the handle."""
        pass


class ICaptchaResolver(ABC):
    """Turns a captcha image into its text."""

    @abstractmethod
    async def solve(self, image: bytes, attempt_number: int = 1) -> str:
        """Return the captcha text, or an empty string if it could not be read."""
        pass

    @abstractmethod
    def clear_cache(self) -> None:
        """Forget every cached solution."""
        pass

    @abstractmethod
    def get_cache_stats(self) -> Dict[str, object]:
        """Return cache and pool statistics."""
        pass

    async def terminate(self) -> None:
        """Release recognition resources. No-op by default."""
        return None


def merge_profiles(base: Dict[str, str], override: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Overlay ``override`` on ``base`` without mutating either."""
    merged = dict(base)
    if override:
        merged.update(override)
    return merged
