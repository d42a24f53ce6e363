"""Captcha resolution by racing several OCR profiles.

For an uncached image every profile is dispatched to the recognition pool at
once and all of them share one hard timeout. Results that arrive in time are
filtered by length and the most confident one wins.
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..config.logger import logger
from ..config.settings import DEFAULT_OCR_PROFILES
from ..errors import InvalidCaptchaImageError
from ..monitoring.performance import PerformanceMonitor
from .cache import CaptchaCache, hash_image
from .interfaces import ICaptchaResolver, RecognitionAttemptResult
from .pool import RecognitionPool
from .preprocessing import is_valid_image, preprocess_for_ocr


def select_best_result(
    results: Sequence[RecognitionAttemptResult],
    min_length: int = 3,
    max_length: int = 8,
) -> Optional[RecognitionAttemptResult]:
    """Pick the most confident result whose text length is in range.

    Ties go to the lower profile index.
    """
    candidates = [r for r in results if min_length <= len(r.text) <= max_length]
    if not candidates:
        return None
    return max(candidates, key=lambda r: (r.confidence, -r.profile_index))


class CaptchaResolver(ICaptchaResolver):
    """Resolve captcha images with a cache in front of a recognition pool.

    Args:
        pool: Recognition pool the profiles are dispatched to.
        monitor: Receives one attempt record per ``solve`` that reaches the
            cache or the pool.
        cache: Solved-captcha cache. A 100 entry, 5 minute cache by default.
        profiles: Recognition profiles, fastest first.
        parallel_attempts: Upper bound on profiles raced per image.
        timeout_ms: Hard timeout shared by all profiles of one race.
        cache_confidence_threshold: Winners must be strictly more confident
            than this to be cached.
        preprocessor: Image transformation applied before recognition.
    """

    def __init__(
        self,
        pool: RecognitionPool,
        monitor: PerformanceMonitor,
        cache: Optional[CaptchaCache] = None,
        profiles: Optional[List[Dict[str, str]]] = None,
        parallel_attempts: int = 4,
        timeout_ms: int = 3000,
        cache_confidence_threshold: float = 40.0,
        min_length: int = 3,
        max_length: int = 8,
        preprocessor: Callable[[bytes], bytes] = preprocess_for_ocr,
    ):
        self.pool = pool
        self.monitor = monitor
        self.cache = cache if cache is not None else CaptchaCache()
        self.profiles = profiles if profiles is not None else [dict(p) for p in DEFAULT_OCR_PROFILES]
        self.parallel_attempts = parallel_attempts
        self.timeout_ms = timeout_ms
        self.cache_confidence_threshold = cache_confidence_threshold
        self.min_length = min_length
        self.max_length = max_length
        self.preprocessor = preprocessor
        self.cache_hits = 0
        self.cache_misses = 0
        self.logger = logger.bind(component="captcha_resolver")

    def _select_profiles(self) -> List[Dict[str, str]]:
        limit = min(self.parallel_attempts, len(self.profiles), max(self.pool.worker_count, 1))
        return self.profiles[:limit]

    async def _recognize_profile(
        self, image: bytes, profile: Dict[str, str], index: int
    ) -> Optional[RecognitionAttemptResult]:
        try:
            return await self.pool.recognize(image, profile, profile_index=index)
        except Exception as e:
            self.logger.warning("recognition_profile_failed", profile_index=index, error=str(e))
            return None

    async def _race_profiles(self, image: bytes) -> List[RecognitionAttemptResult]:
        # Engine construction errors are fatal and must surface here, not per profile
        if not self.pool.is_initialized:
            await self.pool.initialize()

        tasks = [
            asyncio.ensure_future(self._recognize_profile(image, profile, index))
            for index, profile in enumerate(self._select_profiles())
        ]
        if not tasks:
            self.logger.warning(
                "no_recognition_profiles",
                parallel_attempts=self.parallel_attempts,
                profiles=len(self.profiles),
            )
            return []

        done, pending = await asyncio.wait(tasks, timeout=self.timeout_ms / 1000)

        if pending:
            # Abandoned, not cancelled: the engine call keeps running in its thread
            self.logger.warning(
                "recognition_timeout",
                timeout_ms=self.timeout_ms,
                completed=len(done),
                abandoned=len(pending),
            )

        results = [task.result() for task in done]
        return sorted(
            (r for r in results if r is not None),
            key=lambda r: r.profile_index,
        )

    async def solve(self, image: bytes, attempt_number: int = 1) -> str:
        """Return the captcha text, or ``""`` when no profile produced a usable result.

        Raises:
            InvalidCaptchaImageError: If ``image`` is empty.
        """
        if not is_valid_image(image):
            raise InvalidCaptchaImageError("Captcha image is empty")

        start = time.perf_counter()
        image_hash = hash_image(image)

        cached = self.cache.get(image_hash)
        if cached is not None:
            self.cache_hits += 1
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.logger.info("captcha_cache_hit", elapsed_ms=round(elapsed_ms, 2))
            self.monitor.record_attempt(True, elapsed_ms)
            return cached.solved_text

        self.cache_misses += 1
        self.logger.info("solving_captcha", attempt=attempt_number)

        # Pillow work runs off the event loop
        processed = await asyncio.to_thread(self.preprocessor, image)
        results = await self._race_profiles(processed)

        for result in results:
            self.logger.debug(
                "recognition_result",
                profile_index=result.profile_index,
                text=result.text,
                confidence=result.confidence,
                elapsed_ms=result.elapsed_ms,
            )

        best = select_best_result(results, self.min_length, self.max_length)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if best is None:
            self.logger.info("no_valid_recognition", completed=len(results), elapsed_ms=round(elapsed_ms))
            self.monitor.record_attempt(False, elapsed_ms)
            return ""

        if best.confidence > self.cache_confidence_threshold:
            self.cache.put(image_hash, best.text, best.confidence)

        self.logger.info(
            "captcha_solved",
            text=best.text,
            confidence=best.confidence,
            profile_index=best.profile_index,
            elapsed_ms=round(elapsed_ms),
        )
        self.monitor.record_attempt(True, elapsed_ms)
        return best.text

    def get_cache_stats(self) -> Dict[str, Any]:
        lookups = self.cache_hits + self.cache_misses
        hit_rate = (self.cache_hits / lookups) * 100 if lookups else 0.0
        return {
            "memory": {
                "cache_size": len(self.cache),
                "cache_hits": self.cache_hits,
                "cache_misses": self.cache_misses,
                "hit_rate": hit_rate,
            },
            "pool": self.pool.get_stats(),
        }

    def clear_cache(self) -> None:
        self.cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0
        self.logger.info("captcha_cache_cleared")

    async def terminate(self) -> None:
        self.pool.terminate()
