"""Round-robin pool of recognition engine handles.

The pool owns a fixed number of long-lived engine handles and a thread pool of
the same size, so blocking OCR calls never run on the event loop and at most
``worker_count`` of them run at the same time.
"""

import asyncio
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from ..config.logger import logger
from ..config.settings import BASELINE_OCR_PROFILE
from .engines import TesseractEngine
from .interfaces import IRecognitionEngine, RecognitionAttemptResult

EngineFactory = Callable[[Dict[str, str]], IRecognitionEngine]

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


class RecognitionPool:
    """Fixed-size pool of recognition engines dispatched round-robin.

    Args:
        worker_count: Number of engine handles to create.
        profile_defaults: Baseline profile every handle is configured with.
        engine_factory: Builds one handle from a baseline profile.
    """

    def __init__(
        self,
        worker_count: int = 4,
        profile_defaults: Optional[Dict[str, str]] = None,
        engine_factory: EngineFactory = TesseractEngine,
    ):
        self.worker_count = worker_count
        self.profile_defaults = dict(profile_defaults or BASELINE_OCR_PROFILE)
        self._engine_factory = engine_factory
        self._engines: List[IRecognitionEngine] = []
        self._executor: Optional[ThreadPoolExecutor] = None
        self._index = 0
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self.logger = logger.bind(component="recognition_pool")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(
        self,
        worker_count: Optional[int] = None,
        profile_defaults: Optional[Dict[str, str]] = None,
    ) -> None:
        """Create the engine handles. A second call is a no-op.

        Raises:
            RecognitionEngineError: If an engine handle cannot be constructed.
        """
        async with self._init_lock:
            if self._initialized:
                return

            if worker_count is not None:
                self.worker_count = worker_count
            if profile_defaults is not None:
                self.profile_defaults = dict(profile_defaults)
            if self.worker_count < 1:
                raise ValueError("worker_count must be at least 1")

            self.logger.info("initializing_recognition_workers", worker_count=self.worker_count)

            engines = await asyncio.gather(*[
                asyncio.to_thread(self._engine_factory, dict(self.profile_defaults))
                for _ in range(self.worker_count)
            ])

            self._engines = list(engines)
            self._executor = ThreadPoolExecutor(
                max_workers=self.worker_count,
                thread_name_prefix="ocr-worker",
            )
            self._index = 0
            self._initialized = True
            self.logger.info("recognition_workers_ready", worker_count=len(self._engines))

    def _next_engine(self) -> IRecognitionEngine:
        engine = self._engines[self._index]
        self._index = (self._index + 1) % len(self._engines)
        return engine

    async def recognize(
        self,
        image: bytes,
        profile_override: Optional[Dict[str, str]] = None,
        profile_index: int = 0,
    ) -> RecognitionAttemptResult:
        """Run one recognition on the next engine handle.

        The returned text keeps only ASCII letters and digits.
        """
        if not self._initialized:
            await self.initialize()

        engine = self._next_engine()
        loop = asyncio.get_running_loop()
        start = time.perf_counter()

        output = await loop.run_in_executor(
            self._executor, engine.recognize, image, dict(profile_override or {})
        )

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        text = _NON_ALPHANUMERIC.sub("", output.text).strip()

        return RecognitionAttemptResult(
            text=text,
            confidence=float(output.confidence),
            elapsed_ms=elapsed_ms,
            profile_index=profile_index,
        )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "is_initialized": self._initialized,
            "worker_count": len(self._engines),
            "current_worker_index": self._index,
        }

    def terminate(self) -> None:
        """Release every engine handle. Safe to call repeatedly."""
        if not self._initialized:
            return

        self.logger.info("terminating_recognition_workers", worker_count=len(self._engines))
        for engine in self._engines:
            engine.terminate()
        # In-flight abandoned recognitions may still be running
        if self._executor is not None:
            self._executor.shutdown(wait=False)

        self._engines = []
        self._executor = None
        self._index = 0
        self._initialized = False
