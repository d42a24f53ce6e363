"""Batch dispatch.

Small batches run sequentially on one browser session in this process.
Larger batches are split into contiguous chunks that run in worker processes,
each with its own browser and captcha stack. If the parallel run fails in any
way, or its results do not cover every roll number exactly once, the whole
batch is rerun sequentially.
"""

import asyncio
import math
import multiprocessing
import os
import time
from collections import Counter
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import Callable, Iterable, List, Optional

from ..config.logger import logger
from ..config.settings import ScraperSettings, ScrapingOptions
from .interfaces import IResultScraper, ScrapeResult, WorkResult, WorkUnit
from .validation import chunk_list, validate_batch
from .worker import run_work_unit, scrape_sequentially


def spawn_process_pool(max_workers: int) -> Executor:
    """Process pool using the spawn start method.

    Every worker launches its own browser, so forking a parent that already
    runs an event loop and OCR threads is not an option.
    """
    return ProcessPoolExecutor(
        max_workers=max_workers,
        mp_context=multiprocessing.get_context("spawn"),
    )


def plan_worker_count(batch_size: int, max_workers: int, cpu_count: Optional[int]) -> int:
    """Worker processes for a batch: bounded by CPUs, the configured cap and the batch."""
    return max(1, min(cpu_count or 1, max_workers, batch_size))


def results_cover_batch(identifiers: List[str], results: Iterable[ScrapeResult]) -> bool:
    """True when there is exactly one result per roll number of the batch."""
    return Counter(r.identifier for r in results) == Counter(identifiers)


class BatchDispatcher:
    """Dispatch a validated batch sequentially or across worker processes.

    Args:
        scraper_factory: Builds an in-process scraper for sequential runs.
        settings: Batch limits, worker cap and inter-query delays.
        executor_factory: Creates the executor for a parallel run, given the
            worker count.
        worker_fn: Picklable function run in each worker for one chunk.
        cpu_count: Returns the number of CPUs available.
    """

    def __init__(
        self,
        scraper_factory: Callable[[Optional[ScrapingOptions]], IResultScraper],
        settings: Optional[ScraperSettings] = None,
        executor_factory: Callable[[int], Executor] = spawn_process_pool,
        worker_fn: Callable[[WorkUnit], WorkResult] = run_work_unit,
        cpu_count: Callable[[], Optional[int]] = os.cpu_count,
    ):
        self.scraper_factory = scraper_factory
        self.settings = settings or ScraperSettings()
        self.executor_factory = executor_factory
        self.worker_fn = worker_fn
        self.cpu_count = cpu_count
        self.logger = logger.bind(component="batch_dispatcher")

    async def dispatch(
        self,
        identifiers: Iterable[str],
        options: Optional[ScrapingOptions] = None,
    ) -> List[ScrapeResult]:
        """Process a batch of roll numbers.

        Returns:
            One result per roll number. Sequential runs preserve input order;
            parallel runs return results in chunk order.

        Raises:
            BatchValidationError: Before any work starts, if the batch is
                empty, too large or contains a malformed roll number.
        """
        batch = validate_batch(
            identifiers,
            self.settings.max_batch_size,
            self.settings.identifier_pattern,
        )
        options = options or ScrapingOptions()

        if len(batch) <= self.settings.sequential_threshold:
            self.logger.info("batch_sequential", roll_numbers=len(batch))
            return await self._run_sequential(batch, options)

        try:
            results = await self._run_parallel(batch, options)
        except Exception as e:
            self.logger.error("parallel_batch_failed", error=str(e), fallback="sequential")
            return await self._run_sequential(batch, options)

        if not results_cover_batch(batch, results):
            self.logger.error(
                "parallel_batch_incomplete",
                expected=len(batch),
                received=len(results),
                fallback="sequential",
            )
            return await self._run_sequential(batch, options)

        return results

    async def _run_sequential(self, batch: List[str], options: ScrapingOptions) -> List[ScrapeResult]:
        scraper = self.scraper_factory(options)
        return await scrape_sequentially(scraper, batch, self.settings.sequential_delay_ms)

    async def _run_parallel(self, batch: List[str], options: ScrapingOptions) -> List[ScrapeResult]:
        worker_count = plan_worker_count(len(batch), self.settings.max_workers, self.cpu_count())
        chunk_size = math.ceil(len(batch) / worker_count)
        units = [
            WorkUnit(worker_id=index, identifiers=chunk, options=options)
            for index, chunk in enumerate(chunk_list(batch, chunk_size))
        ]

        self.logger.info(
            "batch_parallel",
            roll_numbers=len(batch),
            workers=len(units),
            chunk_size=chunk_size,
        )
        start = time.perf_counter()

        loop = asyncio.get_running_loop()
        executor = self.executor_factory(len(units))
        try:
            work_results = await asyncio.gather(*(
                loop.run_in_executor(executor, self.worker_fn, unit) for unit in units
            ))
        finally:
            executor.shutdown(wait=False)

        results: List[ScrapeResult] = []
        for work_result in work_results:
            self.logger.debug(
                "worker_result",
                worker_id=work_result.worker_id,
                results=len(work_result.results),
                elapsed_ms=work_result.elapsed_ms,
            )
            results.extend(work_result.results)

        self.logger.info(
            "batch_parallel_finished",
            successful=sum(1 for r in results if r.success),
            total=len(results),
            elapsed_ms=int((time.perf_counter() - start) * 1000),
        )
        return results
