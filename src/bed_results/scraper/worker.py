"""Batch worker entry point.

``run_work_unit`` is the function submitted to the process pool. It runs in a
fresh interpreter (spawn start method), so it loads configuration and builds
its own recognition pool, monitor and resolver before touching the browser.
"""

import asyncio
import time
from typing import List, Optional, Sequence

from ..config.logger import logger
from ..config.settings import ScraperSettings, load_app_config
from .interfaces import IResultScraper, ScrapeResult, WorkResult, WorkUnit


async def scrape_sequentially(
    scraper: IResultScraper,
    identifiers: Sequence[str],
    delay_ms: int,
) -> List[ScrapeResult]:
    """Run queries one after another on a single scraper, then close it.

    A query that raises becomes a failed result for that roll number; the
    remaining roll numbers are still processed.
    """
    results: List[ScrapeResult] = []
    try:
        for index, identifier in enumerate(identifiers):
            if index and delay_ms > 0:
                await asyncio.sleep(delay_ms / 1000)
            try:
                results.append(await scraper.run(identifier))
            except Exception as e:
                logger.error("query_failed", roll_number=identifier, error=str(e))
                results.append(ScrapeResult.failure(identifier, str(e) or "Unknown error"))
    finally:
        try:
            await scraper.close()
        except Exception as e:
            logger.warning("scraper_close_failed", error=str(e))
    return results


async def process_work_unit(unit: WorkUnit, settings: Optional[ScraperSettings] = None) -> WorkResult:
    # Imported here so the module stays cheap to import in the parent process
    from ..runtime import build_services

    settings = settings or load_app_config()
    log = logger.bind(component="batch_worker", worker_id=unit.worker_id)
    start = time.perf_counter()
    log.info("worker_started", roll_numbers=len(unit.identifiers))

    services = build_services(settings)
    try:
        scraper = services.create_scraper(unit.options)
        results = await scrape_sequentially(scraper, unit.identifiers, settings.worker_delay_ms)
    except Exception as e:
        log.error("worker_failed", error=str(e))
        results = [ScrapeResult.failure(identifier, str(e)) for identifier in unit.identifiers]
    finally:
        await services.shutdown()

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    log.info(
        "worker_finished",
        successful=sum(1 for r in results if r.success),
        total=len(results),
        elapsed_ms=elapsed_ms,
    )
    return WorkResult(worker_id=unit.worker_id, results=results, elapsed_ms=elapsed_ms)


def run_work_unit(unit: WorkUnit) -> WorkResult:
    """Process one chunk of a batch inside a worker process."""
    return asyncio.run(process_work_unit(unit))
