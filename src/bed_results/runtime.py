"""Process-level component wiring.

Every process (the server and each batch worker) builds exactly one
``ScraperServices``: one recognition pool, one performance monitor and one
captcha resolver, shared by all scrapers created in that process.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .browser.factory import BrowserEngineFactory
from .captcha.cache import CaptchaCache
from .captcha.pool import RecognitionPool
from .captcha.resolver import CaptchaResolver
from .config.logger import logger
from .config.settings import BASELINE_OCR_PROFILE, ScraperSettings, ScrapingOptions
from .monitoring.performance import PerformanceMonitor
from .scraper.results_scraper import ResultsScraper


@dataclass
class ScraperServices:
    """Components owned by one process."""
    settings: ScraperSettings
    pool: RecognitionPool
    monitor: PerformanceMonitor
    resolver: CaptchaResolver
    browser_factory: Any = field(default=BrowserEngineFactory)

    def create_scraper(self, options: Optional[ScrapingOptions] = None) -> ResultsScraper:
        """New scraper with its own browser session, sharing this process's resolver."""
        return ResultsScraper(
            resolver=self.resolver,
            settings=self.settings,
            options=options,
            browser_factory=self.browser_factory,
        )

    async def shutdown(self) -> None:
        self.monitor.log_report()
        await self.resolver.terminate()


def build_services(
    settings: ScraperSettings,
    pool: Optional[RecognitionPool] = None,
    monitor: Optional[PerformanceMonitor] = None,
    browser_factory: Any = BrowserEngineFactory,
) -> ScraperServices:
    """Wire the captcha stack for this process.

    The recognition pool starts lazily on the first captcha.
    """
    pool = pool or RecognitionPool(
        worker_count=settings.ocr_worker_threads,
        profile_defaults=BASELINE_OCR_PROFILE,
    )
    monitor = monitor or PerformanceMonitor()
    resolver = CaptchaResolver(
        pool=pool,
        monitor=monitor,
        cache=CaptchaCache(
            max_entries=settings.captcha_cache_size,
            ttl_seconds=settings.captcha_cache_ttl_seconds,
        ),
        profiles=settings.ocr_profiles,
        parallel_attempts=settings.parallel_ocr_attempts,
        timeout_ms=settings.ocr_timeout_ms,
        cache_confidence_threshold=settings.cache_confidence_threshold,
        min_length=settings.min_captcha_length,
        max_length=settings.max_captcha_length,
    )

    logger.debug(
        "services_built",
        ocr_workers=pool.worker_count,
        parallel_ocr_attempts=settings.parallel_ocr_attempts,
    )
    return ScraperServices(
        settings=settings,
        pool=pool,
        monitor=monitor,
        resolver=resolver,
        browser_factory=browser_factory,
    )
