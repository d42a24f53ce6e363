"""Tests for process-level wiring."""

import pytest
from unittest.mock import MagicMock

from bed_results.config.settings import ScraperSettings, ScrapingOptions
from bed_results.runtime import build_services
from bed_results.scraper.results_scraper import ResultsScraper


class TestBuildServices:

    def test_settings_flow_into_components(self):
        settings = ScraperSettings(
            ocr_worker_threads=2,
            parallel_ocr_attempts=3,
            ocr_timeout_ms=1500,
            captcha_cache_size=10,
        )

        services = build_services(settings)

        assert services.pool.worker_count == 2
        assert services.resolver.parallel_attempts == 3
        assert services.resolver.timeout_ms == 1500
        assert services.resolver.cache.max_entries == 10
        assert services.resolver.monitor is services.monitor
        assert not services.pool.is_initialized

    def test_scrapers_share_the_resolver(self):
        factory = MagicMock()
        services = build_services(ScraperSettings(), browser_factory=factory)

        first = services.create_scraper(ScrapingOptions(headless=False))
        second = services.create_scraper()

        assert isinstance(first, ResultsScraper)
        assert first.resolver is second.resolver
        assert first.settings.headless is False
        assert second.settings.headless is True
        assert first.browser_factory is factory

    @pytest.mark.asyncio
    async def test_shutdown_before_any_captcha(self):
        services = build_services(ScraperSettings())

        await services.shutdown()

        assert not services.pool.is_initialized
