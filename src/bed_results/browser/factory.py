"""
Browser engine factory
Design Pattern: Factory Method + Registry Pattern

Engines come back initialized. An engine whose launch fails is cleaned up
before the error propagates, so a failed session attempt never leaves a
browser driver running.
"""
from typing import Dict, Type, Union

from ..config.logger import logger
from .engines.playwright_engine import PlaywrightEngine
from .interfaces import BrowserConfig, BrowserType, IBrowserEngine


class BrowserEngineFactory:
    """
    Registry of browser engine implementations keyed by ``BrowserType``
    """

    _engines: Dict[BrowserType, Type[IBrowserEngine]] = {
        BrowserType.PLAYWRIGHT: PlaywrightEngine,
    }

    @classmethod
    def resolve(cls, browser_type: Union[BrowserType, str]) -> Type[IBrowserEngine]:
        """Engine class for a type or its name, e.g. ``"playwright"``."""
        try:
            key = BrowserType(browser_type)
        except ValueError:
            raise ValueError(f"Unknown browser type: {browser_type}") from None
        if key not in cls._engines:
            raise ValueError(f"Unknown browser type: {browser_type}")
        return cls._engines[key]

    @classmethod
    async def create(
            cls,
            browser_type: Union[BrowserType, str],
            config: BrowserConfig
    ) -> IBrowserEngine:
        """Create and launch a browser engine.

        Raises:
            ValueError: If no engine is registered for ``browser_type``.
        """
        engine = cls.resolve(browser_type)()
        name = BrowserType(browser_type).value
        try:
            await engine.initialize(config)
        except Exception as e:
            logger.warning("browser_launch_failed", browser_type=name, error=str(e))
            try:
                await engine.cleanup()
            except Exception as cleanup_error:
                logger.warning("browser_cleanup_failed", error=str(cleanup_error))
            raise

        logger.info("browser_engine_created", browser_type=name, headless=config.headless)
        return engine
