"""
Playwright implementation of browser interfaces
"""
import os
from typing import Any, Dict, Optional

import structlog
from playwright.async_api import Browser, BrowserContext, Page, Response, async_playwright

from ..interfaces import BrowserConfig, IBrowserContext, IBrowserEngine, IPage, ResponsePredicate

logger = structlog.get_logger()


def resolve_chromium_path() -> Optional[str]:
    """Pick a system Chromium when running inside a container.

    Returns None for local development so Playwright uses its own browser.
    """
    env_path = os.getenv("PLAYWRIGHT_CHROMIUM_EXECUTABLE_PATH")
    if env_path:
        return env_path
    if os.path.exists("/usr/bin/chromium"):
        return "/usr/bin/chromium"
    return None


class PlaywrightPage(IPage):
    """Playwright page wrapper"""

    def __init__(self, page: Page):
        self._page = page

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[int] = None) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout)

    async def wait_for_selector(self, selector: str, timeout: int = 30000) -> None:
        await self._page.wait_for_selector(selector, timeout=timeout)

    async def click(self, selector: str) -> None:
        await self._page.click(selector)

    async def fill(self, selector: str, value: str) -> None:
        await self._page.fill(selector, value)

    async def evaluate(self, script: str) -> Any:
        return await self._page.evaluate(script)

    async def screenshot_element(self, selector: str) -> Optional[bytes]:
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return await element.screenshot()

    async def wait_for_response(self, predicate: ResponsePredicate, timeout: int = 30000) -> Any:
        response: Response = await self._page.wait_for_event(
            "response",
            predicate=lambda r: predicate(r.url, r.status),
            timeout=timeout,
        )
        return await response.json()

    async def close(self) -> None:
        await self._page.close()


class PlaywrightContext(IBrowserContext):
    """Playwright context wrapper"""

    def __init__(self, context: BrowserContext, default_timeout: Optional[int] = None):
        self._context = context
        self._default_timeout = default_timeout

    async def new_page(self) -> IPage:
        page = await self._context.new_page()
        if self._default_timeout:
            page.set_default_timeout(self._default_timeout)
        return PlaywrightPage(page)

    async def close(self) -> None:
        await self._context.close()


class PlaywrightEngine(IBrowserEngine):
    """
    Playwright browser engine implementation
    """

    def __init__(self):
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._config: Optional[BrowserConfig] = None

    async def initialize(self, config: BrowserConfig) -> None:
        """Initialize Playwright browser"""
        self._config = config
        self._playwright = await async_playwright().start()

        args = [
                   '--no-sandbox',
                   '--disable-setuid-sandbox',
                   '--disable-dev-shm-usage',
               ] + config.extra_args

        launch_options: Dict[str, Any] = {
            "headless": config.headless,
            "timeout": config.timeout_ms,
            "args": args,
        }
        executable_path = config.executable_path or resolve_chromium_path()
        if executable_path:
            launch_options["executable_path"] = executable_path

        self._browser = await self._playwright.chromium.launch(**launch_options)
        logger.info("playwright_engine_initialized", headless=config.headless)

    async def create_context(self, context_options: Dict[str, Any]) -> IBrowserContext:
        """Create browser context with options"""
        options = {
            "viewport": self._config.viewport,
            "user_agent": self._config.user_agent,
            **context_options  # Allow override
        }

        context = await self._browser.new_context(**options)
        return PlaywrightContext(context, default_timeout=self._config.timeout_ms)

    async def cleanup(self) -> None:
        """Cleanup resources"""
        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.info("playwright_engine_cleaned_up")

    @property
    def is_initialized(self) -> bool:
        return self._browser is not None
