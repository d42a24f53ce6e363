"""Results portal scraper.

``ResultsScraper`` drives one browser session through the portal's query form
and implements the per-roll-number retry loop:

    STARTING -> AWAITING_CAPTCHA -> SUBMITTING -> SUCCESS | NOT_FOUND | RETRYING
    RETRYING -> AWAITING_CAPTCHA (next attempt) | EXHAUSTED

Each attempt fills the roll number, screenshots the captcha, resolves it and
submits the form. Only an explicit success or "no record" answer from the
portal ends the loop early; anything else refreshes the captcha and tries
again until the attempt budget is spent.
"""

import asyncio
import re
import time
from typing import Any, Dict, Optional

from ..browser.factory import BrowserEngineFactory
from ..browser.interfaces import BrowserConfig, BrowserType, IBrowserContext, IBrowserEngine, IPage
from ..captcha.interfaces import ICaptchaResolver
from ..config.logger import logger
from ..config.settings import ScraperSettings, ScrapingOptions
from ..errors import SessionError
from .interfaces import IResultScraper, Query, QueryOutcome, QueryState, ScrapeResult, StudentRecord
from .validation import validate_identifier

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def results_table_script(table_selector: str) -> str:
    """JavaScript that reads the first row of the rendered result table."""
    return f"""
        () => {{
            const row = document.querySelector('{table_selector} tbody tr');
            if (!row) return null;

            const cells = row.querySelectorAll('td');
            if (cells.length < 9) return null;

            const text = (i) => (cells[i] && cells[i].textContent ? cells[i].textContent.trim() : '');
            return {{
                barcodeNumber: text(0),
                entranceRollNumber: text(1),
                applicantName: text(2),
                entranceScore: text(3),
                course: text(4),
                stream: text(5),
                socialCategory: text(6),
                remarks: text(8)
            }};
        }}
    """


def _parse_score(value: Any) -> float:
    """Leading number of ``value``, e.g. ``"72.5 marks"`` -> 72.5; 0.0 if there is none."""
    match = _LEADING_NUMBER.match(str(value))
    return float(match.group(0)) if match else 0.0


def build_student_record(
    roll_number: str,
    api_data: Optional[Dict[str, Any]],
    table_data: Optional[Dict[str, Any]] = None,
) -> StudentRecord:
    """Merge the rendered result table with the raw API payload.

    The table is what an operator sees on screen, so its value wins for every
    field it provides; the API payload fills the gaps.
    """
    api = api_data or {}
    table = table_data or {}

    return StudentRecord(
        roll_number=roll_number,
        name=table.get("applicantName") or api.get("vchApplicantName") or "",
        course=table.get("course") or api.get("vchCourse") or "",
        stream=table.get("stream") or api.get("vchStream") or "",
        social_category=table.get("socialCategory") or api.get("vchSocialCategory") or "",
        score=_parse_score(table.get("entranceScore") or api.get("vchPreference") or "0"),
        barcode_number=table.get("barcodeNumber") or "",
        entrance_roll_number=table.get("entranceRollNumber") or roll_number,
        remarks=table.get("remarks") or "",
    )


class ResultsScraper(IResultScraper):
    """Query state machine over one browser session.

    The session is created lazily and torn down after any automation error, so
    the next attempt starts from a freshly loaded portal page. A scraper is not
    safe to share between concurrent queries: the form is a single piece of
    state that must be written in order.

    Args:
        resolver: Captcha resolver used for every attempt.
        settings: Portal selectors, delays and defaults.
        options: Per-request overrides (headless, max retries, timeout).
        browser_factory: Creates browser engines.
        browser_type: Engine implementation to request from the factory.
    """

    def __init__(
            self,
            resolver: ICaptchaResolver,
            settings: Optional[ScraperSettings] = None,
            options: Optional[ScrapingOptions] = None,
            browser_factory: Any = BrowserEngineFactory,
            browser_type: BrowserType = BrowserType.PLAYWRIGHT,
    ):
        self.resolver = resolver
        self.settings = (settings or ScraperSettings()).with_options(options)
        self.browser_factory = browser_factory
        self.browser_type = browser_type

        self._engine: Optional[IBrowserEngine] = None
        self._context: Optional[IBrowserContext] = None
        self._page: Optional[IPage] = None

        self.logger = logger.bind(component="results_scraper")

    @property
    def has_session(self) -> bool:
        return self._page is not None

    async def initialize(self) -> None:
        """Launch the browser and load the portal, unless a session is already open.

        Raises:
            SessionError: If the browser cannot be started or the portal does not load.
        """
        if self._page is not None:
            return

        self.logger.info("launching_browser", headless=self.settings.headless)
        try:
            self._engine = await self.browser_factory.create(
                self.browser_type,
                BrowserConfig(
                    headless=self.settings.headless,
                    timeout_ms=self.settings.timeout_ms,
                )
            )
            self._context = await self._engine.create_context({})
            self._page = await self._context.new_page()

            await self._page.goto(
                self.settings.portal_url,
                wait_until="networkidle",
                timeout=self.settings.timeout_ms,
            )
        except Exception as e:
            await self._teardown_session()
            raise SessionError(f"Failed to initialize browser session: {e}") from e

        self.logger.info("portal_loaded", url=self.settings.portal_url)

    async def _teardown_session(self) -> None:
        """Close page, context and engine, ignoring errors from a broken session."""
        page, context, engine = self._page, self._context, self._engine
        self._page = None
        self._context = None
        self._engine = None

        for name, closer in (
            ("page", page.close if page else None),
            ("context", context.close if context else None),
            ("engine", engine.cleanup if engine else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                self.logger.warning("session_teardown_error", resource=name, error=str(e))

    def _is_result_response(self, url: str, status: int) -> bool:
        return self.settings.result_api_endpoint in url and status == 200

    async def _parse_results_table(self) -> Optional[Dict[str, Any]]:
        """Read the rendered result table, or None if it never shows up."""
        table_selector = self.settings.selectors.results_table
        try:
            await self._page.wait_for_selector(
                table_selector,
                timeout=self.settings.results_table_timeout_ms,
            )
            table_data = await self._page.evaluate(results_table_script(table_selector))
        except Exception as e:
            self.logger.warning("results_table_unavailable", error=str(e))
            return None

        return table_data if isinstance(table_data, dict) else None

    async def _refresh_captcha(self, delay_ms: int, clear_input: bool = False) -> None:
        selectors = self.settings.selectors
        if clear_input:
            await self._page.fill(selectors.captcha_input, "")
        await self._page.click(selectors.refresh_captcha)
        await asyncio.sleep(delay_ms / 1000)

    async def _attempt(self, query: Query, attempt: int, started: float) -> Optional[ScrapeResult]:
        """Run one attempt. Returns a terminal result, or None to try again."""
        log = self.logger.bind(roll_number=query.identifier, attempt=attempt)
        selectors = self.settings.selectors

        await self.initialize()
        page = self._page

        await page.fill(selectors.roll_number, "")
        await page.fill(selectors.captcha_input, "")
        await page.fill(selectors.roll_number, query.identifier)

        log.debug("query_state", state=QueryState.AWAITING_CAPTCHA.value)
        await page.wait_for_selector(selectors.captcha_image, timeout=self.settings.timeout_ms)
        captcha_image = await page.screenshot_element(selectors.captcha_image)
        if not captcha_image:
            query.last_error = "Captcha element not found"
            log.warning("captcha_element_missing")
            return None

        captcha_text = await self.resolver.solve(captcha_image, attempt)
        if len(captcha_text) < self.settings.min_captcha_length:
            query.last_error = "Captcha could not be recognized"
            log.info("captcha_unresolved")
            await self._refresh_captcha(self.settings.captcha_refresh_delay_ms)
            return None

        log.debug("query_state", state=QueryState.SUBMITTING.value)
        await page.fill(selectors.captcha_input, captcha_text)

        response_waiter = asyncio.ensure_future(
            page.wait_for_response(self._is_result_response, timeout=self.settings.timeout_ms)
        )
        # Let the waiter register its listener before the click fires the request
        await asyncio.sleep(0)
        try:
            await page.click(selectors.submit_button)
        except Exception:
            response_waiter.cancel()
            raise
        payload = await response_waiter

        if not isinstance(payload, dict):
            payload = {}

        elapsed_ms = int((time.perf_counter() - started) * 1000)

        if payload.get("state") == self.settings.success_state:
            table_data = await self._parse_results_table()
            record = build_student_record(query.identifier, payload.get("data"), table_data)
            query.outcome = QueryOutcome.SUCCESS
            log.info("query_state", state=QueryState.SUCCESS.value, name=record.name)
            return ScrapeResult(
                identifier=query.identifier,
                success=True,
                outcome=QueryOutcome.SUCCESS,
                data=record,
                elapsed_ms=int((time.perf_counter() - started) * 1000),
            )

        if payload.get("message") == self.settings.no_record_message:
            query.outcome = QueryOutcome.NOT_FOUND
            log.info("query_state", state=QueryState.NOT_FOUND.value)
            return ScrapeResult.failure(
                query.identifier,
                self.settings.no_record_message,
                elapsed_ms,
                outcome=QueryOutcome.NOT_FOUND,
            )

        # Any other answer is read as a rejected captcha
        query.last_error = "Invalid captcha"
        log.info("query_state", state=QueryState.RETRYING.value, reason="captcha_rejected")
        await self._refresh_captcha(self.settings.rejected_captcha_delay_ms, clear_input=True)
        return None

    async def run(self, identifier: str, max_attempts: Optional[int] = None) -> ScrapeResult:
        """Look up one roll number.

        Args:
            identifier: Roll number, e.g. ``ED18A02166``.
            max_attempts: Attempt budget, defaults to the configured max retries.

        Returns:
            A successful result with student data, a ``NOT_FOUND`` result, or an
            ``EXHAUSTED`` result carrying the last observed error.

        Raises:
            InvalidIdentifierError: Before any browser work, if the roll number is malformed.
        """
        roll_number = validate_identifier(identifier, self.settings.identifier_pattern)
        attempts = max_attempts if max_attempts and max_attempts > 0 else self.settings.max_retries
        query = Query(identifier=roll_number)
        started = time.perf_counter()
        log = self.logger.bind(roll_number=roll_number)

        log.info("query_state", state=QueryState.STARTING.value, max_attempts=attempts)

        for attempt in range(1, attempts + 1):
            query.attempts_made = attempt
            try:
                result = await self._attempt(query, attempt, started)
            except Exception as e:
                query.last_error = str(e) or e.__class__.__name__
                log.warning("attempt_failed", attempt=attempt, error=query.last_error)
                await self._teardown_session()
                if attempt < attempts:
                    await asyncio.sleep(self.settings.error_retry_delay_ms / 1000)
                continue

            if result is not None:
                return result

        query.outcome = QueryOutcome.EXHAUSTED
        log.warning("query_state", state=QueryState.EXHAUSTED.value, last_error=query.last_error)
        return ScrapeResult.failure(
            roll_number,
            f"Failed after {attempts} attempts: {query.last_error}",
            int((time.perf_counter() - started) * 1000),
        )

    async def close(self) -> None:
        if self.has_session or self._engine is not None:
            await self._teardown_session()
            self.logger.info("browser_closed", captcha_stats=self.resolver.get_cache_stats())
