"""Scraper settings.

Values come from the environment (optionally a ``.env`` file); every field
has a default that matches the production portal.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


CAPTCHA_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Ordered from the fastest, most restrictive profile to a general fallback
DEFAULT_OCR_PROFILES: List[Dict[str, str]] = [
    {
        "tessedit_char_whitelist": CAPTCHA_ALPHABET,
        "tessedit_pageseg_mode": "8",  # Single word
        "tessedit_ocr_engine_mode": "1",  # LSTM only
        "preserve_interword_spaces": "0",
        "user_defined_dpi": "300",
        "tessedit_enable_doc_dict": "0",
        "tessedit_enable_dict_correction": "0",
    },
    {
        "tessedit_char_whitelist": CAPTCHA_ALPHABET,
        "tessedit_pageseg_mode": "7",  # Single text line
        "tessedit_ocr_engine_mode": "1",
        "preserve_interword_spaces": "0",
        "user_defined_dpi": "300",
    },
    {
        "tessedit_char_whitelist": CAPTCHA_ALPHABET,
        "tessedit_pageseg_mode": "6",  # Single uniform block
        "tessedit_ocr_engine_mode": "3",  # Default + LSTM
    },
]

# Baseline applied to every engine handle when the pool starts
BASELINE_OCR_PROFILE: Dict[str, str] = {
    "tessedit_char_whitelist": CAPTCHA_ALPHABET,
    "tessedit_pageseg_mode": "8",
    "tessedit_ocr_engine_mode": "1",
    "preserve_interword_spaces": "0",
    "user_defined_dpi": "300",
    "tessedit_enable_doc_dict": "0",
    "tessedit_enable_dict_correction": "0",
}


@dataclass
class PortalSelectors:
    """CSS selectors of the result query form."""
    roll_number: str = "#txtBarcode"
    captcha_input: str = "#captchaInput"
    captcha_image: str = "#imgcode"
    submit_button: str = "#btnSubmit"
    refresh_captcha: str = "#switchCode"
    results_table: str = "#dataContainer table"


@dataclass
class ScrapingOptions:
    """Per-request overrides. ``None`` means "use the configured default"."""
    headless: Optional[bool] = None
    max_retries: Optional[int] = None
    timeout_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headless": self.headless,
            "max_retries": self.max_retries,
            "timeout_ms": self.timeout_ms,
        }


@dataclass
class ScraperSettings:
    """Process-wide scraper configuration."""
    portal_url: str = "https://resultsbed.samsodisha.gov.in/ResultBED/BEDSelectionlist"
    result_api_endpoint: str = "/ResultBED/appstatusbed"
    success_state: str = "success"
    no_record_message: str = "No record found"
    identifier_pattern: str = r"^[A-Z]{2}\d{2}[A-Z]\d{5}$"
    selectors: PortalSelectors = field(default_factory=PortalSelectors)

    # Query state machine
    max_retries: int = 3
    timeout_ms: int = 30000
    headless: bool = True
    captcha_refresh_delay_ms: int = 500
    rejected_captcha_delay_ms: int = 300
    error_retry_delay_ms: int = 1000
    results_table_timeout_ms: int = 5000

    # Batch dispatch
    max_workers: int = 4
    max_batch_size: int = 100
    sequential_threshold: int = 3
    sequential_delay_ms: int = 500
    worker_delay_ms: int = 1000

    # Captcha resolution
    ocr_worker_threads: int = 4
    parallel_ocr_attempts: int = 4
    ocr_timeout_ms: int = 3000
    ocr_profiles: List[Dict[str, str]] = field(
        default_factory=lambda: [dict(p) for p in DEFAULT_OCR_PROFILES]
    )
    captcha_cache_size: int = 100
    captcha_cache_ttl_seconds: float = 300.0
    cache_confidence_threshold: float = 40.0
    min_captcha_length: int = 3
    max_captcha_length: int = 8

    log_level: str = "INFO"

    def with_options(self, options: Optional[ScrapingOptions]) -> "ScraperSettings":
        """Return a copy with the request options applied.

        A retry budget or timeout that is not positive counts as unset: a
        zero timeout would disable Playwright's timeouts altogether.
        """
        if options is None:
            return self
        overrides: Dict[str, Any] = {}
        if options.headless is not None:
            overrides["headless"] = options.headless
        if options.max_retries is not None and options.max_retries > 0:
            overrides["max_retries"] = options.max_retries
        if options.timeout_ms is not None and options.timeout_ms > 0:
            overrides["timeout_ms"] = options.timeout_ms
        return replace(self, **overrides) if overrides else self


def _env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    number = int(value)
    if minimum is not None and number < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {number}")
    return number


def load_app_config() -> ScraperSettings:
    """Build ``ScraperSettings`` from environment variables."""
    load_dotenv()

    defaults = ScraperSettings()
    return ScraperSettings(
        portal_url=os.getenv("PORTAL_URL", defaults.portal_url),
        max_retries=_env_int("MAX_RETRY_ATTEMPTS", defaults.max_retries, minimum=1),
        timeout_ms=_env_int("SCRAPING_TIMEOUT_MS", defaults.timeout_ms, minimum=1),
        headless=os.getenv("HEADLESS_MODE", "true").lower() != "false",
        max_workers=_env_int("MAX_WORKERS", defaults.max_workers, minimum=1),
        max_batch_size=_env_int("MAX_BATCH_SIZE", defaults.max_batch_size, minimum=1),
        ocr_worker_threads=_env_int("OCR_WORKER_THREADS", defaults.ocr_worker_threads, minimum=1),
        parallel_ocr_attempts=_env_int("PARALLEL_OCR_ATTEMPTS", defaults.parallel_ocr_attempts, minimum=1),
        ocr_timeout_ms=_env_int("OCR_TIMEOUT_MS", defaults.ocr_timeout_ms, minimum=1),
        captcha_cache_size=_env_int("CAPTCHA_CACHE_SIZE", defaults.captcha_cache_size),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
    )
