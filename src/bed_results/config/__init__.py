"""Configuration: structured logging and scraper settings."""

from .logger import configure_logging, logger
from .settings import (
    DEFAULT_OCR_PROFILES,
    PortalSelectors,
    ScraperSettings,
    ScrapingOptions,
    load_app_config,
)

__all__ = [
    "configure_logging",
    "logger",
    "DEFAULT_OCR_PROFILES",
    "PortalSelectors",
    "ScraperSettings",
    "ScrapingOptions",
    "load_app_config",
]
