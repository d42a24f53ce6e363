"""Browser automation surface used by the results scraper."""

from .factory import BrowserEngineFactory
from .interfaces import (
    BrowserConfig,
    BrowserType,
    IBrowserContext,
    IBrowserEngine,
    IPage,
    ResponsePredicate,
)

__all__ = [
    "BrowserEngineFactory",
    "BrowserConfig",
    "BrowserType",
    "IBrowserContext",
    "IBrowserEngine",
    "IPage",
    "ResponsePredicate",
]
