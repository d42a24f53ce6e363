"""Result lookup tools for the MCP server.

The tools are thin: they turn arguments into scraping options, call the
scraper or the batch dispatcher, and convert errors into ``success: False``
dictionaries.
"""

import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from ... import __version__
from ...config.logger import logger
from ...config.settings import ScrapingOptions
from ...errors import ScraperError
from ...monitoring.performance import build_recommendations
from ...runtime import ScraperServices
from ...scraper.dispatcher import BatchDispatcher
from ...scraper.interfaces import ScrapeResult
from ...scraper.validation import format_processing_time


def _error_response(error: str) -> Dict[str, Any]:
    return {
        "success": False,
        "error": error,
        "timestamp": datetime.now().isoformat(),
    }


def build_batch_summary(
    requested: int,
    results: List[ScrapeResult],
    processing_time_ms: int,
) -> Dict[str, Any]:
    """Summarize a batch run the way callers report it."""
    successful = sum(1 for r in results if r.success)
    errors = [f"{r.identifier}: {r.error}" for r in results if not r.success]
    return {
        "success": True,
        "data": {
            "total": requested,
            "completed": len(results),
            "results": [r.to_dict() for r in results],
            "errors": errors,
            "processing_time": processing_time_ms,
            "processing_time_human": format_processing_time(processing_time_ms),
        },
        "message": f"Processed {len(results)}/{requested} roll numbers ({successful} successful)",
        "timestamp": datetime.now().isoformat(),
    }


def register_results_tools(
    mcp: FastMCP,
    services: ScraperServices,
    dispatcher: Optional[BatchDispatcher] = None,
):
    """Register result lookup tools with the MCP server."""
    dispatcher = dispatcher or BatchDispatcher(
        scraper_factory=services.create_scraper,
        settings=services.settings,
    )

    @mcp.tool()
    async def scrape_result(
        roll_number: str,
        headless: Optional[bool] = None,
        max_retries: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Look up the result of one roll number.

        Args:
            roll_number: Roll number such as ED18A02166
            headless: Run the browser without a window (default from config)
            max_retries: Attempts before giving up (default 3)
            timeout_ms: Page and response timeout in milliseconds (default 30000)

        Returns:
            Dictionary with the lookup outcome and, on success, the student record
        """
        options = ScrapingOptions(headless=headless, max_retries=max_retries, timeout_ms=timeout_ms)
        scraper = services.create_scraper(options)
        try:
            logger.info("scrape_result_request", roll_number=roll_number)
            result = await scraper.run(roll_number)
            return {
                "success": True,
                "data": result.to_dict(),
                "timestamp": datetime.now().isoformat(),
            }
        except ScraperError as e:
            logger.warning("scrape_result_rejected", roll_number=roll_number, error=str(e))
            return _error_response(str(e))
        except Exception as e:
            logger.error("scrape_result_error", error=str(e), exc_info=True)
            return _error_response(f"Error scraping result: {str(e)}")
        finally:
            await scraper.close()

    @mcp.tool()
    async def scrape_results_batch(
        roll_numbers: List[str],
        headless: Optional[bool] = None,
        max_retries: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Look up results for several roll numbers.

        Batches of more than three roll numbers are split across worker processes.

        Args:
            roll_numbers: Up to 100 roll numbers
            headless: Run the browsers without a window (default from config)
            max_retries: Attempts per roll number (default 3)
            timeout_ms: Page and response timeout in milliseconds (default 30000)

        Returns:
            Batch summary with one result per roll number and the list of errors
        """
        options = ScrapingOptions(headless=headless, max_retries=max_retries, timeout_ms=timeout_ms)
        start = time.perf_counter()
        try:
            logger.info("scrape_batch_request", roll_numbers=len(roll_numbers))
            results = await dispatcher.dispatch(roll_numbers, options)
        except ScraperError as e:
            logger.warning("scrape_batch_rejected", error=str(e))
            return _error_response(str(e))
        except Exception as e:
            logger.error("scrape_batch_error", error=str(e), exc_info=True)
            return _error_response(f"Error scraping batch: {str(e)}")

        processing_time_ms = int((time.perf_counter() - start) * 1000)
        summary = build_batch_summary(len(roll_numbers), results, processing_time_ms)
        logger.info("scrape_batch_result", message=summary["message"])
        return summary

    @mcp.tool()
    async def get_performance_metrics() -> Dict[str, Any]:
        """Captcha solving metrics, grading and cache statistics.

        Returns:
            Dictionary with captcha performance, recommendations and cache stats
        """
        metrics = services.monitor.get_metrics()
        return {
            "success": True,
            "data": {
                "captcha_performance": metrics.to_dict(),
                "recommendations": build_recommendations(metrics),
                "cache": services.resolver.get_cache_stats(),
            },
            "timestamp": datetime.now().isoformat(),
        }

    @mcp.tool()
    async def clear_captcha_cache() -> Dict[str, Any]:
        """Clear solved captchas and reset the performance counters.

        Returns:
            Dictionary confirming the reset
        """
        services.resolver.clear_cache()
        services.monitor.reset()
        return {
            "success": True,
            "data": {"message": "Cache cleared successfully"},
            "timestamp": datetime.now().isoformat(),
        }

    @mcp.tool()
    async def get_service_info() -> Dict[str, Any]:
        """Describe this service and its tools.

        Returns:
            Dictionary with name, version, limits and the available tools
        """
        settings = services.settings
        return {
            "success": True,
            "data": {
                "name": "BEd Results Scraper",
                "version": __version__,
                "description": "Result lookups on the SAMS Odisha BEd portal with OCR captcha solving",
                "portal_url": settings.portal_url,
                "limits": {
                    "max_batch_size": settings.max_batch_size,
                    "max_workers": settings.max_workers,
                    "max_retries": settings.max_retries,
                },
                "tools": {
                    "scrape_result": "Scrape a single roll number",
                    "scrape_results_batch": "Scrape multiple roll numbers across worker processes",
                    "get_performance_metrics": "Captcha solving performance metrics",
                    "clear_captcha_cache": "Clear captcha cache and reset metrics",
                    "get_service_info": "Service information",
                },
            },
            "timestamp": datetime.now().isoformat(),
        }
