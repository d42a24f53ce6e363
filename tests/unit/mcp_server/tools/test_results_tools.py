"""Tests for the results MCP tools."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from mcp.server.fastmcp import FastMCP

from bed_results.config.settings import ScraperSettings
from bed_results.errors import BatchValidationError
from bed_results.mcp_server.tools.results_tools import build_batch_summary, register_results_tools
from bed_results.monitoring.performance import PerformanceMonitor
from bed_results.scraper.interfaces import QueryOutcome, ScrapeResult, StudentRecord


@pytest.fixture
def mcp_server():
    """Create a test MCP server instance."""
    return FastMCP("test-server")


@pytest.fixture
def mock_scraper():
    scraper = AsyncMock()
    scraper.run.return_value = ScrapeResult(
        identifier="ED18A02166",
        success=True,
        outcome=QueryOutcome.SUCCESS,
        data=StudentRecord(roll_number="ED18A02166", name="PRIYA DAS"),
    )
    return scraper


@pytest.fixture
def services(mock_scraper, mock_resolver):
    services = MagicMock()
    services.settings = ScraperSettings()
    services.monitor = PerformanceMonitor()
    services.resolver = mock_resolver
    services.create_scraper.return_value = mock_scraper
    return services


@pytest.fixture
def mock_dispatcher():
    return AsyncMock()


def get_tool(mcp_server, name):
    return mcp_server._tool_manager.get_tool(name)


class TestResultsTools:
    """Test suite for results MCP tools."""

    @pytest.mark.asyncio
    async def test_register_results_tools(self, mcp_server, services, mock_dispatcher):
        """Test that every tool is registered."""
        register_results_tools(mcp_server, services, mock_dispatcher)

        tool_names = [tool.name for tool in await mcp_server.list_tools()]
        assert "scrape_result" in tool_names
        assert "scrape_results_batch" in tool_names
        assert "get_performance_metrics" in tool_names
        assert "clear_captcha_cache" in tool_names
        assert "get_service_info" in tool_names

    @pytest.mark.asyncio
    async def test_scrape_result_success(self, mcp_server, services, mock_dispatcher, mock_scraper):
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "scrape_result").fn(roll_number="ED18A02166", max_retries=2)

        assert result["success"] is True
        assert result["data"]["data"]["name"] == "PRIYA DAS"
        options = services.create_scraper.call_args.args[0]
        assert options.max_retries == 2
        assert options.headless is None
        mock_scraper.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scrape_result_invalid_roll_number(self, mcp_server, services, mock_dispatcher, mock_scraper):
        from bed_results.errors import InvalidIdentifierError

        mock_scraper.run.side_effect = InvalidIdentifierError("bad")
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "scrape_result").fn(roll_number="bad")

        assert result["success"] is False
        assert "Invalid roll number format" in result["error"]
        assert "timestamp" in result
        mock_scraper.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scrape_result_unexpected_error(self, mcp_server, services, mock_dispatcher, mock_scraper):
        mock_scraper.run.side_effect = RuntimeError("boom")
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "scrape_result").fn(roll_number="ED18A02166")

        assert result["success"] is False
        assert result["error"] == "Error scraping result: boom"

    @pytest.mark.asyncio
    async def test_scrape_results_batch(self, mcp_server, services, mock_dispatcher):
        mock_dispatcher.dispatch.return_value = [
            ScrapeResult(identifier="ED18A00001", success=True, outcome=QueryOutcome.SUCCESS,
                         data=StudentRecord(roll_number="ED18A00001")),
            ScrapeResult.failure("ED18A00002", "No record found", outcome=QueryOutcome.NOT_FOUND),
        ]
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "scrape_results_batch").fn(
            roll_numbers=["ED18A00001", "ED18A00002"]
        )

        assert result["success"] is True
        assert result["message"] == "Processed 2/2 roll numbers (1 successful)"
        assert result["data"]["errors"] == ["ED18A00002: No record found"]
        assert result["data"]["completed"] == 2

    @pytest.mark.asyncio
    async def test_scrape_results_batch_validation_error(self, mcp_server, services, mock_dispatcher):
        mock_dispatcher.dispatch.side_effect = BatchValidationError("Maximum 100 roll numbers allowed per batch")
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "scrape_results_batch").fn(roll_numbers=["ED18A00001"] * 101)

        assert result["success"] is False
        assert result["error"] == "Maximum 100 roll numbers allowed per batch"

    @pytest.mark.asyncio
    async def test_get_performance_metrics(self, mcp_server, services, mock_dispatcher):
        services.monitor.record_attempt(True, 1500.0)
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "get_performance_metrics").fn()

        data = result["data"]
        assert data["captcha_performance"]["total_attempts"] == 1
        assert data["recommendations"]["average_time_status"] == "Good"
        assert data["recommendations"]["success_rate_status"] == "Excellent"
        assert data["cache"] == {"memory": {"cache_size": 0}}

    @pytest.mark.asyncio
    async def test_clear_captcha_cache(self, mcp_server, services, mock_dispatcher, mock_resolver):
        services.monitor.record_attempt(True, 1500.0)
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "clear_captcha_cache").fn()

        assert result["success"] is True
        mock_resolver.clear_cache.assert_called_once()
        assert services.monitor.get_metrics().total_attempts == 0

    @pytest.mark.asyncio
    async def test_get_service_info(self, mcp_server, services, mock_dispatcher):
        register_results_tools(mcp_server, services, mock_dispatcher)

        result = await get_tool(mcp_server, "get_service_info").fn()

        assert result["data"]["version"] == "1.0.0"
        assert result["data"]["limits"]["max_batch_size"] == 100
        assert "scrape_results_batch" in result["data"]["tools"]


class TestBatchSummary:

    def test_empty_errors_when_all_succeed(self):
        results = [ScrapeResult(identifier="ED18A00001", success=True, outcome=QueryOutcome.SUCCESS)]

        summary = build_batch_summary(1, results, 1500)

        assert summary["data"]["errors"] == []
        assert summary["data"]["processing_time_human"] == "1.5s"
        assert summary["message"] == "Processed 1/1 roll numbers (1 successful)"
