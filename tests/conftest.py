"""
Pytest configuration and shared fixtures for the test suite.
"""
import sys
from pathlib import Path

import pytest

# Make the package and the fixtures module importable without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from fixtures.browser_fixtures import (  # noqa: E402,F401
    mock_browser_context,
    mock_browser_engine,
    mock_browser_factory,
    mock_page,
    mock_resolver,
    results_table_row,
    student_api_payload,
)


@pytest.fixture
def fast_settings():
    """Settings with every delay disabled."""
    from bed_results.config.settings import ScraperSettings

    return ScraperSettings(
        captcha_refresh_delay_ms=0,
        rejected_captcha_delay_ms=0,
        error_retry_delay_ms=0,
        results_table_timeout_ms=10,
        sequential_delay_ms=0,
        worker_delay_ms=0,
    )


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    test_env = {
        "PORTAL_URL": "https://portal.test/ResultBED/BEDSelectionlist",
        "MAX_RETRY_ATTEMPTS": "5",
        "SCRAPING_TIMEOUT_MS": "15000",
        "HEADLESS_MODE": "false",
        "MAX_WORKERS": "2",
        "OCR_TIMEOUT_MS": "2500",
        "LOG_LEVEL": "DEBUG",
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    return test_env


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
