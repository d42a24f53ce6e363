import pytest
from unittest.mock import AsyncMock, MagicMock

from bed_results.browser.interfaces import IBrowserContext, IBrowserEngine, IPage
from bed_results.captcha.interfaces import ICaptchaResolver


@pytest.fixture
def student_api_payload():
    """Body of a successful result API response."""
    return {
        "state": "success",
        "data": {
            "vchApplicantName": "API NAME",
            "vchCourse": "B.Ed",
            "vchStream": "Arts",
            "vchSocialCategory": "GEN",
            "vchPreference": "71.5",
        },
    }


@pytest.fixture
def results_table_row():
    """First row of the rendered result table, as returned by the page script."""
    return {
        "barcodeNumber": "BC1001",
        "entranceRollNumber": "2401001",
        "applicantName": "PRIYA DAS",
        "entranceScore": "68.25",
        "course": "B.Ed",
        "stream": "Science",
        "socialCategory": "SEBC",
        "remarks": "Selected",
    }


@pytest.fixture
def mock_page(student_api_payload, results_table_row):
    """Mock IPage implementation."""
    page = AsyncMock(spec=IPage)

    # Setup default return values
    page.goto.return_value = None
    page.wait_for_selector.return_value = None
    page.click.return_value = None
    page.fill.return_value = None
    page.evaluate.return_value = results_table_row
    page.screenshot_element.return_value = b"captcha_png_bytes"
    page.wait_for_response.return_value = student_api_payload
    page.close.return_value = None

    return page


@pytest.fixture
def mock_browser_context(mock_page):
    """Mock IBrowserContext implementation."""
    context = AsyncMock(spec=IBrowserContext)
    context.new_page.return_value = mock_page
    context.close.return_value = None
    return context


@pytest.fixture
def mock_browser_engine(mock_browser_context):
    """Mock IBrowserEngine implementation."""
    engine = AsyncMock(spec=IBrowserEngine)
    engine.initialize.return_value = None
    engine.create_context.return_value = mock_browser_context
    engine.cleanup.return_value = None
    return engine


@pytest.fixture
def mock_browser_factory(mock_browser_engine):
    """Stands in for BrowserEngineFactory."""
    factory = MagicMock()
    factory.create = AsyncMock(return_value=mock_browser_engine)
    return factory


@pytest.fixture
def mock_resolver():
    """Captcha resolver that always reads AB12XZ."""
    resolver = MagicMock(spec=ICaptchaResolver)
    resolver.solve = AsyncMock(return_value="AB12XZ")
    resolver.terminate = AsyncMock(return_value=None)
    resolver.get_cache_stats.return_value = {"memory": {"cache_size": 0}}
    return resolver
