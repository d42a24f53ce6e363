"""
Browser engine interfaces using ABC
Design Pattern: Strategy + Dependency Inversion Principle

The scraper only ever talks to these interfaces, so tests can drive it with
AsyncMock pages and the concrete engine stays swappable.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional


class BrowserType(Enum):
    """Supported browser types"""
    PLAYWRIGHT = "playwright"


# Receives (url, status) of a network response, returns True to accept it
ResponsePredicate = Callable[[str, int], bool]


@dataclass
class BrowserConfig:
    """Browser configuration"""
    headless: bool = True
    timeout_ms: int = 30000
    executable_path: Optional[str] = None
    user_agent: Optional[str] = None
    viewport: Dict[str, int] = None
    extra_args: list[str] = None

    def __post_init__(self):
        if self.viewport is None:
            self.viewport = {"width": 1280, "height": 720}
        if self.extra_args is None:
            self.extra_args = []


class IPage(ABC):
    """Interface for a browser page"""

    @abstractmethod
    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[int] = None) -> None:
        """Navigate to URL"""
        pass

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout: int = 30000) -> None:
        """Wait for element to appear"""
        pass

    @abstractmethod
    async def click(self, selector: str) -> None:
        """Click an element"""
        pass

    @abstractmethod
    async def fill(self, selector: str, value: str) -> None:
        """Fill input field"""
        pass

    @abstractmethod
    async def evaluate(self, script: str) -> Any:
        """Execute JavaScript"""
        pass

    @abstractmethod
    async def screenshot_element(self, selector: str) -> Optional[bytes]:
        """Screenshot a single element, None if it is not on the page"""
        pass

    @abstractmethod
    async def wait_for_response(self, predicate: ResponsePredicate, timeout: int = 30000) -> Any:
        """Wait for the first response accepted by predicate and return its JSON body"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the page"""
        pass


class IBrowserContext(ABC):
    """Interface for an isolated browser context"""

    @abstractmethod
    async def new_page(self) -> IPage:
        """Create a new page/tab"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the context"""
        pass


class IBrowserEngine(ABC):
    """
    Abstract interface for browser engines
    Following Dependency Inversion Principle (SOLID)
    """

    @abstractmethod
    async def initialize(self, config: BrowserConfig) -> None:
        """Initialize the browser engine"""
        pass

    @abstractmethod
    async def create_context(self, context_options: Dict[str, Any]) -> IBrowserContext:
        """Create an isolated browser context"""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup all resources"""
        pass

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        """Check if engine is initialized"""
        pass
