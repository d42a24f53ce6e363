"""In-process test doubles for the scraper layer."""

from typing import List, Optional

from bed_results.scraper.interfaces import IResultScraper, QueryOutcome, ScrapeResult, StudentRecord


class FakeScraper(IResultScraper):
    """Scraper that succeeds for every roll number except those listed in ``failing``."""

    def __init__(self, failing: Optional[List[str]] = None, raising: Optional[List[str]] = None):
        self.failing = set(failing or [])
        self.raising = set(raising or [])
        self.queried: List[str] = []
        self.closed = False

    async def initialize(self) -> None:
        pass

    async def run(self, identifier: str, max_attempts: Optional[int] = None) -> ScrapeResult:
        self.queried.append(identifier)
        if identifier in self.raising:
            raise RuntimeError("browser crashed")
        if identifier in self.failing:
            return ScrapeResult.failure(identifier, "Failed after 3 attempts: Invalid captcha")
        return ScrapeResult(
            identifier=identifier,
            success=True,
            outcome=QueryOutcome.SUCCESS,
            data=StudentRecord(roll_number=identifier, name="CANDIDATE"),
        )

    async def close(self) -> None:
        self.closed = True
