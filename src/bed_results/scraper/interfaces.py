"""Interfaces for the results scraper.

This module defines the data structures that flow between the query state
machine, the batch dispatcher and the worker processes. Everything that
crosses a process boundary (``WorkUnit``, ``WorkResult`` and the objects they
contain) is a plain dataclass so it pickles cleanly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.settings import ScrapingOptions


class QueryOutcome(Enum):
    """Lifecycle of one roll-number query."""
    PENDING = "pending"  # Still being attempted
    SUCCESS = "success"  # Result found and parsed
    NOT_FOUND = "not_found"  # Portal says the roll number has no record
    EXHAUSTED = "exhausted"  # Ran out of attempts


class QueryState(Enum):
    """States of the per-query retry loop, used for logging."""
    STARTING = "starting"
    AWAITING_CAPTCHA = "awaiting_captcha"
    SUBMITTING = "submitting"
    RETRYING = "retrying"
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXHAUSTED = "exhausted"


@dataclass
class Query:
    """One roll-number lookup, owned by a single state machine run."""
    identifier: str
    attempts_made: int = 0
    outcome: QueryOutcome = QueryOutcome.PENDING
    last_error: str = ""


@dataclass(frozen=True)
class StudentRecord:
    """Result data for one candidate.

    Attributes:
        roll_number: The queried roll number.
        name: Applicant name.
        course: Allotted course.
        stream: Subject stream.
        social_category: Reservation category.
        score: Entrance score.
        barcode_number: Barcode column of the result table.
        entrance_roll_number: Entrance roll number column of the result table.
        remarks: Remarks column of the result table.
    """
    roll_number: str
    name: str = ""
    course: str = ""
    stream: str = ""
    social_category: str = ""
    score: float = 0.0
    barcode_number: str = ""
    entrance_roll_number: str = ""
    remarks: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roll_number": self.roll_number,
            "name": self.name,
            "course": self.course,
            "stream": self.stream,
            "social_category": self.social_category,
            "score": self.score,
            "barcode_number": self.barcode_number,
            "entrance_roll_number": self.entrance_roll_number,
            "remarks": self.remarks,
        }


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ScrapeResult:
    """Externally visible outcome of one roll-number query."""
    identifier: str
    success: bool
    outcome: QueryOutcome
    data: Optional[StudentRecord] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=utc_timestamp)
    elapsed_ms: int = 0

    @classmethod
    def failure(cls, identifier: str, error: str, elapsed_ms: int = 0,
                outcome: QueryOutcome = QueryOutcome.EXHAUSTED) -> "ScrapeResult":
        return cls(
            identifier=identifier,
            success=False,
            outcome=outcome,
            error=error,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "roll_number": self.identifier,
            "success": self.success,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp,
            "processing_time": self.elapsed_ms,
        }
        if self.data is not None:
            result["data"] = self.data.to_dict()
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class WorkUnit:
    """A chunk of a batch sent to one worker process."""
    worker_id: int
    identifiers: List[str]
    options: ScrapingOptions = field(default_factory=ScrapingOptions)


@dataclass(frozen=True)
class WorkResult:
    """What a worker process reports back for its chunk."""
    worker_id: int
    results: List[ScrapeResult]
    elapsed_ms: int


class IResultScraper(ABC):
    """Interface for the per-query state machine."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open the browser session and load the portal."""
        pass

    @abstractmethod
    async def run(self, identifier: str, max_attempts: Optional[int] = None) -> ScrapeResult:
        """Drive one roll-number query to a terminal outcome."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the browser session."""
        pass
