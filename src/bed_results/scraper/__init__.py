"""Result scraping: per-query state machine and batch dispatch."""

from .interfaces import (
    IResultScraper,
    Query,
    QueryOutcome,
    QueryState,
    ScrapeResult,
    StudentRecord,
    WorkResult,
    WorkUnit,
)
from .validation import (
    chunk_list,
    format_processing_time,
    is_valid_identifier,
    sanitize_identifier,
    validate_batch,
    validate_identifier,
)
from .results_scraper import ResultsScraper, build_student_record
from .dispatcher import BatchDispatcher, plan_worker_count, results_cover_batch
from .worker import run_work_unit, scrape_sequentially

__all__ = [
    "IResultScraper",
    "Query",
    "QueryOutcome",
    "QueryState",
    "ScrapeResult",
    "StudentRecord",
    "WorkResult",
    "WorkUnit",
    "chunk_list",
    "format_processing_time",
    "is_valid_identifier",
    "sanitize_identifier",
    "validate_batch",
    "validate_identifier",
    "ResultsScraper",
    "build_student_record",
    "BatchDispatcher",
    "plan_worker_count",
    "results_cover_batch",
    "run_work_unit",
    "scrape_sequentially",
]
