"""Captcha solving performance counters.

One ``PerformanceMonitor`` is created per process at startup and handed to
the components that write to it (the captcha resolver) and read from it
(reporting tools).
"""

import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from ..config.logger import logger


@dataclass(frozen=True)
class PerformanceMetrics:
    """Snapshot of the monitor's counters. Times are in milliseconds."""
    total_attempts: int = 0
    successful_attempts: int = 0
    total_captchas_solved: int = 0
    total_captcha_time: float = 0.0
    average_captcha_time: float = 0.0
    fastest_captcha: float = 0.0
    slowest_captcha: float = 0.0
    success_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PerformanceMonitor:
    """Monotonic counter set, safe under concurrent ``record_attempt`` calls."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reset_counters()
        self.logger = logger.bind(component="performance_monitor")

    def _reset_counters(self) -> None:
        self._total_attempts = 0
        self._successful_attempts = 0
        self._total_solved = 0
        self._total_time = 0.0
        self._fastest = float("inf")
        self._slowest = 0.0

    def record_attempt(self, success: bool, elapsed_ms: float) -> None:
        with self._lock:
            self._total_attempts += 1
            if success:
                self._successful_attempts += 1
                self._total_solved += 1
                self._total_time += elapsed_ms
                self._fastest = min(self._fastest, elapsed_ms)
                self._slowest = max(self._slowest, elapsed_ms)

    def get_metrics(self) -> PerformanceMetrics:
        with self._lock:
            average = self._total_time / self._total_solved if self._total_solved else 0.0
            success_rate = (
                self._successful_attempts / self._total_attempts * 100
                if self._total_attempts else 0.0
            )
            return PerformanceMetrics(
                total_attempts=self._total_attempts,
                successful_attempts=self._successful_attempts,
                total_captchas_solved=self._total_solved,
                total_captcha_time=self._total_time,
                average_captcha_time=average,
                fastest_captcha=0.0 if self._fastest == float("inf") else self._fastest,
                slowest_captcha=self._slowest,
                success_rate=success_rate,
            )

    def reset(self) -> None:
        with self._lock:
            self._reset_counters()

    def log_report(self) -> None:
        metrics = self.get_metrics()
        self.logger.info(
            "captcha_performance_report",
            total_attempts=metrics.total_attempts,
            successful_attempts=metrics.successful_attempts,
            success_rate=round(metrics.success_rate, 1),
            average_ms=round(metrics.average_captcha_time),
            fastest_ms=metrics.fastest_captcha,
            slowest_ms=metrics.slowest_captcha,
        )


def build_recommendations(metrics: PerformanceMetrics) -> Dict[str, Any]:
    """Grade the metrics and suggest tuning steps."""
    if metrics.average_captcha_time < 3000:
        average_status = "Good"
    elif metrics.average_captcha_time < 5000:
        average_status = "Fair"
    else:
        average_status = "Needs Improvement"

    if metrics.success_rate > 80:
        success_status = "Excellent"
    elif metrics.success_rate > 60:
        success_status = "Good"
    else:
        success_status = "Needs Improvement"

    tips: List[str] = []
    if metrics.average_captcha_time > 5000:
        tips.append("Consider optimizing OCR settings or adding recognition workers")
    if metrics.success_rate < 60:
        tips.append("Check captcha image quality and OCR configuration")

    return {
        "average_time_status": average_status,
        "success_rate_status": success_status,
        "tips": tips,
    }
