"""Performance monitoring for captcha solving."""

from .performance import PerformanceMetrics, PerformanceMonitor, build_recommendations

__all__ = ["PerformanceMetrics", "PerformanceMonitor", "build_recommendations"]
