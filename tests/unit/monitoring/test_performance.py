"""Tests for the captcha performance monitor."""

import threading

import pytest

from bed_results.monitoring.performance import PerformanceMetrics, PerformanceMonitor, build_recommendations


class TestPerformanceMonitor:
    """Test suite for PerformanceMonitor."""

    def test_empty_metrics(self):
        metrics = PerformanceMonitor().get_metrics()

        assert metrics == PerformanceMetrics()
        assert metrics.fastest_captcha == 0.0

    def test_record_attempts(self):
        monitor = PerformanceMonitor()
        monitor.record_attempt(True, 1200.0)
        monitor.record_attempt(True, 800.0)
        monitor.record_attempt(False, 3000.0)

        metrics = monitor.get_metrics()

        assert metrics.total_attempts == 3
        assert metrics.successful_attempts == 2
        assert metrics.total_captchas_solved == 2
        assert metrics.average_captcha_time == 1000.0
        assert metrics.fastest_captcha == 800.0
        assert metrics.slowest_captcha == 1200.0
        assert metrics.success_rate == pytest.approx(66.666, rel=1e-3)

    def test_reset(self):
        monitor = PerformanceMonitor()
        monitor.record_attempt(True, 500.0)

        monitor.reset()

        assert monitor.get_metrics().total_attempts == 0

    def test_concurrent_records_are_not_lost(self):
        monitor = PerformanceMonitor()

        def record():
            for _ in range(500):
                monitor.record_attempt(True, 10.0)

        threads = [threading.Thread(target=record) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert monitor.get_metrics().total_attempts == 2000

    def test_metrics_to_dict(self):
        monitor = PerformanceMonitor()
        monitor.record_attempt(True, 250.0)

        data = monitor.get_metrics().to_dict()

        assert data["total_captchas_solved"] == 1
        assert data["average_captcha_time"] == 250.0


class TestRecommendations:

    @pytest.mark.parametrize("average, expected", [
        (2999.0, "Good"),
        (4000.0, "Fair"),
        (5000.0, "Needs Improvement"),
    ])
    def test_average_time_status(self, average, expected):
        metrics = PerformanceMetrics(average_captcha_time=average, success_rate=90.0)

        assert build_recommendations(metrics)["average_time_status"] == expected

    @pytest.mark.parametrize("rate, expected", [
        (81.0, "Excellent"),
        (80.0, "Good"),
        (60.0, "Needs Improvement"),
    ])
    def test_success_rate_status(self, rate, expected):
        metrics = PerformanceMetrics(success_rate=rate)

        assert build_recommendations(metrics)["success_rate_status"] == expected

    def test_tips(self):
        slow = build_recommendations(PerformanceMetrics(average_captcha_time=6000.0, success_rate=50.0))
        healthy = build_recommendations(PerformanceMetrics(average_captcha_time=900.0, success_rate=95.0))

        assert len(slow["tips"]) == 2
        assert healthy["tips"] == []
