"""Tests for settings loading."""

import pytest

from bed_results.config.settings import ScraperSettings, ScrapingOptions, load_app_config


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("PORTAL_URL", "MAX_RETRY_ATTEMPTS", "HEADLESS_MODE", "MAX_WORKERS"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr("bed_results.config.settings.load_dotenv", lambda: None)

        settings = load_app_config()

        assert settings.max_retries == 3
        assert settings.timeout_ms == 30000
        assert settings.headless is True
        assert settings.max_workers == 4
        assert len(settings.ocr_profiles) == 3

    def test_environment_overrides(self, mock_env_vars, monkeypatch):
        monkeypatch.setattr("bed_results.config.settings.load_dotenv", lambda: None)

        settings = load_app_config()

        assert settings.portal_url == mock_env_vars["PORTAL_URL"]
        assert settings.max_retries == 5
        assert settings.timeout_ms == 15000
        assert settings.headless is False
        assert settings.max_workers == 2
        assert settings.ocr_timeout_ms == 2500
        assert settings.log_level == "DEBUG"

    def test_with_options(self):
        settings = ScraperSettings()

        resolved = settings.with_options(ScrapingOptions(max_retries=1, headless=False))

        assert resolved.max_retries == 1
        assert resolved.headless is False
        assert resolved.timeout_ms == settings.timeout_ms
        assert settings.max_retries == 3

    def test_with_empty_options_returns_same_settings(self):
        settings = ScraperSettings()

        assert settings.with_options(ScrapingOptions()) is settings
        assert settings.with_options(None) is settings

    def test_non_positive_options_are_ignored(self):
        settings = ScraperSettings()

        for value in (0, -1):
            resolved = settings.with_options(ScrapingOptions(max_retries=value, timeout_ms=value))

            assert resolved.max_retries == 3
            assert resolved.timeout_ms == 30000

    @pytest.mark.parametrize(
        "name",
        ["MAX_RETRY_ATTEMPTS", "SCRAPING_TIMEOUT_MS", "PARALLEL_OCR_ATTEMPTS", "OCR_WORKER_THREADS"],
    )
    def test_non_positive_environment_values_rejected(self, monkeypatch, name):
        monkeypatch.setattr("bed_results.config.settings.load_dotenv", lambda: None)
        monkeypatch.setenv(name, "0")

        with pytest.raises(ValueError, match=f"{name} must be at least 1"):
            load_app_config()
