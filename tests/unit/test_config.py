"""
Unit tests for settings loading and reporting-period arithmetic.
"""

import os
from datetime import date

import pytest

from revenue_monitor.core.config import Settings, previous_period
from revenue_monitor.core.retry import backoff_delay


class TestPreviousPeriod:

    def test_mid_year(self):
        """Test stepping back within a year"""
        assert previous_period(date(2024, 12, 1)) == date(2024, 11, 1)

    def test_year_boundary(self):
        """Test stepping back from January"""
        assert previous_period(date(2025, 1, 1)) == date(2024, 12, 1)

    def test_day_is_clamped_to_month_length(self):
        """Test that the day is clamped to the shorter month"""
        assert previous_period(date(2024, 3, 31)) == date(2024, 2, 29)
        assert previous_period(date(2023, 3, 31)) == date(2023, 2, 28)

    def test_settings_property(self):
        """Test the previous period exposed by settings"""
        assert Settings(current_period=date(2024, 7, 1)).previous_period == date(2024, 6, 1)


class TestSettingsFromEnv:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        # load_dotenv writes to os.environ; give each test a private copy
        monkeypatch.setattr(os, "environ", dict(os.environ))
        for name in ("DATABASE_URL", "CURRENT_REPORT_PERIOD", "HIGH_RISK_THRESHOLD",
                     "DEFAULT_TRANSACTION_LIMIT", "CORS_ORIGINS", "SEED_SAMPLE_DATA",
                     "STORE_RETRY_ATTEMPTS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        # Keep a developer's .env out of the picture
        monkeypatch.chdir(tmp_path)

    def test_defaults(self):
        """Test values used when nothing is configured"""
        settings = Settings.from_env(env_file=None)

        assert settings.current_period == date(2024, 12, 1)
        assert settings.high_risk_threshold == 70
        assert settings.default_transaction_limit == 100
        assert settings.store_retry_attempts == 0
        assert settings.seed_sample_data is True

    def test_defaults_match_dataclass_defaults(self):
        """Test that loading an empty environment equals constructing Settings directly"""
        assert Settings.from_env(env_file=None) == Settings()

    def test_overrides(self, monkeypatch):
        """Test that environment variables override every default"""
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
        monkeypatch.setenv("CURRENT_REPORT_PERIOD", "2025-03-01")
        monkeypatch.setenv("HIGH_RISK_THRESHOLD", "80")
        monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, http://dashboard.local")
        monkeypatch.setenv("SEED_SAMPLE_DATA", "false")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env(env_file=None)

        assert settings.database_url == "sqlite:///./other.db"
        assert settings.current_period == date(2025, 3, 1)
        assert settings.previous_period == date(2025, 2, 1)
        assert settings.high_risk_threshold == 80
        assert settings.cors_origins == ["http://localhost:3000", "http://dashboard.local"]
        assert settings.seed_sample_data is False
        assert settings.log_level == "DEBUG"

    def test_env_file_is_loaded(self, tmp_path):
        """Test loading values from an explicit .env file"""
        env_file = tmp_path / "custom.env"
        env_file.write_text("CURRENT_REPORT_PERIOD=2024-06-01\n")

        assert Settings.from_env(env_file=str(env_file)).current_period == date(2024, 6, 1)

    @pytest.mark.parametrize("name, value", [
        ("CURRENT_REPORT_PERIOD", "December"),
        ("HIGH_RISK_THRESHOLD", "high"),
        ("HIGH_RISK_THRESHOLD", "150"),
        ("DEFAULT_TRANSACTION_LIMIT", "0"),
        ("STORE_RETRY_ATTEMPTS", "-1"),
    ])
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        """Test that malformed or out-of-range values fail at load time"""
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            Settings.from_env(env_file=None)


class TestBackoffDelay:

    def test_exponential_growth(self):
        """Test that the delay doubles per attempt"""
        assert [backoff_delay(attempt, 0.1, 10.0) for attempt in range(4)] == pytest.approx([0.1, 0.2, 0.4, 0.8])

    def test_capped(self):
        """Test that the delay never exceeds the cap"""
        assert backoff_delay(10, 0.1, 2.0) == 2.0
