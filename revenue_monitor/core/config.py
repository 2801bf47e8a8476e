# revenue_monitor/core/config.py
"""Application settings loaded from environment variables (and an optional .env file)."""

import calendar
import os
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _env_date(name: str, default: date) -> date:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}")


def previous_period(period: date) -> date:
    """Return the same day one calendar month earlier, clamped to the month's length."""
    year, month = (period.year - 1, 12) if period.month == 1 else (period.year, period.month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(period.day, last_day))


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the revenue monitoring service."""

    database_url: str = "sqlite:///./revenue_monitor.db"
    current_period: date = date(2024, 12, 1)
    high_risk_threshold: int = 70
    query_timeout_seconds: float = 30.0
    default_transaction_limit: int = 100
    max_list_limit: int = 1000
    store_retry_attempts: int = 0
    store_retry_backoff: float = 0.1
    store_retry_backoff_cap: float = 2.0
    seed_sample_data: bool = True
    create_tables: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    application_id: str = "revenue-monitor"

    def __post_init__(self):
        if not 0 <= self.high_risk_threshold <= 100:
            raise ValueError("high_risk_threshold must be between 0 and 100")
        if self.default_transaction_limit < 1:
            raise ValueError("default_transaction_limit must be positive")
        if self.max_list_limit < self.default_transaction_limit:
            raise ValueError("max_list_limit cannot be lower than default_transaction_limit")
        if self.store_retry_attempts < 0:
            raise ValueError("store_retry_attempts cannot be negative")
        if self.query_timeout_seconds <= 0:
            raise ValueError("query_timeout_seconds must be positive")

    @property
    def previous_period(self) -> date:
        return previous_period(self.current_period)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from the process environment, loading ``.env`` (searched from the working directory) first."""
        load_dotenv(env_file or find_dotenv(usecwd=True))

        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            current_period=_env_date("CURRENT_REPORT_PERIOD", cls.current_period),
            high_risk_threshold=_env_int("HIGH_RISK_THRESHOLD", cls.high_risk_threshold),
            query_timeout_seconds=_env_float("QUERY_TIMEOUT_SECONDS", cls.query_timeout_seconds),
            default_transaction_limit=_env_int("DEFAULT_TRANSACTION_LIMIT", cls.default_transaction_limit),
            max_list_limit=_env_int("MAX_LIST_LIMIT", cls.max_list_limit),
            store_retry_attempts=_env_int("STORE_RETRY_ATTEMPTS", cls.store_retry_attempts),
            store_retry_backoff=_env_float("STORE_RETRY_BACKOFF", cls.store_retry_backoff),
            store_retry_backoff_cap=_env_float("STORE_RETRY_BACKOFF_CAP", cls.store_retry_backoff_cap),
            seed_sample_data=_env_bool("SEED_SAMPLE_DATA", cls.seed_sample_data),
            create_tables=_env_bool("CREATE_TABLES", cls.create_tables),
            cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            application_id=os.getenv("APPLICATION_ID", cls.application_id),
        )
