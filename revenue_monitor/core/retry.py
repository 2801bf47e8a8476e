# revenue_monitor/core/retry.py
"""Capped exponential backoff for store calls made by the API layer."""

import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from revenue_monitor.core.config import Settings

logger = logging.getLogger(__name__)

ResultType = TypeVar("ResultType")


def backoff_delay(attempt: int, base: float, cap: float) -> float:
    """Delay before retry number ``attempt`` (0-based)."""
    return min(cap, base * (2 ** attempt))


def call_with_retry(
    func: Callable[[], ResultType],
    session: Session,
    settings: Settings,
    sleep: Callable[[float], None] = time.sleep,
) -> ResultType:
    """Run ``func``, retrying only on store faults.

    The session is rolled back between attempts. A ``None`` result (entity
    not found) is returned as is and never retried. After the last attempt
    the original ``SQLAlchemyError`` propagates.
    """
    attempts = settings.store_retry_attempts + 1
    for attempt in range(attempts):
        try:
            return func()
        except SQLAlchemyError as e:
            if attempt == attempts - 1:
                raise
            session.rollback()
            delay = backoff_delay(attempt, settings.store_retry_backoff, settings.store_retry_backoff_cap)
            logger.warning(
                "Store call failed (attempt %d/%d), retrying in %.2fs: %s",
                attempt + 1, attempts, delay, type(e).__name__,
            )
            sleep(delay)
