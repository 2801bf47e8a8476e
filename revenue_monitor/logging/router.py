# revenue_monitor/logging/router.py
"""API router exposing the stored request log."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from revenue_monitor.core.dependencies import SessionDep, SettingsDep
from revenue_monitor.core.retry import call_with_retry
from revenue_monitor.core.schemas import ApiResponse, envelope
from revenue_monitor.logging.dao import LogDAO
from revenue_monitor.logging.schemas import LogRead
from revenue_monitor.monitoring.filters import parse_limit

router = APIRouter(prefix="/logs", tags=["logs"])

DEFAULT_LOG_LIMIT = 100


def get_log_dao(session: SessionDep) -> LogDAO:
    return LogDAO(session)


@router.get("/recent", response_model=ApiResponse[List[LogRead]])
def get_recent_logs(
    session: SessionDep,
    settings: SettingsDep,
    limit: Optional[str] = Query(None, description="Maximum number of log entries"),
    log_dao: LogDAO = Depends(get_log_dao),
):
    """Most recent API requests, newest first."""
    limit_value = parse_limit(limit, default=DEFAULT_LOG_LIMIT, maximum=settings.max_list_limit)
    logs = call_with_retry(lambda: log_dao.get_recent_logs(limit_value), session, settings)
    return envelope([LogRead.model_validate(log) for log in logs], with_count=True)
