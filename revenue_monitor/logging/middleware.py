import logging
import platform
import socket
import time
from datetime import datetime
from typing import Callable

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from revenue_monitor.logging.dao import LogDAO

logger = logging.getLogger(__name__)

EXCLUDED_PREFIXES = ("/api/logs",)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Times every API request and stores a ``Log`` row after the response is sent."""

    def __init__(self, app: ASGIApp, application_id: str = "revenue-monitor"):
        super().__init__(app)
        try:
            self.hostname = socket.gethostname() or platform.node() or "unknown_host"
        except OSError:
            self.hostname = "unknown_host"
        self.application_id = application_id

    async def dispatch(self, request: Request, call_next: Callable):
        # Only API traffic is recorded, reads of the log itself excluded
        path = request.url.path
        if not path.startswith("/api/") or path.startswith(EXCLUDED_PREFIXES):
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        status_code = response.status_code
        session_factory = request.app.state.session_factory
        entry = dict(
            timestamp=datetime.now(),
            method=request.method,
            path=str(request.url.path),
            query_string=request.url.query or None,
            status_code=status_code,
            client_ip=request.client.host if request.client else None,
            processing_time=duration_ms,
            user_agent=request.headers.get("user-agent"),
            hostname=self.hostname,
            application_id=self.application_id,
        )

        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, status_code, duration_ms)

        def log_to_db():
            with session_factory() as session:
                try:
                    LogDAO(session).record(**entry)
                except SQLAlchemyError:
                    session.rollback()
                    logger.exception("Failed to store request log for %s %s", entry["method"], entry["path"])

        # Attach as background task
        response.background = getattr(response, "background", None) or BackgroundTask(log_to_db)

        return response
