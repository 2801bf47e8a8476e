"""Route registration for the revenue monitoring API."""

from fastapi import FastAPI

from revenue_monitor.logging.router import router as log_router
from revenue_monitor.monitoring.router import router as monitoring_router

API_PREFIX = "/api"


def register_routes(app: FastAPI) -> None:
    """Mount every data endpoint under ``/api``; service endpoints stay at the root."""
    app.include_router(monitoring_router, prefix=API_PREFIX)
    app.include_router(log_router, prefix=API_PREFIX)
