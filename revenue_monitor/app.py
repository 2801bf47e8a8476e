"""FastAPI application entry point for the revenue monitoring service."""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from revenue_monitor import __version__
from revenue_monitor.core.config import Settings
from revenue_monitor.core.database import build_engine, build_session_factory, init_db
from revenue_monitor.core.router import register_routes
from revenue_monitor.logging.exception_handlers import register_exception_handlers
from revenue_monitor.logging.middleware import LoggingMiddleware

logger = logging.getLogger(__name__)

SERVICE_NAME = "Revenue Monitoring System API"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the application around one connection pool.

    ``engine`` lets callers (tests, scripts) inject an existing pool; otherwise
    one is created from ``settings.database_url``.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = engine or build_engine(settings)
    init_db(engine, settings)

    app = FastAPI(
        title=SERVICE_NAME,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware, application_id=settings.application_id)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(app)

    @app.get("/health", tags=["service"])
    def health_check(request: Request) -> Any:
        """Liveness check that also verifies the database connection."""
        try:
            with request.app.state.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("Health check failed: %s", type(e).__name__, exc_info=e)
            return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "unreachable"})
        return {"status": "healthy", "database": "connected"}

    @app.get("/", tags=["service"])
    def service_index() -> Dict[str, Any]:
        return {
            "message": SERVICE_NAME,
            "version": __version__,
            "endpoints": {
                "operators": "/api/operators",
                "reports": "/api/reports",
                "anomalies": "/api/anomalies",
                "transactions": "/api/transactions",
                "stats": "/api/stats",
                "anomaly_types": "/api/anomaly-types",
                "logs": "/api/logs/recent",
                "health": "/health",
                "docs": "/api/docs",
            },
        }

    logger.info("Application created (period=%s)", settings.current_period.isoformat())
    return app
