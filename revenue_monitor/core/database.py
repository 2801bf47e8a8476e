# revenue_monitor/core/database.py
"""Database configuration: declarative base, engine construction and session handling."""

import logging
import time
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from revenue_monitor.core.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# SQLite virtual machine instructions between two deadline checks
SQLITE_PROGRESS_INTERVAL = 10_000
_DEADLINE_KEY = "query_deadline"


def _install_sqlite_query_deadline(engine: Engine, timeout_seconds: float) -> None:
    """Interrupt SQLite statements running longer than ``timeout_seconds``.

    The deadline covers execution up to the first result row, which is where
    sorting and aggregation happen. An interrupted statement raises
    ``OperationalError``.
    """

    @event.listens_for(engine, "connect")
    def _set_progress_handler(dbapi_connection, connection_record):
        def _past_deadline() -> int:
            deadline = connection_record.info.get(_DEADLINE_KEY)
            return 1 if deadline is not None and time.monotonic() > deadline else 0

        dbapi_connection.set_progress_handler(_past_deadline, SQLITE_PROGRESS_INTERVAL)

    @event.listens_for(engine, "before_cursor_execute")
    def _start_deadline(conn, cursor, statement, parameters, context, executemany):
        conn.info[_DEADLINE_KEY] = time.monotonic() + timeout_seconds

    @event.listens_for(engine, "after_cursor_execute")
    def _clear_deadline(conn, cursor, statement, parameters, context, executemany):
        conn.info.pop(_DEADLINE_KEY, None)

    @event.listens_for(engine, "handle_error")
    def _clear_deadline_on_error(exception_context):
        # The rollback that follows must run without a deadline
        if exception_context.connection is not None:
            exception_context.connection.info.pop(_DEADLINE_KEY, None)


def build_engine(settings: Settings) -> Engine:
    """Create the connection pool for the configured database.

    The per-query timeout is enforced for both supported drivers. SQLite
    waits at most ``query_timeout_seconds`` on a locked database and a
    progress handler interrupts statements that run past it. PostgreSQL
    cancels them through ``statement_timeout``. Both surface as
    ``OperationalError``.
    """
    url = settings.database_url
    connect_args = {}

    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": settings.query_timeout_seconds}
    elif url.startswith("postgresql"):
        timeout_ms = int(settings.query_timeout_seconds * 1000)
        connect_args = {"options": f"-c statement_timeout={timeout_ms}"}

    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=not url.startswith("sqlite"))
    if url.startswith("sqlite"):
        _install_sqlite_query_deadline(engine, settings.query_timeout_seconds)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session from the application's pool for the duration of one request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# ===== TABLE CREATION =====


def create_all_tables(engine: Engine) -> None:
    """Create every table registered on ``Base``."""
    # Import models to ensure they're registered with Base
    from revenue_monitor.monitoring.models import Operator, RevenueReport, Transaction  # noqa: F401
    from revenue_monitor.logging.models import Log  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def drop_all_tables(engine: Engine) -> None:
    """Drop every table registered on ``Base`` (use with caution!)."""
    from revenue_monitor.monitoring.models import Operator, RevenueReport, Transaction  # noqa: F401
    from revenue_monitor.logging.models import Log  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    logger.info("Database tables dropped")


def init_db(engine: Engine, settings: Settings) -> None:
    """Create tables and, when configured, load the demo data set."""
    if settings.create_tables:
        create_all_tables(engine)

    if settings.seed_sample_data:
        from revenue_monitor.seed import seed_database

        with build_session_factory(engine)() as session:
            seed_database(session)
