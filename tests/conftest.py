"""
Test configuration and shared fixtures for the revenue monitor test suite.
Provides an in-memory database, the application client and sample data.
"""

from datetime import date, datetime
from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from revenue_monitor.app import create_app
from revenue_monitor.core.config import Settings
from revenue_monitor.core.database import build_session_factory, create_all_tables, drop_all_tables
from revenue_monitor.monitoring.models import Operator, OperatorStatus, RevenueReport, Transaction
from revenue_monitor.seed import seed_database


# ===== DATABASE SETUP =====

@pytest.fixture(scope="session")
def engine():
    """In-memory SQLite engine shared by the whole test session"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    return engine


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        current_period=date(2024, 12, 1),
        seed_sample_data=False,
        store_retry_backoff=0.0,
        log_level="WARNING",
    )


@pytest.fixture(scope="function")
def db_session(engine):
    """Session for arranging test data; tables are recreated after each test"""
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        drop_all_tables(engine)
        create_all_tables(engine)


@pytest.fixture
def app(settings, engine, db_session):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


# ===== SAMPLE DATA FIXTURES =====

@pytest.fixture
def seeded(db_session: Session) -> Session:
    """The full demo data set with a fixed random seed"""
    seed_database(db_session, random_seed=42, today=date(2025, 1, 15))
    return db_session


@pytest.fixture
def sample_operators(db_session: Session) -> List[Operator]:
    operators = [
        Operator(operator_id=10, name="Alpha Bets", license_type="Sports Betting",
                 status=OperatorStatus.ACTIVE, risk_score=30),
        Operator(operator_id=11, name="Beta Casino", license_type="Online Casino",
                 status=OperatorStatus.SUSPENDED, risk_score=90),
    ]
    db_session.add_all(operators)
    db_session.commit()
    return operators


@pytest.fixture
def sample_transactions(db_session: Session, sample_operators) -> List[Transaction]:
    """Five transactions with known dates, hours and flags"""
    rows = [
        (10, date(2024, 12, 1), 9, "Football", False),
        (10, date(2024, 12, 3), 22, "Football", True),
        (10, date(2024, 12, 3), 8, "Tennis", False),
        (11, date(2024, 12, 2), 15, "Slots", True),
        (11, date(2024, 11, 28), 23, "Slots", False),
    ]
    transactions = [
        Transaction(operator_id=operator_id, transaction_date=day, transaction_hour=hour,
                    bet_amount=100.0, payout_amount=0.0, game_type=game, player_id="PLAYER_1",
                    ip_address="41.0.0.1", suspicious_flag=suspicious)
        for operator_id, day, hour, game, suspicious in rows
    ]
    db_session.add_all(transactions)
    db_session.commit()
    return transactions


def make_report(operator_id: int, period: date, revenue: float, **extra) -> RevenueReport:
    """Build a revenue report with tax at 20% and no anomaly unless given"""
    fields = dict(
        operator_id=operator_id,
        report_date=period,
        gross_revenue=revenue,
        declared_tax=revenue * 0.2,
        submission_timestamp=datetime(period.year, period.month, period.day, 9, 0),
        is_late=False,
        anomaly_flag=False,
    )
    fields.update(extra)
    return RevenueReport(**fields)
