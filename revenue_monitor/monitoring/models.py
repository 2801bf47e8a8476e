"""Database models for operators, their revenue reports and wagering transactions."""

import enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from revenue_monitor.core.database import Base


class OperatorStatus(str, enum.Enum):
    """Regulatory status of a licensed operator."""

    ACTIVE = "Active"
    UNDER_REVIEW = "Under Review"
    SUSPENDED = "Suspended"
    INACTIVE = "Inactive"


class LicenseType(str, enum.Enum):
    """Known license categories. The column itself accepts any label."""

    SPORTS_BETTING = "Sports Betting"
    ONLINE_CASINO = "Online Casino"
    LOTTERY = "Lottery"


ACTIVE_STATUSES = (OperatorStatus.ACTIVE,)
PROBLEM_STATUSES = (OperatorStatus.UNDER_REVIEW, OperatorStatus.SUSPENDED)


class Operator(Base):
    """A licensed gaming entity under monitoring."""

    __tablename__ = "operators"

    operator_id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)
    license_type = Column(String(60), nullable=False)
    status = Column(
        Enum(
            OperatorStatus,
            name="operator_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=OperatorStatus.ACTIVE,
    )
    risk_score = Column(Integer, nullable=True)
    contact_email = Column(String(255), nullable=True)
    license_issue_date = Column(Date, nullable=True)
    last_report_date = Column(Date, nullable=True)

    reports = relationship("RevenueReport", back_populates="operator")
    transactions = relationship("Transaction", back_populates="operator")

    __table_args__ = (
        CheckConstraint("risk_score IS NULL OR (risk_score >= 0 AND risk_score <= 100)", name="ck_operator_risk_score"),
    )

    def __repr__(self):
        return f"<Operator(id={self.operator_id}, name='{self.name}', status='{self.status}')>"


class RevenueReport(Base):
    """One operator's self-declared financial summary for one reporting period."""

    __tablename__ = "revenue_reports"

    report_id = Column(Integer, primary_key=True, autoincrement=True)
    operator_id = Column(Integer, ForeignKey("operators.operator_id"), nullable=False, index=True)
    report_date = Column(Date, nullable=False)
    gross_revenue = Column(Float, nullable=True)
    total_bets = Column(Float, nullable=True)
    total_payouts = Column(Float, nullable=True)
    number_of_transactions = Column(Integer, nullable=True)
    declared_tax = Column(Float, nullable=True)
    submission_timestamp = Column(DateTime, nullable=True)
    is_late = Column(Boolean, nullable=False, default=False)
    anomaly_flag = Column(Boolean, nullable=False, default=False)
    anomaly_type = Column(String(100), nullable=True)
    anomaly_confidence = Column(Float, nullable=True)

    operator = relationship("Operator", back_populates="reports")

    __table_args__ = (
        # Category and confidence travel with the flag
        CheckConstraint(
            "(anomaly_flag AND anomaly_type IS NOT NULL AND anomaly_confidence IS NOT NULL) OR "
            "(NOT anomaly_flag AND anomaly_type IS NULL AND anomaly_confidence IS NULL)",
            name="ck_report_anomaly_fields",
        ),
        CheckConstraint(
            "anomaly_confidence IS NULL OR (anomaly_confidence >= 0 AND anomaly_confidence <= 100)",
            name="ck_report_anomaly_confidence",
        ),
        Index("ix_revenue_reports_report_date", "report_date"),
        Index("ix_revenue_reports_operator_date", "operator_id", "report_date"),
    )

    @property
    def operator_name(self) -> Optional[str]:
        return self.operator.name if self.operator else None

    @property
    def license_type(self) -> Optional[str]:
        return self.operator.license_type if self.operator else None

    @property
    def operator_status(self) -> Optional[OperatorStatus]:
        return self.operator.status if self.operator else None

    def __repr__(self):
        return (f"<RevenueReport(id={self.report_id}, operator={self.operator_id}, "
                f"period={self.report_date}, anomaly={self.anomaly_flag})>")


class Transaction(Base):
    """A single wagering event."""

    __tablename__ = "transactions"

    transaction_id = Column(Integer, primary_key=True, autoincrement=True)
    operator_id = Column(Integer, ForeignKey("operators.operator_id"), nullable=False, index=True)
    transaction_date = Column(Date, nullable=False)
    transaction_hour = Column(Integer, nullable=False)
    bet_amount = Column(Float, nullable=True)
    payout_amount = Column(Float, nullable=True)
    game_type = Column(String(60), nullable=True)
    player_id = Column(String(60), nullable=True)
    ip_address = Column(String(45), nullable=True)
    suspicious_flag = Column(Boolean, nullable=False, default=False)

    operator = relationship("Operator", back_populates="transactions")

    __table_args__ = (
        CheckConstraint("transaction_hour >= 0 AND transaction_hour <= 23", name="ck_transaction_hour"),
        Index("ix_transactions_date_hour", "transaction_date", "transaction_hour"),
    )

    @property
    def operator_name(self) -> Optional[str]:
        return self.operator.name if self.operator else None
