"""Pydantic schemas for the monitoring API."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from revenue_monitor.monitoring.models import OperatorStatus


# ===== OPERATOR SCHEMAS =====


class OperatorRead(BaseModel):
    """A licensed operator as returned by the API."""

    operator_id: int
    name: str
    license_type: str
    status: OperatorStatus
    risk_score: Optional[int] = None
    contact_email: Optional[str] = None
    license_issue_date: Optional[date] = None
    last_report_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


# ===== REPORT SCHEMAS =====


class RevenueReportRead(BaseModel):
    """A revenue report without operator details."""

    report_id: int
    operator_id: int
    report_date: date
    gross_revenue: Optional[float] = None
    total_bets: Optional[float] = None
    total_payouts: Optional[float] = None
    number_of_transactions: Optional[int] = None
    declared_tax: Optional[float] = None
    submission_timestamp: Optional[datetime] = None
    is_late: bool
    anomaly_flag: bool
    anomaly_type: Optional[str] = None
    anomaly_confidence: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class OperatorDetail(OperatorRead):
    """Operator with its most recent reports, newest first."""

    recent_reports: List[RevenueReportRead] = []


class ReportWithOperator(RevenueReportRead):
    """Revenue report joined with the owning operator's name and license."""

    operator_name: str
    license_type: str


class AnomalyRead(ReportWithOperator):
    """Flagged revenue report including the operator's regulatory status."""

    operator_status: OperatorStatus


class AnomalyTypeCount(BaseModel):
    anomaly_type: str
    count: int


# ===== TRANSACTION SCHEMAS =====


class TransactionRead(BaseModel):
    """A wagering transaction joined with the operator name."""

    transaction_id: int
    operator_id: int
    operator_name: str
    transaction_date: date
    transaction_hour: int
    bet_amount: Optional[float] = None
    payout_amount: Optional[float] = None
    game_type: Optional[str] = None
    player_id: Optional[str] = None
    ip_address: Optional[str] = None
    suspicious_flag: bool

    model_config = ConfigDict(from_attributes=True)


# ===== FILTER SCHEMAS =====


class ReportFilters(BaseModel):
    operator_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    has_anomaly: Optional[bool] = None
    limit: Optional[int] = None


class AnomalyFilters(BaseModel):
    anomaly_type: Optional[str] = None
    min_confidence: Optional[float] = None
    operator_id: Optional[int] = None
    limit: Optional[int] = None


class TransactionFilters(BaseModel):
    operator_id: Optional[int] = None
    suspicious_only: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    game_type: Optional[str] = None
    limit: int = 100


# ===== DASHBOARD STATISTICS SCHEMAS =====


class StatsOverview(BaseModel):
    """Headline counters for the dashboard."""

    current_period: date
    previous_period: date
    total_operators: int
    active_operators: int
    problematic_operators: int
    high_risk_operators: int
    current_month_revenue: float
    previous_month_revenue: float
    revenue_change_percent: float
    current_month_tax: float
    active_anomalies: int
    late_submissions: int


class RevenueTrendPoint(BaseModel):
    report_date: date
    total_revenue: float
    total_tax: float
    num_operators: int


class TopOperator(BaseModel):
    operator_id: int
    name: str
    license_type: str
    gross_revenue: float
    declared_tax: float
    risk_score: Optional[int] = None


class DashboardStats(BaseModel):
    overview: StatsOverview
    revenue_trend: List[RevenueTrendPoint]
    top_operators: List[TopOperator]
