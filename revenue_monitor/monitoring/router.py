# revenue_monitor/monitoring/router.py
"""API router for operators, revenue reports, anomalies, transactions and dashboard statistics."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from revenue_monitor.core.dependencies import SessionDep, SettingsDep
from revenue_monitor.core.retry import call_with_retry
from revenue_monitor.core.schemas import ApiResponse, envelope
from revenue_monitor.monitoring.dao import OperatorDAO, RevenueReportDAO, StatisticsDAO, TransactionDAO
from revenue_monitor.monitoring.filters import parse_date, parse_flag, parse_float, parse_int, parse_limit
from revenue_monitor.monitoring.schemas import (
    AnomalyFilters,
    AnomalyRead,
    AnomalyTypeCount,
    DashboardStats,
    OperatorDetail,
    OperatorRead,
    ReportFilters,
    ReportWithOperator,
    TransactionFilters,
    TransactionRead,
)
from revenue_monitor.monitoring.service import (
    OperatorService,
    ReportService,
    StatisticsService,
    TransactionService,
)

router = APIRouter(tags=["monitoring"])


# ===== DEPENDENCY INJECTION =====

def get_operator_service(session: SessionDep) -> OperatorService:
    return OperatorService(OperatorDAO(session))


def get_report_service(session: SessionDep) -> ReportService:
    return ReportService(RevenueReportDAO(session))


def get_transaction_service(session: SessionDep) -> TransactionService:
    return TransactionService(TransactionDAO(session))


def get_statistics_service(session: SessionDep, settings: SettingsDep) -> StatisticsService:
    return StatisticsService(StatisticsDAO(session), high_risk_threshold=settings.high_risk_threshold)


# ===== OPERATOR ENDPOINTS =====

@router.get("/operators", response_model=ApiResponse[List[OperatorRead]])
def get_operators(
    session: SessionDep,
    settings: SettingsDep,
    service: OperatorService = Depends(get_operator_service),
):
    """List all operators, highest risk score first."""
    operators = call_with_retry(service.get_all_operators, session, settings)
    return envelope(operators, with_count=True)


@router.get("/operators/{operator_id}", response_model=ApiResponse[OperatorDetail])
def get_operator(
    operator_id: int,
    session: SessionDep,
    settings: SettingsDep,
    service: OperatorService = Depends(get_operator_service),
):
    """Operator details with its six most recent reports."""
    operator = call_with_retry(lambda: service.get_operator_detail(operator_id), session, settings)
    if operator is None:
        raise HTTPException(status_code=404, detail="Operator not found")
    return envelope(operator)


# ===== REPORT ENDPOINTS =====

@router.get("/reports", response_model=ApiResponse[List[ReportWithOperator]])
def get_reports(
    session: SessionDep,
    settings: SettingsDep,
    operator_id: Optional[str] = Query(None, description="Filter by operator"),
    start_date: Optional[str] = Query(None, description="Earliest report period (inclusive)"),
    end_date: Optional[str] = Query(None, description="Latest report period (inclusive)"),
    has_anomaly: Optional[str] = Query(None, description="true/false to filter on the anomaly flag"),
    limit: Optional[str] = Query(None, description="Maximum number of reports"),
    service: ReportService = Depends(get_report_service),
):
    """Revenue reports matching every supplied filter, newest period first."""
    filters = ReportFilters(
        operator_id=parse_int(operator_id, "operator_id"),
        start_date=parse_date(start_date, "start_date"),
        end_date=parse_date(end_date, "end_date"),
        has_anomaly=parse_flag(has_anomaly),
        limit=parse_limit(limit, default=None, maximum=settings.max_list_limit),
    )
    reports = call_with_retry(lambda: service.get_reports(filters), session, settings)
    return envelope(reports, with_count=True)


@router.get("/reports/{report_id}", response_model=ApiResponse[ReportWithOperator])
def get_report(
    report_id: int,
    session: SessionDep,
    settings: SettingsDep,
    service: ReportService = Depends(get_report_service),
):
    report = call_with_retry(lambda: service.get_by_id(report_id), session, settings)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return envelope(report)


@router.get("/anomalies", response_model=ApiResponse[List[AnomalyRead]])
def get_anomalies(
    session: SessionDep,
    settings: SettingsDep,
    anomaly_type: Optional[str] = Query(None, description="Filter by anomaly category"),
    min_confidence: Optional[str] = Query(None, description="Minimum confidence score"),
    operator_id: Optional[str] = Query(None, description="Filter by operator"),
    limit: Optional[str] = Query(None, description="Maximum number of anomalies"),
    service: ReportService = Depends(get_report_service),
):
    """Flagged reports, most confident first."""
    filters = AnomalyFilters(
        anomaly_type=anomaly_type,
        min_confidence=parse_float(min_confidence, "min_confidence"),
        operator_id=parse_int(operator_id, "operator_id"),
        limit=parse_limit(limit, default=None, maximum=settings.max_list_limit),
    )
    anomalies = call_with_retry(lambda: service.get_anomalies(filters), session, settings)
    return envelope(anomalies, with_count=True)


@router.get("/anomaly-types", response_model=ApiResponse[List[AnomalyTypeCount]])
def get_anomaly_types(
    session: SessionDep,
    settings: SettingsDep,
    service: ReportService = Depends(get_report_service),
):
    """Distinct anomaly categories with their occurrence counts."""
    types = call_with_retry(service.get_anomaly_types, session, settings)
    return envelope(types, with_count=True)


# ===== TRANSACTION ENDPOINTS =====

@router.get("/transactions", response_model=ApiResponse[List[TransactionRead]])
def get_transactions(
    session: SessionDep,
    settings: SettingsDep,
    operator_id: Optional[str] = Query(None, description="Filter by operator"),
    suspicious_only: Optional[str] = Query(None, description="true to return suspicious transactions only"),
    start_date: Optional[str] = Query(None, description="Earliest transaction date (inclusive)"),
    end_date: Optional[str] = Query(None, description="Latest transaction date (inclusive)"),
    game_type: Optional[str] = Query(None, description="Filter by game category"),
    limit: Optional[str] = Query(None, description="Maximum number of transactions"),
    service: TransactionService = Depends(get_transaction_service),
):
    """Transactions matching every supplied filter, newest first."""
    filters = TransactionFilters(
        operator_id=parse_int(operator_id, "operator_id"),
        suspicious_only=parse_flag(suspicious_only) is True,
        start_date=parse_date(start_date, "start_date"),
        end_date=parse_date(end_date, "end_date"),
        game_type=game_type,
        limit=parse_limit(limit, default=settings.default_transaction_limit, maximum=settings.max_list_limit),
    )
    transactions = call_with_retry(lambda: service.get_transactions(filters), session, settings)
    return envelope(transactions, with_count=True)


# ===== DASHBOARD STATISTICS =====

@router.get("/stats", response_model=ApiResponse[DashboardStats])
def get_stats(
    session: SessionDep,
    settings: SettingsDep,
    period: Optional[str] = Query(None, description="Reporting period; defaults to the configured current period"),
    service: StatisticsService = Depends(get_statistics_service),
):
    """Overview counters, revenue trend and top operators for one reporting period."""
    current_period = parse_date(period, "period") or settings.current_period
    stats = call_with_retry(lambda: service.get_dashboard_stats(current_period), session, settings)
    return envelope(stats)
