"""Service layer for the monitoring module: result shaping and derived metrics."""

import logging
from datetime import date
from typing import List, Optional

from revenue_monitor.core.base_service import BaseService
from revenue_monitor.core.config import previous_period
from revenue_monitor.monitoring.dao import OperatorDAO, RevenueReportDAO, StatisticsDAO, TransactionDAO
from revenue_monitor.monitoring.models import Operator, RevenueReport, Transaction
from revenue_monitor.monitoring.schemas import (
    AnomalyFilters,
    AnomalyRead,
    AnomalyTypeCount,
    DashboardStats,
    OperatorDetail,
    OperatorRead,
    ReportFilters,
    ReportWithOperator,
    RevenueReportRead,
    RevenueTrendPoint,
    StatsOverview,
    TopOperator,
    TransactionFilters,
    TransactionRead,
)

logger = logging.getLogger(__name__)


def revenue_change_percent(current: Optional[float], previous: Optional[float]) -> float:
    """Period-over-period change in percent, rounded to two decimals.

    Defined as ``0`` when the previous total is missing or not positive.
    """
    current = current or 0
    if not previous or previous <= 0:
        return 0
    return round((current - previous) / previous * 100, 2)


class OperatorService(BaseService[Operator, OperatorRead]):
    """Operator listing and detail."""

    response_model = OperatorRead

    def __init__(self, operator_dao: OperatorDAO):
        super().__init__(operator_dao)
        self.operator_dao = operator_dao

    def get_all_operators(self) -> List[OperatorRead]:
        return self._to_responses(self.operator_dao.get_all_by_risk())

    def get_operator_detail(self, operator_id: int) -> Optional[OperatorDetail]:
        """Operator with its six most recent reports; ``None`` if the operator does not exist."""
        operator = self.get_by_id(operator_id)
        if operator is None:
            return None

        reports = self.operator_dao.get_recent_reports(operator_id)
        return OperatorDetail(
            **operator.model_dump(),
            recent_reports=[RevenueReportRead.model_validate(report) for report in reports],
        )


class ReportService(BaseService[RevenueReport, ReportWithOperator]):
    """Revenue report listings, anomalies and anomaly categories."""

    response_model = ReportWithOperator

    def __init__(self, report_dao: RevenueReportDAO):
        super().__init__(report_dao)
        self.report_dao = report_dao

    def get_by_id(self, id: int) -> Optional[ReportWithOperator]:
        report = self.report_dao.get_with_operator(id)
        return self._to_response(report) if report else None

    def get_reports(self, filters: ReportFilters) -> List[ReportWithOperator]:
        return self._to_responses(self.report_dao.get_reports_with_filters(filters))

    def get_anomalies(self, filters: AnomalyFilters) -> List[AnomalyRead]:
        reports = self.report_dao.get_anomalies_with_filters(filters)
        return [AnomalyRead.model_validate(report) for report in reports]

    def get_anomaly_types(self) -> List[AnomalyTypeCount]:
        return [AnomalyTypeCount(**row) for row in self.report_dao.get_anomaly_type_counts()]


class TransactionService(BaseService[Transaction, TransactionRead]):
    response_model = TransactionRead

    def __init__(self, transaction_dao: TransactionDAO):
        super().__init__(transaction_dao)
        self.transaction_dao = transaction_dao

    def get_transactions(self, filters: TransactionFilters) -> List[TransactionRead]:
        return self._to_responses(self.transaction_dao.get_transactions_with_filters(filters))


class StatisticsService:
    """Builds the dashboard statistics aggregate for a reporting period."""

    def __init__(self, statistics_dao: StatisticsDAO, high_risk_threshold: int = 70):
        self.statistics_dao = statistics_dao
        self.high_risk_threshold = high_risk_threshold

    def get_dashboard_stats(self, current_period: date) -> DashboardStats:
        """Operator counters, period totals, revenue trend and current-period ranking.

        Every sub-aggregate is read through the same session. Concurrent writers
        may still cause skew between sub-aggregates.
        """
        prior_period = previous_period(current_period)

        operator_counts = self.statistics_dao.get_operator_counts(self.high_risk_threshold)
        totals = self.statistics_dao.get_period_totals(current_period, prior_period)
        trend = self.statistics_dao.get_revenue_trend()
        top_operators = self.statistics_dao.get_top_operators(current_period)

        current_revenue = totals["current_revenue"] or 0
        previous_revenue = totals["previous_revenue"] or 0

        overview = StatsOverview(
            current_period=current_period,
            previous_period=prior_period,
            current_month_revenue=current_revenue,
            previous_month_revenue=previous_revenue,
            revenue_change_percent=revenue_change_percent(current_revenue, previous_revenue),
            current_month_tax=totals["current_tax"] or 0,
            active_anomalies=totals["anomalies"],
            late_submissions=totals["late"],
            **operator_counts,
        )

        if not top_operators:
            logger.info("No revenue reports found for period %s", current_period.isoformat())

        return DashboardStats(
            overview=overview,
            revenue_trend=[RevenueTrendPoint(**row) for row in trend],
            top_operators=[TopOperator(**row) for row in top_operators],
        )
