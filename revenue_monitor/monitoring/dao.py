"""Data Access Objects for operators, revenue reports, transactions and dashboard aggregates."""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import case, desc, func, select
from sqlalchemy.orm import Session, contains_eager

from revenue_monitor.core.base_dao import BaseDAO
from revenue_monitor.monitoring.filters import FilterBuilder
from revenue_monitor.monitoring.models import (
    ACTIVE_STATUSES,
    PROBLEM_STATUSES,
    Operator,
    RevenueReport,
    Transaction,
)
from revenue_monitor.monitoring.schemas import AnomalyFilters, ReportFilters, TransactionFilters

RECENT_REPORT_COUNT = 6


class OperatorDAO(BaseDAO[Operator]):
    """DAO for operator lookups."""

    def __init__(self, db_session: Session):
        super().__init__(Operator, db_session)

    def get_all_by_risk(self) -> List[Operator]:
        """All operators, riskiest first."""
        return self.get_all(order_by=(desc(Operator.risk_score), Operator.operator_id))

    def get_recent_reports(self, operator_id: int, limit: int = RECENT_REPORT_COUNT) -> List[RevenueReport]:
        """Most recent reports for one operator, newest period first."""
        query = (
            select(RevenueReport)
            .where(RevenueReport.operator_id == operator_id)
            .order_by(desc(RevenueReport.report_date), desc(RevenueReport.report_id))
            .limit(limit)
        )
        return list(self.db.execute(query).scalars().all())


class RevenueReportDAO(BaseDAO[RevenueReport]):
    """DAO for report listings. Every query joins the owning operator."""

    def __init__(self, db_session: Session):
        super().__init__(RevenueReport, db_session)

    def _base_query(self):
        return (
            select(RevenueReport)
            .join(RevenueReport.operator)
            .options(contains_eager(RevenueReport.operator))
        )

    def get_with_operator(self, report_id: int) -> Optional[RevenueReport]:
        query = self._base_query().where(RevenueReport.report_id == report_id)
        return self.db.execute(query).scalars().first()

    def get_reports_with_filters(self, filters: ReportFilters) -> List[RevenueReport]:
        """Reports matching every supplied filter, newest period first."""
        builder = (
            FilterBuilder()
            .equals(RevenueReport.operator_id, filters.operator_id)
            .between(RevenueReport.report_date, filters.start_date, filters.end_date)
            .flag(RevenueReport.anomaly_flag, filters.has_anomaly)
        )

        query = builder.apply(self._base_query()).order_by(
            desc(RevenueReport.report_date), desc(RevenueReport.report_id)
        )
        if filters.limit is not None:
            query = query.limit(filters.limit)

        return list(self.db.execute(query).scalars().all())

    def get_anomalies_with_filters(self, filters: AnomalyFilters) -> List[RevenueReport]:
        """Flagged reports only, most confident first."""
        builder = (
            FilterBuilder()
            .flag(RevenueReport.anomaly_flag, True)
            .equals(RevenueReport.anomaly_type, filters.anomaly_type)
            .at_least(RevenueReport.anomaly_confidence, filters.min_confidence)
            .equals(RevenueReport.operator_id, filters.operator_id)
        )

        query = builder.apply(self._base_query()).order_by(
            desc(RevenueReport.anomaly_confidence),
            desc(RevenueReport.report_date),
            desc(RevenueReport.report_id),
        )
        if filters.limit is not None:
            query = query.limit(filters.limit)

        return list(self.db.execute(query).scalars().all())

    def get_anomaly_type_counts(self) -> List[Dict[str, Any]]:
        """Distinct anomaly categories among flagged reports with occurrence counts."""
        count_col = func.count().label("count")
        query = (
            select(RevenueReport.anomaly_type, count_col)
            .where(RevenueReport.anomaly_flag.is_(True), RevenueReport.anomaly_type.isnot(None))
            .group_by(RevenueReport.anomaly_type)
            .order_by(desc(count_col), RevenueReport.anomaly_type)
        )
        result = self.db.execute(query).all()
        return [dict(row._mapping) for row in result]


class TransactionDAO(BaseDAO[Transaction]):
    """DAO for transaction listings."""

    def __init__(self, db_session: Session):
        super().__init__(Transaction, db_session)

    def get_transactions_with_filters(self, filters: TransactionFilters) -> List[Transaction]:
        """Transactions matching every supplied filter, newest first, bounded by ``filters.limit``."""
        builder = (
            FilterBuilder()
            .equals(Transaction.operator_id, filters.operator_id)
            .between(Transaction.transaction_date, filters.start_date, filters.end_date)
            .equals(Transaction.game_type, filters.game_type)
        )
        if filters.suspicious_only:
            builder.flag(Transaction.suspicious_flag, True)

        query = (
            select(Transaction)
            .join(Transaction.operator)
            .options(contains_eager(Transaction.operator))
        )
        query = (
            builder.apply(query)
            .order_by(
                desc(Transaction.transaction_date),
                desc(Transaction.transaction_hour),
                desc(Transaction.transaction_id),
            )
            .limit(filters.limit)
        )

        return list(self.db.execute(query).scalars().all())


class StatisticsDAO:
    """Aggregate queries behind the dashboard statistics endpoint."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_operator_counts(self, high_risk_threshold: int) -> Dict[str, int]:
        """Operator totals by status class and risk, in a single query."""
        query = select(
            func.count().label("total"),
            func.coalesce(func.sum(case((Operator.status.in_(ACTIVE_STATUSES), 1), else_=0)), 0).label("active"),
            func.coalesce(func.sum(case((Operator.status.in_(PROBLEM_STATUSES), 1), else_=0)), 0).label("problematic"),
            func.coalesce(func.sum(case((Operator.risk_score > high_risk_threshold, 1), else_=0)), 0).label("high_risk"),
        ).select_from(Operator)

        row = self.db.execute(query).one()
        return {
            "total_operators": int(row.total),
            "active_operators": int(row.active),
            "problematic_operators": int(row.problematic),
            "high_risk_operators": int(row.high_risk),
        }

    def get_period_totals(self, current_period: date, previous_period: date) -> Dict[str, Any]:
        """Revenue, tax, anomaly and late-submission totals for two periods, in a single query."""
        is_current = RevenueReport.report_date == current_period
        is_previous = RevenueReport.report_date == previous_period

        query = select(
            func.sum(case((is_current, RevenueReport.gross_revenue), else_=None)).label("current_revenue"),
            func.sum(case((is_previous, RevenueReport.gross_revenue), else_=None)).label("previous_revenue"),
            func.sum(case((is_current, RevenueReport.declared_tax), else_=None)).label("current_tax"),
            func.coalesce(
                func.sum(case((is_current & RevenueReport.anomaly_flag.is_(True), 1), else_=0)), 0
            ).label("anomalies"),
            func.coalesce(
                func.sum(case((is_current & RevenueReport.is_late.is_(True), 1), else_=0)), 0
            ).label("late"),
        ).where(RevenueReport.report_date.in_([current_period, previous_period]))

        row = self.db.execute(query).one()
        return {
            "current_revenue": row.current_revenue,
            "previous_revenue": row.previous_revenue,
            "current_tax": row.current_tax,
            "anomalies": int(row.anomalies),
            "late": int(row.late),
        }

    def get_revenue_trend(self) -> List[Dict[str, Any]]:
        """One row per distinct report period, oldest first."""
        query = (
            select(
                RevenueReport.report_date,
                func.coalesce(func.sum(RevenueReport.gross_revenue), 0).label("total_revenue"),
                func.coalesce(func.sum(RevenueReport.declared_tax), 0).label("total_tax"),
                func.count().label("num_operators"),
            )
            .group_by(RevenueReport.report_date)
            .order_by(RevenueReport.report_date)
        )
        return [dict(row._mapping) for row in self.db.execute(query).all()]

    def get_top_operators(self, period: date) -> List[Dict[str, Any]]:
        """Every report in ``period`` with operator details, highest revenue first."""
        query = (
            select(
                Operator.operator_id,
                Operator.name,
                Operator.license_type,
                func.coalesce(RevenueReport.gross_revenue, 0).label("gross_revenue"),
                func.coalesce(RevenueReport.declared_tax, 0).label("declared_tax"),
                Operator.risk_score,
            )
            .select_from(RevenueReport)
            .join(Operator, RevenueReport.operator_id == Operator.operator_id)
            .where(RevenueReport.report_date == period)
            .order_by(desc(RevenueReport.gross_revenue), Operator.operator_id, RevenueReport.report_id)
        )
        return [dict(row._mapping) for row in self.db.execute(query).all()]
