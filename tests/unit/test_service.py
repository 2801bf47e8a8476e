"""
Unit tests for the monitoring service layer.
Tests derived metrics, dashboard assembly and the store retry policy.
"""

from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from revenue_monitor.core.config import Settings
from revenue_monitor.core.retry import call_with_retry
from revenue_monitor.monitoring.models import Operator, OperatorStatus
from revenue_monitor.monitoring.service import OperatorService, StatisticsService, revenue_change_percent


def store_fault() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


class TestRevenueChangePercent:

    def test_decrease(self):
        """Test a period-over-period drop"""
        assert revenue_change_percent(35_000_000, 39_300_000) == -10.94

    def test_increase(self):
        """Test a period-over-period rise"""
        assert revenue_change_percent(110, 100) == 10.0

    def test_rounded_to_two_decimals(self):
        """Test rounding of the percentage"""
        assert revenue_change_percent(1, 3) == -66.67

    @pytest.mark.parametrize("previous", [None, 0, 0.0, -500])
    def test_zero_when_previous_not_positive(self, previous):
        """Test that a missing or non-positive previous total gives zero"""
        assert revenue_change_percent(1000, previous) == 0

    def test_missing_current_counts_as_zero(self):
        """Test that a missing current total counts as zero"""
        assert revenue_change_percent(None, 200) == -100.0


class TestStatisticsService:
    """Test dashboard assembly over a mocked DAO"""

    @pytest.fixture
    def mock_statistics_dao(self):
        dao = Mock()
        dao.get_operator_counts = Mock(return_value={
            "total_operators": 3,
            "active_operators": 2,
            "problematic_operators": 1,
            "high_risk_operators": 1,
        })
        dao.get_period_totals = Mock(return_value={
            "current_revenue": 1200.0,
            "previous_revenue": 1000.0,
            "current_tax": 240.0,
            "anomalies": 1,
            "late": 0,
        })
        dao.get_revenue_trend = Mock(return_value=[
            {"report_date": date(2024, 11, 1), "total_revenue": 1000.0, "total_tax": 200.0, "num_operators": 2},
            {"report_date": date(2024, 12, 1), "total_revenue": 1200.0, "total_tax": 240.0, "num_operators": 2},
        ])
        dao.get_top_operators = Mock(return_value=[
            {"operator_id": 1, "name": "A", "license_type": "Lottery", "gross_revenue": 700.0,
             "declared_tax": 140.0, "risk_score": 20},
            {"operator_id": 2, "name": "B", "license_type": "Lottery", "gross_revenue": 500.0,
             "declared_tax": 100.0, "risk_score": 80},
        ])
        return dao

    def test_overview(self, mock_statistics_dao):
        """Test the overview counters and totals"""
        stats = StatisticsService(mock_statistics_dao, high_risk_threshold=75).get_dashboard_stats(date(2024, 12, 1))

        overview = stats.overview
        assert overview.current_period == date(2024, 12, 1)
        assert overview.previous_period == date(2024, 11, 1)
        assert overview.total_operators == 3
        assert overview.current_month_revenue == 1200.0
        assert overview.previous_month_revenue == 1000.0
        assert overview.revenue_change_percent == 20.0
        assert overview.current_month_tax == 240.0
        assert overview.active_anomalies == 1
        assert overview.late_submissions == 0

    def test_passes_threshold_and_periods_to_dao(self, mock_statistics_dao):
        """Test the arguments handed to each aggregate query"""
        StatisticsService(mock_statistics_dao, high_risk_threshold=75).get_dashboard_stats(date(2025, 1, 1))

        mock_statistics_dao.get_operator_counts.assert_called_once_with(75)
        mock_statistics_dao.get_period_totals.assert_called_once_with(date(2025, 1, 1), date(2024, 12, 1))
        mock_statistics_dao.get_top_operators.assert_called_once_with(date(2025, 1, 1))

    def test_trend_and_ranking_are_kept_in_order(self, mock_statistics_dao):
        """Test that DAO ordering is preserved"""
        stats = StatisticsService(mock_statistics_dao).get_dashboard_stats(date(2024, 12, 1))

        assert [point.report_date for point in stats.revenue_trend] == [date(2024, 11, 1), date(2024, 12, 1)]
        assert [operator.operator_id for operator in stats.top_operators] == [1, 2]

    def test_empty_period(self, mock_statistics_dao):
        """Test a period without any reports"""
        mock_statistics_dao.get_period_totals.return_value = {
            "current_revenue": None,
            "previous_revenue": None,
            "current_tax": None,
            "anomalies": 0,
            "late": 0,
        }
        mock_statistics_dao.get_top_operators.return_value = []

        stats = StatisticsService(mock_statistics_dao).get_dashboard_stats(date(2030, 1, 1))

        assert stats.overview.current_month_revenue == 0
        assert stats.overview.previous_month_revenue == 0
        assert stats.overview.current_month_tax == 0
        assert stats.overview.revenue_change_percent == 0
        assert stats.top_operators == []


class TestOperatorService:

    def test_detail_of_missing_operator_is_none(self):
        """Test that a missing operator yields None without loading reports"""
        dao = Mock()
        dao.get_by_id = Mock(return_value=None)

        assert OperatorService(dao).get_operator_detail(999) is None
        dao.get_recent_reports.assert_not_called()

    def test_detail_includes_recent_reports(self):
        """Test that the detail combines the operator and its reports"""
        dao = Mock()
        dao.get_by_id = Mock(return_value=Operator(
            operator_id=7, name="Gamma", license_type="Lottery", status=OperatorStatus.ACTIVE, risk_score=10,
        ))
        dao.get_recent_reports = Mock(return_value=[])

        detail = OperatorService(dao).get_operator_detail(7)

        assert detail.operator_id == 7
        assert detail.status == OperatorStatus.ACTIVE
        assert detail.recent_reports == []
        dao.get_recent_reports.assert_called_once_with(7)


class TestCallWithRetry:
    """Test the store retry policy"""

    @pytest.fixture
    def session(self):
        return Mock()

    @pytest.fixture
    def sleep(self):
        return Mock()

    def test_success_is_not_retried(self, session, sleep):
        """Test that a successful call runs once"""
        func = Mock(return_value=["row"])

        assert call_with_retry(func, session, Settings(store_retry_attempts=3), sleep=sleep) == ["row"]
        assert func.call_count == 1
        sleep.assert_not_called()

    def test_none_result_is_not_retried(self, session, sleep):
        """Test that a not-found result is returned without retrying"""
        func = Mock(return_value=None)

        assert call_with_retry(func, session, Settings(store_retry_attempts=3), sleep=sleep) is None
        assert func.call_count == 1

    def test_no_retries_by_default(self, session, sleep):
        """Test that the default policy makes a single attempt"""
        func = Mock(side_effect=store_fault())

        with pytest.raises(OperationalError):
            call_with_retry(func, session, Settings(), sleep=sleep)

        assert func.call_count == 1
        sleep.assert_not_called()

    def test_recovers_after_transient_fault(self, session, sleep):
        """Test recovery with exponential backoff and rollbacks"""
        func = Mock(side_effect=[store_fault(), store_fault(), "ok"])
        settings = Settings(store_retry_attempts=2, store_retry_backoff=0.5, store_retry_backoff_cap=10.0)

        assert call_with_retry(func, session, settings, sleep=sleep) == "ok"
        assert func.call_count == 3
        assert [call.args[0] for call in sleep.call_args_list] == [0.5, 1.0]
        assert session.rollback.call_count == 2

    def test_gives_up_after_last_attempt(self, session, sleep):
        """Test that the last fault propagates and delays are capped"""
        func = Mock(side_effect=store_fault())
        settings = Settings(store_retry_attempts=2, store_retry_backoff=1.0, store_retry_backoff_cap=1.5)

        with pytest.raises(OperationalError):
            call_with_retry(func, session, settings, sleep=sleep)

        assert func.call_count == 3
        assert [call.args[0] for call in sleep.call_args_list] == [1.0, 1.5]

    def test_other_errors_propagate_immediately(self, session, sleep):
        """Test that non-store errors are never retried"""
        func = Mock(side_effect=KeyError("boom"))

        with pytest.raises(KeyError):
            call_with_retry(func, session, Settings(store_retry_attempts=3), sleep=sleep)

        assert func.call_count == 1
