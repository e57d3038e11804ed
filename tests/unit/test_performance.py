"""
Тесты для Portfolio Performance

Проверяемые инварианты:
1. Меньше двух снапшотов → все rate-метрики None
2. Cash flow последовательной пары — на дату end (вес 0)
3. Lookback-период собирает cash flows из (begin, end]
4. Undefined period return пропагирует в cumulative TWR
5. Totals берутся из Composite Views (с carry-forward)
"""

import datetime
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from snaptrack.core.domain import Asset, CashFlowOperation, Snapshot, SnapshotAssetValue
from snaptrack.metrics.lookback import LookbackPeriod, resolve_period
from snaptrack.metrics.performance import (
    PerformanceConfig,
    PerformanceEngine,
    consecutive_period_returns,
    net_cash_flows_by_snapshot,
    period_growth_rate,
    period_return_rate,
)
from snaptrack.resolver import resolve_all

D = Decimal
EPS = D("1e-20")


def value(snapshot: Snapshot, name: str, platform: str, amount) -> SnapshotAssetValue:
    return SnapshotAssetValue(
        snapshot_id=snapshot.id, asset=Asset(name=name, platform=platform), market_value=D(amount)
    )


def flow(snapshot: Snapshot, description: str, amount) -> CashFlowOperation:
    return CashFlowOperation(snapshot_id=snapshot.id, description=description, amount=D(amount))


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def history():
    """
    Jan 1: Bank 100,000
    Feb 1: Bank 105,000, deposit +2,000
    Mar 1: Broker 10,000 (Bank переносится), deposit +10,000 → total 115,000
    """
    jan = Snapshot(date="2024-01-01")
    feb = Snapshot(date="2024-02-01")
    mar = Snapshot(date="2024-03-01")
    values = [
        value(jan, "Savings", "Bank", 100000),
        value(feb, "Savings", "Bank", 105000),
        value(mar, "VTI", "Broker", 10000),
    ]
    cash_flows = [flow(feb, "Salary", 2000), flow(mar, "Transfer in", 10000)]
    return [jan, feb, mar], values, cash_flows


# =============================================================================
# ТЕСТЫ: Building blocks
# =============================================================================


class TestNetCashFlows:
    def test_sums_per_snapshot(self):
        snapshot = Snapshot(date="2024-01-01")
        flows = [flow(snapshot, "Deposit", 1000), flow(snapshot, "Withdrawal", -300)]
        assert net_cash_flows_by_snapshot(flows) == {snapshot.id: D(700)}

    def test_empty(self):
        assert net_cash_flows_by_snapshot([]) == {}


class TestConsecutivePeriodReturns:
    def test_end_flow_has_zero_weight(self, history):
        snapshots, values, cash_flows = history
        views = resolve_all(snapshots, values)
        returns = consecutive_period_returns(snapshots, views, net_cash_flows_by_snapshot(cash_flows))

        # (105000 - 100000 - 2000) / 100000; (115000 - 105000 - 10000) / 105000
        assert returns == [D("0.03"), D(0)]

    def test_non_positive_begin_undefined(self):
        jan, feb = Snapshot(date="2024-01-01"), Snapshot(date="2024-02-01")
        values = [value(jan, "Savings", "Bank", 0), value(feb, "Savings", "Bank", 1000)]
        views = resolve_all([jan, feb], values)
        assert consecutive_period_returns([jan, feb], views, {}) == [None]


class TestPeriodRates:
    def test_one_month(self, history):
        snapshots, values, cash_flows = history
        views = resolve_all(snapshots, values)
        net_flows = net_cash_flows_by_snapshot(cash_flows)
        resolved = resolve_period(LookbackPeriod.ONE_MONTH, snapshots)

        assert resolved.begin_date == datetime.date(2024, 2, 1)
        assert period_growth_rate(resolved, views) == D(10000) / D(105000)
        assert period_return_rate(resolved, snapshots, views, net_flows) == D(0)

    def test_three_months_collects_intermediate_flows(self, history):
        snapshots, values, cash_flows = history
        views = resolve_all(snapshots, values)
        net_flows = net_cash_flows_by_snapshot(cash_flows)
        resolved = resolve_period(LookbackPeriod.THREE_MONTHS, snapshots)

        assert resolved.begin_date == datetime.date(2024, 1, 1)
        assert period_growth_rate(resolved, views) == D("0.15")

        # Feb deposit на day 31 из 60, Mar deposit на day 60 (вес 0)
        expected = D(3000) / (D(100000) + D(2000) * D(29) / D(60))
        assert abs(period_return_rate(resolved, snapshots, views, net_flows) - expected) < EPS


# =============================================================================
# ТЕСТЫ: Engine
# =============================================================================


class TestPerformanceEngine:
    def test_empty(self):
        result = PerformanceEngine().evaluate([], [], [])
        assert result.is_empty
        assert result.latest_total is None
        assert result.cumulative_twr is None

    def test_single_snapshot_all_rates_undefined(self):
        snapshot = Snapshot(date="2024-01-01")
        result = PerformanceEngine().evaluate([snapshot], [value(snapshot, "Savings", "Bank", 1000)])

        assert result.latest_total == D(1000)
        assert result.latest_date == datetime.date(2024, 1, 1)
        for period in LookbackPeriod:
            assert result.growth_rate(period) is None
            assert result.return_rate(period) is None
            assert result.period_date_range(period) is None
        assert result.cumulative_twr is None
        assert result.cagr is None
        assert result.twr_history == ()
        assert len(result.value_history) == 1

    def test_full_history(self, history):
        snapshots, values, cash_flows = history
        result = PerformanceEngine().evaluate(snapshots, values, cash_flows)

        assert result.latest_total == D(115000)
        assert result.latest_date == datetime.date(2024, 3, 1)
        assert result.asset_count == 1
        assert result.period_returns == (D("0.03"), D(0))
        assert result.cumulative_twr == D("0.03")
        assert [p.value for p in result.twr_history] == [D(0), D("0.03"), D("0.03")]
        assert [p.value for p in result.value_history] == [D(100000), D(105000), D(115000)]
        assert result.period_date_range(LookbackPeriod.ONE_MONTH) == (
            datetime.date(2024, 2, 1),
            datetime.date(2024, 3, 1),
        )
        assert result.growth_rate(LookbackPeriod.ONE_YEAR) == D("0.15")

    def test_cagr_since_inception(self, history):
        snapshots, values, cash_flows = history
        result = PerformanceEngine().evaluate(snapshots, values, cash_flows)

        expected = 1.15 ** (365.25 / 60) - 1
        assert float(result.cagr) == pytest.approx(expected, rel=1e-9)

    def test_recent_snapshots_newest_first(self, history):
        snapshots, values, cash_flows = history
        result = PerformanceEngine().evaluate(snapshots, values, cash_flows)
        assert [s.date.month for s in result.recent_snapshots] == [3, 2, 1]

    def test_undefined_period_propagates_to_twr(self):
        jan, feb, mar = (Snapshot(date=f"2024-0{m}-01") for m in (1, 2, 3))
        values = [
            value(jan, "Savings", "Bank", 0),
            value(feb, "Savings", "Bank", 1000),
            value(mar, "Savings", "Bank", 1100),
        ]
        result = PerformanceEngine().evaluate([jan, feb, mar], values)

        assert result.period_returns == (None, D("0.1"))
        assert result.cumulative_twr is None
        assert [p.value for p in result.twr_history] == [D(0), None, None]
        assert result.cagr is None

    def test_custom_periods(self, history):
        snapshots, values, cash_flows = history
        engine = PerformanceEngine(PerformanceConfig(periods=(LookbackPeriod.ONE_MONTH,)))
        result = engine.evaluate(snapshots, values, cash_flows)
        assert list(result.periods) == [LookbackPeriod.ONE_MONTH]

    def test_logs_evaluation(self, history):
        snapshots, values, cash_flows = history
        with capture_logs() as logs:
            PerformanceEngine().evaluate(snapshots, values, cash_flows)

        events = [entry["event"] for entry in logs]
        assert "carry_forward_resolved" in events
        assert "performance_evaluated" in events
