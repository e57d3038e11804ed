"""
Portfolio Performance — сводные метрики портфеля по всем снапшотам

Собирает вместе resolver и калькуляторы доходности:
- Composite total последнего снапшота
- Growth rate и Modified Dietz return для периодов 1M / 3M / 1Y
- Cumulative TWR с inception (цепочка Modified Dietz по парам снапшотов)
- CAGR с inception
- История стоимости портфеля и cumulative TWR для графиков

ПРАВИЛА CASH FLOWS:
- Net cash flow снапшота = Σ amount его CashFlowOperation
- Cash flow снапшота размещается на дате снапшота
- Для последовательной пары (begin, end) в период попадает только end:
  days_since_start = total_days, вес 0
- Для lookback-периода берутся снапшоты в (begin, end]
- Нулевые net cash flows пропускаются

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Меньше двух снапшотов → все rate-метрики None
2. Undefined period return → cumulative TWR None (не 0%)
3. Все totals берутся из Composite Views (direct + carried-forward)
"""

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Final, Iterable, Mapping, Sequence
from uuid import UUID

import structlog

from snaptrack.core.domain.composite_view import CompositeView
from snaptrack.core.domain.snapshot import CashFlowOperation, Snapshot, SnapshotAssetValue
from snaptrack.core.math.decimal_safeguards import ZERO, DecimalConfig, decimal_context
from snaptrack.core.math.returns import (
    CashFlow,
    cagr,
    cumulative_twr_series,
    growth_rate,
    modified_dietz,
)
from snaptrack.core.math.time_weighting import DAYS_PER_YEAR, days_between, years_between
from snaptrack.metrics.chart_range import SeriesPoint
from snaptrack.metrics.lookback import LookbackPeriod, ResolvedPeriod, resolve_period
from snaptrack.resolver.carry_forward import ResolverConfig, resolve_all

logger = structlog.get_logger(__name__)

DEFAULT_PERIODS: Final[tuple[LookbackPeriod, ...]] = (
    LookbackPeriod.ONE_MONTH,
    LookbackPeriod.THREE_MONTHS,
    LookbackPeriod.ONE_YEAR,
)

RECENT_SNAPSHOTS_LIMIT: Final[int] = 5


# =============================================================================
# CONFIGURATION & RESULTS
# =============================================================================


@dataclass(frozen=True)
class PerformanceConfig:
    """Конфигурация расчёта метрик портфеля."""

    periods: tuple[LookbackPeriod, ...] = DEFAULT_PERIODS
    days_per_year: float = DAYS_PER_YEAR
    decimal: DecimalConfig = DecimalConfig()


@dataclass(frozen=True)
class PeriodPerformance:
    """Growth rate и Modified Dietz return одного lookback-периода."""

    period: LookbackPeriod
    begin_date: datetime.date
    end_date: datetime.date
    growth_rate: Decimal | None
    return_rate: Decimal | None


@dataclass(frozen=True)
class RecentSnapshot:
    """Строка списка последних снапшотов."""

    date: datetime.date
    total_value: Decimal
    asset_count: int


@dataclass(frozen=True)
class PortfolioPerformance:
    """Результат PerformanceEngine.evaluate."""

    latest_total: Decimal | None = None
    latest_date: datetime.date | None = None
    asset_count: int = 0
    periods: dict[LookbackPeriod, PeriodPerformance] = field(default_factory=dict)
    cumulative_twr: Decimal | None = None
    cagr: Decimal | None = None
    period_returns: tuple[Decimal | None, ...] = ()
    value_history: tuple[SeriesPoint, ...] = ()
    twr_history: tuple[SeriesPoint, ...] = ()
    recent_snapshots: tuple[RecentSnapshot, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.latest_date is None

    def growth_rate(self, period: LookbackPeriod) -> Decimal | None:
        result = self.periods.get(period)
        return None if result is None else result.growth_rate

    def return_rate(self, period: LookbackPeriod) -> Decimal | None:
        result = self.periods.get(period)
        return None if result is None else result.return_rate

    def period_date_range(self, period: LookbackPeriod) -> tuple[datetime.date, datetime.date] | None:
        result = self.periods.get(period)
        return None if result is None else (result.begin_date, result.end_date)


# =============================================================================
# CASH FLOWS
# =============================================================================


def net_cash_flows_by_snapshot(
    cash_flows: Iterable[CashFlowOperation],
    config: DecimalConfig | None = None,
) -> dict[UUID, Decimal]:
    """
    Net cash flow каждого снапшота (Σ amount его операций).

    Снапшоты без операций в результат не попадают.
    """
    totals: dict[UUID, Decimal] = {}
    with decimal_context(config):
        for operation in cash_flows:
            totals[operation.snapshot_id] = totals.get(operation.snapshot_id, ZERO) + operation.amount
    return totals


def _period_cash_flows(
    begin: Snapshot,
    end: Snapshot,
    ordered: Sequence[Snapshot],
    net_flows: Mapping[UUID, Decimal],
) -> list[CashFlow]:
    """Ненулевые net cash flows снапшотов в (begin.date, end.date]."""
    flows: list[CashFlow] = []
    for snapshot in ordered:
        if not begin.date < snapshot.date <= end.date:
            continue
        amount = net_flows.get(snapshot.id, ZERO)
        if amount != 0:
            flows.append(CashFlow(amount=amount, days_since_start=days_between(begin.date, snapshot.date)))
    return flows


# =============================================================================
# PERIOD RETURNS
# =============================================================================


def consecutive_period_returns(
    snapshots: Sequence[Snapshot],
    views: Mapping[UUID, CompositeView],
    net_flows: Mapping[UUID, Decimal],
    config: DecimalConfig | None = None,
) -> list[Decimal | None]:
    """
    Modified Dietz return для каждой пары последовательных снапшотов.

    Args:
        snapshots: Снапшоты (сортируются по дате)
        views: Composite Views по snapshot id
        net_flows: Net cash flow по snapshot id
        config: Decimal-конфигурация

    Returns:
        Список длины len(snapshots) - 1; None для неопределённых периодов
    """
    ordered = sorted(snapshots, key=lambda s: s.date)
    returns: list[Decimal | None] = []
    for begin, end in zip(ordered, ordered[1:]):
        total_days = days_between(begin.date, end.date)
        net_flow = net_flows.get(end.id, ZERO)
        flows = [CashFlow(amount=net_flow, days_since_start=total_days)] if net_flow != 0 else []
        returns.append(
            modified_dietz(
                views[begin.id].total_value,
                views[end.id].total_value,
                flows,
                total_days,
                config,
            )
        )
    return returns


def period_growth_rate(
    resolved: ResolvedPeriod,
    views: Mapping[UUID, CompositeView],
    config: DecimalConfig | None = None,
) -> Decimal | None:
    """Growth rate между composite totals begin и end снапшотов периода."""
    return growth_rate(
        views[resolved.begin.id].total_value,
        views[resolved.end.id].total_value,
        config,
    )


def period_return_rate(
    resolved: ResolvedPeriod,
    snapshots: Sequence[Snapshot],
    views: Mapping[UUID, CompositeView],
    net_flows: Mapping[UUID, Decimal],
    config: DecimalConfig | None = None,
) -> Decimal | None:
    """
    Modified Dietz return lookback-периода.

    Промежуточные cash flows — снапшоты строго после begin и до end
    включительно; days_since_start считается от даты begin.
    """
    ordered = sorted(snapshots, key=lambda s: s.date)
    flows = _period_cash_flows(resolved.begin, resolved.end, ordered, net_flows)
    return modified_dietz(
        views[resolved.begin.id].total_value,
        views[resolved.end.id].total_value,
        flows,
        resolved.total_days,
        config,
    )


# =============================================================================
# ENGINE
# =============================================================================


class PerformanceEngine:
    """
    Расчёт сводных метрик портфеля.

    Не кэширует результаты: каждый evaluate пересчитывает composite views
    и метрики из полного набора данных.
    """

    def __init__(self, config: PerformanceConfig | None = None):
        self.config = config or PerformanceConfig()

    def evaluate(
        self,
        snapshots: Iterable[Snapshot],
        values: Iterable[SnapshotAssetValue],
        cash_flows: Iterable[CashFlowOperation] = (),
    ) -> PortfolioPerformance:
        """
        Метрики портфеля по всем снапшотам.

        Args:
            snapshots: Все снапшоты
            values: Все SnapshotAssetValue
            cash_flows: Все CashFlowOperation

        Returns:
            PortfolioPerformance; пустой результат если снапшотов нет

        Raises:
            StructuralInvariantViolation: нарушен структурный инвариант входа
        """
        decimal_config = self.config.decimal
        snapshots = list(snapshots)
        views = resolve_all(snapshots, values, ResolverConfig(decimal=decimal_config))
        if not views:
            return PortfolioPerformance()

        ordered = sorted(snapshots, key=lambda s: s.date)
        net_flows = net_cash_flows_by_snapshot(cash_flows, decimal_config)
        first, latest = ordered[0], ordered[-1]
        latest_view = views[latest.id]

        value_history = tuple(
            SeriesPoint(date=s.date, value=views[s.id].total_value) for s in ordered
        )
        recent = tuple(
            RecentSnapshot(
                date=s.date,
                total_value=views[s.id].total_value,
                asset_count=len(views[s.id].direct_values),
            )
            for s in reversed(ordered[-RECENT_SNAPSHOTS_LIMIT:])
        )

        if len(ordered) < 2:
            result = PortfolioPerformance(
                latest_total=latest_view.total_value,
                latest_date=latest.date,
                asset_count=len(latest_view.direct_values),
                value_history=value_history,
                recent_snapshots=recent,
            )
            self._log(result)
            return result

        periods: dict[LookbackPeriod, PeriodPerformance] = {}
        for period in self.config.periods:
            resolved = resolve_period(period, ordered)
            if resolved is None:
                continue
            periods[period] = PeriodPerformance(
                period=period,
                begin_date=resolved.begin_date,
                end_date=resolved.end_date,
                growth_rate=period_growth_rate(resolved, views, decimal_config),
                return_rate=period_return_rate(resolved, ordered, views, net_flows, decimal_config),
            )

        period_returns = consecutive_period_returns(ordered, views, net_flows, decimal_config)
        twr_series = cumulative_twr_series(period_returns, decimal_config)
        twr_history = tuple(
            SeriesPoint(date=s.date, value=value) for s, value in zip(ordered, twr_series)
        )

        result = PortfolioPerformance(
            latest_total=latest_view.total_value,
            latest_date=latest.date,
            asset_count=len(latest_view.direct_values),
            periods=periods,
            cumulative_twr=twr_series[-1],
            cagr=cagr(
                views[first.id].total_value,
                latest_view.total_value,
                years_between(first.date, latest.date, self.config.days_per_year),
                decimal_config,
            ),
            period_returns=tuple(period_returns),
            value_history=value_history,
            twr_history=twr_history,
            recent_snapshots=recent,
        )
        self._log(result)
        return result

    def _log(self, result: PortfolioPerformance) -> None:
        logger.debug(
            "performance_evaluated",
            snapshots=len(result.value_history),
            latest_date=result.latest_date.isoformat() if result.latest_date else None,
            latest_total=str(result.latest_total),
            cumulative_twr=None if result.cumulative_twr is None else str(result.cumulative_twr),
            cagr=None if result.cagr is None else str(result.cagr),
        )
