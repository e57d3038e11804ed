"""
Metrics Engine

Period lookback, сводные метрики портфеля, category breakdown и окна
графиков поверх Composite Views.
"""

# Lookback
from snaptrack.metrics.lookback import (
    LookbackPeriod,
    ResolvedPeriod,
    find_closest_snapshot,
    find_lookback_snapshot,
    lookback_target_date,
    resolve_period,
)

# Chart windows
from snaptrack.metrics.chart_range import (
    ChartTimeRange,
    SeriesPoint,
    filter_points,
    rebase_twr_window,
    window_start_index,
)

# Categories
from snaptrack.metrics.categories import (
    UNCATEGORIZED_KEY,
    UNCATEGORIZED_LABEL,
    CategoryAllocationData,
    CategoryValuePoint,
    category_allocations,
    category_value_history,
    category_values,
)

# Performance
from snaptrack.metrics.performance import (
    DEFAULT_PERIODS,
    PerformanceConfig,
    PerformanceEngine,
    PeriodPerformance,
    PortfolioPerformance,
    RecentSnapshot,
    consecutive_period_returns,
    net_cash_flows_by_snapshot,
    period_growth_rate,
    period_return_rate,
)

__all__ = [
    # Lookback
    "LookbackPeriod",
    "ResolvedPeriod",
    "find_closest_snapshot",
    "find_lookback_snapshot",
    "lookback_target_date",
    "resolve_period",
    # Chart windows
    "ChartTimeRange",
    "SeriesPoint",
    "filter_points",
    "rebase_twr_window",
    "window_start_index",
    # Categories
    "UNCATEGORIZED_KEY",
    "UNCATEGORIZED_LABEL",
    "CategoryAllocationData",
    "CategoryValuePoint",
    "category_allocations",
    "category_value_history",
    "category_values",
    # Performance
    "DEFAULT_PERIODS",
    "PerformanceConfig",
    "PerformanceEngine",
    "PeriodPerformance",
    "PortfolioPerformance",
    "RecentSnapshot",
    "consecutive_period_returns",
    "net_cash_flows_by_snapshot",
    "period_growth_rate",
    "period_return_rate",
]
