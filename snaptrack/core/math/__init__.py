"""
Core math modules для snaptrack

Decimal-примитивы, календарная арифметика и калькуляторы доходности.
"""

# Decimal Safeguards
from snaptrack.core.math.decimal_safeguards import (
    DECIMAL_PRECISION_DEFAULT,
    DECIMAL_ROUNDING_DEFAULT,
    DEFAULT_DECIMAL_CONFIG,
    DecimalConfig,
    decimal_context,
    decimal_sum,
    is_finite_decimal,
    safe_divide,
    safe_power,
    to_decimal,
    validate_finite,
)

# Time Weighting
from snaptrack.core.math.time_weighting import (
    DAYS_PER_YEAR,
    cash_flow_weight,
    days_between,
    normalize_snapshot_date,
    subtract_months,
    years_between,
)

# Returns
from snaptrack.core.math.returns import (
    CashFlow,
    cagr,
    cumulative_twr,
    cumulative_twr_series,
    growth_rate,
    modified_dietz,
    rebase_cumulative,
)

# Allocation
from snaptrack.core.math.allocation import (
    category_allocation,
    goal_achievement_rate,
    goal_distance,
    is_goal_reached,
)

__all__ = [
    # Decimal Safeguards — Constants
    "DECIMAL_PRECISION_DEFAULT",
    "DECIMAL_ROUNDING_DEFAULT",
    "DEFAULT_DECIMAL_CONFIG",
    # Decimal Safeguards — Config
    "DecimalConfig",
    "decimal_context",
    # Decimal Safeguards — Functions
    "decimal_sum",
    "is_finite_decimal",
    "safe_divide",
    "safe_power",
    "to_decimal",
    "validate_finite",
    # Time Weighting
    "DAYS_PER_YEAR",
    "cash_flow_weight",
    "days_between",
    "normalize_snapshot_date",
    "subtract_months",
    "years_between",
    # Returns
    "CashFlow",
    "cagr",
    "cumulative_twr",
    "cumulative_twr_series",
    "growth_rate",
    "modified_dietz",
    "rebase_cumulative",
    # Allocation
    "category_allocation",
    "goal_achievement_rate",
    "goal_distance",
    "is_goal_reached",
]
