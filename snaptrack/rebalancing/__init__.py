"""
Rebalancing Calculator

Корректировки категорий к целевым долям (read-only, без изменения данных).
"""

from snaptrack.rebalancing.calculator import (
    MINIMUM_THRESHOLD_DEFAULT,
    ActionType,
    CategoryAllocationInput,
    NoTargetRow,
    RebalancingAction,
    RebalancingConfig,
    RebalancingPlan,
    UncategorizedRow,
    adjustment,
    build_rebalancing_plan,
    calculate_adjustments,
    classify_adjustment,
)

__all__ = [
    "MINIMUM_THRESHOLD_DEFAULT",
    "ActionType",
    "CategoryAllocationInput",
    "NoTargetRow",
    "RebalancingAction",
    "RebalancingConfig",
    "RebalancingPlan",
    "UncategorizedRow",
    "adjustment",
    "build_rebalancing_plan",
    "calculate_adjustments",
    "classify_adjustment",
]
