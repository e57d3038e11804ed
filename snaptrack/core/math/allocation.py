"""
Allocation — доли категорий и прогресс к финансовой цели

В отличие от метрик доходности, доля категории деградирует в 0, а не в
None: "0% от портфеля стоимостью 0" — осмысленный отображаемый ответ.
"""

from decimal import Decimal

from snaptrack.core.math.decimal_safeguards import (
    HUNDRED,
    ZERO,
    DecimalConfig,
    decimal_context,
)


# =============================================================================
# CATEGORY ALLOCATION
# =============================================================================


def category_allocation(
    category_value: Decimal,
    total_value: Decimal,
    config: DecimalConfig | None = None,
) -> Decimal:
    """
    Доля категории в портфеле, в процентах.

    Args:
        category_value: Composite стоимость категории
        total_value: Composite стоимость портфеля

    Returns:
        category_value / total_value * 100, или 0 если total_value == 0

    Examples:
        >>> category_allocation(Decimal(250), Decimal(1000))
        Decimal('25.00')
        >>> category_allocation(Decimal(250), Decimal(0))
        Decimal('0')
    """
    if total_value == 0:
        return ZERO

    with decimal_context(config):
        return category_value / total_value * HUNDRED


# =============================================================================
# GOAL PROGRESS
# =============================================================================


def goal_achievement_rate(
    total_value: Decimal,
    goal: Decimal | None,
    config: DecimalConfig | None = None,
) -> Decimal:
    """
    Процент достижения финансовой цели (0-100+).

    Returns:
        total_value / goal * 100, или 0 если цель не задана или goal <= 0
    """
    if goal is None or goal <= 0:
        return ZERO

    with decimal_context(config):
        return total_value / goal * HUNDRED


def goal_distance(total_value: Decimal, goal: Decimal | None) -> Decimal:
    """
    Остаток до цели: > 0 ниже цели, 0 на цели, < 0 выше цели.

    Без цели → 0.
    """
    if goal is None:
        return ZERO
    return goal - total_value


def is_goal_reached(total_value: Decimal, goal: Decimal | None) -> bool:
    """Цель достигнута, если total_value >= goal."""
    if goal is None:
        return False
    return total_value >= goal
