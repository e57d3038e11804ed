"""
Rebalancing Calculator — корректировки категорий к целевым долям

Для каждой категории с целевой долей:
    adjustment = total · target% / 100 - total · current% / 100
    adjustment > 0 → BUY, adjustment < 0 → SELL
    |adjustment| < minimum_threshold ($1) → NO_ACTION

Категории без цели в расчёт не входят, но показываются отдельными
строками (no-target rows). Активы без категории — отдельная строка
uncategorized.

Калькулятор не изменяет данные и не форматирует суммы в валюте.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Final, Iterable, Sequence

from snaptrack.core.domain.asset import Category
from snaptrack.core.domain.composite_view import CompositeView
from snaptrack.core.domain.identity import normalize_identity
from snaptrack.core.math.allocation import category_allocation
from snaptrack.core.math.decimal_safeguards import (
    HUNDRED,
    ZERO,
    DecimalConfig,
    decimal_context,
)
from snaptrack.metrics.categories import UNCATEGORIZED_KEY, category_values

MINIMUM_THRESHOLD_DEFAULT: Final[Decimal] = Decimal("1")


# =============================================================================
# CONFIGURATION & TYPES
# =============================================================================


@dataclass(frozen=True)
class RebalancingConfig:
    """Конфигурация ребалансировки."""

    # Корректировки меньше порога (по модулю) → NO_ACTION
    minimum_threshold: Decimal = MINIMUM_THRESHOLD_DEFAULT
    decimal: DecimalConfig = DecimalConfig()


class ActionType(str, Enum):
    """Тип рекомендации."""

    BUY = "BUY"
    SELL = "SELL"
    NO_ACTION = "NO_ACTION"


@dataclass(frozen=True)
class CategoryAllocationInput:
    """Текущая стоимость категории и её целевая доля (nullable)."""

    name: str
    current_value: Decimal
    target_percentage: Decimal | None = None


@dataclass(frozen=True)
class RebalancingAction:
    """Рекомендация по одной категории с целевой долей."""

    category_name: str
    current_value: Decimal
    current_percentage: Decimal
    target_percentage: Decimal
    adjustment_amount: Decimal
    action: ActionType


@dataclass(frozen=True)
class NoTargetRow:
    """Категория без целевой доли."""

    category_name: str
    current_value: Decimal
    current_percentage: Decimal


@dataclass(frozen=True)
class UncategorizedRow:
    current_value: Decimal
    current_percentage: Decimal


@dataclass(frozen=True)
class RebalancingPlan:
    """Полный план ребалансировки для одного Composite View."""

    total_value: Decimal
    suggestions: tuple[RebalancingAction, ...] = ()
    no_target_rows: tuple[NoTargetRow, ...] = ()
    uncategorized_row: UncategorizedRow | None = None

    @property
    def is_empty(self) -> bool:
        return not self.suggestions and not self.no_target_rows and self.uncategorized_row is None


# =============================================================================
# CALCULATIONS
# =============================================================================


def adjustment(
    current_percentage: Decimal,
    target_percentage: Decimal,
    total_value: Decimal,
    config: DecimalConfig | None = None,
) -> Decimal:
    """
    Сумма корректировки категории.

    Args:
        current_percentage: Текущая доля категории (%)
        target_percentage: Целевая доля категории (%)
        total_value: Composite total портфеля

    Returns:
        total · target / 100 - total · current / 100 (> 0 buy, < 0 sell)

    Examples:
        >>> adjustment(Decimal(30), Decimal(40), Decimal(10000))
        Decimal('1000')
    """
    with decimal_context(config):
        return total_value * target_percentage / HUNDRED - total_value * current_percentage / HUNDRED


def classify_adjustment(amount: Decimal, minimum_threshold: Decimal = MINIMUM_THRESHOLD_DEFAULT) -> ActionType:
    if abs(amount) < minimum_threshold:
        return ActionType.NO_ACTION
    if amount > 0:
        return ActionType.BUY
    return ActionType.SELL


def calculate_adjustments(
    categories: Iterable[CategoryAllocationInput],
    total_value: Decimal,
    config: RebalancingConfig | None = None,
) -> list[RebalancingAction]:
    """
    Рекомендации для всех категорий с целевой долей.

    Args:
        categories: Текущие стоимости категорий (могут быть без цели)
        total_value: Composite total портфеля
        config: Конфигурация ребалансировки

    Returns:
        Рекомендации по убыванию |adjustment|; пусто если total_value <= 0
    """
    config = config or RebalancingConfig()
    if total_value <= 0:
        return []

    actions: list[RebalancingAction] = []
    with decimal_context(config.decimal):
        for category in categories:
            target = category.target_percentage
            if target is None:
                continue

            target_value = total_value * target / HUNDRED
            amount = target_value - category.current_value
            actions.append(
                RebalancingAction(
                    category_name=category.name,
                    current_value=category.current_value,
                    current_percentage=category.current_value / total_value * HUNDRED,
                    target_percentage=target,
                    adjustment_amount=amount,
                    action=classify_adjustment(amount, config.minimum_threshold),
                )
            )

    # Стабильная сортировка: при равных |adjustment| сохраняется порядок входа
    actions.sort(key=lambda a: abs(a.adjustment_amount), reverse=True)
    return actions


def build_rebalancing_plan(
    view: CompositeView,
    categories: Sequence[Category],
    config: RebalancingConfig | None = None,
) -> RebalancingPlan:
    """
    План ребалансировки по Composite View (обычно последнего снапшота).

    Стоимость категорий берётся из composite-значений (direct +
    carried-forward). Имена категорий сопоставляются после нормализации.

    Args:
        view: Composite View
        categories: Все категории (с целью и без)
        config: Конфигурация ребалансировки

    Returns:
        RebalancingPlan; пустой план если composite total <= 0
    """
    config = config or RebalancingConfig()
    total = view.total_value
    if total <= 0:
        return RebalancingPlan(total_value=total)

    lookup: dict[str, Decimal] = {}
    uncategorized_value = ZERO
    with decimal_context(config.decimal):
        for name, value in category_values(view, config.decimal).items():
            if name == UNCATEGORIZED_KEY:
                uncategorized_value += value
            else:
                key = normalize_identity(name)
                lookup[key] = lookup.get(key, ZERO) + value

    inputs = [
        CategoryAllocationInput(
            name=category.name,
            current_value=lookup.get(category.normalized_name, ZERO),
            target_percentage=category.target_allocation_percentage,
        )
        for category in categories
    ]
    suggestions = calculate_adjustments(inputs, total, config)

    no_target_rows = sorted(
        (
            NoTargetRow(
                category_name=item.name,
                current_value=item.current_value,
                current_percentage=category_allocation(item.current_value, total, config.decimal),
            )
            for item in inputs
            if item.target_percentage is None
        ),
        key=lambda row: row.category_name.casefold(),
    )

    uncategorized_row = None
    if uncategorized_value > 0:
        uncategorized_row = UncategorizedRow(
            current_value=uncategorized_value,
            current_percentage=category_allocation(uncategorized_value, total, config.decimal),
        )

    return RebalancingPlan(
        total_value=total,
        suggestions=tuple(suggestions),
        no_target_rows=tuple(no_target_rows),
        uncategorized_row=uncategorized_row,
    )
