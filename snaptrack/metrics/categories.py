"""Category breakdown — стоимость и доли категорий по Composite View.

Группировка идёт по composite-значениям (direct + carried-forward), так что
сумма по категориям равна composite total снапшота. Активы без категории
группируются под пустым ключом и отображаются как "Uncategorized".
"""

import datetime
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Final, Iterable

from snaptrack.core.domain.composite_view import CompositeView
from snaptrack.core.domain.identity import normalize_identity
from snaptrack.core.math.allocation import category_allocation
from snaptrack.core.math.decimal_safeguards import ZERO, DecimalConfig, decimal_context

UNCATEGORIZED_KEY: Final[str] = ""
UNCATEGORIZED_LABEL: Final[str] = "Uncategorized"


@dataclass(frozen=True)
class CategoryAllocationData:
    """Стоимость и доля одной категории."""

    category_name: str
    value: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class CategoryValuePoint:
    """Стоимость категории в дату снапшота."""

    date: datetime.date
    value: Decimal


def display_name(category_key: str) -> str:
    return UNCATEGORIZED_LABEL if category_key == UNCATEGORIZED_KEY else category_key


def category_values(
    view: CompositeView,
    config: DecimalConfig | None = None,
) -> dict[str, Decimal]:
    """
    Стоимость по категориям для одного Composite View.

    Имена категорий сравниваются после нормализации; в ключе результата
    остаётся написание первого встреченного актива.

    Returns:
        {category name: Σ market_value}; "" — активы без категории
    """
    names: dict[str, str] = {}
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    with decimal_context(config):
        for value in view.all_values:
            raw_name = value.asset.category or UNCATEGORIZED_KEY
            key = normalize_identity(raw_name)
            names.setdefault(key, raw_name.strip())
            totals[key] += value.market_value
    return {names[key]: total for key, total in totals.items()}


def category_allocations(
    view: CompositeView,
    config: DecimalConfig | None = None,
) -> list[CategoryAllocationData]:
    """
    Доли категорий в Composite View, по убыванию стоимости.

    Пустой список, если composite total <= 0.
    """
    total = view.total_value
    if total <= 0:
        return []

    allocations = [
        CategoryAllocationData(
            category_name=display_name(name),
            value=value,
            percentage=category_allocation(value, total, config),
        )
        for name, value in category_values(view, config).items()
    ]
    allocations.sort(key=lambda a: a.value, reverse=True)
    return allocations


def category_value_history(
    views: Iterable[CompositeView],
    config: DecimalConfig | None = None,
) -> dict[str, list[CategoryValuePoint]]:
    """
    История стоимости каждой категории по снапшотам (по возрастанию даты).

    Написание имени категории берётся из первого снапшота, где она встретилась.
    """
    names: dict[str, str] = {}
    history: dict[str, list[CategoryValuePoint]] = defaultdict(list)
    for view in sorted(views, key=lambda v: v.snapshot_date):
        for name, value in category_values(view, config).items():
            key = normalize_identity(name)
            names.setdefault(key, display_name(name))
            history[key].append(CategoryValuePoint(date=view.snapshot_date, value=value))
    return {names[key]: points for key, points in history.items()}
