"""
Time Weighting — календарная арифметика для метрик доходности

Чистые date-helpers:
- Нормализация даты снапшота (datetime → календарная дата, local midnight)
- Количество календарных дней между датами
- Вес cash flow для Modified Dietz
- Длительность периода в годах (для CAGR)
- Сдвиг даты на N календарных месяцев (end-of-month clamp)

ФОРМУЛЫ:
    w_i = (total_days - days_since_start_i) / total_days
    years = days / 365.25
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Final

from dateutil.relativedelta import relativedelta

from snaptrack.core.math.decimal_safeguards import (
    DecimalConfig,
    decimal_context,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Средняя длина года (учёт високосных лет) для CAGR
DAYS_PER_YEAR: Final[float] = 365.25


# =============================================================================
# ДАТЫ
# =============================================================================


def normalize_snapshot_date(value: date | datetime | str) -> date:
    """
    Нормализация даты снапшота до календарной даты.

    Time component отбрасывается. Naive datetime уже считается локальным;
    aware datetime сначала переводится в local timezone и только затем
    сводится к дате. Строки принимаются в ISO-формате (с offset или без).

    Examples:
        >>> normalize_snapshot_date(datetime(2024, 1, 1, 23, 59))
        datetime.date(2024, 1, 1)
        >>> normalize_snapshot_date("2024-02-01")
        datetime.date(2024, 2, 1)
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "T" in text or " " in text:
            return normalize_snapshot_date(datetime.fromisoformat(text))
        return date.fromisoformat(text)
    raise TypeError(f"Unsupported date type: {type(value).__name__}")


def days_between(start: date, end: date) -> int:
    """
    Количество календарных дней от start до end (может быть отрицательным).
    """
    return (end - start).days


def subtract_months(value: date, months: int) -> date:
    """
    Сдвиг даты на months календарных месяцев назад.

    Несуществующий день месяца clamp'ится к последнему дню:
        2024-03-31 - 1 month → 2024-02-29
    """
    if months < 0:
        raise ValueError(f"months must be non-negative, got {months}")
    return value - relativedelta(months=months)


def years_between(start: date, end: date, days_per_year: float = DAYS_PER_YEAR) -> float:
    """
    Длительность периода в годах (дробная).

    Sub-year периоды допустимы: CAGR для них считается (и может быть
    экстремальным).
    """
    if days_per_year <= 0:
        raise ValueError(f"days_per_year must be positive, got {days_per_year}")
    return days_between(start, end) / days_per_year


# =============================================================================
# ВЕСА CASH FLOW
# =============================================================================


def cash_flow_weight(
    days_since_start: int,
    total_days: int,
    config: DecimalConfig | None = None,
) -> Decimal:
    """
    Вес cash flow для Modified Dietz.

    Cash flow в начале периода (day 0) → вес 1 (инвестирован весь период),
    в последний день → вес 0.

    Args:
        days_since_start: Дней от начала периода до cash flow
        total_days: Длина периода в днях (> 0)
        config: Decimal-конфигурация

    Returns:
        w = (total_days - days_since_start) / total_days

    Raises:
        ValueError: если total_days <= 0 (вызывающий код обязан отсечь
            вырожденный период до вызова)

    Examples:
        >>> cash_flow_weight(0, 90)
        Decimal('1')
        >>> cash_flow_weight(90, 90)
        Decimal('0')
    """
    if total_days <= 0:
        raise ValueError(f"total_days must be positive, got {total_days}")

    with decimal_context(config):
        return Decimal(total_days - days_since_start) / Decimal(total_days)
