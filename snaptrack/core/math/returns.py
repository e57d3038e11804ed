"""
Returns — growth rate, Modified Dietz, cumulative TWR, rebasing, CAGR

Модуль содержит чистые калькуляторы доходности поверх Decimal:
- Simple growth rate между двумя значениями
- Modified Dietz return с time-weighted cash flows
- Geometric chaining period returns в cumulative TWR
- Rebasing cumulative TWR серии для окна отображения
- CAGR для дробного числа лет

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Undefined результат → None (никогда 0, Infinity или sentinel)
2. None во входной цепочке TWR пропагирует, а не трактуется как 0%
3. Rebasing использует уже посчитанную cumulative серию, не re-chain
4. Все вычисления в изолированном decimal-контексте

ФОРМУЛЫ:
    growth = (end - begin) / begin
    R_md = (EMV - BMV - CF) / (BMV + Σ w_i · CF_i),  w_i = (T - d_i) / T
    TWR = Π (1 + r_k) - 1
    rebased_i = (1 + C_i) / (1 + C_k) - 1
    CAGR = (end / begin) ^ (1 / years) - 1
"""

import math
from decimal import Decimal
from typing import NamedTuple, Sequence

import structlog

from snaptrack.core.math.decimal_safeguards import (
    ONE,
    ZERO,
    DecimalConfig,
    decimal_context,
    safe_divide,
    safe_power,
    to_decimal,
)
from snaptrack.core.math.time_weighting import cash_flow_weight

logger = structlog.get_logger(__name__)


# =============================================================================
# TYPES
# =============================================================================


class CashFlow(NamedTuple):
    """
    Cash flow внутри периода Modified Dietz.

    amount > 0 — inflow, amount < 0 — outflow.
    """

    amount: Decimal
    days_since_start: int


# =============================================================================
# GROWTH RATE
# =============================================================================


def growth_rate(
    begin_value: Decimal,
    end_value: Decimal,
    config: DecimalConfig | None = None,
) -> Decimal | None:
    """
    Simple growth rate между двумя composite totals.

    Args:
        begin_value: Значение на начало периода
        end_value: Значение на конец периода
        config: Decimal-конфигурация

    Returns:
        (end - begin) / begin, или None если begin <= 0

    Examples:
        >>> growth_rate(Decimal(100), Decimal(110))
        Decimal('0.1')
        >>> growth_rate(Decimal(0), Decimal(110)) is None
        True
    """
    if begin_value <= 0:
        logger.debug("metric_undefined", metric="growth_rate", reason="begin_value_not_positive")
        return None

    with decimal_context(config):
        return safe_divide(end_value - begin_value, begin_value)


# =============================================================================
# MODIFIED DIETZ
# =============================================================================


def modified_dietz(
    begin_value: Decimal,
    end_value: Decimal,
    cash_flows: Sequence[CashFlow | tuple[Decimal, int]],
    total_days: int,
    config: DecimalConfig | None = None,
) -> Decimal | None:
    """
    Modified Dietz return за период.

    Cash flow на day 0 получает вес 1, на последний день (day == total_days)
    вес 0. Sub-day timing не моделируется.

    Args:
        begin_value: BMV — composite total на начало периода
        end_value: EMV — composite total на конец периода
        cash_flows: (amount, days_since_start) для промежуточных cash flows
        total_days: Длина периода в календарных днях
        config: Decimal-конфигурация

    Returns:
        R = (EMV - BMV - CF) / (BMV + Σ w_i·CF_i), или None если
        begin_value <= 0, total_days <= 0 или знаменатель <= 0

    Examples:
        >>> r = modified_dietz(Decimal(100000), Decimal(115000),
        ...                    [CashFlow(Decimal(10000), 30)], 90)
        >>> round(r, 4)
        Decimal('0.0469')
    """
    if begin_value <= 0:
        logger.debug("metric_undefined", metric="modified_dietz", reason="begin_value_not_positive")
        return None
    if total_days <= 0:
        logger.debug("metric_undefined", metric="modified_dietz", reason="empty_period")
        return None

    with decimal_context(config):
        total_cash_flow = ZERO
        weighted_cash_flow = ZERO
        for amount, days_since_start in cash_flows:
            amount = to_decimal(amount)
            weight = cash_flow_weight(days_since_start, total_days, config)
            total_cash_flow += amount
            weighted_cash_flow += weight * amount

        denominator = begin_value + weighted_cash_flow
        if denominator <= 0:
            logger.debug(
                "metric_undefined",
                metric="modified_dietz",
                reason="denominator_not_positive",
                denominator=str(denominator),
            )
            return None

        return safe_divide(end_value - begin_value - total_cash_flow, denominator)


# =============================================================================
# CUMULATIVE TWR
# =============================================================================


def cumulative_twr(
    period_returns: Sequence[Decimal | None],
    config: DecimalConfig | None = None,
) -> Decimal | None:
    """
    Cumulative time-weighted return: geometric chaining period returns.

    Period с нулевым cash flow (чистый price return) участвует в цепочке
    наравне с остальными. Если хотя бы один r_k не определён (None),
    результат для этой точки не определён: пропущенный период НЕ
    трактуется как 0%.

    Args:
        period_returns: Modified Dietz returns последовательных пар снапшотов
        config: Decimal-конфигурация

    Returns:
        Π (1 + r_k) - 1, или None если любой r_k is None

    Examples:
        >>> cumulative_twr([Decimal("0.1")])
        Decimal('0.1')
        >>> cumulative_twr([Decimal("0.1"), Decimal("0.1")])
        Decimal('0.21')
        >>> cumulative_twr([Decimal("0.1"), None]) is None
        True
    """
    with decimal_context(config):
        product = ONE
        for period_return in period_returns:
            if period_return is None:
                logger.debug("metric_undefined", metric="cumulative_twr", reason="undefined_period_return")
                return None
            product *= ONE + period_return
        return product - ONE


def cumulative_twr_series(
    period_returns: Sequence[Decimal | None],
    config: DecimalConfig | None = None,
) -> list[Decimal | None]:
    """
    Cumulative TWR на каждой точке: [C_0 = 0, C_1, ..., C_n].

    C_0 соответствует первому снапшоту (inception). После первого
    undefined period return все последующие точки — None.
    """
    series: list[Decimal | None] = [ZERO]
    with decimal_context(config):
        product: Decimal | None = ONE
        for period_return in period_returns:
            if product is None or period_return is None:
                product = None
                series.append(None)
                continue
            product *= ONE + period_return
            series.append(product - ONE)
    return series


def rebase_cumulative(
    cumulative: Sequence[Decimal | None],
    start_index: int,
    config: DecimalConfig | None = None,
) -> list[Decimal | None]:
    """
    Rebasing cumulative серии: точка start_index становится новым нулём.

    Presentation transform поверх уже посчитанных C_i — НЕ re-chain
    подмножества period returns.

    Args:
        cumulative: Полная cumulative серия C_0..C_n
        start_index: Индекс k начала окна
        config: Decimal-конфигурация

    Returns:
        [(1 + C_i) / (1 + C_k) - 1 for i in k..n]; None там, где C_i или
        C_k не определены, или 1 + C_k == 0

    Raises:
        IndexError: если start_index вне серии

    Examples:
        >>> series = [Decimal(0), Decimal("0.10"), Decimal("0.21"), Decimal("0.331")]
        >>> rebase_cumulative(series, 1)
        [Decimal('0'), Decimal('0.1'), Decimal('0.21')]
    """
    if not 0 <= start_index < len(cumulative):
        raise IndexError(f"start_index {start_index} out of range for series of {len(cumulative)}")

    base = cumulative[start_index]
    window = cumulative[start_index:]
    if base is None:
        return [None] * len(window)

    with decimal_context(config):
        base_growth = ONE + base
        rebased: list[Decimal | None] = []
        for value in window:
            if value is None:
                rebased.append(None)
                continue
            ratio = safe_divide(ONE + value, base_growth)
            rebased.append(None if ratio is None else ratio - ONE)
        return rebased


# =============================================================================
# CAGR
# =============================================================================


def cagr(
    begin_value: Decimal,
    end_value: Decimal,
    years: float,
    config: DecimalConfig | None = None,
) -> Decimal | None:
    """
    Compound annual growth rate.

    Sub-year периоды считаются (результат может быть экстремальным).

    Args:
        begin_value: Значение на начало
        end_value: Значение на конец
        years: Длительность в годах (дробная, days / 365.25)
        config: Decimal-конфигурация

    Returns:
        (end / begin) ^ (1 / years) - 1, или None если begin_value <= 0,
        end_value <= 0 (нет вещественного корня), years <= 0 или не конечно,
        либо рост выходит за пределы decimal-контекста

    Examples:
        >>> round(cagr(Decimal(100000), Decimal(121000), 2.0), 10)
        Decimal('0.1000000000')
    """
    if begin_value <= 0:
        logger.debug("metric_undefined", metric="cagr", reason="begin_value_not_positive")
        return None
    if end_value <= 0:
        logger.debug("metric_undefined", metric="cagr", reason="end_value_not_positive")
        return None
    if not math.isfinite(years):
        logger.debug("metric_undefined", metric="cagr", reason="years_not_finite")
        return None
    if years <= 0:
        logger.debug("metric_undefined", metric="cagr", reason="years_not_positive")
        return None

    with decimal_context(config):
        ratio = safe_divide(end_value, begin_value)
        exponent = safe_divide(ONE, to_decimal(years))
        if ratio is None or exponent is None:
            return None
        growth = safe_power(ratio, exponent)
        if growth is None:
            logger.debug("metric_undefined", metric="cagr", reason="growth_not_finite")
            return None
        return growth - ONE
