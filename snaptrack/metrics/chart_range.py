"""Chart windows — фильтрация серий по диапазону и rebasing TWR.

Окно считается от даты последней точки серии (не от "сегодня"), чтобы
совпадать с timeline портфеля.

Rebasing cumulative TWR для окна — presentation transform поверх уже
посчитанной полной серии: rebased_i = (1 + C_i) / (1 + C_k) - 1, где k —
первая точка окна. Re-chain подмножества period returns запрещён: он
теряет вклад периода, пересекающего границу окна.
"""

import datetime
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence, TypeVar

from dateutil.relativedelta import relativedelta

from snaptrack.core.math.decimal_safeguards import DecimalConfig
from snaptrack.core.math.returns import rebase_cumulative


@dataclass(frozen=True)
class SeriesPoint:
    """Точка серии (стоимость портфеля или cumulative TWR)."""

    date: datetime.date
    value: Decimal | None


PointT = TypeVar("PointT", bound=SeriesPoint)


class ChartTimeRange(str, Enum):
    """Диапазон отображения графиков."""

    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"
    ALL = "All"

    def start_date(self, reference: datetime.date) -> datetime.date | None:
        """
        Начало окна относительно reference; None для ALL (без фильтра).
        """
        if self is ChartTimeRange.ONE_WEEK:
            return reference - relativedelta(days=7)
        if self is ChartTimeRange.ONE_MONTH:
            return reference - relativedelta(months=1)
        if self is ChartTimeRange.THREE_MONTHS:
            return reference - relativedelta(months=3)
        if self is ChartTimeRange.SIX_MONTHS:
            return reference - relativedelta(months=6)
        if self is ChartTimeRange.ONE_YEAR:
            return reference - relativedelta(years=1)
        if self is ChartTimeRange.THREE_YEARS:
            return reference - relativedelta(years=3)
        if self is ChartTimeRange.FIVE_YEARS:
            return reference - relativedelta(years=5)
        if self is ChartTimeRange.ALL:
            return None
        raise ValueError(f"Unknown chart range: {self!r}")


def window_start_index(points: Sequence[SeriesPoint], time_range: ChartTimeRange) -> int | None:
    """
    Индекс первой точки окна в серии, отсортированной по дате.

    None для пустой серии.
    """
    if not points:
        return None
    start = time_range.start_date(max(p.date for p in points))
    if start is None:
        return 0
    for index, point in enumerate(points):
        if point.date >= start:
            return index
    return None


def filter_points(points: Sequence[PointT], time_range: ChartTimeRange) -> list[PointT]:
    """Точки серии, попадающие в окно (порядок сохраняется)."""
    if not points:
        return []
    start = time_range.start_date(max(p.date for p in points))
    if start is None:
        return list(points)
    return [p for p in points if p.date >= start]


def rebase_twr_window(
    cumulative_points: Sequence[SeriesPoint],
    time_range: ChartTimeRange,
    config: DecimalConfig | None = None,
) -> list[SeriesPoint]:
    """
    Cumulative TWR окна, пересчитанный от первой точки окна.

    Args:
        cumulative_points: Полная cumulative TWR серия по возрастанию даты
        time_range: Диапазон отображения

    Returns:
        Точки окна с rebased значениями (первая точка = 0)
    """
    ordered = sorted(cumulative_points, key=lambda p: p.date)
    start_index = window_start_index(ordered, time_range)
    if start_index is None:
        return []

    rebased = rebase_cumulative([p.value for p in ordered], start_index, config)
    return [
        SeriesPoint(date=point.date, value=value)
        for point, value in zip(ordered[start_index:], rebased)
    ]
