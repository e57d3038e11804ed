"""Period lookback — выбор begin-снапшота для периодных метрик.

Общий для growth rate и Modified Dietz:
- target_date = current_date - N календарных месяцев (1/3/12)
- Выбирается снапшот, ближайший к target_date в ЛЮБУЮ сторону
  (до или после), без ограничения расстояния
- При равном расстоянии предпочитается более ранний снапшот
"""

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, TypeVar

from snaptrack.core.domain.snapshot import Snapshot
from snaptrack.core.math.time_weighting import days_between, subtract_months


class LookbackPeriod(int, Enum):
    """Период для growth/return метрик (значение — число месяцев)."""

    ONE_MONTH = 1
    THREE_MONTHS = 3
    ONE_YEAR = 12

    @property
    def months(self) -> int:
        return int(self.value)

    @property
    def label(self) -> str:
        if self is LookbackPeriod.ONE_MONTH:
            return "1M"
        if self is LookbackPeriod.THREE_MONTHS:
            return "3M"
        if self is LookbackPeriod.ONE_YEAR:
            return "1Y"
        raise ValueError(f"Unknown lookback period: {self!r}")


SnapshotT = TypeVar("SnapshotT", bound=Snapshot)


@dataclass(frozen=True)
class ResolvedPeriod:
    """Период с конкретными begin/end снапшотами."""

    period: LookbackPeriod
    begin: Snapshot
    end: Snapshot

    @property
    def begin_date(self) -> datetime.date:
        return self.begin.date

    @property
    def end_date(self) -> datetime.date:
        return self.end.date

    @property
    def total_days(self) -> int:
        return days_between(self.begin.date, self.end.date)


def lookback_target_date(current_date: datetime.date, period: LookbackPeriod) -> datetime.date:
    """current_date минус period.months календарных месяцев."""
    return subtract_months(current_date, period.months)


def find_closest_snapshot(
    target_date: datetime.date,
    snapshots: Iterable[SnapshotT],
) -> SnapshotT | None:
    """
    Ближайший к target_date снапшот (абсолютное расстояние в днях).

    Tie-break: более ранний снапшот. None если снапшотов нет.
    """
    best: SnapshotT | None = None
    best_key: tuple[int, datetime.date] | None = None
    for snapshot in snapshots:
        key = (abs(days_between(snapshot.date, target_date)), snapshot.date)
        if best_key is None or key < best_key:
            best, best_key = snapshot, key
    return best


def find_lookback_snapshot(
    current_date: datetime.date,
    period: LookbackPeriod,
    snapshots: Iterable[SnapshotT],
) -> SnapshotT | None:
    """
    Снапшот для начала периода, заканчивающегося в current_date.

    Args:
        current_date: Дата конца периода
        period: Период (1/3/12 месяцев)
        snapshots: Кандидаты (вызывающий код исключает end-снапшот)

    Returns:
        Ближайший к current_date - period снапшот, или None если кандидатов нет
    """
    return find_closest_snapshot(lookback_target_date(current_date, period), snapshots)


def resolve_period(
    period: LookbackPeriod,
    snapshots: Iterable[Snapshot],
) -> ResolvedPeriod | None:
    """
    Begin/end снапшоты периода.

    end — самый поздний снапшот; begin ищется среди остальных.

    Returns:
        ResolvedPeriod, или None если снапшотов меньше двух
    """
    ordered = sorted(snapshots, key=lambda s: s.date)
    if len(ordered) < 2:
        return None

    end = ordered[-1]
    begin = find_lookback_snapshot(end.date, period, ordered[:-1])
    if begin is None:
        return None
    return ResolvedPeriod(period=period, begin=begin, end=end)
