"""
Carry-Forward Resolver — composite views из разреженных снапшотов

Для каждого снапшота строит Composite View: прямые значения + значения
платформ, отсутствующих в снапшоте, перенесённые из самого свежего
предыдущего снапшота, где платформа была записана.

Алгоритм (один проход по снапшотам в порядке возрастания даты):
1. Partition прямых значений снапшота по нормализованному platform key
   → present_platforms
2. Для каждого ключа latest_by_platform, отсутствующего в present_platforms,
   emit сохранённые {source_date, values} как carried-forward
3. total_value = Σ direct + Σ carried-forward
4. Для каждого present key перезаписать latest_by_platform значениями
   этого снапшота; отсутствующие ключи не трогаются
5. Записать Composite View

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Сложность линейна по (снапшоты + значения): никаких rescans истории
2. Присутствие платформы подавляет ВЕСЬ carry-forward этой платформы
3. Первый снапшот не имеет carried-forward значений
4. Нет memoization между вызовами: working state локален для вызова
5. Структурные нарушения входа → StructuralInvariantViolation (fatal)
"""

import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, NamedTuple, NoReturn, Sequence
from uuid import UUID

import structlog

from snaptrack.core.domain.composite_view import CompositeAssetValue, CompositeView
from snaptrack.core.domain.snapshot import Snapshot, SnapshotAssetValue
from snaptrack.core.math.decimal_safeguards import (
    DecimalConfig,
    decimal_context,
    decimal_sum,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class StructuralInvariantViolation(Exception):
    """
    Нарушение структурного инварианта входных данных.

    Означает баг upstream-коллаборатора (данные должны были быть
    провалидированы до передачи в core). Core не восстанавливается:
    исключение пробрасывается вызывающему коду.

    Примеры:
    - Два SnapshotAssetValue для одной пары (snapshot, asset)
    - Два снапшота на одну дату
    - Значение ссылается на неизвестный снапшот
    """

    pass


# =============================================================================
# WORKING STATE
# =============================================================================


class _PlatformSource(NamedTuple):
    """Самые свежие прямые значения платформы и дата их снапшота."""

    source_date: datetime.date
    values: tuple[SnapshotAssetValue, ...]


@dataclass(frozen=True)
class ResolverConfig:
    """Конфигурация resolver'а."""

    decimal: DecimalConfig = DecimalConfig()

    # Проверка уникальности (snapshot, asset identity) при partitioning.
    # Проверка линейна и выполняется за тот же проход.
    check_duplicate_assets: bool = True


# =============================================================================
# INDEXING
# =============================================================================


def _sort_snapshots(snapshots: Iterable[Snapshot]) -> list[Snapshot]:
    """
    Сортировка по дате с проверкой уникальности id и даты.

    Raises:
        StructuralInvariantViolation: дубликат id или даты
    """
    ordered = sorted(snapshots, key=lambda s: s.date)
    seen_ids: set[UUID] = set()
    previous: Snapshot | None = None
    for snapshot in ordered:
        if snapshot.id in seen_ids:
            _violation("duplicate_snapshot_id", snapshot_id=str(snapshot.id))
        if previous is not None and previous.date == snapshot.date:
            _violation("duplicate_snapshot_date", date=snapshot.date.isoformat())
        seen_ids.add(snapshot.id)
        previous = snapshot
    return ordered


def _group_values(
    values: Iterable[SnapshotAssetValue],
    known_ids: set[UUID],
) -> dict[UUID, list[SnapshotAssetValue]]:
    """
    Группировка значений по снапшоту (один проход).

    Raises:
        StructuralInvariantViolation: значение ссылается на неизвестный снапшот
    """
    grouped: dict[UUID, list[SnapshotAssetValue]] = {}
    for value in values:
        if value.snapshot_id not in known_ids:
            _violation("unknown_snapshot_reference", snapshot_id=str(value.snapshot_id))
        grouped.setdefault(value.snapshot_id, []).append(value)
    return grouped


def _partition_by_platform(
    snapshot: Snapshot,
    direct: Sequence[SnapshotAssetValue],
    check_duplicates: bool,
) -> dict[str, list[SnapshotAssetValue]]:
    """
    Partition прямых значений снапшота по нормализованному platform key.

    Raises:
        StructuralInvariantViolation: дубликат (snapshot, asset identity)
    """
    by_platform: dict[str, list[SnapshotAssetValue]] = {}
    seen_assets: set[tuple[str, str]] = set()
    for value in direct:
        if check_duplicates:
            identity = value.asset.identity_key
            if identity in seen_assets:
                _violation(
                    "duplicate_asset_value",
                    snapshot_id=str(snapshot.id),
                    date=snapshot.date.isoformat(),
                    asset=value.asset.name,
                    platform=value.asset.platform,
                )
            seen_assets.add(identity)
        by_platform.setdefault(value.platform_key, []).append(value)
    return by_platform


def _violation(reason: str, **details: str) -> NoReturn:
    logger.error("structural_invariant_violation", reason=reason, **details)
    detail_text = ", ".join(f"{k}={v}" for k, v in details.items())
    raise StructuralInvariantViolation(f"{reason}: {detail_text}")


# =============================================================================
# BATCH RESOLUTION
# =============================================================================


def _resolve_ordered(
    ordered: Sequence[Snapshot],
    values_by_snapshot: dict[UUID, list[SnapshotAssetValue]],
    config: ResolverConfig,
) -> dict[UUID, CompositeView]:
    """Один проход carry-forward по уже отсортированным снапшотам."""
    latest_by_platform: dict[str, _PlatformSource] = {}
    views: dict[UUID, CompositeView] = {}

    with decimal_context(config.decimal):
        for snapshot in ordered:
            direct = values_by_snapshot.get(snapshot.id, [])
            by_platform = _partition_by_platform(snapshot, direct, config.check_duplicate_assets)

            carried: list[CompositeAssetValue] = []
            for key, source in latest_by_platform.items():
                if key in by_platform:
                    continue
                carried.extend(
                    CompositeAssetValue(
                        asset=value.asset,
                        market_value=value.market_value,
                        is_carried_forward=True,
                        source_snapshot_date=source.source_date,
                    )
                    for value in source.values
                )

            direct_values = tuple(
                CompositeAssetValue(asset=value.asset, market_value=value.market_value)
                for value in direct
            )
            total_value = decimal_sum(v.market_value for v in direct_values) + decimal_sum(
                v.market_value for v in carried
            )

            for key, platform_values in by_platform.items():
                latest_by_platform[key] = _PlatformSource(
                    source_date=snapshot.date,
                    values=tuple(platform_values),
                )

            views[snapshot.id] = CompositeView(
                snapshot_id=snapshot.id,
                snapshot_date=snapshot.date,
                direct_values=direct_values,
                carried_forward_values=tuple(carried),
                total_value=total_value,
            )

    return views


def resolve_all(
    snapshots: Iterable[Snapshot],
    values: Iterable[SnapshotAssetValue],
    config: ResolverConfig | None = None,
) -> dict[UUID, CompositeView]:
    """
    Composite View для каждого снапшота.

    Снапшоты не обязаны быть отсортированы. Сложность O(S + V).

    Args:
        snapshots: Все снапшоты
        values: Все SnapshotAssetValue по всем снапшотам
        config: Конфигурация resolver'а

    Returns:
        {snapshot_id: CompositeView}, в порядке возрастания даты

    Raises:
        StructuralInvariantViolation: нарушен структурный инвариант входа
    """
    config = config or ResolverConfig()
    ordered = _sort_snapshots(snapshots)
    values_by_snapshot = _group_values(values, {s.id for s in ordered})
    views = _resolve_ordered(ordered, values_by_snapshot, config)

    logger.debug(
        "carry_forward_resolved",
        snapshots=len(views),
        carried_forward=sum(len(v.carried_forward_values) for v in views.values()),
    )
    return views


def resolve(
    snapshot: Snapshot,
    all_snapshots: Iterable[Snapshot],
    all_values: Iterable[SnapshotAssetValue],
    config: ResolverConfig | None = None,
) -> CompositeView:
    """
    Composite View одного снапшота.

    Результат идентичен resolve_all(...)[snapshot.id]: выполняется тот же
    проход, усечённый до снапшотов с датой <= даты целевого.

    Raises:
        StructuralInvariantViolation: целевой снапшот отсутствует в
            all_snapshots или нарушен структурный инвариант входа
    """
    config = config or ResolverConfig()
    ordered = _sort_snapshots(all_snapshots)
    if not any(s.id == snapshot.id for s in ordered):
        _violation("unknown_target_snapshot", snapshot_id=str(snapshot.id))

    values_by_snapshot = _group_values(all_values, {s.id for s in ordered})
    truncated = [s for s in ordered if s.date <= snapshot.date]
    views = _resolve_ordered(truncated, values_by_snapshot, config)
    return views[snapshot.id]


def composite_total(
    snapshot: Snapshot,
    all_snapshots: Iterable[Snapshot],
    all_values: Iterable[SnapshotAssetValue],
    config: ResolverConfig | None = None,
) -> Decimal:
    """Composite total value одного снапшота (direct + carried-forward)."""
    return resolve(snapshot, all_snapshots, all_values, config).total_value


# =============================================================================
# RESOLVER
# =============================================================================


class CarryForwardResolver:
    """
    Carry-forward resolver с фиксированной конфигурацией.

    Не хранит состояние между вызовами: каждый вызов пересчитывает
    composite views из полного набора данных (удаление снапшота или
    изменение значений не требует инвалидации).
    """

    def __init__(self, config: ResolverConfig | None = None):
        self.config = config or ResolverConfig()

    def resolve_all(
        self,
        snapshots: Iterable[Snapshot],
        values: Iterable[SnapshotAssetValue],
    ) -> dict[UUID, CompositeView]:
        return resolve_all(snapshots, values, self.config)

    def resolve(
        self,
        snapshot: Snapshot,
        all_snapshots: Iterable[Snapshot],
        all_values: Iterable[SnapshotAssetValue],
    ) -> CompositeView:
        return resolve(snapshot, all_snapshots, all_values, self.config)

    def composite_total(
        self,
        snapshot: Snapshot,
        all_snapshots: Iterable[Snapshot],
        all_values: Iterable[SnapshotAssetValue],
    ) -> Decimal:
        return composite_total(snapshot, all_snapshots, all_values, self.config)
