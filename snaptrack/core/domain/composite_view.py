"""
CompositeView — производное composite-состояние снапшота

Composite View = прямые значения снапшота + carried-forward значения
платформ, отсутствующих в снапшоте. Пересчитывается по запросу, никогда
не кешируется на диск.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. (snapshot, platform) представлен либо только direct, либо только одним
   carried-forward набором — никогда смесью
2. total_value == Σ direct + Σ carried-forward (точно)
3. source_snapshot_date задан тогда и только тогда, когда значение
   carried-forward
"""

import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from snaptrack.core.domain.asset import Asset


# =============================================================================
# COMPOSITE ASSET VALUE
# =============================================================================


class CompositeAssetValue(BaseModel):
    """
    Значение актива внутри Composite View.
    """

    asset: Asset = Field(..., description="Актив")
    market_value: Decimal = Field(..., description="Рыночная стоимость")
    is_carried_forward: bool = Field(
        default=False, description="True если значение перенесено из прошлого снапшота"
    )
    source_snapshot_date: datetime.date | None = Field(
        default=None, description="Дата снапшота-источника (только для carried-forward)"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_source_date(self) -> "CompositeAssetValue":
        """source_snapshot_date задан iff is_carried_forward."""
        if self.is_carried_forward and self.source_snapshot_date is None:
            raise ValueError("carried-forward value requires source_snapshot_date")
        if not self.is_carried_forward and self.source_snapshot_date is not None:
            raise ValueError("direct value must not have source_snapshot_date")
        return self

    @property
    def platform_key(self) -> str:
        return self.asset.normalized_platform


# =============================================================================
# COMPOSITE VIEW
# =============================================================================


class CompositeView(BaseModel):
    """
    Composite View одного снапшота.

    Immutable модель (frozen=True). Выход carry-forward resolver'а и вход
    metrics engine / rebalancing calculator.
    """

    snapshot_id: UUID = Field(..., description="Снапшот")
    snapshot_date: datetime.date = Field(..., description="Дата снапшота")
    direct_values: tuple[CompositeAssetValue, ...] = Field(
        default=(), description="Прямые значения снапшота"
    )
    carried_forward_values: tuple[CompositeAssetValue, ...] = Field(
        default=(), description="Перенесённые значения отсутствующих платформ"
    )
    total_value: Decimal = Field(..., description="Σ direct + Σ carried-forward")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_platform_partition(self) -> "CompositeView":
        """Платформа не может быть одновременно direct и carried-forward."""
        direct_platforms = {v.platform_key for v in self.direct_values}
        carried_platforms = {v.platform_key for v in self.carried_forward_values}
        overlap = direct_platforms & carried_platforms
        if overlap:
            raise ValueError(f"platforms both direct and carried forward: {sorted(overlap)}")
        if any(v.is_carried_forward for v in self.direct_values):
            raise ValueError("direct_values must not contain carried-forward entries")
        if not all(v.is_carried_forward for v in self.carried_forward_values):
            raise ValueError("carried_forward_values must contain only carried-forward entries")
        return self

    @property
    def all_values(self) -> tuple[CompositeAssetValue, ...]:
        """Direct, затем carried-forward."""
        return self.direct_values + self.carried_forward_values

    @property
    def direct_platforms(self) -> frozenset[str]:
        return frozenset(v.platform_key for v in self.direct_values)

    @property
    def carried_forward_platforms(self) -> frozenset[str]:
        return frozenset(v.platform_key for v in self.carried_forward_values)

    @property
    def platforms(self) -> frozenset[str]:
        return self.direct_platforms | self.carried_forward_platforms

    @property
    def asset_count(self) -> int:
        return len(self.direct_values) + len(self.carried_forward_values)

    def carried_forward_for(self, platform_key: str) -> tuple[CompositeAssetValue, ...]:
        """Carried-forward значения конкретной платформы (по нормализованному ключу)."""
        return tuple(v for v in self.carried_forward_values if v.platform_key == platform_key)
