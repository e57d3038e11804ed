"""
Snapshot — модели снапшота, значения актива и cash flow

Immutable Pydantic модели входных данных, которыми владеет внешний
persistence-слой. Core трактует их как неизменяемые на время вычисления.

Инварианты (проверяются PortfolioDataset / resolver'ом):
- Один снапшот на календарную дату
- Не более одного SnapshotAssetValue на (snapshot, asset identity)
- Описание CashFlowOperation уникально (case-insensitive) внутри снапшота
"""

import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from snaptrack.core.domain.asset import Asset
from snaptrack.core.domain.identity import normalize_identity
from snaptrack.core.math.decimal_safeguards import validate_finite
from snaptrack.core.math.time_weighting import normalize_snapshot_date


# =============================================================================
# SNAPSHOT
# =============================================================================


class Snapshot(BaseModel):
    """
    Снапшот: лучшее известное состояние портфеля на календарную дату.

    datetime на входе нормализуется до даты (local midnight).
    """

    id: UUID = Field(default_factory=uuid4, description="Идентификатор снапшота")
    date: datetime.date = Field(..., description="Календарная дата снапшота")

    model_config = {"frozen": True}

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        """Отбрасываем time component."""
        return normalize_snapshot_date(v)


# =============================================================================
# SNAPSHOT ASSET VALUE
# =============================================================================


class SnapshotAssetValue(BaseModel):
    """
    Рыночная стоимость актива в снапшоте.

    Может быть нулевой или отрицательной (обязательства).
    """

    snapshot_id: UUID = Field(..., description="Снапшот-владелец")
    asset: Asset = Field(..., description="Актив")
    market_value: Decimal = Field(..., description="Рыночная стоимость (может быть < 0)")

    model_config = {"frozen": True}

    @field_validator("market_value")
    @classmethod
    def validate_market_value_finite(cls, v: Decimal) -> Decimal:
        return validate_finite(v, "market_value")

    @property
    def platform_key(self) -> str:
        return self.asset.normalized_platform


# =============================================================================
# CASH FLOW OPERATION
# =============================================================================


class CashFlowOperation(BaseModel):
    """
    Внешний cash flow, зафиксированный в снапшоте.

    amount > 0 — inflow (депозит), amount < 0 — outflow (вывод).
    Sub-day timing не моделируется: flow считается произошедшим в дату
    снапшота.
    """

    snapshot_id: UUID = Field(..., description="Снапшот-владелец")
    description: str = Field(..., min_length=1, description="Описание операции")
    amount: Decimal = Field(..., description="Сумма (+ inflow, - outflow)")
    currency: str = Field(default="", description="Currency label (passthrough)")

    model_config = {"frozen": True}

    @field_validator("amount")
    @classmethod
    def validate_amount_finite(cls, v: Decimal) -> Decimal:
        return validate_finite(v, "amount")

    @property
    def normalized_description(self) -> str:
        return normalize_identity(self.description)
