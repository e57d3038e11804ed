"""
PortfolioDataset — полная материализованная история портфеля

Immutable Pydantic контейнер, который persistence/import слой передаёт в
core целиком (batch resolution требует всю историю заранее, без lazy
доступа).

Структурные инварианты проверяются при создании:
1. Уникальный id и уникальная дата снапшота
2. Каждое значение/cash flow ссылается на существующий снапшот
3. Не более одного значения на (snapshot, asset identity)
4. Описание cash flow уникально (case-insensitive) внутри снапшота
5. Уникальное (case-insensitive) имя категории
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from snaptrack.core.contracts import validate_dataset
from snaptrack.core.domain.asset import Category
from snaptrack.core.domain.snapshot import (
    CashFlowOperation,
    Snapshot,
    SnapshotAssetValue,
)

# Версия формата payload (dataset.json)
DATASET_SCHEMA_VERSION = "1"


class PortfolioDataset(BaseModel):
    """
    Полная история: снапшоты, значения активов, cash flows, категории.

    Порядок снапшотов произвольный; сортировка — ответственность resolver'а.
    """

    snapshots: tuple[Snapshot, ...] = Field(default=(), description="Снапшоты")
    asset_values: tuple[SnapshotAssetValue, ...] = Field(
        default=(), description="Значения активов по всем снапшотам"
    )
    cash_flows: tuple[CashFlowOperation, ...] = Field(
        default=(), description="Cash flow операции по всем снапшотам"
    )
    categories: tuple[Category, ...] = Field(default=(), description="Категории")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_structure(self) -> "PortfolioDataset":
        snapshot_ids: set[UUID] = set()
        snapshot_dates = set()
        for snapshot in self.snapshots:
            if snapshot.id in snapshot_ids:
                raise ValueError(f"duplicate snapshot id {snapshot.id}")
            if snapshot.date in snapshot_dates:
                raise ValueError(f"duplicate snapshot date {snapshot.date.isoformat()}")
            snapshot_ids.add(snapshot.id)
            snapshot_dates.add(snapshot.date)

        seen_values: set[tuple[UUID, tuple[str, str]]] = set()
        for value in self.asset_values:
            if value.snapshot_id not in snapshot_ids:
                raise ValueError(f"asset value references unknown snapshot {value.snapshot_id}")
            key = (value.snapshot_id, value.asset.identity_key)
            if key in seen_values:
                raise ValueError(
                    f"duplicate value for asset {value.asset.name!r} "
                    f"(platform {value.asset.platform!r}) in snapshot {value.snapshot_id}"
                )
            seen_values.add(key)

        seen_flows: set[tuple[UUID, str]] = set()
        for flow in self.cash_flows:
            if flow.snapshot_id not in snapshot_ids:
                raise ValueError(f"cash flow references unknown snapshot {flow.snapshot_id}")
            key = (flow.snapshot_id, flow.normalized_description)
            if key in seen_flows:
                raise ValueError(
                    f"duplicate cash flow description {flow.description!r} "
                    f"in snapshot {flow.snapshot_id}"
                )
            seen_flows.add(key)

        category_names: set[str] = set()
        for category in self.categories:
            if category.normalized_name in category_names:
                raise ValueError(f"duplicate category {category.name!r}")
            category_names.add(category.normalized_name)

        return self

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PortfolioDataset":
        """
        Построение dataset из JSON payload.

        Сначала payload проверяется против dataset.json контракта, затем
        строятся модели (Decimal из строк/чисел, даты из ISO-строк).

        Raises:
            jsonschema.ValidationError: payload не соответствует контракту
            pydantic.ValidationError: нарушен структурный инвариант
        """
        validate_dataset(payload)
        return cls.model_validate(
            {
                "snapshots": payload.get("snapshots", []),
                "asset_values": [_decimal_fields(v, "market_value") for v in payload.get("asset_values", [])],
                "cash_flows": [_decimal_fields(v, "amount") for v in payload.get("cash_flows", [])],
                "categories": [
                    _decimal_fields(c, "target_allocation_percentage") for c in payload.get("categories", [])
                ],
            }
        )

    def sorted_snapshots(self) -> list[Snapshot]:
        """Снапшоты по возрастанию даты."""
        return sorted(self.snapshots, key=lambda s: s.date)


def _decimal_fields(record: dict[str, Any], field_name: str) -> dict[str, Any]:
    """JSON numbers → str, чтобы Decimal не проходил через binary float."""
    value = record.get(field_name)
    if isinstance(value, float):
        return {**record, field_name: repr(value)}
    return record
