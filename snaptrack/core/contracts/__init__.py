"""
Contract Validation Module

Модуль для валидации JSON контрактов на границе snaptrack core.
"""

from .validators import (
    CashFlowOperationValidator,
    CategoryValidator,
    CompositeViewValidator,
    ContractValidator,
    DatasetValidator,
    SchemaLoader,
    SnapshotAssetValueValidator,
    SnapshotValidator,
    validate_cash_flow_operation,
    validate_category,
    validate_composite_view,
    validate_dataset,
    validate_snapshot,
    validate_snapshot_asset_value,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "SnapshotValidator",
    "SnapshotAssetValueValidator",
    "CashFlowOperationValidator",
    "CategoryValidator",
    "DatasetValidator",
    "CompositeViewValidator",
    # Functions
    "validate_snapshot",
    "validate_snapshot_asset_value",
    "validate_cash_flow_operation",
    "validate_category",
    "validate_dataset",
    "validate_composite_view",
]
