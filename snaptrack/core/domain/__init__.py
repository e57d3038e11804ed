"""
Domain models and value objects.

Contains fundamental domain entities: Asset, Category, Snapshot,
SnapshotAssetValue, CashFlowOperation, CompositeView, PortfolioDataset.
"""

from snaptrack.core.domain.asset import Asset, Category
from snaptrack.core.domain.composite_view import CompositeAssetValue, CompositeView
from snaptrack.core.domain.dataset import DATASET_SCHEMA_VERSION, PortfolioDataset
from snaptrack.core.domain.identity import (
    NO_PLATFORM_KEY,
    asset_identity_key,
    identities_match,
    normalize_identity,
    platform_key,
)
from snaptrack.core.domain.snapshot import (
    CashFlowOperation,
    Snapshot,
    SnapshotAssetValue,
)

__all__ = [
    # Identity
    "NO_PLATFORM_KEY",
    "asset_identity_key",
    "identities_match",
    "normalize_identity",
    "platform_key",
    # Asset / Category
    "Asset",
    "Category",
    # Snapshot
    "Snapshot",
    "SnapshotAssetValue",
    "CashFlowOperation",
    # Composite View
    "CompositeAssetValue",
    "CompositeView",
    # Dataset
    "DATASET_SCHEMA_VERSION",
    "PortfolioDataset",
]
