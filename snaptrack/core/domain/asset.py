"""
Asset / Category — модели актива и категории

Immutable Pydantic модели. Идентичность актива — нормализованная пара
(name, platform); category — слабая ссылка по имени (lookup, не владение).
Currency — passthrough label, конверсия не выполняется.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from snaptrack.core.domain.identity import (
    asset_identity_key,
    normalize_identity,
)
from snaptrack.core.math.decimal_safeguards import validate_finite


# =============================================================================
# ASSET
# =============================================================================


class Asset(BaseModel):
    """
    Модель актива.

    Immutable модель (frozen=True). Пустая platform ("") — отдельный bucket
    "no platform" для carry-forward.
    """

    name: str = Field(..., min_length=1, description="Имя актива (например, 'VTI')")
    platform: str = Field(default="", description="Платформа/брокер ('' = no platform)")
    category: str | None = Field(
        default=None, description="Имя категории (слабая ссылка, nullable)"
    )
    currency: str = Field(default="", description="Currency label (passthrough)")

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        """Имя не может состоять только из whitespace."""
        if not normalize_identity(v):
            raise ValueError("asset name must not be blank")
        return v

    @property
    def normalized_name(self) -> str:
        return normalize_identity(self.name)

    @property
    def normalized_platform(self) -> str:
        return normalize_identity(self.platform)

    @property
    def identity_key(self) -> tuple[str, str]:
        """Ключ идентичности (normalized name, normalized platform)."""
        return asset_identity_key(self.name, self.platform)

    def same_identity(self, other: "Asset") -> bool:
        return self.identity_key == other.identity_key


# =============================================================================
# CATEGORY
# =============================================================================


class Category(BaseModel):
    """
    Модель категории с опциональной целевой долей (для ребалансировки).
    """

    name: str = Field(..., min_length=1, description="Имя категории")
    target_allocation_percentage: Decimal | None = Field(
        default=None, ge=0, le=100, description="Целевая доля (%, nullable)"
    )
    display_order: int = Field(default=0, description="Порядок отображения")

    model_config = {"frozen": True}

    @field_validator("target_allocation_percentage")
    @classmethod
    def validate_target_finite(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return v
        return validate_finite(v, "target_allocation_percentage")

    @property
    def normalized_name(self) -> str:
        return normalize_identity(self.name)

    @property
    def has_target(self) -> bool:
        return self.target_allocation_percentage is not None
