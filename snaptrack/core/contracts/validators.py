"""
JSON Schema контракты на границе snaptrack core

Схемы поставляются как package data (snaptrack/core/contracts/schema/*.json).
Имя контракта = имя файла без расширения = "title" внутри схемы:

    вход:  snapshot, snapshot_asset_value, cash_flow_operation, category, dataset
    выход: composite_view (JSON-дамп CompositeView для presentation-слоя)

Каждая схема проверяется против Draft 2020-12 meta-schema при первой
загрузке; скомпилированные валидаторы кэшируются на весь процесс.
"""

import json
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, List

import jsonschema
from jsonschema import Draft202012Validator

SCHEMA_SUFFIX = ".json"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """Каталог схем: по умолчанию package data, для тестов любой каталог."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or resources.files(__package__) / "schema"
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._compiled: Dict[str, Draft202012Validator] = {}

    @property
    def schema_dir(self):
        return self._schema_dir

    def schema_names(self) -> List[str]:
        """Имена всех контрактов в каталоге, по алфавиту."""
        return sorted(
            entry.name[: -len(SCHEMA_SUFFIX)]
            for entry in self._schema_dir.iterdir()
            if entry.name.endswith(SCHEMA_SUFFIX) and entry.is_file()
        )

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Схема контракта как dict (кэшируется).

        Raises:
            FileNotFoundError: нет файла <schema_name>.json
            ValueError: файл не является валидной Draft 2020-12 схемой, или
                его "title" не совпадает с именем контракта
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        entry = self._schema_dir / f"{schema_name}{SCHEMA_SUFFIX}"
        if not entry.is_file():
            raise FileNotFoundError(f"Schema not found: {entry}")

        schema = json.loads(entry.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {entry.name}: {e.message}") from e

        title = schema.get("title", schema_name)
        if title != schema_name:
            raise ValueError(f"Schema {entry.name} declares title {title!r}")

        self._schemas[schema_name] = schema
        return schema

    def validator_for(self, schema_name: str) -> Draft202012Validator:
        if schema_name not in self._compiled:
            self._compiled[schema_name] = Draft202012Validator(self.load_schema(schema_name))
        return self._compiled[schema_name]


# Схемы read-only: один загрузчик на процесс
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Валидатор одного контракта.

    Подклассы фиксируют контракт через атрибут класса schema_name;
    базовый класс можно использовать напрямую с явным именем.
    """

    schema_name: str = ""

    def __init__(self, schema_name: str | None = None, loader: SchemaLoader | None = None):
        if schema_name is not None:
            self.schema_name = schema_name
        if not self.schema_name:
            raise ValueError("schema_name is required")
        self.validator = (loader or _SCHEMA_LOADER).validator_for(self.schema_name)

    @property
    def schema(self) -> Dict[str, Any]:
        return self.validator.schema

    def validate(self, data: Dict[str, Any]) -> None:
        """Raises jsonschema.ValidationError на первом (лучшем) нарушении."""
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[jsonschema.ValidationError]:
        """Все нарушения сразу (для отчёта по dataset целиком)."""
        return self.validator.iter_errors(data)


class SnapshotValidator(ContractValidator):
    schema_name = "snapshot"


class SnapshotAssetValueValidator(ContractValidator):
    schema_name = "snapshot_asset_value"


class CashFlowOperationValidator(ContractValidator):
    schema_name = "cash_flow_operation"


class CategoryValidator(ContractValidator):
    schema_name = "category"


class DatasetValidator(ContractValidator):
    """Полная материализованная история от persistence-слоя."""

    schema_name = "dataset"


class CompositeViewValidator(ContractValidator):
    """Выход resolver'а: CompositeView.model_dump(mode="json")."""

    schema_name = "composite_view"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
# Все поднимают jsonschema.ValidationError при нарушении контракта.


def validate_snapshot(data: Dict[str, Any]) -> None:
    SnapshotValidator().validate(data)


def validate_snapshot_asset_value(data: Dict[str, Any]) -> None:
    SnapshotAssetValueValidator().validate(data)


def validate_cash_flow_operation(data: Dict[str, Any]) -> None:
    CashFlowOperationValidator().validate(data)


def validate_category(data: Dict[str, Any]) -> None:
    CategoryValidator().validate(data)


def validate_dataset(data: Dict[str, Any]) -> None:
    DatasetValidator().validate(data)


def validate_composite_view(data: Dict[str, Any]) -> None:
    CompositeViewValidator().validate(data)
