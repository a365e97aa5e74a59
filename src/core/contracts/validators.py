"""
JSON Schema контракты движка rollup-агрегации

Схемы поставляются внутри пакета (src/core/contracts/schema/*.json) и
читаются через importlib.resources, поэтому работают и из checkout, и из
обычной (не editable) установки.

Схемы:
- line_item_change.json — изменение строки заказа в batch
- order_rollup.json — снапшот производных полей заказа

Загрузчик создаётся лениво при первом обращении; импорт модуля не читает файлы.
"""

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Iterator, Tuple

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

# Пакет, внутри которого лежит каталог schema/
SCHEMA_PACKAGE = "src.core.contracts"
SCHEMA_DIR = "schema"

LINE_ITEM_CHANGE_SCHEMA = "line_item_change"
ORDER_ROLLUP_SCHEMA = "order_rollup"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema из ресурсов пакета.

    Каждая схема читается один раз, проходит meta-validation и кэшируется.
    """

    def __init__(self, package: str = SCHEMA_PACKAGE, directory: str = SCHEMA_DIR):
        self._root = resources.files(package).joinpath(directory)
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def available(self) -> Tuple[str, ...]:
        """Имена схем, поставленных с пакетом (без расширения)."""
        return tuple(
            sorted(
                entry.name[: -len(".json")]
                for entry in self._root.iterdir()
                if entry.name.endswith(".json")
            )
        )

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка схемы по имени.

        Args:
            schema_name: Имя схемы без расширения (например, 'order_rollup')

        Returns:
            Схема как dict

        Raises:
            FileNotFoundError: Если схема не поставлена с пакетом
            ValueError: Если файл не является корректной Draft 2020-12 схемой
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        resource = self._root.joinpath(f"{schema_name}.json")
        if not resource.is_file():
            raise FileNotFoundError(f"Schema not found: {SCHEMA_DIR}/{schema_name}.json")

        schema = json.loads(resource.read_text(encoding="utf-8"))

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}")

        self._schemas[schema_name] = schema
        return schema


@lru_cache(maxsize=None)
def get_schema_loader() -> SchemaLoader:
    """Общий загрузчик схем (создаётся при первом вызове)."""
    return SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Валидатор данных против одной схемы.

    Экземпляр держит скомпилированный Draft202012Validator и может
    переиспользоваться (в том числе из нескольких потоков: только чтение).
    """

    schema_name: str = ""

    def __init__(self, schema_name: str = "", loader: SchemaLoader = None):
        self.schema_name = schema_name or self.schema_name
        if not self.schema_name:
            raise ValueError("schema_name is required")

        loader = loader or get_schema_loader()
        self.schema = loader.load_schema(self.schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)


class LineItemChangeValidator(ContractValidator):
    """Валидатор изменения строки (LineItemChange.model_dump(mode="json"))."""

    schema_name = LINE_ITEM_CHANGE_SCHEMA


class OrderRollupValidator(ContractValidator):
    """Валидатор снапшота заказа (OrderRollup.model_dump(mode="json"))."""

    schema_name = ORDER_ROLLUP_SCHEMA


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


@lru_cache(maxsize=None)
def _shared_validator(schema_name: str) -> ContractValidator:
    return ContractValidator(schema_name)


def validate_line_item_change(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если изменение строки нарушает контракт
    """
    _shared_validator(LINE_ITEM_CHANGE_SCHEMA).validate(data)


def validate_order_rollup(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если снапшот заказа нарушает контракт
    """
    _shared_validator(ORDER_ROLLUP_SCHEMA).validate(data)
