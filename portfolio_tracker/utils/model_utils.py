import re
from dataclasses import MISSING, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar, get_type_hints

from portfolio_tracker.utils.type_utils import convert_type

# Generic type for any model class
T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel_case(name: str) -> str:
    """purchase_price -> purchasePrice"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_snake_case(name: str) -> str:
    """purchasePrice -> purchase_price"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _serialise_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_serialise_value(item) for item in value]
    return value


class ModelFactory:
    """Factory class to convert domain models to and from stored JSON objects"""

    @staticmethod
    def create_from_dict(model_class: type[T], data: dict[str, Any]) -> T:
        """
        Create a model instance from a camelCase (or snake_case) JSON object.

        Values are coerced to the annotated field types. Keys that don't match a
        field are ignored and missing keys fall back to the field default.

        Raises:
            ValueError: If a required field is missing or a value can't be converted
        """
        type_hints: dict[str, Any] = get_type_hints(model_class)
        normalised: dict[str, Any] = {to_snake_case(key): value for key, value in data.items()}
        init_args: dict[str, Any] = {}

        for field in fields(model_class):  # type: ignore[arg-type]
            if field.name not in normalised:
                if field.default is MISSING and field.default_factory is MISSING:
                    raise ValueError(
                        f"Missing required field '{field.name}' for {model_class.__name__}"
                    )
                continue
            init_args[field.name] = convert_type(normalised[field.name], type_hints[field.name])

        return model_class(**init_args)

    @staticmethod
    def create_list_from_dicts(model_class: type[T], items: list[dict[str, Any]]) -> list[T]:
        """Create a list of model instances from JSON objects"""
        return [ModelFactory.create_from_dict(model_class, item) for item in items]

    @staticmethod
    def to_dict(model: Any) -> dict[str, Any]:
        """Convert a dataclass instance to a camelCase, JSON-ready dict. None values are omitted."""
        if not is_dataclass(model):
            raise TypeError(f"Expected a dataclass instance, got {type(model).__name__}")

        result: dict[str, Any] = {}
        for field in fields(model):
            value = getattr(model, field.name)
            if value is None:
                continue
            result[to_camel_case(field.name)] = _serialise_value(value)
        return result
