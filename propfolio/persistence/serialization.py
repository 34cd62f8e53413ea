"""Shared (de)serialization utilities for persistence backends."""

import types
from dataclasses import asdict, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

from propfolio.models import Property

T = TypeVar("T")


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value):
        return dataclass_to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def from_dict(cls: type[T], data: dict[str, Any]) -> T:
    """Rebuild a (possibly nested) dataclass from its serialized dict.

    Keys missing from ``data`` fall back to the field defaults; keys the
    dataclass does not declare are ignored so older records still load.
    """
    hints = get_type_hints(cls)
    kwargs = {}
    for f in fields(cls):  # type: ignore[arg-type]
        if f.name in data:
            kwargs[f.name] = deserialize_value(hints[f.name], data[f.name])
    return cls(**kwargs)


def deserialize_value(hint: Any, value: Any) -> Any:
    """Convert a JSON value back to the Python type named by ``hint``."""
    if value is None:
        return None

    origin = get_origin(hint)
    if origin in (Union, types.UnionType):
        # Only Optional[X] unions appear in the models
        inner = [arg for arg in get_args(hint) if arg is not type(None)]
        return deserialize_value(inner[0], value)
    if origin is list:
        (item_hint,) = get_args(hint)
        return [deserialize_value(item_hint, item) for item in value]

    if is_dataclass(hint):
        return from_dict(hint, value)
    if hint is Decimal:
        return Decimal(str(value))
    if hint is datetime:
        return datetime.fromisoformat(value) if isinstance(value, str) else value
    if hint is date:
        return date.fromisoformat(value) if isinstance(value, str) else value
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)
    return value


def property_to_dict(prop: Property) -> dict:
    """Serialize a property with all child collections."""
    return dataclass_to_dict(prop)


def property_from_dict(data: dict[str, Any]) -> Property:
    """Deserialize a property written by :func:`property_to_dict`."""
    return from_dict(Property, data)
