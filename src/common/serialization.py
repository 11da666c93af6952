"""Serialization utilities."""

from dataclasses import asdict
from datetime import datetime
from enum import Enum


def _serialize_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def serialize_dataclass(obj) -> dict:
    """Serialize a dataclass to dict, converting datetimes to ISO strings and enums to values."""
    data = asdict(obj)
    for key, value in data.items():
        if isinstance(value, dict):
            for k, v in value.items():
                value[k] = _serialize_value(v)
        else:
            data[key] = _serialize_value(value)
    return data
