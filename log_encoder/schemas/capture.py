"""Capture arbitrary Python objects as property values."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from log_encoder.schemas.models import (
    DictionaryValue,
    PropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)

MAX_DEPTH = 10

_SCALAR_TYPES = (str, bool, int, float, Decimal, datetime, date, time, timedelta, UUID, Enum, bytes)


def _is_scalar_key(key: Any) -> bool:
    return key is None or isinstance(key, _SCALAR_TYPES)


def capture_value(obj: Any, depth: int = 0) -> PropertyValue:
    """Convert ``obj`` into the closed property value variant."""

    if isinstance(obj, ScalarValue | SequenceValue | StructureValue | DictionaryValue):
        return obj
    if obj is None or isinstance(obj, _SCALAR_TYPES):
        return ScalarValue(obj)
    if depth >= MAX_DEPTH:
        return ScalarValue(str(obj))

    if isinstance(obj, Mapping) and all(_is_scalar_key(key) for key in obj):
        return DictionaryValue(
            entries=tuple((ScalarValue(key), capture_value(value, depth + 1)) for key, value in obj.items()),
        )
    if isinstance(obj, list | tuple | set | frozenset):
        return SequenceValue(items=tuple(capture_value(item, depth + 1) for item in obj))
    if isinstance(obj, BaseModel):
        return StructureValue(
            members=tuple(
                (name, capture_value(getattr(obj, name), depth + 1)) for name in type(obj).model_fields
            ),
            type_tag=type(obj).__name__,
        )
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return StructureValue(
            members=tuple(
                (item.name, capture_value(getattr(obj, item.name), depth + 1)) for item in dataclasses.fields(obj)
            ),
            type_tag=type(obj).__name__,
        )
    return ScalarValue(obj)


def capture_properties(values: Mapping[Any, Any]) -> dict[str, PropertyValue]:
    """Capture every value of a name → object mapping."""

    return {str(name): capture_value(value) for name, value in values.items()}
