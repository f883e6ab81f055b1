"""JSON literal writing with an optional pluggable serializer."""

from __future__ import annotations

import json
import math
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol, TextIO, runtime_checkable

from pydantic_core import to_json

from log_encoder.errors import EncodingError


@runtime_checkable
class LiteralSerializer(Protocol):
    """Strategy that turns an arbitrary value into compact JSON text."""

    def serialize_to_string(self, value: Any) -> str:
        """Return valid, compact JSON for ``value``."""


class PydanticLiteralSerializer:
    """Serialize values with pydantic-core; handles models, dataclasses, and temporals."""

    def __init__(self, fallback_to_str: bool = True) -> None:
        self._fallback = str if fallback_to_str else None

    def serialize_to_string(self, value: Any) -> str:
        return to_json(value, inf_nan_mode="strings", fallback=self._fallback).decode("utf-8")


def write_string(text: str, output: TextIO) -> None:
    """Write ``text`` as a JSON string literal."""

    output.write(json.dumps(text))


def _write_float(value: float, output: TextIO) -> None:
    if math.isnan(value):
        write_string("NaN", output)
    elif math.isinf(value):
        write_string("Infinity" if value > 0 else "-Infinity", output)
    else:
        output.write(repr(float(value)))


def _write_builtin(value: Any, output: TextIO) -> None:
    match value:
        case None:
            output.write("null")
        case Enum():
            write_string(value.name, output)
        case bool():
            output.write("true" if value else "false")
        case int():
            output.write(str(int(value)))
        case float():
            _write_float(value, output)
        case Decimal():
            if value.is_finite():
                output.write(str(value))
            else:
                write_string(str(value), output)
        case str():
            write_string(value, output)
        case datetime() | date() | time():
            write_string(value.isoformat(), output)
        case _:
            write_string(str(value), output)


def write_literal(value: Any, output: TextIO, serializer: LiteralSerializer | None = None) -> None:
    """Write one scalar as JSON, delegating to ``serializer`` when one is set."""

    if serializer is None:
        _write_builtin(value, output)
        return
    try:
        text = serializer.serialize_to_string(value)
    except Exception as error:
        raise EncodingError(f"Literal serializer failed for value of type {type(value).__name__}") from error
    output.write(text)
