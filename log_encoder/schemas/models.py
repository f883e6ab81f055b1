"""Log event, property value, and error record models."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum
from types import MappingProxyType
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(IntEnum):
    """Ordered event severity; written by name, never by rank."""

    VERBOSE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_logging(cls, levelno: int) -> LogLevel:
        """Map a stdlib logging level number onto the event level scale."""

        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFORMATION
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.VERBOSE


@dataclass(frozen=True)
class ScalarValue:
    """A single literal: string, number, bool, None, temporal, or opaque object."""

    value: Any


@dataclass(frozen=True)
class SequenceValue:
    items: tuple[PropertyValue, ...] = ()


@dataclass(frozen=True)
class StructureValue:
    """Named members of an object; ``type_tag`` is informational."""

    members: tuple[tuple[str, PropertyValue], ...] = ()
    type_tag: str | None = None


@dataclass(frozen=True)
class DictionaryValue:
    entries: tuple[tuple[ScalarValue, PropertyValue], ...] = ()


PropertyValue: TypeAlias = ScalarValue | SequenceValue | StructureValue | DictionaryValue


def _freeze(properties: Mapping[str, PropertyValue]) -> Mapping[str, PropertyValue]:
    return MappingProxyType(dict(properties))


@dataclass(frozen=True)
class LogEvent:
    """One structured event, consumed read-only by the encoder."""

    timestamp: datetime
    level: LogLevel
    message_template: str
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    exception: BaseException | None = None
    rendered_message: str | None = None

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=UTC))
        object.__setattr__(self, "properties", _freeze(self.properties))


class DataEntry(BaseModel):
    """One stringified key/value pair attached to an exception."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class ErrorRecord(BaseModel):
    """Store-friendly representation of one exception in a cause chain."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    exception_type: str = Field(alias="exceptionType")
    module_name: str | None = Field(default=None, alias="moduleName")
    declaring_type_name: str | None = Field(default=None, alias="declaringTypeName")
    target_site_name: str | None = Field(default=None, alias="targetSiteName")
    message: str = Field(alias="message")
    stack_trace: str | None = Field(default=None, alias="stackTrace")
    data: list[DataEntry] = Field(default_factory=list, alias="data")
    inner_error: ErrorRecord | None = Field(default=None, alias="innerError")

    @property
    def depth(self) -> int:
        """Number of nested ``innerError`` levels below this record."""

        count = 0
        current = self.inner_error
        while current is not None:
            count += 1
            current = current.inner_error
        return count

    def __str__(self) -> str:
        lines: list[str] = []
        record: ErrorRecord | None = self
        prefix = ""
        while record is not None:
            lines.append(f"{prefix}ExceptionType: {record.exception_type}")
            lines.append(f"{prefix}Message: {record.message}")
            lines.append(f"{prefix}ModuleName: {record.module_name or ''}")
            lines.append(f"{prefix}DeclaringTypeName: {record.declaring_type_name or ''}")
            lines.append(f"{prefix}TargetSiteName: {record.target_site_name or ''}")
            for entry in record.data:
                lines.append(f"{prefix}Data-{entry.key}: {entry.value}")
            lines.append(f"{prefix}StackTrace: {record.stack_trace or ''}")
            record = record.inner_error
            if record is not None:
                lines.append(f"{prefix}InnerError:")
                prefix += "\t"
        return "\n".join(lines)
