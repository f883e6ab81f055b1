"""Elasticsearch-friendly JSON encoding of structured log events."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, TextIO

from pydantic import ValidationError

from log_encoder.config.settings import EncoderConfig
from log_encoder.errors import ConfigurationError
from log_encoder.formatting.exceptions import innermost_message, to_error_record
from log_encoder.formatting.literals import LiteralSerializer, write_literal, write_string
from log_encoder.formatting.names import sanitize_key, sanitize_name
from log_encoder.formatting.templates import MessageTemplate, Rendering
from log_encoder.schemas.models import (
    DictionaryValue,
    ErrorRecord,
    LogEvent,
    PropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)

LOGGER = logging.getLogger(__name__)

TIMESTAMP_KEY = "@timestamp"
LEVEL_KEY = "level"
MESSAGE_TEMPLATE_KEY = "messageTemplate"
RENDERED_MESSAGE_KEY = "@message"
RENDERINGS_KEY = "renderings"
EXCEPTION_KEY = "exception"
EXCEPTION_MESSAGE_KEY = "@exceptionMessage"
INNER_ERROR_KEY = "innerError"
FIELDS_KEY = "fields"
TYPE_TAG_KEY = "_typeTag"


class _Members:
    """Delimiter state for the members of one JSON object being written."""

    def __init__(self, output: TextIO, leading: str = "") -> None:
        self.output = output
        self._delimiter = leading

    def key(self, name: str) -> None:
        self.output.write(self._delimiter)
        self._delimiter = ","
        write_string(name, self.output)
        self.output.write(":")


class ElasticsearchJsonEncoder:
    """Encode one ``LogEvent`` per call; holds only read-only configuration."""

    def __init__(
        self,
        config: EncoderConfig | None = None,
        serializer: LiteralSerializer | None = None,
        **options: Any,
    ) -> None:
        try:
            if config is None:
                config = EncoderConfig(**options)
            elif options:
                config = EncoderConfig(**{**config.model_dump(), **options})
        except ValidationError as error:
            raise ConfigurationError(f"Invalid encoder configuration: {error}") from error
        if serializer is not None and not isinstance(serializer, LiteralSerializer):
            raise ConfigurationError("serializer must provide serialize_to_string(value) -> str")

        self._config = config
        self._serializer = serializer
        self._omitted = frozenset(config.omitted_properties)
        self._flattened = config.flattened_property.casefold()
        LOGGER.debug(
            "Encoder configured",
            extra={
                "inline_fields": config.inline_fields,
                "omit_enclosing_object": config.omit_enclosing_object,
                "serializer": type(serializer).__name__ if serializer else None,
            },
        )

    @property
    def config(self) -> EncoderConfig:
        return self._config

    def format(self, event: LogEvent) -> str:
        """Return the encoded event as a string."""

        buffer = io.StringIO()
        self.encode(event, buffer)
        return buffer.getvalue()

    def encode(self, event: LogEvent, output: TextIO) -> None:
        """Write the encoded event to ``output``."""

        config = self._config
        if not config.omit_enclosing_object:
            output.write("{")
        members = _Members(output, "," if config.omit_enclosing_object else "")

        members.key(TIMESTAMP_KEY)
        write_string(event.timestamp.isoformat(), output)

        members.key(LEVEL_KEY)
        write_string(event.level.label, output)

        template = MessageTemplate.parse(event.message_template)
        if config.render_message_template:
            members.key(MESSAGE_TEMPLATE_KEY)
            write_string(template.text, output)

        if config.render_message:
            message = event.rendered_message
            if message is None:
                message = template.render(event.properties)
            members.key(RENDERED_MESSAGE_KEY)
            write_string(message, output)

        renderings = template.renderings(event.properties)
        if renderings:
            self._write_renderings(renderings, members)

        if event.exception is not None:
            self._write_exception(event.exception, members)

        if event.properties:
            self._write_properties(event.properties, members)

        if not config.omit_enclosing_object:
            output.write("}")
            output.write(config.closing_delimiter)

    def sanitize(self, name: str) -> str:
        return sanitize_name(name, self._config.forbidden_char, self._config.replacement_char)

    def _write_renderings(self, renderings: Iterable[Rendering], members: _Members) -> None:
        grouped: dict[str, list[Rendering]] = {}
        for rendering in renderings:
            grouped.setdefault(rendering.name, []).append(rendering)

        output = members.output
        members.key(RENDERINGS_KEY)
        output.write("{")
        inner = _Members(output)
        for name, items in grouped.items():
            inner.key(self.sanitize(name))
            output.write("[")
            for index, item in enumerate(items):
                if index:
                    output.write(",")
                output.write('{"Format":')
                write_string(item.format, output)
                output.write(',"Rendering":')
                write_string(item.text, output)
                output.write("}")
            output.write("]")
        output.write("}")

    def _write_exception(self, exception: BaseException, members: _Members) -> None:
        members.key(EXCEPTION_KEY)
        _write_error_record(to_error_record(exception), members.output)
        members.key(EXCEPTION_MESSAGE_KEY)
        write_string(innermost_message(exception), members.output)

    def _write_properties(self, properties: Mapping[str, PropertyValue], members: _Members) -> None:
        if self._config.inline_fields:
            for name, value in properties.items():
                self._write_property(name, value, members)
            return

        output = members.output
        members.key(FIELDS_KEY)
        output.write("{")
        inner = _Members(output)
        for name, value in properties.items():
            self._write_property(name, value, inner)
        output.write("}")

    def _write_property(self, name: str, value: PropertyValue, members: _Members) -> None:
        if name in self._omitted:
            return
        if isinstance(value, StructureValue) and name.casefold() == self._flattened:
            for member_name, member in value.members:
                members.key(self.sanitize(member_name))
                self._write_value(member, members.output)
            return
        members.key(self.sanitize(name))
        self._write_value(value, members.output)

    def _write_value(self, value: PropertyValue, output: TextIO) -> None:
        match value:
            case ScalarValue(value=literal):
                write_literal(literal, output, self._serializer)
            case SequenceValue(items=items):
                output.write("[")
                for index, item in enumerate(items):
                    if index:
                        output.write(",")
                    self._write_value(item, output)
                output.write("]")
            case StructureValue(members=struct_members, type_tag=type_tag):
                output.write("{")
                inner = _Members(output)
                for member_name, member in struct_members:
                    self._write_property(member_name, member, inner)
                if type_tag is not None and self._config.include_type_tag:
                    inner.key(TYPE_TAG_KEY)
                    write_string(type_tag, output)
                output.write("}")
            case DictionaryValue(entries=entries):
                output.write("{")
                inner = _Members(output)
                for key, entry in entries:
                    escaped = sanitize_key(key, self._config.forbidden_char, self._config.replacement_char)
                    inner.key(_key_text(escaped))
                    self._write_value(entry, output)
                output.write("}")
            case _:
                raise TypeError(f"Unsupported property value: {type(value).__name__}")


def _write_error_record(record: ErrorRecord, output: TextIO) -> None:
    """Write one object per chain level, nesting each cause under ``innerError``."""

    current: ErrorRecord | None = record
    while current is not None:
        output.write("{")
        members = _Members(output)
        fields = current.model_dump(by_alias=True, exclude_none=True, exclude={"inner_error"})
        for key, value in fields.items():
            members.key(key)
            output.write(json.dumps(value))
        current = current.inner_error
        if current is not None:
            members.key(INNER_ERROR_KEY)
    output.write("}" * (record.depth + 1))


def _key_text(key: ScalarValue) -> str:
    match key.value:
        case str() as text:
            return text
        case None:
            return "null"
        case bool() as flag:
            return "true" if flag else "false"
        case other:
            return str(other)
