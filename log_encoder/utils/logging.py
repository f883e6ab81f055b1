"""Bridge stdlib logging records into the Elasticsearch JSON encoder."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime

from log_encoder.config.settings import EncoderSettings, get_settings
from log_encoder.formatting.encoder import ElasticsearchJsonEncoder
from log_encoder.schemas.capture import capture_properties
from log_encoder.schemas.models import LogEvent, LogLevel, PropertyValue, ScalarValue

_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}


def record_to_event(record: logging.LogRecord) -> LogEvent:
    """Convert a stdlib ``LogRecord`` into a ``LogEvent``."""

    properties: dict[str, PropertyValue] = {}
    if isinstance(record.args, Mapping):
        properties.update(capture_properties(record.args))
    elif record.args:
        properties.update(capture_properties(dict(enumerate(record.args))))

    extra = {
        name: value
        for name, value in vars(record).items()
        if name not in _RECORD_ATTRIBUTES and not name.startswith("_")
    }
    properties.update(capture_properties(extra))
    properties["SourceContext"] = ScalarValue(record.name)

    exception = None
    if record.exc_info and record.exc_info[1] is not None:
        exception = record.exc_info[1]

    return LogEvent(
        timestamp=datetime.fromtimestamp(record.created, tz=UTC),
        level=LogLevel.from_logging(record.levelno),
        message_template=str(record.msg),
        properties=properties,
        exception=exception,
        rendered_message=record.getMessage(),
    )


class ElasticsearchLogFormatter(logging.Formatter):
    """Format log records as Elasticsearch-ready JSON documents."""

    def __init__(self, encoder: ElasticsearchJsonEncoder | None = None) -> None:
        super().__init__()
        # Handlers append their own terminator.
        self._encoder = encoder or ElasticsearchJsonEncoder(closing_delimiter="")

    @property
    def encoder(self) -> ElasticsearchJsonEncoder:
        return self._encoder

    def format(self, record: logging.LogRecord) -> str:
        return self._encoder.format(record_to_event(record))


def configure_logging(settings: EncoderSettings | None = None) -> None:
    """Configure root logger with Elasticsearch JSON formatting."""

    settings = settings or get_settings()
    encoder = ElasticsearchJsonEncoder(settings.to_config(), closing_delimiter="")
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    handler = logging.StreamHandler()
    handler.setFormatter(ElasticsearchLogFormatter(encoder))
    root.handlers = [handler]
