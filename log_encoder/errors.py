"""Exception types raised by the encoder."""

from __future__ import annotations


class LogEncoderError(Exception):
    """Base class for encoder failures."""


class ConfigurationError(LogEncoderError, ValueError):
    """Invalid encoder configuration, raised at construction time."""


class EncodingError(LogEncoderError):
    """A value could not be encoded; the event should be treated as lost."""
