"""Encoder configuration and settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from log_encoder.errors import ConfigurationError


class EncoderConfig(BaseModel):
    """Options fixed at encoder construction."""

    model_config = ConfigDict(frozen=True)

    omit_enclosing_object: bool = False
    closing_delimiter: str = "\n"
    render_message: bool = True
    render_message_template: bool = True
    inline_fields: bool = False
    include_type_tag: bool = True

    forbidden_char: str = Field(default=".", min_length=1, max_length=1)
    replacement_char: str = Field(default="/", min_length=1, max_length=1)

    omitted_properties: tuple[str, ...] = ("SourceContext", "EventId")
    flattened_property: str = Field(default="HttpContext", min_length=1)

    @field_validator("replacement_char")
    @classmethod
    def check_replacement_char(cls, value: str) -> str:
        if not value.isprintable() or value in {'"', "\\"}:
            raise ValueError("replacement_char must be a printable, non-quoting character")
        return value

    @model_validator(mode="after")
    def check_chars_differ(self) -> EncoderConfig:
        if self.forbidden_char == self.replacement_char:
            raise ValueError("forbidden_char and replacement_char must differ")
        return self


class EncoderSettings(BaseSettings):
    """Runtime settings for the encoder and the logging bridge."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_ENCODER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    omit_enclosing_object: bool = False
    inline_fields: bool = False
    render_message: bool = True
    render_message_template: bool = True
    include_type_tag: bool = True
    forbidden_char: str = "."
    replacement_char: str = "/"

    def to_config(self) -> EncoderConfig:
        """Build the frozen encoder config from these settings."""

        try:
            return EncoderConfig(
                omit_enclosing_object=self.omit_enclosing_object,
                inline_fields=self.inline_fields,
                render_message=self.render_message,
                render_message_template=self.render_message_template,
                include_type_tag=self.include_type_tag,
                forbidden_char=self.forbidden_char,
                replacement_char=self.replacement_char,
            )
        except ValidationError as error:
            raise ConfigurationError(f"Invalid LOG_ENCODER_* settings: {error}") from error


def get_settings() -> EncoderSettings:
    """Return encoder settings."""

    return EncoderSettings()
