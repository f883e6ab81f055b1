"""Message template parsing and rendering against event properties."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from log_encoder.schemas.models import (
    DictionaryValue,
    PropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)


@dataclass(frozen=True)
class TextToken:
    text: str


@dataclass(frozen=True)
class PropertyToken:
    """A ``{Name,alignment:format}`` hole in a template."""

    name: str
    raw: str
    format: str | None = None
    alignment: int | None = None


Token = TextToken | PropertyToken


@dataclass(frozen=True)
class Rendering:
    """Result of applying one token's format specifier to its property."""

    name: str
    format: str
    text: str


def _parse_hole(raw: str) -> Token:
    body = raw[1:-1]
    # Capture hints only matter upstream.
    if body[:1] in {"@", "$"}:
        body = body[1:]

    fmt = None
    if ":" in body:
        body, fmt = body.split(":", 1)
        if not fmt:
            return TextToken(raw)

    alignment = None
    if "," in body:
        body, align_text = body.split(",", 1)
        try:
            alignment = int(align_text.strip())
        except ValueError:
            return TextToken(raw)

    name = body.strip()
    if not (name.isidentifier() or name.isdigit()):
        return TextToken(raw)
    return PropertyToken(name=name, raw=raw, format=fmt, alignment=alignment)


def _tokenize(text: str) -> tuple[Token, ...]:
    tokens: list[Token] = []
    buffer: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == "{" and text.startswith("{{", index):
            buffer.append("{")
            index += 2
            continue
        if char == "}" and text.startswith("}}", index):
            buffer.append("}")
            index += 2
            continue
        if char == "{":
            end = text.find("}", index + 1)
            nested = text.find("{", index + 1)
            if end == -1 or (nested != -1 and nested < end):
                buffer.append(char)
                index += 1
                continue
            token = _parse_hole(text[index : end + 1])
            if isinstance(token, TextToken):
                buffer.append(token.text)
            else:
                if buffer:
                    tokens.append(TextToken("".join(buffer)))
                    buffer = []
                tokens.append(token)
            index = end + 1
            continue
        buffer.append(char)
        index += 1
    if buffer:
        tokens.append(TextToken("".join(buffer)))
    return tuple(tokens)


def _render_value(value: PropertyValue, nested: bool = False) -> str:
    match value:
        case ScalarValue(value=None):
            return "null"
        case ScalarValue(value=str() as text):
            return json.dumps(text, ensure_ascii=False) if nested else text
        case ScalarValue(value=inner):
            return str(inner)
        case SequenceValue(items=items):
            return "[" + ", ".join(_render_value(item, True) for item in items) + "]"
        case StructureValue(members=members, type_tag=type_tag):
            body = ", ".join(f"{name}: {_render_value(member, True)}" for name, member in members)
            prefix = f"{type_tag} " if type_tag else ""
            return f"{prefix}{{ {body} }}" if body else f"{prefix}{{}}"
        case DictionaryValue(entries=entries):
            body = ", ".join(
                f"[{_render_value(key, True)}]: {_render_value(entry, True)}" for key, entry in entries
            )
            return "{" + body + "}"
    raise TypeError(f"Unsupported property value: {type(value).__name__}")


def _align(text: str, alignment: int | None) -> str:
    if alignment is None:
        return text
    if alignment < 0:
        return text.ljust(-alignment)
    return text.rjust(alignment)


@dataclass(frozen=True)
class MessageTemplate:
    text: str
    tokens: tuple[Token, ...]

    @classmethod
    def parse(cls, text: str) -> MessageTemplate:
        return _parse_cached(text)

    @property
    def property_tokens(self) -> tuple[PropertyToken, ...]:
        return tuple(token for token in self.tokens if isinstance(token, PropertyToken))

    def render_token(self, token: PropertyToken, properties: Mapping[str, PropertyValue]) -> tuple[str, bool]:
        """Render one hole; the flag reports whether its format was applied."""

        value = properties.get(token.name)
        if value is None:
            return token.raw, False

        applied = False
        if token.format is not None and isinstance(value, ScalarValue) and value.value is not None:
            try:
                text = format(value.value, token.format)
                applied = True
            except (ValueError, TypeError):
                text = _render_value(value)
        else:
            text = _render_value(value)
        return _align(text, token.alignment), applied

    def render(self, properties: Mapping[str, PropertyValue]) -> str:
        parts: list[str] = []
        for token in self.tokens:
            if isinstance(token, TextToken):
                parts.append(token.text)
            else:
                parts.append(self.render_token(token, properties)[0])
        return "".join(parts)

    def renderings(self, properties: Mapping[str, PropertyValue]) -> list[Rendering]:
        """Formatted renderings, one per distinct (property, format) pair, in template order."""

        seen: set[tuple[str, str]] = set()
        results: list[Rendering] = []
        for token in self.property_tokens:
            if token.format is None or (token.name, token.format) in seen:
                continue
            text, applied = self.render_token(token, properties)
            if not applied:
                continue
            seen.add((token.name, token.format))
            results.append(Rendering(name=token.name, format=token.format, text=text))
        return results


@lru_cache(maxsize=1024)
def _parse_cached(text: str) -> MessageTemplate:
    return MessageTemplate(text=text, tokens=_tokenize(text))
