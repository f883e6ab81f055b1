"""Field-name escaping for document stores that reserve ``.`` in field paths."""

from __future__ import annotations

from typing import overload

from log_encoder.schemas.models import ScalarValue

DEFAULT_FORBIDDEN_CHAR = "."
DEFAULT_REPLACEMENT_CHAR = "/"


@overload
def sanitize_name(name: str, forbidden: str = ..., replacement: str = ...) -> str: ...


@overload
def sanitize_name(name: None, forbidden: str = ..., replacement: str = ...) -> None: ...


def sanitize_name(
    name: str | None,
    forbidden: str = DEFAULT_FORBIDDEN_CHAR,
    replacement: str = DEFAULT_REPLACEMENT_CHAR,
) -> str | None:
    """Replace every forbidden character in ``name``; ``None`` stays ``None``."""

    if name is None:
        return None
    return name.replace(forbidden, replacement)


def sanitize_key(
    key: ScalarValue,
    forbidden: str = DEFAULT_FORBIDDEN_CHAR,
    replacement: str = DEFAULT_REPLACEMENT_CHAR,
) -> ScalarValue:
    """Escape a dictionary key when it holds a string; other keys pass through."""

    if isinstance(key.value, str):
        return ScalarValue(sanitize_name(key.value, forbidden, replacement))
    return key
