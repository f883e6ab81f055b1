"""Tests for capturing Python objects as property values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from log_encoder.schemas.capture import MAX_DEPTH, capture_properties, capture_value
from log_encoder.schemas.models import DictionaryValue, ScalarValue, SequenceValue, StructureValue


@dataclass
class _User:
    user_id: str
    roles: list[str]


class _Request(BaseModel):
    path: str
    status: int


def test_scalars_are_wrapped() -> None:
    moment = datetime(2024, 1, 1)
    assert capture_value("x") == ScalarValue("x")
    assert capture_value(None) == ScalarValue(None)
    assert capture_value(moment) == ScalarValue(moment)


def test_collections_become_sequences_and_dictionaries() -> None:
    assert capture_value([1, "a"]) == SequenceValue((ScalarValue(1), ScalarValue("a")))
    assert capture_value({"k.v": 2}) == DictionaryValue(((ScalarValue("k.v"), ScalarValue(2)),))


def test_dataclass_and_model_become_structures() -> None:
    user = capture_value(_User(user_id="42", roles=["admin"]))
    assert user == StructureValue(
        members=(("user_id", ScalarValue("42")), ("roles", SequenceValue((ScalarValue("admin"),)))),
        type_tag="_User",
    )
    request = capture_value(_Request(path="/", status=200))
    assert isinstance(request, StructureValue)
    assert request.type_tag == "_Request"
    assert dict(request.members)["status"] == ScalarValue(200)


def test_existing_property_values_pass_through() -> None:
    value = SequenceValue(())
    assert capture_value(value) is value


def test_depth_is_bounded() -> None:
    nested: list[object] = []
    current = nested
    for _ in range(MAX_DEPTH + 5):
        child: list[object] = []
        current.append(child)
        current = child
    value = capture_value(nested)
    for _ in range(MAX_DEPTH):
        assert isinstance(value, SequenceValue)
        value = value.items[0]
    assert isinstance(value, ScalarValue)


def test_capture_properties_stringifies_names() -> None:
    assert capture_properties({"a": 1}) == {"a": ScalarValue(1)}
