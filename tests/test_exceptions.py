"""Tests for exception chain serialization."""

from __future__ import annotations

import pytest

from log_encoder.formatting.exceptions import innermost_message, iter_chain, to_error_record


class _Repository:
    def load(self) -> None:
        raise KeyError("missing row")


def _raise_chain(messages: list[str]) -> BaseException:
    """Raise a chain where messages[0] is outermost, messages[-1] innermost."""

    def _raise(depth: int) -> None:
        if depth == len(messages) - 1:
            raise RuntimeError(messages[depth])
        try:
            _raise(depth + 1)
        except RuntimeError as error:
            raise RuntimeError(messages[depth]) from error

    try:
        _raise(0)
    except RuntimeError as error:
        return error
    raise AssertionError("unreachable")


def test_chain_of_two_nests_once() -> None:
    error = _raise_chain(["outer", "inner"])
    record = to_error_record(error)
    assert record.message == "outer"
    assert record.inner_error is not None
    assert record.inner_error.message == "inner"
    assert record.inner_error.inner_error is None
    assert innermost_message(error) == "inner"


@pytest.mark.parametrize("length", [1, 3, 6])
def test_depth_tracks_chain_length(length: int) -> None:
    messages = [f"level-{index}" for index in range(length)]
    error = _raise_chain(messages)
    record = to_error_record(error)
    assert record.depth == length - 1
    assert innermost_message(error) == messages[-1]


def test_implicit_context_is_followed_unless_suppressed() -> None:
    try:
        try:
            raise ValueError("first")
        except ValueError:
            raise TypeError("second")
    except TypeError as error:
        implicit = error
    assert innermost_message(implicit) == "first"

    try:
        try:
            raise ValueError("first")
        except ValueError:
            raise TypeError("second") from None
    except TypeError as error:
        suppressed = error
    assert innermost_message(suppressed) == "second"
    assert to_error_record(suppressed).inner_error is None


def test_fault_site_comes_from_innermost_frame() -> None:
    try:
        _Repository().load()
    except KeyError as error:
        record = to_error_record(error)
    assert record.exception_type == "KeyError"
    assert record.target_site_name == "load"
    assert record.declaring_type_name == "_Repository"
    assert record.module_name == __name__
    assert record.stack_trace is not None
    assert "raise KeyError" in record.stack_trace


def test_unraised_exception_has_no_fault_site() -> None:
    record = to_error_record(ValueError("never raised"))
    assert record.module_name is None
    assert record.declaring_type_name is None
    assert record.target_site_name is None
    assert record.stack_trace is None
    assert "moduleName" not in record.model_dump(by_alias=True, exclude_none=True)


def test_data_collects_attributes_and_notes() -> None:
    error = ValueError("bad input")
    error.request_id = 17  # type: ignore[attr-defined]
    error.tenant = None  # type: ignore[attr-defined]
    error._private = "hidden"  # type: ignore[attr-defined]
    error.add_note("retry later")
    record = to_error_record(error)
    assert [(entry.key, entry.value) for entry in record.data] == [
        ("request_id", "17"),
        ("note", "retry later"),
    ]


def test_cycle_in_context_terminates() -> None:
    first = ValueError("a")
    second = ValueError("b")
    first.__context__ = second
    second.__context__ = first
    assert [str(item) for item in iter_chain(first)] == ["a", "b"]
    assert to_error_record(first).depth == 1


def test_text_dump_indents_inner_errors() -> None:
    text = str(to_error_record(_raise_chain(["outer", "inner"])))
    assert "ExceptionType: RuntimeError" in text
    assert "\tMessage: inner" in text


def test_long_chain_builds_without_recursion() -> None:
    errors = [OSError(f"step {index}") for index in range(1200)]
    for outer, inner in zip(errors, errors[1:]):
        outer.__cause__ = inner
    record = to_error_record(errors[0])
    assert record.depth == 1199
    assert innermost_message(errors[0]) == "step 1199"
    assert str(record).count("InnerError:") == 1199
