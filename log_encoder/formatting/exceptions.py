"""Convert exception cause chains into nested error records."""

from __future__ import annotations

import traceback
from collections.abc import Iterator
from types import TracebackType

from log_encoder.schemas.models import DataEntry, ErrorRecord


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def iter_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and then each cause, outermost first."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = _cause_of(current)


def _innermost_frame(tb: TracebackType | None) -> TracebackType | None:
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb


def _declaring_type(qualname: str) -> str | None:
    parts = qualname.split(".")
    if len(parts) < 2 or parts[-2] == "<locals>":
        return None
    return parts[-2]


def _data_entries(exc: BaseException) -> list[DataEntry]:
    entries = [
        DataEntry(key=str(key), value=str(value))
        for key, value in vars(exc).items()
        if not str(key).startswith("_") and value is not None
    ]
    for note in getattr(exc, "__notes__", None) or ():
        entries.append(DataEntry(key="note", value=str(note)))
    return entries


def _single_record(exc: BaseException, inner: ErrorRecord | None) -> ErrorRecord:
    module_name = declaring_type_name = target_site_name = None
    frame = _innermost_frame(exc.__traceback__)
    if frame is not None:
        code = frame.tb_frame.f_code
        module_name = frame.tb_frame.f_globals.get("__name__")
        declaring_type_name = _declaring_type(getattr(code, "co_qualname", code.co_name))
        target_site_name = code.co_name

    stack_trace = None
    if exc.__traceback__ is not None:
        stack_trace = "".join(traceback.format_tb(exc.__traceback__))

    return ErrorRecord(
        exception_type=type(exc).__name__,
        module_name=module_name,
        declaring_type_name=declaring_type_name,
        target_site_name=target_site_name,
        message=str(exc),
        stack_trace=stack_trace,
        data=_data_entries(exc),
        inner_error=inner,
    )


def to_error_record(exc: BaseException) -> ErrorRecord:
    """Build the error record tree; one ``inner_error`` level per cause."""

    *outer, innermost = iter_chain(exc)
    record = _single_record(innermost, None)
    for link in reversed(outer):
        record = _single_record(link, record)
    return record


def innermost_message(exc: BaseException) -> str:
    """Return the message of the last exception in the cause chain."""

    *_, last = iter_chain(exc)
    return str(last)
