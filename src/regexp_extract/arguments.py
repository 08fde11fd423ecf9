"""Normalize scalar and array arguments into a uniform per-row view."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple, Protocol

import pyarrow as pa

from regexp_extract.errors import LengthMismatchError
from regexp_extract.readers import integer_reader, string_reader
from regexp_extract.signature import ExtractPlan, ResolvedArgument, ValueKind

DEFAULT_GROUP_INDEX = 1
DEFAULT_FLAGS = ""


class RowTuple(NamedTuple):
    """Logical arguments for one row, independent of column layout."""

    subject: str | None
    pattern: str | None
    group_index: int | None
    flags: str | None


class _RowSource[T](Protocol):
    def get(self, row: int) -> T | None: ...


class Broadcast[T]:
    """Expose one scalar value at every row without repeating it."""

    __slots__ = ("value",)

    def __init__(self, value: T | None) -> None:
        self.value = value

    def get(self, row: int) -> T | None:
        _ = row
        return self.value


def _source(argument: ResolvedArgument) -> _RowSource[object]:
    if isinstance(argument.value, pa.Scalar):
        return Broadcast(argument.value.as_py())
    if argument.spec.kind is ValueKind.INTEGER:
        return integer_reader(argument.value)
    return string_reader(argument.value)


def batch_length(plan: ExtractPlan, *, number_rows: int | None = None) -> int:
    """Return the common length of every array argument.

    Parameters
    ----------
    plan
        Resolved call plan.
    number_rows
        Batch length pinned by the caller, if any.

    Returns
    -------
    int
        Batch length. All-scalar calls without ``number_rows`` have length 1.

    Raises
    ------
    LengthMismatchError
        Raised when two array arguments, or an array and ``number_rows``,
        disagree.
    """
    expected = number_rows
    for argument in plan.array_arguments:
        actual = len(argument.value)
        if expected is None:
            expected = actual
            continue
        if actual != expected:
            position = argument.position if number_rows is None else None
            raise LengthMismatchError(
                expected=expected,
                actual=actual,
                position=position,
            )
    return 1 if expected is None else expected


@dataclass(frozen=True)
class MaterializedArguments:
    """Restartable per-row view over the call arguments."""

    num_rows: int
    subject: _RowSource[str]
    pattern: _RowSource[str]
    group_index: _RowSource[int]
    flags: _RowSource[str]

    def __len__(self) -> int:
        return self.num_rows

    def __iter__(self) -> Iterator[RowTuple]:
        return self.rows()

    def row(self, index: int) -> RowTuple:
        """Return the logical arguments for one row.

        Returns
        -------
        RowTuple
            Subject, pattern, group index and flags at ``index``.
        """
        return RowTuple(
            self.subject.get(index),
            self.pattern.get(index),
            self.group_index.get(index),
            self.flags.get(index),
        )

    def rows(self, start: int = 0, stop: int | None = None) -> Iterator[RowTuple]:
        """Yield row tuples for ``[start, stop)`` in row order.

        Yields
        ------
        RowTuple
            Logical arguments for each row.
        """
        end = self.num_rows if stop is None else min(stop, self.num_rows)
        for index in range(start, end):
            yield self.row(index)


def materialize_arguments(
    plan: ExtractPlan,
    *,
    number_rows: int | None = None,
) -> MaterializedArguments:
    """Build the per-row argument view for a resolved plan.

    Absent group indexes default to ``1`` and absent flags to ``""``.

    Returns
    -------
    MaterializedArguments
        Uniform per-row view of the arguments.
    """
    num_rows = batch_length(plan, number_rows=number_rows)
    group_index = plan.group_index
    flags = plan.flags
    return MaterializedArguments(
        num_rows=num_rows,
        subject=_source(plan.subject),
        pattern=_source(plan.pattern),
        group_index=(
            _source(group_index) if group_index is not None else Broadcast(DEFAULT_GROUP_INDEX)
        ),
        flags=_source(flags) if flags is not None else Broadcast(DEFAULT_FLAGS),
    )


__all__ = [
    "DEFAULT_FLAGS",
    "DEFAULT_GROUP_INDEX",
    "Broadcast",
    "MaterializedArguments",
    "RowTuple",
    "batch_length",
    "materialize_arguments",
]
