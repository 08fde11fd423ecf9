"""Tests for argument materialization."""

from __future__ import annotations

import pyarrow as pa
import pytest

from regexp_extract.arguments import RowTuple, batch_length, materialize_arguments
from regexp_extract.errors import ErrorKind, LengthMismatchError
from regexp_extract.signature import resolve_signature


def test_scalars_broadcast_to_batch_length() -> None:
    """Scalar arguments repeat on every row."""
    plan = resolve_signature([pa.array(["a", "b", None]), "(x)", 2, "i"])
    arguments = materialize_arguments(plan)
    assert len(arguments) == 3
    assert list(arguments) == [
        RowTuple("a", "(x)", 2, "i"),
        RowTuple("b", "(x)", 2, "i"),
        RowTuple(None, "(x)", 2, "i"),
    ]


def test_defaults_fill_missing_arguments() -> None:
    """Missing group index and flags default to 1 and empty flags."""
    plan = resolve_signature([pa.array(["a"]), "(a)"])
    arguments = materialize_arguments(plan)
    assert arguments.row(0) == RowTuple("a", "(a)", 1, "")


def test_array_arguments_vary_per_row() -> None:
    """Array arguments yield their own value at each row."""
    plan = resolve_signature(
        [
            pa.array(["a", "b"]),
            pa.array(["(a)", "(b)"]),
            pa.array([0, None], type=pa.int8()),
        ]
    )
    arguments = materialize_arguments(plan)
    assert arguments.row(1) == RowTuple("b", "(b)", None, "")


def test_rows_is_restartable_and_bounded() -> None:
    """Row iteration can restart and respects range bounds."""
    plan = resolve_signature([pa.array(["a", "b", "c", "d"]), "(a)"])
    arguments = materialize_arguments(plan)
    assert [row.subject for row in arguments.rows(1, 3)] == ["b", "c"]
    assert [row.subject for row in arguments.rows(2, 10)] == ["c", "d"]
    assert list(arguments) == list(arguments)


def test_all_scalar_batch_has_one_row() -> None:
    """All-scalar calls materialize to a single row."""
    plan = resolve_signature(["abc", "(a)"])
    assert batch_length(plan) == 1
    assert batch_length(plan, number_rows=4) == 4


def test_length_mismatch_reports_position() -> None:
    """Disagreeing array lengths name the offending argument."""
    plan = resolve_signature([pa.array(["a", "b", "c"]), pa.array(["(a)"] * 5)])
    with pytest.raises(LengthMismatchError, match="argument 2") as excinfo:
        materialize_arguments(plan)
    assert excinfo.value.kind is ErrorKind.LENGTH
    assert (excinfo.value.expected, excinfo.value.actual) == (3, 5)


def test_number_rows_pins_batch_length() -> None:
    """A pinned batch length must agree with every array argument."""
    plan = resolve_signature([pa.array(["a", "b"]), "(a)"])
    assert batch_length(plan, number_rows=2) == 2
    with pytest.raises(LengthMismatchError, match="number_rows"):
        batch_length(plan, number_rows=5)


def test_chunked_subject_materializes() -> None:
    """Chunked subjects read across chunk boundaries."""
    subject = pa.chunked_array([["a"], ["b", "c"]])
    arguments = materialize_arguments(resolve_signature([subject, "(a)"]))
    assert [row.subject for row in arguments] == ["a", "b", "c"]
