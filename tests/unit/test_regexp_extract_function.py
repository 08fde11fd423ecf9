"""Tests for the regexp_extract function object."""

from __future__ import annotations

import pyarrow as pa
import pytest

from regexp_extract import ExtractConfig, RegexpExtractFunc, kernel
from regexp_extract.signature import ValueKind


def test_function_metadata() -> None:
    """The function exposes its name, arguments and volatility."""
    func = RegexpExtractFunc()
    assert func.name == "regexp_extract"
    assert func.aliases == ()
    assert func.volatility == "immutable"
    assert func.arg_names == ("str", "regexp", "group_index", "flags")
    assert func.arg_kinds[2] is ValueKind.INTEGER


def test_return_type_tracks_subject() -> None:
    """The declared return type follows the subject type."""
    func = RegexpExtractFunc()
    assert func.return_type([pa.large_string(), pa.string(), pa.int64()]) == pa.large_string()
    assert func.return_type([pa.string_view(), pa.string()]) == pa.string()


def test_invoke_with_array_arguments() -> None:
    """Array calls return an array with one entry per row."""
    func = RegexpExtractFunc(config=ExtractConfig(max_workers=1))
    result = func.invoke_with_args([pa.array(["a1", "b"]), r"(\d)"])
    assert isinstance(result, pa.Array)
    assert result.to_pylist() == ["1", None]


def test_invoke_with_scalar_arguments() -> None:
    """All-scalar calls return a scalar."""
    result = RegexpExtractFunc().invoke_with_args(["aBc", "(b|d)", 1, "i"])
    assert isinstance(result, pa.Scalar)
    assert result.as_py() == "B"


def test_invoke_with_number_rows() -> None:
    """A pinned row count broadcasts scalar calls."""
    result = RegexpExtractFunc().invoke_with_args(["abc", "(c)"], number_rows=2)
    assert result.to_pylist() == ["c", "c"]


def test_documentation_payload() -> None:
    """Documentation serializes to builtins with its examples."""
    payload = RegexpExtractFunc().documentation_payload()
    assert payload["name"] == "regexp_extract"
    assert payload["section"] == "Regular Expression Functions"
    assert "Köln" in payload["sql_example"]
    assert [argument["name"] for argument in payload["arguments"]] == [
        "str",
        "regexp",
        "group_index",
        "flags",
    ]


def test_invocation_reports_span_attributes(monkeypatch: pytest.MonkeyPatch) -> None:
    """Invocations report distinct pattern and worker counts on the span."""
    recorded: list[dict[str, object]] = []

    def _capture(_span: object, attrs: dict[str, object]) -> None:
        recorded.append(dict(attrs))

    monkeypatch.setattr(kernel, "set_span_attributes", _capture)
    RegexpExtractFunc(config=ExtractConfig(max_workers=1)).invoke_with_args(
        [pa.array(["a", "b"]), pa.array(["(a)", "(b)"])]
    )
    assert recorded == [{"regexp_extract.distinct_patterns": 2, "regexp_extract.workers": 1}]
