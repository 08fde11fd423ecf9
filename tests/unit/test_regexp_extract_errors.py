"""Tests for the regexp_extract error taxonomy."""

from __future__ import annotations

import pytest

from regexp_extract.errors import (
    ErrorKind,
    GroupIndexOutOfRangeError,
    InvalidPatternError,
    InvalidSignatureError,
    LengthMismatchError,
    RegexpExtractError,
    UnsupportedFlagError,
)


class TestErrorTaxonomy:
    """Each failure carries its kind and context."""

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (
                InvalidSignatureError(position=1, expected="string", actual="int64"),
                ErrorKind.SIGNATURE,
            ),
            (LengthMismatchError(expected=3, actual=5, position=2), ErrorKind.LENGTH),
            (InvalidPatternError("(", "missing )"), ErrorKind.PATTERN),
            (UnsupportedFlagError("x", "x"), ErrorKind.FLAG),
            (
                GroupIndexOutOfRangeError(group_index=4, group_count=1, pattern="(a)"),
                ErrorKind.GROUP_INDEX,
            ),
        ],
    )
    def test_kind_and_base_class(self, error: RegexpExtractError, kind: ErrorKind) -> None:
        """Every error is a ``ValueError`` tagged with its kind."""
        assert isinstance(error, RegexpExtractError)
        assert isinstance(error, ValueError)
        assert error.kind is kind

    def test_length_mismatch_message(self) -> None:
        """Length mismatches name both lengths."""
        error = LengthMismatchError(expected=3, actual=5, position=2)
        assert str(error) == "regexp_extract argument 2 has length 5, expected batch length 3."

    def test_group_index_message_names_valid_range(self) -> None:
        """Out-of-range group errors state the valid range."""
        error = GroupIndexOutOfRangeError(group_index=4, group_count=1, pattern="(a)")
        assert "valid range is [0, 1]" in str(error)

    def test_invalid_pattern_message_includes_diagnostic(self) -> None:
        """Pattern errors carry the compiler diagnostic."""
        error = InvalidPatternError("(", "missing ), unterminated subpattern")
        assert str(error).startswith("Unable to compile pattern '('")
        assert error.diagnostic in str(error)
