"""Typed failures raised by the regexp_extract kernel."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categorize kernel errors by the stage that detected them."""

    SIGNATURE = "signature"
    LENGTH = "length"
    PATTERN = "pattern"
    FLAG = "flag"
    GROUP_INDEX = "group_index"


class RegexpExtractError(ValueError):
    """Base exception for regexp_extract invocation failures."""

    kind: ErrorKind

    def __init__(self, message: str, *, kind: ErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


class InvalidSignatureError(RegexpExtractError):
    """Argument count or argument kind does not fit the function signature."""

    def __init__(self, *, position: int | None, expected: str, actual: str) -> None:
        if position is None:
            msg = f"regexp_extract expects {expected}, got {actual}."
        else:
            msg = f"regexp_extract argument {position} expects {expected}, got {actual}."
        super().__init__(msg, kind=ErrorKind.SIGNATURE)
        self.position = position
        self.expected = expected
        self.actual = actual


class LengthMismatchError(RegexpExtractError):
    """Two array arguments disagree on the batch length."""

    def __init__(self, *, expected: int, actual: int, position: int | None) -> None:
        where = "number_rows" if position is None else f"argument {position}"
        msg = f"regexp_extract {where} has length {actual}, expected batch length {expected}."
        super().__init__(msg, kind=ErrorKind.LENGTH)
        self.expected = expected
        self.actual = actual
        self.position = position


class InvalidPatternError(RegexpExtractError):
    """Pattern text could not be compiled."""

    def __init__(self, pattern: str, diagnostic: str) -> None:
        msg = f"Unable to compile pattern {pattern!r} into regex: {diagnostic}"
        super().__init__(msg, kind=ErrorKind.PATTERN)
        self.pattern = pattern
        self.diagnostic = diagnostic


class UnsupportedFlagError(RegexpExtractError):
    """Flags text contains a character outside the supported set."""

    def __init__(self, flags: str, flag: str) -> None:
        msg = f"Unsupported regexp_extract flag {flag!r} in {flags!r}."
        super().__init__(msg, kind=ErrorKind.FLAG)
        self.flags = flags
        self.flag = flag
        self.diagnostic = "supported flags are 'i', 'm' and 's'"


class GroupIndexOutOfRangeError(RegexpExtractError):
    """Requested capture group does not exist in the pattern."""

    def __init__(self, *, group_index: int, group_count: int, pattern: str) -> None:
        msg = (
            f"Group index {group_index} is out of range for pattern {pattern!r} "
            f"with {group_count} capture group(s); valid range is [0, {group_count}]."
        )
        super().__init__(msg, kind=ErrorKind.GROUP_INDEX)
        self.group_index = group_index
        self.group_count = group_count
        self.pattern = pattern


__all__ = [
    "ErrorKind",
    "GroupIndexOutOfRangeError",
    "InvalidPatternError",
    "InvalidSignatureError",
    "LengthMismatchError",
    "RegexpExtractError",
    "UnsupportedFlagError",
]
