"""Vectorized regular-expression capture-group extraction over Arrow columns."""

from __future__ import annotations

from regexp_extract.config import ExtractConfig, config_from_env
from regexp_extract.errors import (
    ErrorKind,
    GroupIndexOutOfRangeError,
    InvalidPatternError,
    InvalidSignatureError,
    LengthMismatchError,
    RegexpExtractError,
    UnsupportedFlagError,
)
from regexp_extract.function import RegexpExtractFunc
from regexp_extract.kernel import invoke, regexp_extract
from regexp_extract.pattern_cache import shared_pattern_cache

__all__ = [
    "ErrorKind",
    "ExtractConfig",
    "GroupIndexOutOfRangeError",
    "InvalidPatternError",
    "InvalidSignatureError",
    "LengthMismatchError",
    "RegexpExtractError",
    "RegexpExtractFunc",
    "UnsupportedFlagError",
    "config_from_env",
    "invoke",
    "regexp_extract",
    "shared_pattern_cache",
]
