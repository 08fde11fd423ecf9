"""Tests for compiled-pattern caching."""

from __future__ import annotations

import re

import pyarrow as pa
import pytest

from regexp_extract import ExtractConfig, regexp_extract
from regexp_extract.arguments import materialize_arguments
from regexp_extract.errors import InvalidPatternError, UnsupportedFlagError
from regexp_extract.extractor import prepare_patterns
from regexp_extract.pattern_cache import (
    PatternCache,
    PatternKey,
    SharedPatternCache,
    compile_pattern,
    parse_flags,
)
from regexp_extract.signature import resolve_signature

_SHARED_SIZE = 2


def _prepared(args: list[object]) -> PatternCache:
    plan = resolve_signature(args)
    cache = PatternCache()
    prepare_patterns(plan, materialize_arguments(plan), cache)
    return cache


def test_parse_flags_combines_bits() -> None:
    """Flag characters map onto ``re`` flag bits."""
    assert parse_flags("") == re.RegexFlag(0)
    assert parse_flags("is") == re.IGNORECASE | re.DOTALL
    assert parse_flags("mm") == re.MULTILINE


def test_parse_flags_rejects_unknown_character() -> None:
    """Unknown flag characters raise with the offending flag."""
    with pytest.raises(UnsupportedFlagError, match="'x'"):
        parse_flags("ix")


def test_compile_pattern_wraps_regex_errors() -> None:
    """Malformed patterns raise with the engine diagnostic chained."""
    with pytest.raises(InvalidPatternError) as excinfo:
        compile_pattern("[")
    assert isinstance(excinfo.value.__cause__, re.error)
    assert excinfo.value.diagnostic


def test_compile_pattern_reports_group_count() -> None:
    """Compiled patterns expose their capture group count."""
    compiled = compile_pattern("(a)(?:b)(c)", "i")
    assert compiled.group_count == 2
    assert compiled.key == PatternKey("(a)(?:b)(c)", "i")


def test_repeated_pattern_compiles_once() -> None:
    """A pattern repeated across rows is compiled a single time."""
    cache = _prepared([pa.array(["a", "b", "c"]), pa.array(["(a)", "(a)", "(a)"])])
    assert len(cache) == 1
    assert cache.compilations == 1


def test_distinct_flags_form_distinct_keys() -> None:
    """The same pattern under different flags compiles separately."""
    cache = _prepared([pa.array(["a", "b"]), "(a)", 1, pa.array(["", "i"])])
    assert len(cache) == 2
    assert PatternKey("(a)", "i") in cache


def test_null_pattern_rows_are_skipped() -> None:
    """Rows with a null pattern or flags contribute no key."""
    cache = _prepared(
        [
            pa.array(["a", "b"]),
            pa.array(["(a)", None], type=pa.string()),
            1,
            pa.array([None, ""], type=pa.string()),
        ]
    )
    assert len(cache) == 0


def test_frozen_cache_refuses_new_keys() -> None:
    """A frozen cache serves known keys and rejects new ones."""
    cache = PatternCache()
    compiled = cache.get_or_compile("(a)", "")
    cache.freeze()
    assert cache.frozen
    assert cache.get_or_compile("(a)", "") is compiled
    with pytest.raises(RuntimeError, match="frozen"):
        cache.get_or_compile("(b)", "")


def test_shared_cache_evicts_least_recently_used() -> None:
    """The shared cache keeps the most recently used keys."""
    shared = SharedPatternCache(_SHARED_SIZE)
    first = shared.get_or_compile("(a)", "")
    shared.get_or_compile("(b)", "")
    assert shared.get_or_compile("(a)", "") is first
    shared.get_or_compile("(c)", "")
    stats = shared.stats()
    assert stats.size == _SHARED_SIZE
    assert stats.hits == 1
    assert stats.misses == 3
    assert stats.evictions == 1
    assert shared.get_or_compile("(a)", "") is first


def test_shared_cache_resize_evicts_oldest() -> None:
    """Shrinking the shared cache drops the oldest entries."""
    shared = SharedPatternCache(4)
    for pattern in ("(a)", "(b)", "(c)"):
        shared.get_or_compile(pattern, "")
    shared.resize(1)
    stats = shared.stats()
    assert (stats.size, stats.max_size, stats.evictions) == (1, 1, 2)


def test_shared_cache_rejects_non_positive_size() -> None:
    """The shared cache needs room for at least one entry."""
    with pytest.raises(ValueError, match="positive"):
        SharedPatternCache(0)


def test_invocations_reuse_shared_cache(clean_shared_cache: SharedPatternCache) -> None:
    """Invocations with the shared cache enabled reuse compiled patterns."""
    config = ExtractConfig(shared_cache=True)
    subjects = pa.array(["a1", "b2"])
    first = regexp_extract(subjects, r"(\d)", 1, config=config)
    second = regexp_extract(subjects, r"(\d)", 1, config=config)
    assert first.equals(second)
    stats = clean_shared_cache.stats()
    assert stats.misses == 1
    assert stats.hits == 1
