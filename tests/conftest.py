"""Shared pytest fixtures for regexp_extract tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from regexp_extract.pattern_cache import SharedPatternCache, shared_pattern_cache

_ENV_PREFIX = "REGEXP_EXTRACT_"


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clean_shared_cache() -> Iterator[SharedPatternCache]:
    """Yield the process-wide pattern cache, cleared before and after use.

    Yields
    ------
    SharedPatternCache
        Process-wide cache.
    """
    cache = shared_pattern_cache(256)
    cache.clear()
    yield cache
    cache.clear()
