"""Compiled-pattern memoization keyed by ``(pattern, flags)``.

``PatternCache`` serves one invocation: it is populated by a single writer and
then frozen, after which any number of threads may read it. ``SharedPatternCache``
is the optional process-wide layer underneath it; it is guarded by a lock and
evicts least-recently-used entries.
"""

from __future__ import annotations

import logging
import re
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import NamedTuple

from regexp_extract.errors import InvalidPatternError, UnsupportedFlagError
from serde_msgspec import StructBaseStrict

_LOGGER = logging.getLogger(__name__)

FLAG_BITS: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


class PatternKey(NamedTuple):
    """Immutable cache key for a compiled pattern."""

    pattern: str
    flags: str


@dataclass(frozen=True)
class CompiledPattern:
    """A compiled regex shared read-only by every row using its key."""

    key: PatternKey
    regex: re.Pattern[str]

    @property
    def group_count(self) -> int:
        """Return the number of capture groups in the pattern."""
        return self.regex.groups


class CacheStats(StructBaseStrict, frozen=True):
    """Counters describing a shared pattern cache."""

    size: int
    max_size: int
    hits: int = 0
    misses: int = 0
    evictions: int = 0


def parse_flags(flags: str) -> re.RegexFlag:
    """Translate flag characters into ``re`` flag bits.

    Parameters
    ----------
    flags
        Flag characters: ``i`` case-insensitive, ``m`` multiline,
        ``s`` dot matches newline.

    Returns
    -------
    re.RegexFlag
        Combined flag bits.

    Raises
    ------
    UnsupportedFlagError
        Raised on the first character outside the supported set.
    """
    bits = re.RegexFlag(0)
    for char in flags:
        flag = FLAG_BITS.get(char)
        if flag is None:
            raise UnsupportedFlagError(flags, char)
        bits |= flag
    return bits


def compile_pattern(pattern: str, flags: str = "") -> CompiledPattern:
    """Compile a pattern under the given flags.

    Returns
    -------
    CompiledPattern
        Compiled pattern with its key.

    Raises
    ------
    InvalidPatternError
        Raised when the pattern is not valid regex syntax.
    """
    bits = parse_flags(flags)
    try:
        regex = re.compile(pattern, bits)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc
    return CompiledPattern(key=PatternKey(pattern, flags), regex=regex)


class SharedPatternCache:
    """Process-wide LRU cache of compiled patterns."""

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            msg = f"Shared pattern cache size must be positive, got {max_size}."
            raise ValueError(msg)
        self._max_size = max_size
        self._entries: OrderedDict[PatternKey, CompiledPattern] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get_or_compile(self, pattern: str, flags: str) -> CompiledPattern:
        """Return a cached pattern, compiling and inserting it on a miss.

        Returns
        -------
        CompiledPattern
            Compiled pattern for the key.
        """
        key = PatternKey(pattern, flags)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self._hits += 1
                return cached
            self._misses += 1
        compiled = compile_pattern(pattern, flags)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            self._entries[key] = compiled
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                _LOGGER.debug("Evicted shared regex pattern %r", evicted.pattern)
        return compiled

    def resize(self, max_size: int) -> None:
        """Change the LRU bound, evicting the oldest entries when shrinking."""
        if max_size < 1:
            msg = f"Shared pattern cache size must be positive, got {max_size}."
            raise ValueError(msg)
        with self._lock:
            self._max_size = max_size
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)
                self._evictions += 1

    def clear(self) -> None:
        """Drop every cached pattern and reset counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> CacheStats:
        """Return a snapshot of the cache counters.

        Returns
        -------
        CacheStats
            Size, bound, hit, miss and eviction counts.
        """
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_size=self._max_size,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )


_SHARED_CACHE: dict[str, SharedPatternCache | None] = {"value": None}
_SHARED_CACHE_LOCK = threading.Lock()


def shared_pattern_cache(max_size: int) -> SharedPatternCache:
    """Return the process-wide pattern cache, creating or resizing it.

    Returns
    -------
    SharedPatternCache
        Singleton shared cache bounded to ``max_size`` entries.
    """
    with _SHARED_CACHE_LOCK:
        cache = _SHARED_CACHE["value"]
        if cache is None:
            cache = SharedPatternCache(max_size)
            _SHARED_CACHE["value"] = cache
            return cache
    if cache.stats().max_size != max_size:
        cache.resize(max_size)
    return cache


class PatternCache:
    """Per-invocation cache guaranteeing one compilation per key."""

    def __init__(self, *, shared: SharedPatternCache | None = None) -> None:
        self._entries: dict[PatternKey, CompiledPattern] = {}
        self._shared = shared
        self._frozen = False
        self.compilations = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @property
    def frozen(self) -> bool:
        """Return True once the cache is read-only."""
        return self._frozen

    def get_or_compile(self, pattern: str, flags: str) -> CompiledPattern:
        """Return the compiled pattern for a key, compiling it on first use.

        Returns
        -------
        CompiledPattern
            Compiled pattern shared by every row with the same key.

        Raises
        ------
        RuntimeError
            Raised when a new key is requested after :meth:`freeze`.
        """
        key = PatternKey(pattern, flags)
        cached = self._entries.get(key)
        if cached is not None:
            return cached
        if self._frozen:
            msg = f"Pattern cache is frozen; key {key!r} was not resolved before extraction."
            raise RuntimeError(msg)
        if self._shared is not None:
            compiled = self._shared.get_or_compile(pattern, flags)
        else:
            compiled = compile_pattern(pattern, flags)
            self.compilations += 1
        self._entries[key] = compiled
        return compiled

    def freeze(self) -> None:
        """Make the cache read-only for the concurrent extraction phase."""
        self._frozen = True
        _LOGGER.debug(
            "Pattern cache frozen with %d key(s), %d local compilation(s)",
            len(self._entries),
            self.compilations,
        )


__all__ = [
    "FLAG_BITS",
    "CacheStats",
    "CompiledPattern",
    "PatternCache",
    "PatternKey",
    "SharedPatternCache",
    "compile_pattern",
    "parse_flags",
    "shared_pattern_cache",
]
