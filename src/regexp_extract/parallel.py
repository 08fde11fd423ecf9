"""Thread-based row-range execution for the extraction phase."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor

from opentelemetry import context as otel_context

_LOGGER = logging.getLogger(__name__)


def _gil_disabled() -> bool:
    checker = getattr(sys, "_is_gil_enabled", None)
    if not callable(checker):
        return False
    try:
        return not bool(checker())
    except (RuntimeError, TypeError, ValueError):
        return False


def resolve_max_workers(
    max_workers: int | None,
    *,
    num_rows: int,
    parallel_min_rows: int,
) -> int:
    """Resolve the worker count for a batch.

    Batches below ``parallel_min_rows`` always run on the calling thread. An
    unset ``max_workers`` uses the CPU count only on free-threaded builds,
    where threads can run ``re`` matching concurrently.

    Returns
    -------
    int
        Effective worker count.
    """
    if num_rows < parallel_min_rows:
        return 1
    if max_workers is not None:
        return max(1, max_workers)
    if not _gil_disabled():
        return 1
    return max(1, os.cpu_count() or 1)


def row_ranges(num_rows: int, chunk_rows: int) -> list[tuple[int, int]]:
    """Split ``[0, num_rows)`` into consecutive ranges of ``chunk_rows`` rows.

    Returns
    -------
    list[tuple[int, int]]
        ``(start, stop)`` pairs covering every row once, in order.
    """
    return [(start, min(start + chunk_rows, num_rows)) for start in range(0, num_rows, chunk_rows)]


def parallel_map[T, U](
    items: Iterable[T],
    fn: Callable[[T], U],
    *,
    max_workers: int,
) -> Iterator[U]:
    """Map items on a thread pool, yielding results in input order.

    Worker threads run under the caller's OpenTelemetry context.

    Yields
    ------
    U
        Results produced by applying the function to each item.
    """
    if max_workers <= 1:
        for item in items:
            yield fn(item)
        return
    current = otel_context.get_current()

    def _wrapped(item: T) -> U:
        token = otel_context.attach(current)
        try:
            return fn(item)
        finally:
            otel_context.detach(token)

    _LOGGER.debug("Dispatching regexp_extract ranges on %d thread(s)", max_workers)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        yield from executor.map(_wrapped, items)


__all__ = ["parallel_map", "resolve_max_workers", "row_ranges"]
