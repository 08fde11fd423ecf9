"""Per-row match and capture-group selection."""

from __future__ import annotations

import logging

from regexp_extract.arguments import MaterializedArguments, RowTuple
from regexp_extract.errors import GroupIndexOutOfRangeError
from regexp_extract.pattern_cache import CompiledPattern, PatternCache, PatternKey
from regexp_extract.signature import ExtractPlan

_LOGGER = logging.getLogger(__name__)


def check_group_index(compiled: CompiledPattern, group_index: int) -> None:
    """Ensure ``group_index`` names a group of the compiled pattern.

    Raises
    ------
    GroupIndexOutOfRangeError
        Raised when the index is negative or above the group count.
    """
    if 0 <= group_index <= compiled.group_count:
        return
    raise GroupIndexOutOfRangeError(
        group_index=group_index,
        group_count=compiled.group_count,
        pattern=compiled.key.pattern,
    )


def prepare_patterns(
    plan: ExtractPlan,
    arguments: MaterializedArguments,
    cache: PatternCache,
) -> int:
    """Compile every distinct ``(pattern, flags)`` key and check group indexes.

    This is the single-writer phase: it runs before any extraction and leaves
    ``cache`` holding every key a row can ask for. Keys are compiled and group
    indexes checked for every row whose pattern, flags and group index are
    non-null, whatever its subject, so a malformed pattern or an out-of-range
    group anywhere in the batch fails the whole call.

    Parameters
    ----------
    plan
        Resolved call plan, used to short-circuit scalar arguments.
    arguments
        Per-row argument view.
    cache
        Invocation cache to populate.

    Returns
    -------
    int
        Number of distinct keys resolved.
    """
    varying = (plan.pattern, plan.group_index, plan.flags)
    if any(argument is not None and argument.is_array for argument in varying):
        indices = range(arguments.num_rows)
    else:
        indices = range(1)
    checked: set[tuple[PatternKey, int]] = set()
    for index in indices:
        pattern = arguments.pattern.get(index)
        group_index = arguments.group_index.get(index)
        flags = arguments.flags.get(index)
        if pattern is None or group_index is None or flags is None:
            continue
        compiled = cache.get_or_compile(pattern, flags)
        if (compiled.key, group_index) in checked:
            continue
        check_group_index(compiled, group_index)
        checked.add((compiled.key, group_index))
    _LOGGER.debug("Resolved %d distinct regex key(s) across %d row(s)", len(cache), len(arguments))
    return len(cache)


def extract_row(row: RowTuple, cache: PatternCache) -> str | None:
    """Return the captured text for one row, or ``None``.

    Null arguments, a failed match, and a group that did not take part in the
    match all produce ``None``. A group that matched an empty span produces
    ``""``.

    Returns
    -------
    str | None
        Captured substring of the subject, or ``None``.

    Raises
    ------
    GroupIndexOutOfRangeError
        Raised when ``group_index`` names no group of the pattern.
    """
    subject, pattern, group_index, flags = row
    if pattern is None or group_index is None or flags is None:
        return None
    compiled = cache.get_or_compile(pattern, flags)
    check_group_index(compiled, group_index)
    if subject is None:
        return None
    match = compiled.regex.search(subject)
    if match is None:
        return None
    return match.group(group_index)


def extract_range(
    arguments: MaterializedArguments,
    cache: PatternCache,
    start: int,
    stop: int,
) -> list[str | None]:
    """Extract rows ``[start, stop)`` in row order.

    Returns
    -------
    list[str | None]
        One result per row.
    """
    return [extract_row(row, cache) for row in arguments.rows(start, stop)]


__all__ = ["check_group_index", "extract_range", "extract_row", "prepare_patterns"]
