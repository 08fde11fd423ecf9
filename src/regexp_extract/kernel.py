"""Batch entrypoints for regexp_extract over Arrow columns."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

import pyarrow as pa

from obs.otel import SCOPE_REGEXP_EXTRACT, set_span_attributes, stage_span
from regexp_extract.arguments import MaterializedArguments, materialize_arguments
from regexp_extract.builder import OutputBuilder
from regexp_extract.config import ExtractConfig, config_from_env
from regexp_extract.extractor import extract_range, prepare_patterns
from regexp_extract.parallel import parallel_map, resolve_max_workers, row_ranges
from regexp_extract.pattern_cache import PatternCache, shared_pattern_cache
from regexp_extract.readers import ColumnLike
from regexp_extract.signature import ExtractPlan, resolve_signature

_LOGGER = logging.getLogger(__name__)

type ArgumentValue = ColumnLike | pa.Scalar | str | int | None


def _pattern_cache(config: ExtractConfig) -> PatternCache:
    if not config.shared_cache:
        return PatternCache()
    return PatternCache(shared=shared_pattern_cache(config.shared_cache_size))


def _extract_all(
    arguments: MaterializedArguments,
    cache: PatternCache,
    *,
    builder: OutputBuilder,
    workers: int,
    chunk_rows: int,
) -> None:
    ranges = row_ranges(arguments.num_rows, chunk_rows)
    run = partial(_extract_span, arguments, cache)
    for values in parallel_map(ranges, run, max_workers=min(workers, max(len(ranges), 1))):
        builder.extend(values)


def _extract_span(
    arguments: MaterializedArguments,
    cache: PatternCache,
    bounds: tuple[int, int],
) -> list[str | None]:
    start, stop = bounds
    return extract_range(arguments, cache, start, stop)


def execute_plan(
    plan: ExtractPlan,
    *,
    number_rows: int | None = None,
    config: ExtractConfig | None = None,
) -> pa.Array:
    """Run a resolved plan and return the extracted column.

    Every pattern in the batch is compiled and every group index checked
    before any row is extracted. Extraction may then run on several threads
    reading the frozen pattern cache.

    Parameters
    ----------
    plan
        Plan returned by :func:`resolve_signature`.
    number_rows
        Batch length pinned by the caller, if any.
    config
        Execution policy. Defaults to :func:`config_from_env`.

    Returns
    -------
    pyarrow.Array
        Nullable string column with one entry per row.
    """
    resolved_config = config if config is not None else config_from_env()
    arguments = materialize_arguments(plan, number_rows=number_rows)
    attributes = {
        "regexp_extract.rows": arguments.num_rows,
        "regexp_extract.argument_count": len(plan.arguments),
        "regexp_extract.array_arguments": [arg.spec.name for arg in plan.array_arguments],
    }
    with stage_span(
        "regexp_extract.invoke",
        stage="regexp_extract",
        scope_name=SCOPE_REGEXP_EXTRACT,
        attributes=attributes,
    ) as span:
        cache = _pattern_cache(resolved_config)
        distinct = prepare_patterns(plan, arguments, cache)
        cache.freeze()
        workers = resolve_max_workers(
            resolved_config.max_workers,
            num_rows=arguments.num_rows,
            parallel_min_rows=resolved_config.parallel_min_rows,
        )
        set_span_attributes(
            span,
            {"regexp_extract.distinct_patterns": distinct, "regexp_extract.workers": workers},
        )
        builder = OutputBuilder(arguments.num_rows, plan.return_type)
        try:
            _extract_all(
                arguments,
                cache,
                builder=builder,
                workers=workers,
                chunk_rows=resolved_config.chunk_rows,
            )
        except Exception:
            builder.discard()
            raise
        result = builder.finish()
    _LOGGER.debug(
        "regexp_extract produced %d row(s), %d null(s), %d distinct pattern(s)",
        len(result),
        result.null_count,
        distinct,
    )
    return result


def invoke(
    args: Sequence[ArgumentValue],
    *,
    number_rows: int | None = None,
    config: ExtractConfig | None = None,
) -> pa.Array | pa.Scalar:
    """Evaluate regexp_extract over positional columnar arguments.

    When every argument is a scalar and ``number_rows`` is not given, the
    single result is returned as a ``pyarrow.Scalar``.

    Parameters
    ----------
    args
        ``(subject, pattern[, group_index][, flags])``.
    number_rows
        Batch length pinned by the caller, if any.
    config
        Execution policy.

    Returns
    -------
    pyarrow.Array | pyarrow.Scalar
        Extracted column, or a scalar for an all-scalar call.
    """
    plan = resolve_signature(args)
    result = execute_plan(plan, number_rows=number_rows, config=config)
    if plan.all_scalar and number_rows is None:
        return result[0]
    return result


def regexp_extract(
    subject: ArgumentValue,
    pattern: ArgumentValue,
    group_index: ArgumentValue = 1,
    flags: ArgumentValue = "",
    *,
    config: ExtractConfig | None = None,
) -> pa.Array:
    """Return the capture group ``group_index`` of ``pattern`` in each subject.

    Any argument may be a scalar (broadcast to every row) or an Arrow column
    of the batch length. Group ``0`` selects the whole match.

    Parameters
    ----------
    subject
        Strings to search.
    pattern
        Regular expression, searched leftmost-first.
    group_index
        One-based capture group to return; ``0`` for the whole match.
    flags
        Any of ``i`` (case-insensitive), ``m`` (multiline) and
        ``s`` (dot matches newline).
    config
        Execution policy.

    Returns
    -------
    pyarrow.Array
        Nullable string column; null where the subject is null, the pattern
        does not match, or the group did not take part in the match.

    Examples
    --------
    >>> import pyarrow as pa
    >>> regexp_extract(pa.array(["abc", None]), "(a)(b)(c)", 2).to_pylist()
    ['b', None]
    """
    plan = resolve_signature((subject, pattern, group_index, flags))
    return execute_plan(plan, config=config)


__all__ = ["ArgumentValue", "execute_plan", "invoke", "regexp_extract"]
