"""OpenTelemetry helpers for regexp_extract instrumentation."""

from __future__ import annotations

from obs.otel.attributes import normalize_attributes
from obs.otel.scopes import SCOPE_REGEXP_EXTRACT
from obs.otel.tracing import (
    get_tracer,
    record_exception,
    set_span_attributes,
    span_attributes,
    stage_span,
)

__all__ = [
    "SCOPE_REGEXP_EXTRACT",
    "get_tracer",
    "normalize_attributes",
    "record_exception",
    "set_span_attributes",
    "span_attributes",
    "stage_span",
]
