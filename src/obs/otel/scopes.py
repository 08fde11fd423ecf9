"""Canonical OpenTelemetry instrumentation scopes for regexp_extract."""

from __future__ import annotations

SCOPE_REGEXP_EXTRACT = "regexp_extract"

__all__ = ["SCOPE_REGEXP_EXTRACT"]
