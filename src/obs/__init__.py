"""Observability helpers for regexp_extract."""
