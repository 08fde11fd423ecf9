"""Shared utilities for regexp_extract."""
