"""Tests for regexp_extract runtime configuration."""

from __future__ import annotations

import logging

import pytest

from regexp_extract.config import (
    DEFAULT_CONFIG,
    ENV_CHUNK_ROWS,
    ENV_MAX_WORKERS,
    ENV_SHARED_CACHE,
    ExtractConfig,
    build_config,
    config_from_env,
)

_WORKERS = 4
_CHUNK_ROWS = 128


def test_defaults_without_environment() -> None:
    """An empty environment yields the default config."""
    assert config_from_env() == DEFAULT_CONFIG
    assert DEFAULT_CONFIG.max_workers is None
    assert DEFAULT_CONFIG.shared_cache is False


def test_environment_overrides_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment variables override individual fields."""
    monkeypatch.setenv(ENV_MAX_WORKERS, str(_WORKERS))
    monkeypatch.setenv(ENV_CHUNK_ROWS, f" {_CHUNK_ROWS} ")
    monkeypatch.setenv(ENV_SHARED_CACHE, "yes")
    config = config_from_env()
    assert config.max_workers == _WORKERS
    assert config.chunk_rows == _CHUNK_ROWS
    assert config.shared_cache is True


def test_unparseable_environment_falls_back(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Unparseable values are logged and replaced by defaults."""
    monkeypatch.setenv(ENV_MAX_WORKERS, "many")
    monkeypatch.setenv(ENV_SHARED_CACHE, "perhaps")
    with caplog.at_level(logging.WARNING):
        config = config_from_env()
    assert config == DEFAULT_CONFIG
    assert ENV_MAX_WORKERS in caplog.text
    assert ENV_SHARED_CACHE in caplog.text


def test_out_of_range_environment_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    """Parsed values that break the config contract are rejected."""
    monkeypatch.setenv(ENV_CHUNK_ROWS, "0")
    with pytest.raises(ValueError, match="config validation failed"):
        config_from_env()


@pytest.mark.parametrize(
    "payload",
    [
        {"chunk_rows": 0},
        {"max_workers": -1},
        {"parallel_min_rows": -5},
        {"shared_cache_size": "large"},
        {"unknown_field": 1},
    ],
)
def test_build_config_rejects_invalid_payloads(payload: dict[str, object]) -> None:
    """Invalid payloads raise ``ValueError``."""
    with pytest.raises(ValueError, match="config validation failed"):
        build_config(payload)


def test_build_config_accepts_partial_payload() -> None:
    """Omitted fields keep their defaults."""
    config = build_config({"max_workers": 2})
    assert config == ExtractConfig(max_workers=2)


def test_fingerprint_is_stable() -> None:
    """Equal configs share a fingerprint and different configs do not."""
    assert ExtractConfig().fingerprint() == DEFAULT_CONFIG.fingerprint()
    assert ExtractConfig(chunk_rows=8).fingerprint() != DEFAULT_CONFIG.fingerprint()
    assert len(DEFAULT_CONFIG.fingerprint()) == 64
