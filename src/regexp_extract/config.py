"""Runtime configuration for regexp_extract invocations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated

import msgspec

from serde_msgspec import StructBaseStrict, convert, validation_error_payload
from utils.env_utils import env_bool, env_int
from utils.hashing import hash_json_canonical

ENV_MAX_WORKERS = "REGEXP_EXTRACT_MAX_WORKERS"
ENV_PARALLEL_MIN_ROWS = "REGEXP_EXTRACT_PARALLEL_MIN_ROWS"
ENV_CHUNK_ROWS = "REGEXP_EXTRACT_CHUNK_ROWS"
ENV_SHARED_CACHE = "REGEXP_EXTRACT_SHARED_CACHE"
ENV_SHARED_CACHE_SIZE = "REGEXP_EXTRACT_SHARED_CACHE_SIZE"

PositiveInt = Annotated[int, msgspec.Meta(ge=1)]
NonNegativeInt = Annotated[int, msgspec.Meta(ge=0)]


class ExtractConfig(StructBaseStrict, frozen=True):
    """Execution policy for one or more regexp_extract calls.

    ``max_workers`` of ``None`` resolves to the CPU count on free-threaded
    builds once a batch reaches ``parallel_min_rows`` and to one thread
    otherwise. ``max_workers=1`` always runs serially.
    """

    max_workers: PositiveInt | None = None
    parallel_min_rows: NonNegativeInt = 65_536
    chunk_rows: PositiveInt = 16_384
    shared_cache: bool = False
    shared_cache_size: PositiveInt = 256

    def fingerprint_payload(self) -> Mapping[str, object]:
        """Return canonical payload for config fingerprinting.

        Returns
        -------
        Mapping[str, object]
            Payload used for fingerprinting.
        """
        return {
            "version": 1,
            "max_workers": self.max_workers,
            "parallel_min_rows": self.parallel_min_rows,
            "chunk_rows": self.chunk_rows,
            "shared_cache": self.shared_cache,
            "shared_cache_size": self.shared_cache_size,
        }

    def fingerprint(self) -> str:
        """Return a deterministic fingerprint for this config.

        Returns
        -------
        str
            SHA-256 hexdigest of the fingerprint payload.
        """
        return hash_json_canonical(self.fingerprint_payload(), str_keys=True)


DEFAULT_CONFIG = ExtractConfig()


def build_config(payload: Mapping[str, object]) -> ExtractConfig:
    """Validate a mapping into an ``ExtractConfig``.

    Returns
    -------
    ExtractConfig
        Validated configuration.

    Raises
    ------
    ValueError
        Raised when the payload does not satisfy the config contract.
    """
    try:
        return convert(payload, target_type=ExtractConfig, strict=False)
    except msgspec.ValidationError as exc:
        details = validation_error_payload(exc)
        msg = f"regexp_extract config validation failed: {details}"
        raise ValueError(msg) from exc


def config_from_env() -> ExtractConfig:
    """Return a config with defaults overridden by environment variables.

    Unparseable values are logged and replaced by their defaults. Values that
    parse but break the config contract raise ``ValueError``.

    Returns
    -------
    ExtractConfig
        Resolved configuration.
    """
    payload: dict[str, object] = {
        "max_workers": env_int(ENV_MAX_WORKERS, default=DEFAULT_CONFIG.max_workers),
        "parallel_min_rows": env_int(
            ENV_PARALLEL_MIN_ROWS,
            default=DEFAULT_CONFIG.parallel_min_rows,
        ),
        "chunk_rows": env_int(ENV_CHUNK_ROWS, default=DEFAULT_CONFIG.chunk_rows),
        "shared_cache": env_bool(
            ENV_SHARED_CACHE,
            default=DEFAULT_CONFIG.shared_cache,
            log_invalid=True,
        ),
        "shared_cache_size": env_int(
            ENV_SHARED_CACHE_SIZE,
            default=DEFAULT_CONFIG.shared_cache_size,
        ),
    }
    return build_config(payload)


__all__ = [
    "DEFAULT_CONFIG",
    "ENV_CHUNK_ROWS",
    "ENV_MAX_WORKERS",
    "ENV_PARALLEL_MIN_ROWS",
    "ENV_SHARED_CACHE",
    "ENV_SHARED_CACHE_SIZE",
    "ExtractConfig",
    "build_config",
    "config_from_env",
]
