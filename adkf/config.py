"""
Numerical configuration for the adkf core.

Groups the knobs that change storage and checking behaviour without
changing results:

- large_matrix_threshold: above this many entries Jacobians are assembled
  in host (NumPy) buffers instead of fixed-shape JAX arrays
- default_eps: smallest eigenvalue kept by the covariance regularizer
- checks_enabled: strict numeric assertions (finiteness, regularizer
  postcondition); switch off for release runs
- enable_x64: double precision in JAX, applied once by adkf.jax_init

Defaults may be overridden through ADKF_* environment variables.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from typing import Iterator


LARGE_MATRIX_THRESHOLD_DEFAULT = 1024
DEFAULT_EPS = 1e-10

_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class NumericsConfig:
    """Numeric storage and checking configuration."""
    large_matrix_threshold: int = LARGE_MATRIX_THRESHOLD_DEFAULT
    default_eps: float = DEFAULT_EPS
    checks_enabled: bool = True
    enable_x64: bool = True

    def __post_init__(self):
        if self.large_matrix_threshold < 0:
            raise ValueError(
                f"large_matrix_threshold must be >= 0, got {self.large_matrix_threshold}"
            )
        if not self.default_eps > 0:
            raise ValueError(f"default_eps must be > 0, got {self.default_eps}")

    @classmethod
    def from_env(cls) -> 'NumericsConfig':
        """Build a config from ADKF_* environment variables."""
        return cls(
            large_matrix_threshold=int(os.environ.get(
                "ADKF_LARGE_MATRIX_THRESHOLD", LARGE_MATRIX_THRESHOLD_DEFAULT
            )),
            default_eps=float(os.environ.get("ADKF_DEFAULT_EPS", DEFAULT_EPS)),
            checks_enabled=_env_bool("ADKF_CHECKS", True),
            enable_x64=_env_bool("ADKF_ENABLE_X64", True),
        )


_config = NumericsConfig.from_env()


def get_config() -> NumericsConfig:
    """Return the active configuration."""
    return _config


def set_config(**changes) -> NumericsConfig:
    """
    Replace fields of the active configuration.

    Returns:
        The previous configuration, so callers can restore it.

    Raises:
        ValueError: on unknown field names or invalid values
    """
    global _config
    known = {f.name for f in fields(NumericsConfig)}
    unknown = set(changes) - known
    if unknown:
        raise ValueError(f"Unknown config fields: {sorted(unknown)}")
    previous = _config
    _config = replace(_config, **changes)
    return previous


@contextmanager
def override_config(**changes) -> Iterator[NumericsConfig]:
    """Temporarily override configuration fields."""
    previous = set_config(**changes)
    try:
        yield _config
    finally:
        set_config(**{f.name: getattr(previous, f.name) for f in fields(NumericsConfig)})


__all__ = [
    'NumericsConfig',
    'get_config',
    'set_config',
    'override_config',
    'LARGE_MATRIX_THRESHOLD_DEFAULT',
    'DEFAULT_EPS',
]
