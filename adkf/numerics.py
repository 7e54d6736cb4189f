"""
Finiteness guard.

assert_finite() is the strict-mode sanity check run on inputs and
intermediate results: it raises NonFiniteError on the first argument that
holds NaN or Inf. With NumericsConfig.checks_enabled off it does nothing.
"""
from __future__ import annotations

from typing import Any

from .autodiff.dual import DualVector
from .config import get_config
from .core.errors import NonFiniteError
from .jax_init import jnp


def is_finite(value: Any) -> bool:
    """Whether every element of a scalar, array or dual vector is finite."""
    if isinstance(value, DualVector):
        return is_finite(value.value) and is_finite(value.partials)
    return bool(jnp.all(jnp.isfinite(jnp.asarray(value))))


def assert_finite(*values: Any) -> None:
    """
    Check that all arguments are finite.

    Raises:
        NonFiniteError: naming the position of the first offending argument
    """
    if not get_config().checks_enabled:
        return
    for position, value in enumerate(values):
        if not is_finite(value):
            raise NonFiniteError(f"Argument {position} contains NaN or Inf")


__all__ = ['is_finite', 'assert_finite']
