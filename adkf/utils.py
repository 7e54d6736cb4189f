"""
Small helpers shared by the filter layers.
"""
from __future__ import annotations

from typing import Any

from .autodiff.dual import DualVector
from .core.types import Manifold
from .jax_init import jax, jnp


def evaluate(result: Any) -> Any:
    """
    Bring an intermediate result into canonical storage.

    Python and NumPy scalars and arrays become JAX arrays, so their
    descriptor can be resolved and they can be traced. JAX arrays (tracers
    included), manifolds and dual vectors pass through untouched.
    """
    if isinstance(result, (jax.Array, Manifold, DualVector)):
        return result
    return jnp.asarray(result)


def noise_segment(noise, start: int, size: int):
    """
    Cut noise[start:start + size] out of a stacked noise vector.

    Raises:
        ValueError: if the segment does not fit into the vector
    """
    length = noise.shape[0]
    if start < 0 or size < 0 or start + size > length:
        raise ValueError(
            f"Segment [{start}, {start + size}) out of range for noise of length {length}"
        )
    return noise[start:start + size]


__all__ = ['evaluate', 'noise_segment']
