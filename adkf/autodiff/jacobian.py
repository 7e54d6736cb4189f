"""
Jacobian extraction and matrix storage.

extract_jacobian() reads the derivative components out of a dual vector:
row j of the result is the partials of output j. Small results stay
fixed-shape JAX arrays; results with more entries than
NumericsConfig.large_matrix_threshold are returned as host NumPy buffers.
identity_matrix() and set_block() follow the same rule, so block
assembly writes in place on large matrices and uses functional updates on
small ones. Traced values inside jit or vmap always stay JAX arrays. Values
never depend on the storage chosen.
"""
from __future__ import annotations

import numpy as np

from ..config import get_config
from ..jax_init import jax, jnp
from .dual import DualVector


def is_large_matrix(rows: int, cols: int) -> bool:
    """Whether a rows x cols matrix uses host (dynamic) storage."""
    return rows * cols > get_config().large_matrix_threshold


def extract_jacobian(result: DualVector):
    """
    Jacobian stored in a dual vector.

    Args:
        result: output of a function evaluated at a derivator-seeded input,
                with LDOF entries of RDOF derivative components each

    Returns:
        (LDOF, RDOF) matrix
    """
    partials = result.partials
    if partials.ndim != 2 or partials.shape[0] != result.value.shape[0]:
        raise ValueError(
            f"Dual vector partials of shape {partials.shape} do not match"
            f" value of shape {result.value.shape}"
        )
    rows, cols = partials.shape
    if is_large_matrix(rows, cols) and not is_traced(partials):
        return np.array(partials)
    return jnp.asarray(partials)


def is_traced(value) -> bool:
    """Whether value is an abstract value inside a JAX transformation."""
    return isinstance(value, jax.core.Tracer)


def identity_matrix(n: int, dtype=None):
    """n x n identity in the storage extract_jacobian would pick."""
    if is_large_matrix(n, n):
        return np.eye(n, dtype=dtype)
    return jnp.eye(n, dtype=dtype)


def set_block(matrix, row: int, col: int, block):
    """
    Write block into matrix at (row, col).

    NumPy matrices are written in place; JAX matrices are copied. A traced
    block turns a NumPy matrix into a JAX one, since tracers cannot be
    stored in host buffers. Use the return value in all cases.
    """
    rows, cols = block.shape
    if isinstance(matrix, np.ndarray) and not is_traced(block):
        matrix[row:row + rows, col:col + cols] = np.asarray(block)
        return matrix
    return jnp.asarray(matrix).at[row:row + rows, col:col + cols].set(block)


__all__ = [
    'is_large_matrix',
    'is_traced',
    'extract_jacobian',
    'identity_matrix',
    'set_block',
]
