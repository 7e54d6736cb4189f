"""
Covariance regularization.

Covariances produced by reference changes and filter updates drift away
from positive definiteness through rounding. This module checks and
repairs them:

- is_positive_definite: Cholesky factorization succeeds with a positive
  diagonal. Failure is reported as False, never raised.
- regularize_covariance: raises every eigenvalue below eps to eps and
  rebuilds the matrix from its eigenvectors, returning the repaired matrix
  with the number of clamped eigenvalues. Matrices that need no clamping
  are returned as-is, without a rebuild. For matrices with a large
  dynamic range the floor is raised above eps to the rounding level of the
  largest eigenvalue, so the rebuilt matrix still factorizes.
- assure_positive_definite: regularize_covariance with in-place semantics
  for NumPy buffers.
"""
from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional

import numpy as np

from .config import get_config
from .core.errors import RegularizationError
from .jax_init import jnp
from .numerics import assert_finite

logger = logging.getLogger(__name__)


class Regularization(NamedTuple):
    """Result of regularize_covariance."""
    matrix: Any
    clamped: int

    @property
    def changed(self) -> bool:
        return self.clamped > 0


def is_positive_definite(matrix) -> bool:
    """
    Check positive definiteness through a Cholesky factorization.

    Non-square and non-finite matrices are not positive definite.
    """
    m = jnp.asarray(matrix)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        return False
    if not bool(jnp.all(jnp.isfinite(m))):
        return False
    # jnp.linalg.cholesky signals failure with NaN factors
    factor = jnp.linalg.cholesky(m)
    positive = bool(jnp.all(jnp.isfinite(factor))) and bool(jnp.all(jnp.diag(factor) > 0))
    if not positive:
        logger.debug("Cholesky factorization failed for %dx%d matrix", *m.shape)
    return positive


def rounding_floor(eigvals) -> float:
    """
    Smallest eigenvalue that survives rebuilding and factorizing the matrix.

    Rebuilding V diag V^T and the Cholesky check each perturb eigenvalues
    by about n * machine eps * max|lambda|.
    """
    n = eigvals.shape[0]
    resolution = float(jnp.finfo(eigvals.dtype).eps)
    return 4.0 * n * resolution * float(jnp.max(jnp.abs(eigvals)))


def regularize_covariance(matrix, eps: Optional[float] = None) -> Regularization:
    """
    Clamp the eigenvalues of a symmetric matrix from below.

    Args:
        matrix: symmetric (n, n) matrix
        eps: smallest eigenvalue kept (default: NumericsConfig.default_eps),
            raised to rounding_floor() when that is larger

    Returns:
        Regularization(matrix, clamped). When clamped == 0, matrix is the
        input object itself.

    Raises:
        NonFiniteError: the input holds NaN or Inf (checks enabled)
        RegularizationError: the rebuilt matrix is not positive definite
            (checks enabled)
    """
    eps = get_config().default_eps if eps is None else eps
    assert_finite(matrix)

    eigvals, eigvecs = jnp.linalg.eigh(jnp.asarray(matrix))
    floor = max(eps, rounding_floor(eigvals))
    below = eigvals < floor
    clamped = int(jnp.sum(below))
    if clamped == 0:
        return Regularization(matrix, 0)

    eigvals = jnp.where(below, floor, eigvals)
    # eigh returns orthonormal eigenvectors, so V^T is V^-1
    repaired = eigvecs @ jnp.diag(eigvals) @ eigvecs.T
    repaired = 0.5 * (repaired + repaired.T)
    logger.debug("Clamped %d of %d eigenvalues to %g", clamped, eigvals.shape[0], floor)

    if get_config().checks_enabled and not is_positive_definite(repaired):
        raise RegularizationError(
            f"Matrix is not positive definite after clamping {clamped} eigenvalues to {floor}"
        )
    return Regularization(repaired, clamped)


def assure_positive_definite(matrix, eps: Optional[float] = None):
    """
    Make a symmetric matrix positive definite with eigenvalues >= eps.

    Writable NumPy matrices are overwritten in place. JAX arrays are
    immutable, so always use the returned matrix.
    """
    result = regularize_covariance(matrix, eps)
    if not result.changed:
        return matrix
    if isinstance(matrix, np.ndarray) and matrix.flags.writeable:
        matrix[...] = np.asarray(result.matrix)
        return matrix
    return result.matrix


__all__ = [
    'Regularization',
    'is_positive_definite',
    'rounding_floor',
    'regularize_covariance',
    'assure_positive_definite',
]
