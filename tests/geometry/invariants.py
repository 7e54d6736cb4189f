"""
Invariant assertions for reference-change Jacobians and covariances.

Each assertion raises InvariantViolation with a message naming the
violated property:

- identity Jacobian for an unchanged reference
- block-diagonal structure of compound Jacobians
- symmetric positive definiteness with an eigenvalue floor
"""
import jax.numpy as jnp
from typing import Sequence

from adkf import is_positive_definite


class InvariantViolation(AssertionError):
    """Raised when a mathematical invariant is violated."""
    pass


def _check_allclose(
    actual: jnp.ndarray,
    expected: jnp.ndarray,
    rtol: float,
    atol: float,
    message: str
) -> None:
    """Helper to check array equality with informative error."""
    actual = jnp.asarray(actual)
    expected = jnp.asarray(expected)
    if actual.shape != expected.shape:
        raise InvariantViolation(
            f"{message}\n  Expected shape: {expected.shape}, Actual shape: {actual.shape}"
        )
    if not jnp.allclose(actual, expected, rtol=rtol, atol=atol):
        max_diff = jnp.max(jnp.abs(actual - expected))
        raise InvariantViolation(
            f"{message}\n"
            f"  Max absolute difference: {max_diff}"
        )


def assert_identity(J: jnp.ndarray, dof: int, atol: float = 1e-10) -> None:
    """Verify J == I_dof."""
    _check_allclose(
        J, jnp.eye(dof), 0.0, atol,
        "Reference change to the same point is not the identity"
    )


def assert_block_diagonal(J: jnp.ndarray, block_sizes: Sequence[int]) -> None:
    """
    Verify that every entry outside the diagonal blocks is exactly zero.
    """
    J = jnp.asarray(J)
    total = sum(block_sizes)
    if J.shape != (total, total):
        raise InvariantViolation(
            f"Jacobian shape {J.shape} does not match blocks {tuple(block_sizes)}"
        )
    mask = jnp.zeros((total, total), dtype=bool)
    offset = 0
    for size in block_sizes:
        mask = mask.at[offset:offset + size, offset:offset + size].set(True)
        offset += size
    off_block = jnp.where(mask, 0.0, J)
    if not bool(jnp.all(off_block == 0.0)):
        raise InvariantViolation(
            "Off-diagonal blocks are not zero\n"
            f"  Max absolute off-block entry: {jnp.max(jnp.abs(off_block))}"
        )


def assert_spd(M: jnp.ndarray, eps: float = 0.0, rtol: float = 1e-9) -> None:
    """Verify M is positive definite with eigenvalues >= eps (up to rounding)."""
    M = jnp.asarray(M)
    if not is_positive_definite(M):
        raise InvariantViolation("Matrix is not positive definite")
    eigvals = jnp.linalg.eigvalsh(M)
    floor = eps - rtol * max(1.0, float(jnp.max(jnp.abs(eigvals))))
    if float(jnp.min(eigvals)) < floor:
        raise InvariantViolation(
            f"Eigenvalue floor violated: min eigenvalue {float(jnp.min(eigvals))} < {eps}"
        )
