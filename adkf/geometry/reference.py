"""
Reference-change Jacobians for manifold-valued errors.

An error distribution is kept relative to a reference point ref1. When the
filter re-linearizes around ref2, the covariance has to be carried over by
the Jacobian of

    eps -> (ref1 + (Er1 + eps)) - ref2        at eps = 0

where Er1 is the mean of the error relative to ref1 (zero when omitted).

Atomic states (scalars, vectors, manifolds that are not compound) are
differentiated in one forward pass seeded with derivator_basis(dof).
Compound manifolds recurse into their components: each component's
retraction only acts on its own slice of the tangent space, so the result
is block diagonal with one block per component, off-diagonal blocks zero.

Note: a compound whose components' retractions are coupled would need the
full Jacobian; no such type is handled here.
"""
from __future__ import annotations

from typing import Any, Optional

from ..autodiff.derivator import derivator_basis
from ..autodiff.dual import propagate
from ..autodiff.jacobian import extract_jacobian, identity_matrix, set_block
from ..core.traits import dof_of, is_compound, resolve
from ..covariance import assure_positive_definite
from ..jax_init import jnp
from ..numerics import assert_finite
from ..utils import evaluate, noise_segment


def _as_tangent(error: Any, dof: int):
    tangent = jnp.ravel(evaluate(error))
    if tangent.shape != (dof,):
        raise ValueError(f"Expected a tangent error of size {dof}, got shape {tangent.shape}")
    return tangent


def _atomic_jacobian(ref1, ref2, tangent, info):
    seed = derivator_basis(info.dof, info.scalar_type)
    if tangent is not None:
        seed = seed + tangent
    ref1 = evaluate(ref1)
    ref2 = evaluate(ref2)
    result = propagate(lambda delta: ref1 + delta - ref2, seed)
    return extract_jacobian(result)


def _compound_jacobian(ref1, ref2, tangent, info):
    jacobian = identity_matrix(info.dof, info.scalar_type)

    def visit(component, other, offset):
        nonlocal jacobian
        dof = dof_of(component)
        sub_error = None if tangent is None else noise_segment(tangent, offset, dof)
        block = transform_reference_jacobian(component, other, sub_error)
        jacobian = set_block(jacobian, offset, offset, block)

    ref1.for_each_component_paired(ref2, visit)
    return jacobian


def transform_reference_jacobian(ref1, ref2, er1: Optional[Any] = None):
    """
    Jacobian moving an error from reference ref1 to reference ref2.

    Args:
        ref1: base reference (manifold, vector or scalar)
        ref2: target reference, same type as ref1
        er1: mean of the error relative to ref1, shape (dof,); None for a
             zero-mean error

    Returns:
        (dof, dof) Jacobian. Identity when ref1 == ref2 and er1 is zero.
    """
    info = resolve(ref1)
    tangent = None if er1 is None else _as_tangent(er1, info.dof)
    if is_compound(ref1):
        return _compound_jacobian(ref1, ref2, tangent, info)
    return _atomic_jacobian(ref1, ref2, tangent, info)


def transform_covariance(
    covariance,
    ref1,
    ref2,
    er1: Optional[Any] = None,
    regularize: bool = False,
    eps: Optional[float] = None,
):
    """
    Carry a covariance from reference ref1 over to reference ref2.

    Computes J P J^T with J = transform_reference_jacobian(ref1, ref2, er1),
    optionally followed by assure_positive_definite.
    """
    info = resolve(ref1)
    covariance = evaluate(covariance)
    if covariance.shape != info.covariance_shape:
        raise ValueError(
            f"Covariance of shape {covariance.shape} does not match dof {info.dof}"
        )
    assert_finite(covariance)
    jacobian = jnp.asarray(transform_reference_jacobian(ref1, ref2, er1))
    transformed = jacobian @ covariance @ jacobian.T
    if regularize:
        transformed = assure_positive_definite(transformed, eps)
    return transformed


__all__ = ['transform_reference_jacobian', 'transform_covariance']
