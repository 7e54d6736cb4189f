"""
Type trait resolver.

Classifies anything that may appear in a filter state (manifolds, fixed-size
vectors, floating scalars) into a StateDescriptor. Resolution order:

1. Qualifiers are stripped: Annotated[T, ...] resolves as T.
2. Manifold types and instances report their declared attributes.
3. One-dimensional floating arrays (jax.Array, tracers included,
   numpy.ndarray, jax.ShapeDtypeStruct) have dof == global_size == length.
4. float and NumPy floating scalars have dof == global_size == 1.

Everything else raises StateTypeError.
"""
from __future__ import annotations

import typing
from typing import Any

import numpy as np

from ..jax_init import jax, jnp
from .errors import StateTypeError
from .types import CompoundManifold, Manifold, StateDescriptor, StateKind


_ARRAY_TYPES = (jax.Array, np.ndarray, jax.ShapeDtypeStruct)


def _strip_qualifiers(x: Any) -> Any:
    while typing.get_origin(x) is typing.Annotated:
        x = typing.get_args(x)[0]
    return x


def _resolve_manifold(cls: type) -> StateDescriptor:
    try:
        dof = cls.dof
        global_size = cls.global_size
    except AttributeError as exc:
        raise StateTypeError(
            f"Manifold {cls.__name__} must declare 'dof' and 'global_size'"
        ) from exc
    if not isinstance(dof, int) or not isinstance(global_size, int):
        raise StateTypeError(
            f"Manifold {cls.__name__} declares non-integer dof/global_size"
        )
    return StateDescriptor(
        scalar_type=np.dtype(cls.scalar_type),
        dof=dof,
        global_size=global_size,
        canonical_type=cls,
        kind=StateKind.MANIFOLD,
    )


def _resolve_array(shape, dtype) -> StateDescriptor:
    dtype = np.dtype(dtype)
    if not jnp.issubdtype(dtype, jnp.floating):
        raise StateTypeError(f"State arrays must be floating, got dtype {dtype}")
    if len(shape) == 0:
        return StateDescriptor(dtype, 1, 1, dtype.type, StateKind.SCALAR)
    if len(shape) == 1:
        return StateDescriptor(dtype, shape[0], shape[0], jax.Array, StateKind.VECTOR)
    raise StateTypeError(f"State arrays must be vectors, got shape {tuple(shape)}")


def _resolve_type(cls: type) -> StateDescriptor:
    if issubclass(cls, Manifold):
        return _resolve_manifold(cls)
    if issubclass(cls, np.floating):
        return StateDescriptor(np.dtype(cls), 1, 1, cls, StateKind.SCALAR)
    if cls is float:
        return StateDescriptor(np.dtype(np.float64), 1, 1, float, StateKind.SCALAR)
    if issubclass(cls, _ARRAY_TYPES):
        raise StateTypeError(
            f"The size of {cls.__name__} is only known from an instance;"
            " pass the array or a jax.ShapeDtypeStruct"
        )
    raise StateTypeError(f"{cls.__name__} is not a manifold, vector or floating scalar")


def resolve(x: Any) -> StateDescriptor:
    """
    Resolve the state descriptor of a type or a value.

    Args:
        x: a state type (Manifold subclass, float, np.float32, ...), a state
           value, or a jax.ShapeDtypeStruct describing a vector

    Returns:
        StateDescriptor with scalar type, dof and global size

    Raises:
        StateTypeError: if x is none of the supported categories
    """
    x = _strip_qualifiers(x)
    if isinstance(x, type):
        return _resolve_type(x)
    if isinstance(x, Manifold):
        return _resolve_manifold(type(x))
    if isinstance(x, _ARRAY_TYPES):
        return _resolve_array(x.shape, x.dtype)
    return _resolve_type(type(x))


def dof_of(x: Any) -> int:
    """Tangent-space dimension of a state type or value."""
    return resolve(x).dof


def global_size_of(x: Any) -> int:
    """Stored coordinate count of a state type or value."""
    return resolve(x).global_size


def scalar_of(x: Any) -> np.dtype:
    """Scalar dtype of a state type or value."""
    return resolve(x).scalar_type


def is_manifold(x: Any) -> bool:
    x = _strip_qualifiers(x)
    cls = x if isinstance(x, type) else type(x)
    return issubclass(cls, Manifold)


def is_compound(x: Any) -> bool:
    x = _strip_qualifiers(x)
    cls = x if isinstance(x, type) else type(x)
    return issubclass(cls, CompoundManifold)


def covariance_of(x: Any, scale: float = 1.0) -> jnp.ndarray:
    """Scaled dof x dof identity in the scalar type of x."""
    info = resolve(x)
    return scale * jnp.eye(info.dof, dtype=info.scalar_type)


__all__ = [
    'resolve',
    'dof_of',
    'global_size_of',
    'scalar_of',
    'is_manifold',
    'is_compound',
    'covariance_of',
]
