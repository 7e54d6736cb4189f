"""
State type taxonomy for manifold-valued filtering.

Every value that can sit inside a filter state falls in one of three
categories:

- MANIFOLD: a type with a retraction (+) and local coordinates (-), whose
  tangent dimension (dof) may be smaller than its stored size
- VECTOR: a fixed-size floating vector, dof == global_size == length
- SCALAR: a single floating number, dof == global_size == 1

StateDescriptor is the uniform description the trait resolver produces for
all three. Manifold and CompoundManifold are the capability base classes
concrete state types derive from.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Tuple

import numpy as np

from ..jax_init import jnp
from .errors import StateTypeError


class StateKind(Enum):
    """Category a state type resolves to."""
    MANIFOLD = "manifold"
    VECTOR = "vector"
    SCALAR = "scalar"


@dataclass(frozen=True)
class StateDescriptor:
    """
    Uniform description of a state type.

    Attributes:
        scalar_type: NumPy dtype of the coordinates
        dof: tangent-space dimension, used for errors and covariances
        global_size: number of stored (ambient) coordinates, >= dof
        canonical_type: the plain type values of this state are stored as
        kind: which category the type resolved through
    """
    scalar_type: np.dtype
    dof: int
    global_size: int
    canonical_type: type
    kind: StateKind = StateKind.MANIFOLD

    def __post_init__(self):
        if self.dof < 1:
            raise StateTypeError(f"dof must be positive, got {self.dof}")
        if self.global_size < self.dof:
            raise StateTypeError(
                f"global_size ({self.global_size}) must be >= dof ({self.dof})"
                f" for {self.canonical_type.__name__}"
            )

    @property
    def covariance_shape(self) -> Tuple[int, int]:
        return (self.dof, self.dof)


class Manifold:
    """
    Base class of all manifold state types.

    Subclasses declare the class attributes ``scalar_type``, ``dof`` and
    ``global_size`` and implement

        self + delta  -> Manifold       (retraction, delta has shape (dof,))
        self - other  -> jnp.ndarray    (local coordinates, shape (dof,))

    with jax.numpy so both can be traced by forward-mode differentiation.
    """
    scalar_type: ClassVar[Any] = np.float64
    dof: ClassVar[int]
    global_size: ClassVar[int]

    def __add__(self, delta):
        raise NotImplementedError

    def __sub__(self, other):
        raise NotImplementedError


class CompoundManifold(Manifold):
    """
    Manifold made of an ordered, fixed set of sub-manifolds and sub-vectors.

    Subclasses are dataclasses naming their constituent fields in
    ``components``; that order is the tangent-space layout. The declared
    ``dof`` must equal the sum of the component dofs (not checked).

    Retraction and local coordinates act component-wise, so subclasses only
    need to declare their fields.
    """
    components: ClassVar[Tuple[str, ...]] = ()

    def component_values(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self.components)

    def for_each_component_paired(
        self,
        other: 'CompoundManifold',
        visitor: Callable[[Any, Any, int], None],
    ) -> None:
        """
        Call ``visitor(component, other_component, offset)`` per component.

        Components are visited in declared order; ``offset`` is the start of
        the component's slice in the tangent space.
        """
        from .traits import dof_of

        if type(other) is not type(self):
            raise StateTypeError(
                f"Cannot pair {type(self).__name__} with {type(other).__name__}"
            )
        offset = 0
        for name in self.components:
            component = getattr(self, name)
            visitor(component, getattr(other, name), offset)
            offset += dof_of(component)

    def with_components(self, **values) -> 'CompoundManifold':
        """Copy of self with some components replaced."""
        return dataclasses.replace(self, **values)

    def __add__(self, delta):
        from .traits import resolve

        delta = jnp.ravel(jnp.asarray(delta))
        updates = {}
        offset = 0
        for name in self.components:
            component = getattr(self, name)
            info = resolve(component)
            step = delta[offset:offset + info.dof]
            if info.kind is StateKind.SCALAR:
                step = step[0]
            updates[name] = component + step
            offset += info.dof
        return self.with_components(**updates)

    def __sub__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        parts = [
            jnp.atleast_1d(mine - theirs)
            for mine, theirs in zip(self.component_values(), other.component_values())
        ]
        return jnp.concatenate(parts)


__all__ = [
    'StateKind',
    'StateDescriptor',
    'Manifold',
    'CompoundManifold',
]
