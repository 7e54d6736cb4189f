"""
Core state type system.

- StateDescriptor / StateKind: uniform description of state types
- Manifold / CompoundManifold: capability base classes
- resolve and the dof_of / global_size_of / scalar_of helpers
- the adkf exception hierarchy
"""
from .errors import (
    AdkfError,
    StateTypeError,
    NumericError,
    NonFiniteError,
    RegularizationError,
)
from .types import (
    StateKind,
    StateDescriptor,
    Manifold,
    CompoundManifold,
)
from .traits import (
    resolve,
    dof_of,
    global_size_of,
    scalar_of,
    is_manifold,
    is_compound,
    covariance_of,
)

__all__ = [
    'AdkfError',
    'StateTypeError',
    'NumericError',
    'NonFiniteError',
    'RegularizationError',
    'StateKind',
    'StateDescriptor',
    'Manifold',
    'CompoundManifold',
    'resolve',
    'dof_of',
    'global_size_of',
    'scalar_of',
    'is_manifold',
    'is_compound',
    'covariance_of',
]
