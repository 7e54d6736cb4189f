"""
Forward-mode differentiation primitives.

- DualVector / propagate: dual vectors over jax.jvp
- derivator_basis: cached identity seed per dimension
- extract_jacobian: dense Jacobian from a dual vector
"""
from .dual import DualVector, propagate
from .derivator import (
    derivator_basis,
    precompute_derivators,
    cached_derivator_keys,
    clear_derivator_cache,
)
from .jacobian import (
    is_large_matrix,
    is_traced,
    extract_jacobian,
    identity_matrix,
    set_block,
)

__all__ = [
    'DualVector',
    'propagate',
    'derivator_basis',
    'precompute_derivators',
    'cached_derivator_keys',
    'clear_derivator_cache',
    'is_large_matrix',
    'is_traced',
    'extract_jacobian',
    'identity_matrix',
    'set_block',
]
