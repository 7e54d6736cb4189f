"""
Derivator: the identity seed for forward-mode differentiation.

derivator_basis(n) is the dual vector whose entry i has real part 0 and
derivative components e_i. Adding it to a point x0 and pushing the result
through f yields f(x0) together with the full Jacobian in one pass.

Bases are pure data and are cached per (size, dtype). The cache is filled
under a lock with a double-checked lookup, so concurrent first use stores
exactly one basis per key. Cached arrays are read-only NumPy arrays, which
keeps them free of JAX tracers when the first request happens inside a
transformation.
"""
from __future__ import annotations

import logging
import operator
import threading
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from ..jax_init import jax
from .dual import DualVector

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_bases: Dict[Tuple[int, str], DualVector] = {}


def _canonical(dtype) -> np.dtype:
    # float64 maps to float32 when x64 is disabled
    return np.dtype(jax.dtypes.canonicalize_dtype(dtype))


def _build_basis(size: int, dtype: np.dtype) -> DualVector:
    value = np.zeros(size, dtype=dtype)
    partials = np.eye(size, dtype=dtype)
    value.setflags(write=False)
    partials.setflags(write=False)
    return DualVector(value, partials)


def derivator_basis(size: int, dtype=None) -> DualVector:
    """
    Identity seed of the given dimension.

    Args:
        size: number of inputs differentiated simultaneously
        dtype: scalar type of the seed (default: float64, float32 without x64)

    Returns:
        DualVector with zero value and identity partials

    Raises:
        ValueError: if size < 1
    """
    size = operator.index(size)
    if size < 1:
        raise ValueError(f"Derivator size must be positive, got {size}")
    dtype = _canonical(np.float64 if dtype is None else dtype)
    key = (size, dtype.str)

    basis = _bases.get(key)
    if basis is None:
        with _lock:
            basis = _bases.get(key)
            if basis is None:
                basis = _build_basis(size, dtype)
                _bases[key] = basis
                logger.debug("Cached derivator basis size=%d dtype=%s", size, dtype)
    return basis


def precompute_derivators(sizes: Iterable[int], dtype=None) -> None:
    """Fill the cache ahead of concurrent use."""
    for size in sizes:
        derivator_basis(size, dtype)


def cached_derivator_keys() -> Tuple[Tuple[int, str], ...]:
    with _lock:
        return tuple(sorted(_bases))


def clear_derivator_cache(dtype: Optional[object] = None) -> None:
    """Drop cached bases, all of them or those of one dtype."""
    with _lock:
        if dtype is None:
            _bases.clear()
            return
        dtype_str = np.dtype(dtype).str
        for key in [k for k in _bases if k[1] == dtype_str]:
            del _bases[key]


__all__ = [
    'derivator_basis',
    'precompute_derivators',
    'cached_derivator_keys',
    'clear_derivator_cache',
]
