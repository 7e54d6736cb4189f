"""
Dual vectors on top of JAX forward mode.

A DualVector is a vector of dual numbers stored column-wise:

    value:    (n,)    the real parts
    partials: (n, k)  row i holds the k derivative components of entry i

It supports + and - with plain arrays (shifting the value) and with other
dual vectors of the same order. Anything more elaborate is left to JAX:
propagate() pushes a dual vector through an arbitrary traceable function
with jax.jvp, batched over the k derivative components with jax.vmap.
This is the same push-forward jax.jacfwd performs, exposed so the seed can
be built and cached separately.
"""
from __future__ import annotations

from typing import Callable

from ..jax_init import jax, jnp


@jax.tree_util.register_pytree_node_class
class DualVector:
    """Vector of dual numbers with k derivative components each."""

    # Make NumPy binary operators defer to the reflected methods below.
    __array_ufunc__ = None

    def __init__(self, value, partials):
        self.value = value
        self.partials = partials

    def tree_flatten(self):
        return (self.value, self.partials), None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        return cls(*children)

    @property
    def size(self) -> int:
        return self.value.shape[0]

    @property
    def order(self) -> int:
        """Number of derivative components per entry."""
        return self.partials.shape[1]

    def _check_compatible(self, other: 'DualVector') -> None:
        if other.order != self.order:
            raise ValueError(
                f"Cannot combine dual vectors with {self.order} and {other.order}"
                " derivative components"
            )

    def __add__(self, other):
        if isinstance(other, DualVector):
            self._check_compatible(other)
            return DualVector(
                jnp.asarray(self.value) + other.value,
                jnp.asarray(self.partials) + other.partials,
            )
        return DualVector(jnp.asarray(self.value) + other, self.partials)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, DualVector):
            self._check_compatible(other)
            return DualVector(
                jnp.asarray(self.value) - other.value,
                jnp.asarray(self.partials) - other.partials,
            )
        return DualVector(jnp.asarray(self.value) - other, self.partials)

    def __rsub__(self, other):
        return DualVector(other - jnp.asarray(self.value), -jnp.asarray(self.partials))

    def __neg__(self):
        return DualVector(-jnp.asarray(self.value), -jnp.asarray(self.partials))

    def __repr__(self):
        return f"DualVector(size={self.size}, order={self.order})"


def propagate(fn: Callable, seed: DualVector) -> DualVector:
    """
    Evaluate fn at a dual vector.

    Args:
        fn: JAX-traceable function from a (n,) vector to any array; the
            output is flattened to a vector
        seed: input dual vector, typically x0 + derivator_basis(n)

    Returns:
        DualVector with value fn(seed.value) and partials d fn / d seed
    """
    primal = jnp.asarray(seed.value)
    tangents = jnp.asarray(seed.partials, dtype=primal.dtype)

    def flat_fn(x):
        return jnp.ravel(fn(x))

    def pushforward(tangent):
        return jax.jvp(flat_fn, (primal,), (tangent,))

    value, partials = jax.vmap(pushforward, in_axes=1, out_axes=(None, 1))(tangents)
    return DualVector(value, partials)


__all__ = ['DualVector', 'propagate']
