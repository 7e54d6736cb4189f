"""
Pytest configuration and shared fixtures for the adkf test-suite.

Provides JAX-aware fixtures (x64, reproducible PRNG keys) plus reference
points on the test manifolds.
"""
import zlib

import pytest
import jax
import jax.numpy as jnp

from adkf import clear_derivator_cache

# Reference-change Jacobians are compared at double precision
jax.config.update("jax_enable_x64", True)


@pytest.fixture(scope="session")
def base_key():
    """Root PRNG key for all tests."""
    return jax.random.PRNGKey(42)


def stable_seed(nodeid: str) -> int:
    """Seed from a test id; unlike hash(), independent of PYTHONHASHSEED."""
    return zlib.crc32(nodeid.encode("utf-8")) % (2**31)


@pytest.fixture
def key(base_key, request):
    """Per-test PRNG key derived from the test id, stable across runs."""
    return jax.random.fold_in(base_key, stable_seed(request.node.nodeid))


@pytest.fixture(params=[1, 2, 3, 6, 9])
def dim(request):
    """Parametrized state dimension."""
    return request.param


@pytest.fixture
def fresh_derivators():
    """Empty derivator cache before and after the test."""
    clear_derivator_cache()
    yield
    clear_derivator_cache()


@pytest.fixture
def random_spd(key):
    """Factory for random well-conditioned SPD matrices."""
    def make(n, floor=0.5):
        A = jax.random.normal(key, (n, n))
        return A @ A.T + floor * jnp.eye(n)
    return make


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "invariant: mathematical invariant verification")
