"""
Tests for the finiteness guard and small helpers.

Tests cover:
- is_finite on scalars, arrays and dual vectors
- assert_finite reports the first offending argument
- assert_finite is skipped when checks are disabled
- evaluate / noise_segment helpers
"""
import pytest
import jax
import jax.numpy as jnp
import numpy as np

from adkf import (
    DualVector,
    NonFiniteError,
    NumericError,
    assert_finite,
    derivator_basis,
    evaluate,
    is_finite,
    noise_segment,
    override_config,
)
from tests.geometry.manifolds import SO3


class TestIsFinite:

    @pytest.mark.parametrize("value", [1.0, np.float32(2.0), jnp.ones((2, 3)), np.zeros(4)])
    def test_finite(self, value):
        assert is_finite(value)

    @pytest.mark.parametrize("value", [float("nan"), jnp.array([1.0, jnp.inf]), np.array([[0.0, -np.inf]])])
    def test_non_finite(self, value):
        assert not is_finite(value)

    def test_dual_vector(self):
        assert is_finite(derivator_basis(3))
        assert not is_finite(DualVector(jnp.zeros(2), jnp.array([[1.0, jnp.nan], [0.0, 1.0]])))


class TestAssertFinite:

    def test_no_arguments(self):
        assert_finite()

    def test_all_finite(self):
        assert_finite(1.0, jnp.eye(3), np.ones(2))

    def test_reports_first_violation(self):
        with pytest.raises(NonFiniteError, match="Argument 1"):
            assert_finite(1.0, jnp.array([jnp.nan]), jnp.array([jnp.inf]))

    def test_is_numeric_error(self):
        with pytest.raises(ArithmeticError):
            assert_finite(float("inf"))
        with pytest.raises(NumericError):
            assert_finite(float("inf"))

    def test_disabled_checks(self):
        with override_config(checks_enabled=False):
            assert_finite(jnp.array([jnp.nan]))


class TestEvaluate:

    def test_python_and_numpy_become_jax(self):
        assert isinstance(evaluate(2.0), jax.Array)
        assert isinstance(evaluate(np.ones(3)), jax.Array)

    def test_pass_through(self):
        x = jnp.ones(2)
        rotation = SO3.identity()
        basis = derivator_basis(2)
        assert evaluate(x) is x
        assert evaluate(rotation) is rotation
        assert evaluate(basis) is basis


class TestNoiseSegment:

    def test_segment(self):
        noise = jnp.arange(6.0)
        np.testing.assert_array_equal(noise_segment(noise, 2, 3), [2.0, 3.0, 4.0])

    def test_full_and_empty(self):
        noise = jnp.arange(4.0)
        assert noise_segment(noise, 0, 4).shape == (4,)
        assert noise_segment(noise, 4, 0).shape == (0,)

    @pytest.mark.parametrize("start,size", [(-1, 2), (3, 2), (0, 5)])
    def test_out_of_range(self, start, size):
        with pytest.raises(ValueError, match="out of range"):
            noise_segment(jnp.arange(4.0), start, size)
