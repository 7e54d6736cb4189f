"""
Integration Tests for the Reference-Change Pipeline

Tests the flow a filter runs when it re-linearizes:
- estimate with error mean -> reference-change Jacobian -> covariance
  carried to the new reference -> regularization
- end-to-end scalar and compound scenarios
- concurrent use of the engine from several threads
"""
from concurrent.futures import ThreadPoolExecutor

import pytest
import jax
import jax.numpy as jnp
import numpy as np

from adkf import (
    NonFiniteError,
    clear_derivator_cache,
    is_positive_definite,
    transform_covariance,
    transform_reference_jacobian,
)
from tests.geometry.manifolds import (
    SO3, Pose, ScalarPair, Body, so3_exp, random_pose, random_body,
)
from tests.geometry.invariants import assert_identity, assert_spd


class TestEndToEndScenarios:

    def test_scalar_manifold(self):
        np.testing.assert_allclose(transform_reference_jacobian(3.0, 5.0), [[1.0]])

    def test_two_scalar_compound(self):
        J = transform_reference_jacobian(ScalarPair(1.0, 2.0), ScalarPair(3.0, 4.0))
        np.testing.assert_array_equal(np.asarray(J), np.eye(2))
        assert J[0, 1] == 0.0 and J[1, 0] == 0.0


class TestCovarianceFlow:

    def test_relinearize_pose(self, key, random_spd):
        k1, k2 = jax.random.split(key)
        estimate = random_pose(k1)
        er1 = jnp.array([0.05, -0.02, 0.1, 0.3, 0.0, -0.2])
        # new reference: the old one moved by the error mean
        new_reference = estimate + er1
        P = random_spd(6)

        P_new = transform_covariance(P, estimate, new_reference, er1)
        J = transform_reference_jacobian(estimate, new_reference, er1)
        np.testing.assert_allclose(P_new, J @ P @ J.T, atol=1e-12)
        assert_spd(P_new)

    def test_moving_to_the_mean_centres_the_error(self, key):
        estimate = random_pose(key)
        er1 = jnp.array([0.05, -0.02, 0.1, 0.3, 0.0, -0.2])
        new_reference = estimate + er1
        np.testing.assert_allclose(estimate + er1 - new_reference, jnp.zeros(6), atol=1e-12)
        # Position block of the Jacobian is unaffected by the error mean
        J = transform_reference_jacobian(estimate, new_reference, er1)
        assert_identity(J[3:, 3:], 3)

    def test_unchanged_reference_keeps_covariance(self, key, random_spd):
        ref = random_body(key)
        P = random_spd(10)
        np.testing.assert_allclose(transform_covariance(P, ref, ref), P, atol=1e-10)

    def test_regularize_after_transform(self, key):
        ref = random_pose(key)
        # Rank-deficient covariance: one direction has no uncertainty
        v = jnp.arange(1.0, 7.0)
        P = jnp.outer(v, v)
        P_new = transform_covariance(P, ref, ref, regularize=True, eps=1e-6)
        assert is_positive_definite(P_new)
        assert_spd(P_new, 1e-6)

    def test_shape_mismatch(self, key):
        with pytest.raises(ValueError, match="dof 6"):
            transform_covariance(jnp.eye(3), random_pose(key), random_pose(key))

    def test_non_finite_covariance(self, key):
        ref = random_pose(key)
        P = jnp.eye(6).at[0, 0].set(jnp.nan)
        with pytest.raises(NonFiniteError):
            transform_covariance(P, ref, ref)


class TestConcurrency:

    def test_threads_share_cold_cache(self, key):
        clear_derivator_cache()
        refs = [random_body(k) for k in jax.random.split(key, 8)]
        expected = [np.asarray(transform_reference_jacobian(r, refs[0])) for r in refs]
        clear_derivator_cache()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda r: transform_reference_jacobian(r, refs[0]), refs))

        for got, want in zip(results, expected):
            np.testing.assert_allclose(np.asarray(got), want, atol=1e-14)
