"""
adkf: automatic-differentiation core for manifold Kalman filters

This package provides the primitives that let a Kalman-filter style
estimator work on manifold-valued states (rotations, poses and compounds
of them) with forward-mode differentiation instead of hand-derived
Jacobians:

Core Types (adkf.core):
    - StateDescriptor: scalar type, dof and global size of a state type
    - Manifold / CompoundManifold: capability base classes
    - resolve: trait resolver for manifolds, vectors and scalars

Differentiation (adkf.autodiff):
    - DualVector / propagate: dual vectors over jax.jvp
    - derivator_basis: cached identity seed per dimension
    - extract_jacobian: dense Jacobian from a dual vector

Geometry (adkf.geometry):
    - transform_reference_jacobian: Jacobian of a reference change
    - transform_covariance: covariance carried to a new reference

Numerics:
    - is_positive_definite / assure_positive_definite: covariance repair
    - assert_finite: NaN/Inf guard

Usage:
    from adkf import transform_reference_jacobian, assure_positive_definite

    J = transform_reference_jacobian(old_estimate, new_estimate)
    P = assure_positive_definite(J @ P @ J.T)
"""
import logging

from .config import (
    NumericsConfig,
    get_config,
    set_config,
    override_config,
)

# =============================================================================
# Core Types (adkf.core)
# =============================================================================
from .core import (
    AdkfError,
    StateTypeError,
    NumericError,
    NonFiniteError,
    RegularizationError,
    StateKind,
    StateDescriptor,
    Manifold,
    CompoundManifold,
    resolve,
    dof_of,
    global_size_of,
    scalar_of,
    is_manifold,
    is_compound,
    covariance_of,
)

# =============================================================================
# Differentiation (adkf.autodiff)
# =============================================================================
from .autodiff import (
    DualVector,
    propagate,
    derivator_basis,
    precompute_derivators,
    clear_derivator_cache,
    extract_jacobian,
)

# =============================================================================
# Geometry (adkf.geometry)
# =============================================================================
from .geometry import (
    transform_reference_jacobian,
    transform_covariance,
)

# =============================================================================
# Numerics
# =============================================================================
from .covariance import (
    Regularization,
    is_positive_definite,
    regularize_covariance,
    assure_positive_definite,
    rounding_floor,
)
from .numerics import is_finite, assert_finite
from .utils import evaluate, noise_segment

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "NumericsConfig",
    "get_config",
    "set_config",
    "override_config",
    # Errors
    "AdkfError",
    "StateTypeError",
    "NumericError",
    "NonFiniteError",
    "RegularizationError",
    # Core types
    "StateKind",
    "StateDescriptor",
    "Manifold",
    "CompoundManifold",
    "resolve",
    "dof_of",
    "global_size_of",
    "scalar_of",
    "is_manifold",
    "is_compound",
    "covariance_of",
    # Differentiation
    "DualVector",
    "propagate",
    "derivator_basis",
    "precompute_derivators",
    "clear_derivator_cache",
    "extract_jacobian",
    # Geometry
    "transform_reference_jacobian",
    "transform_covariance",
    # Numerics
    "Regularization",
    "is_positive_definite",
    "regularize_covariance",
    "assure_positive_definite",
    "rounding_floor",
    "is_finite",
    "assert_finite",
    "evaluate",
    "noise_segment",
]
