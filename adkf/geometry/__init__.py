"""
Geometry of manifold-valued errors: reference-change Jacobians.
"""
from .reference import (
    transform_reference_jacobian,
    transform_covariance,
)

__all__ = [
    'transform_reference_jacobian',
    'transform_covariance',
]
