"""
Exception hierarchy for the adkf core.

- StateTypeError: a type cannot be classified as a state (manifold,
  vector or scalar). Also a TypeError, so generic handlers keep working.
- NumericError: numeric sanity failures. NonFiniteError for NaN/Inf,
  RegularizationError when a regularized covariance is still not
  positive definite.
"""
from __future__ import annotations


class AdkfError(Exception):
    """Base class for all adkf errors."""


class StateTypeError(AdkfError, TypeError):
    """Raised when a type has no state descriptor."""


class NumericError(AdkfError, ArithmeticError):
    """Raised when a numeric sanity check fails."""


class NonFiniteError(NumericError):
    """A value that must be finite contains NaN or Inf."""


class RegularizationError(NumericError):
    """A regularized matrix failed its positive-definiteness postcondition."""


__all__ = [
    'AdkfError',
    'StateTypeError',
    'NumericError',
    'NonFiniteError',
    'RegularizationError',
]
