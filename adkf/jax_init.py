"""
JAX initialization for the adkf core.

Imported before any other adkf module touches JAX so that the precision
switch is applied once, at import time. Covariance regularization and
reference-change Jacobians are numerically fragile in single precision,
so x64 is on unless ADKF_ENABLE_X64=0.

Usage:
    from adkf.jax_init import jax, jnp
"""
from __future__ import annotations

import jax
import jax.numpy as jnp

from .config import get_config

if get_config().enable_x64:
    jax.config.update("jax_enable_x64", True)

__all__ = ["jax", "jnp"]
