#!/usr/bin/env python3
"""
adkf CLI - diagnostics for the manifold filter core

Command-line interface for inspecting the numeric configuration, the
derivator seeds and covariance matrices dumped by a filter.

Usage:
    adkf info                       Show configuration and JAX backend
    adkf basis 3                    Print the derivator basis of size 3
    adkf check '[[1, 0], [0, 1]]'   Finiteness / positive-definiteness report
    adkf regularize cov.json        Regularize a covariance matrix
"""
import argparse
import json
import logging
import os
import sys

import numpy as np

from .jax_init import jax, jnp


def _load_matrix(source: str) -> np.ndarray:
    """Parse a matrix given as JSON text or as a path to a JSON file."""
    if os.path.isfile(source):
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        data = json.loads(source)
    matrix = np.asarray(data, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got shape {matrix.shape}")
    return matrix


def cmd_info(args):
    """Show configuration and backend information."""
    from . import __version__, get_config

    config = get_config()
    print(f"adkf {__version__}")
    print(f"  JAX {jax.__version__} on {jax.default_backend()}")
    print(f"  x64 enabled:            {jax.config.jax_enable_x64}")
    print(f"  large matrix threshold: {config.large_matrix_threshold}")
    print(f"  default eps:            {config.default_eps:g}")
    print(f"  checks enabled:         {config.checks_enabled}")
    return 0


def cmd_basis(args):
    """Print the derivator basis of the requested size."""
    from .autodiff import derivator_basis

    basis = derivator_basis(args.size)
    print(f"Derivator basis of size {args.size} ({basis.partials.dtype}):")
    print(f"  value:    {np.array2string(np.asarray(basis.value))}")
    print("  partials:")
    for row in np.asarray(basis.partials):
        print(f"    {np.array2string(row)}")
    return 0


def cmd_check(args):
    """Report finiteness and positive definiteness of a matrix."""
    from .covariance import is_positive_definite
    from .numerics import is_finite

    try:
        matrix = _load_matrix(args.matrix)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finite = is_finite(matrix)
    positive = finite and is_positive_definite(matrix)
    print(f"Matrix {matrix.shape[0]}x{matrix.shape[1]}:")
    print(f"  finite:             {'yes' if finite else 'NO'}")
    print(f"  positive definite:  {'yes' if positive else 'NO'}")
    if finite and matrix.shape[0] == matrix.shape[1]:
        eigvals = jnp.linalg.eigvalsh(jnp.asarray(matrix))
        print(f"  min eigenvalue:     {float(eigvals[0]):.6g}")
    return 0 if positive else 1


def cmd_regularize(args):
    """Regularize a matrix and print the result."""
    from .core.errors import NumericError
    from .covariance import regularize_covariance

    try:
        matrix = _load_matrix(args.matrix)
        result = regularize_covariance(matrix, args.eps)
    except (ValueError, NumericError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    repaired = np.asarray(result.matrix)
    eigvals = np.asarray(jnp.linalg.eigvalsh(jnp.asarray(repaired)))
    print(f"Clamped eigenvalues: {result.clamped}")
    print(f"Eigenvalues: {np.array2string(eigvals)}")
    print(json.dumps(repaired.tolist()))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='adkf',
        description='adkf - diagnostics for the manifold filter core',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  adkf info                          Show configuration
  adkf basis 6                       Derivator seed for a 6-dof state
  adkf check cov.json                Is the covariance usable?
  adkf regularize cov.json --eps 1e-9
"""
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    subparsers.add_parser('info', help='Show configuration and backend')

    basis_parser = subparsers.add_parser('basis', help='Print a derivator basis')
    basis_parser.add_argument('size', type=int, help='Basis dimension')

    check_parser = subparsers.add_parser('check', help='Check a covariance matrix')
    check_parser.add_argument('matrix', help='JSON matrix or path to a JSON file')

    reg_parser = subparsers.add_parser('regularize', help='Regularize a covariance matrix')
    reg_parser.add_argument('matrix', help='JSON matrix or path to a JSON file')
    reg_parser.add_argument('--eps', type=float, default=None,
                            help='Smallest eigenvalue to keep')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == 'info':
        return cmd_info(args)
    elif args.command == 'basis':
        return cmd_basis(args)
    elif args.command == 'check':
        return cmd_check(args)
    elif args.command == 'regularize':
        return cmd_regularize(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
