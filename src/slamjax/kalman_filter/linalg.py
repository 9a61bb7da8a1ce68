"""Covariance validity checks and the symmetric matrix square root.

The checks raise on a bad covariance and never repair it.  They read
concrete values and must run eagerly (outside ``jax.jit``).
"""

from __future__ import annotations

import math

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from slamjax.config import get_symmetry_tolerance
from slamjax.kalman_filter._errors import (
    NegativeDefinitenessError,
    SymmetryViolationError,
)


def outer_product(v: ArrayLike) -> Array:
    """Return the outer product ``v v^T`` of a vector with itself.

    Args:
        v: Vector of shape ``(n,)``.

    Returns:
        Array: Matrix of shape ``(n, n)``.
    """
    v = jnp.asarray(v)
    return jnp.outer(v, v)


def check_symmetric(A: ArrayLike) -> None:
    """Check that ``A`` is a symmetric matrix.

    The Frobenius norm of ``A - A^T`` must be finite and below
    :func:`~slamjax.config.get_symmetry_tolerance`.

    Args:
        A: Square matrix of shape ``(n, n)``.

    Raises:
        SymmetryViolationError: If the norm is NaN or too large.
    """
    A = jnp.asarray(A)
    norm = float(jnp.linalg.norm(A - A.T))
    if math.isnan(norm) or abs(norm) >= get_symmetry_tolerance():
        raise SymmetryViolationError(
            f"Symmetry check failed with norm: '{norm}' from matrix:\n{A}"
        )


def check_non_negative_definite(A: ArrayLike) -> None:
    """Check that a symmetric matrix has no significantly negative eigenvalue.

    Small negative eigenvalues down to ``-get_symmetry_tolerance()`` are
    accepted as numerical noise.

    Args:
        A: Symmetric matrix of shape ``(n, n)``.

    Raises:
        SymmetryViolationError: If ``A`` is not symmetric.
        NegativeDefinitenessError: If the minimum eigenvalue is too negative.
    """
    check_symmetric(A)
    A = jnp.asarray(A)
    eigenvalues = jnp.linalg.eigvalsh((A + A.T) / 2.0)
    _check_eigenvalues(eigenvalues)


def _check_eigenvalues(eigenvalues: Array) -> None:
    if not float(jnp.min(eigenvalues)) > -get_symmetry_tolerance():
        raise NegativeDefinitenessError(
            f"Matrix is not positive semi-definite, eigenvalues: {eigenvalues}"
        )


def matrix_sqrt(A: ArrayLike) -> Array:
    """Return the symmetric square root of a symmetric PSD matrix.

    Computes ``B = V diag(sqrt(max(0, lambda_i))) V^T`` from the
    eigendecomposition of the symmetrized input ``(A + A^T) / 2``, so that
    ``B @ B.T`` reconstructs ``A`` up to floating-point error.  Negative
    eigenvalue noise within tolerance is clamped to zero.

    Args:
        A: Symmetric positive semi-definite matrix of shape ``(n, n)``.

    Returns:
        Array: Symmetric matrix ``B`` of shape ``(n, n)``.

    Raises:
        SymmetryViolationError: If ``A`` is not symmetric.
        NegativeDefinitenessError: If ``A`` has a significantly negative
            eigenvalue.

    Examples:
        ```python
        import jax.numpy as jnp
        from slamjax.kalman_filter import matrix_sqrt

        B = matrix_sqrt(jnp.array([[4.0, 0.0], [0.0, 9.0]]))  # diag(2, 3)
        ```
    """
    A = jnp.asarray(A)
    check_symmetric(A)

    eigenvalues, eigenvectors = jnp.linalg.eigh((A + A.T) / 2.0)
    _check_eigenvalues(eigenvalues)

    root = jnp.sqrt(jnp.maximum(eigenvalues, 0.0))
    return eigenvectors @ jnp.diag(root) @ eigenvectors.T
