"""Module-wide floating-point precision configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
throughout slamjax.  The default is ``jnp.float64``: the default unscented
transform parameters (``alpha=1e-3``) produce sigma point weights with
magnitudes around ``1e6``, and the cancellation in the weighted sums is only
accurate enough in double precision.  Selecting ``jnp.float64`` enables
JAX's 64-bit mode (``jax_enable_x64``), which happens on import for the
default.

Call ``set_dtype`` **before** any JIT compilation, just like JAX's own
``jax.config.update("jax_enable_x64", True)``.

The numerical gates of the filter (covariance symmetry, zero-mean noise,
manifold mean convergence) use dtype-adaptive tolerances returned by
:func:`get_symmetry_tolerance` and :func:`get_mean_tolerance`.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

jax.config.update("jax_enable_x64", True)
_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for slamjax.

    Must be called **before** any ``jax.jit`` compilation.  In eager mode
    the change takes effect immediately and applies to every filter step
    run afterwards.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is automatically
    enabled via ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def get_symmetry_tolerance() -> float:
    """Return the dtype-adaptive tolerance for covariance validity checks.

    Used both as the bound on the Frobenius norm ``||A - A^T||`` and as the
    magnitude of negative eigenvalue noise accepted in a covariance:

    - ``float64``:  1e-5
    - ``float32``:  1e-5
    - ``float16``:  1e-2
    - ``bfloat16``: 1e-2

    Returns:
        float: Absolute tolerance.
    """
    if _dtype in (jnp.float64, jnp.float32):
        return 1e-5
    # float16 and bfloat16
    return 1e-2


def get_mean_tolerance() -> float:
    """Return the dtype-adaptive tolerance for zero-mean and mean-solver checks.

    Bounds the norm of a measurement noise mean and the weighted error at
    which the manifold mean solver is considered converged:

    - ``float64``:  1e-9
    - ``float32``:  1e-5
    - ``float16``:  1e-2
    - ``bfloat16``: 1e-2

    Returns:
        float: Absolute tolerance.
    """
    if _dtype == jnp.float64:
        return 1e-9
    if _dtype == jnp.float32:
        return 1e-5
    # float16 and bfloat16
    return 1e-2
