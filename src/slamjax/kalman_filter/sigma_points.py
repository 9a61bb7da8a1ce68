"""Scaled unscented transform weights and sigma point offsets.

Implements Van der Merwe's scaled sigma points. For a state of dimension
``n`` the transform uses ``2n + 1`` points: the mean itself and, for every
column ``S_i`` of the covariance square root, the pair
``mean (+) sqrt(n + lambda) S_i`` and ``mean (+) -sqrt(n + lambda) S_i``,
where ``(+)`` is the state's ``add_delta`` operator.

Offsets are kept separate from the points so that non-additive state spaces
can apply them through their own ``add_delta``.
"""

from __future__ import annotations

import math
from collections.abc import Callable

import jax.numpy as jnp
from jax import Array

from slamjax.config import get_dtype
from slamjax.kalman_filter._types import SigmaWeights, UKFConfig

_DEFAULT_UKF_CONFIG = UKFConfig()


def compute_weights(n: int, config: UKFConfig = _DEFAULT_UKF_CONFIG) -> SigmaWeights:
    """Compute the sigma point weights for a state of dimension ``n``.

    With ``lambda = alpha^2 (n + kappa) - n``:

    - central mean weight ``lambda / (n + lambda)``
    - central covariance weight ``lambda / (n + lambda) + (1 - alpha^2 + beta)``
    - every other point ``1 / (2 (n + lambda))`` for both

    Args:
        n: State dimension, at least 1.
        config: Unscented transform parameters. Default: ``UKFConfig()``.

    Returns:
        SigmaWeights: The weights and the composite scaling ``lambda``.

    Raises:
        ValueError: If ``n < 1`` or ``n + lambda`` is not positive.
    """
    if n < 1:
        raise ValueError(f"State dimension must be at least 1, got {n}")

    alpha, beta, kappa = config.alpha, config.beta, config.kappa
    lam = alpha**2 * (n + kappa) - n
    if n + lam <= 0.0:
        raise ValueError(
            f"Unscented transform requires n + lambda > 0, got {n + lam} "
            f"(alpha={alpha}, kappa={kappa})"
        )

    mean_0 = lam / (n + lam)
    weight_i = 1.0 / (2.0 * (n + lam))

    return SigmaWeights(
        n=n,
        lam=lam,
        mean_0=mean_0,
        cov_0=mean_0 + (1.0 - alpha**2 + beta),
        mean_i=weight_i,
        cov_i=weight_i,
    )


def sigma_offsets(sqrt_sigma: Array, weights: SigmaWeights) -> Array:
    """Return the zero-mean sigma point offsets.

    Row 0 is the zero offset of the central point. For column ``i`` of
    ``sqrt_sigma``, row ``2i + 1`` is ``+sqrt(n + lambda) S_i`` and row
    ``2i + 2`` is ``-sqrt(n + lambda) S_i``.

    Args:
        sqrt_sigma: Covariance square root of shape ``(n, n)``.
        weights: Weights for dimension ``n``.

    Returns:
        Array: Offsets of shape ``(2n+1, n)``.
    """
    n = weights.n
    scaled = math.sqrt(n + weights.lam) * jnp.asarray(sqrt_sigma, dtype=get_dtype())

    # (n, 2, n): column i and its negation, flattened to alternate +/-
    pairs = jnp.stack([scaled.T, -scaled.T], axis=1).reshape(2 * n, n)
    return jnp.concatenate([jnp.zeros((1, n), dtype=pairs.dtype), pairs], axis=0)


def sigma_points(
    mean: Array,
    offsets: Array,
    add_delta: Callable[[Array, Array], Array],
) -> list[Array]:
    """Apply sigma point offsets to a mean.

    The central point is ``mean`` itself rather than ``add_delta(mean, 0)``.

    Args:
        mean: State mean of shape ``(n,)``.
        offsets: Offsets from :func:`sigma_offsets`, shape ``(2n+1, n)``.
        add_delta: State composition ``(state, delta) -> state``.

    Returns:
        list[Array]: The ``2n + 1`` sigma points.
    """
    return [mean] + [add_delta(mean, offset) for offset in offsets[1:]]
