"""Type definitions for the unscented Kalman filter.

Provides the core data types used by the filter implementation:

- :class:`GaussianDistribution`: Mean and covariance of a multivariate
  normal belief, closed under addition (convolution) and linear maps.
- :class:`UKFConfig`: Scaling parameters of the unscented transform.
- :class:`SigmaWeights`: The four scalar weights derived from a config
  and a state dimension.
- :class:`DeltaOperators`: The pair of functions defining how deltas are
  applied to and measured between states.

All types are :class:`~typing.NamedTuple` instances, which JAX treats as
pytrees automatically.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from slamjax.config import get_dtype


class GaussianDistribution(NamedTuple):
    """Multivariate normal distribution.

    The sum of two distributions is the distribution of the sum of two
    independent random variables: means add and covariances add.  This is
    how process noise is folded into a predicted belief.

    Attributes:
        mean: Mean vector of shape ``(n,)``.
        covariance: Covariance matrix of shape ``(n, n)``. Must be
            symmetric positive semi-definite.

    Examples:
        ```python
        import jax.numpy as jnp
        from slamjax.kalman_filter import GaussianDistribution

        a = GaussianDistribution(jnp.zeros(2), jnp.eye(2))
        b = GaussianDistribution(jnp.ones(2), 0.5 * jnp.eye(2))
        c = a + b  # mean [1, 1], covariance 1.5 * I
        ```
    """

    mean: Array
    covariance: Array

    def __add__(self, other: GaussianDistribution) -> GaussianDistribution:
        if not isinstance(other, GaussianDistribution):
            return NotImplemented
        if self.mean.shape != other.mean.shape:
            raise ValueError(
                f"Cannot add distributions of dimension {self.mean.shape[0]} "
                f"and {other.mean.shape[0]}"
            )
        return GaussianDistribution(
            mean=self.mean + other.mean,
            covariance=self.covariance + other.covariance,
        )

    @property
    def dimension(self) -> int:
        """Dimension ``n`` of the distribution."""
        return int(self.mean.shape[0])

    def linear_transform(self, matrix: ArrayLike) -> GaussianDistribution:
        """Push the distribution through the linear map ``y = A x``.

        Args:
            matrix: Matrix ``A`` of shape ``(m, n)``.

        Returns:
            GaussianDistribution: ``N(A mean, A covariance A^T)`` of
                dimension ``m``.
        """
        A = jnp.asarray(matrix, dtype=self.mean.dtype)
        return GaussianDistribution(
            mean=A @ self.mean,
            covariance=A @ self.covariance @ A.T,
        )


class UKFConfig(NamedTuple):
    """Configuration for the unscented transform.

    Controls the sigma point spread and weighting using the scaled unscented
    transform (Van der Merwe). The defaults ``alpha=1e-3``, ``beta=2.0``,
    ``kappa=0.0`` place the sigma points very close to the mean, which keeps
    the transform local for strongly non-linear models at the price of
    large-magnitude weights (hence the float64 default dtype).

    Attributes:
        alpha: Spread of sigma points around the mean. Default: 1e-3.
        beta: Prior knowledge of the state distribution. ``beta=2.0``
            is optimal for Gaussian distributions. Default: 2.0.
        kappa: Secondary scaling parameter. Default: 0.0.
    """

    alpha: float = 1e-3
    beta: float = 2.0
    kappa: float = 0.0


class SigmaWeights(NamedTuple):
    """Weights of the ``2n + 1`` sigma points.

    The central point carries its own mean and covariance weights; the
    ``2n`` symmetric points share a single weight for both.

    Attributes:
        n: State dimension the weights were computed for.
        lam: Composite scaling ``lambda = alpha^2 (n + kappa) - n``.
        mean_0: Mean weight of the central point.
        cov_0: Covariance weight of the central point.
        mean_i: Mean weight of each symmetric point.
        cov_i: Covariance weight of each symmetric point.
    """

    n: int
    lam: float
    mean_0: float
    cov_0: float
    mean_i: float
    cov_i: float

    def mean_weights(self) -> Array:
        """Mean weights as an array of shape ``(2n+1,)``."""
        dtype = get_dtype()
        return jnp.concatenate(
            [jnp.array([self.mean_0], dtype=dtype), jnp.full(2 * self.n, self.mean_i, dtype=dtype)]
        )

    def covariance_weights(self) -> Array:
        """Covariance weights as an array of shape ``(2n+1,)``."""
        dtype = get_dtype()
        return jnp.concatenate(
            [jnp.array([self.cov_0], dtype=dtype), jnp.full(2 * self.n, self.cov_i, dtype=dtype)]
        )


class DeltaOperators(NamedTuple):
    """Manifold structure of a state space.

    ``add_delta(state, delta)`` moves a state by a tangent-space delta and
    ``compute_delta(origin, target)`` returns the delta that moves
    ``origin`` to ``target``.  For ordinary vector states they are addition
    and subtraction; see :mod:`slamjax.kalman_filter.manifolds` for angle
    and orientation states.

    Attributes:
        add_delta: ``(state, delta) -> state``.
        compute_delta: ``(origin, target) -> delta``.
    """

    add_delta: Callable[[Array, Array], Array]
    compute_delta: Callable[[Array, Array], Array]
