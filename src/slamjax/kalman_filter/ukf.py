"""Unscented Kalman Filter over arbitrary state manifolds.

Implements the Kalman filter of Thrun et al., *Probabilistic Robotics*
(2006), using the unscented transform, extended to non-additive state
spaces following Kraft, *A Quaternion-based Unscented Kalman Filter for
Orientation Tracking* (2003):

- sigma points are spread with the state's ``add_delta`` operator,
- the predicted mean is the state minimizing the weighted squared
  ``compute_delta`` to the transformed sigma points, found iteratively,
- the measurement correction is applied with ``add_delta``.

Observation functions return a residual that is zero for a perfect
noiseless reading, so the innovation is ``0 - z_hat``.

The filter is stateful and steps run eagerly: user functions are called
once per sigma point and need not be JAX-traceable, and every step checks
its covariances before accepting them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from slamjax.config import get_dtype, get_mean_tolerance
from slamjax.kalman_filter._errors import (
    MeanSolverDivergenceError,
    NonZeroMeanNoiseError,
    SingularInnovationError,
)
from slamjax.kalman_filter._types import DeltaOperators, GaussianDistribution, UKFConfig
from slamjax.kalman_filter.linalg import check_non_negative_definite, check_symmetric, matrix_sqrt
from slamjax.kalman_filter.manifolds import euclidean_operators
from slamjax.kalman_filter.sigma_points import compute_weights, sigma_offsets, sigma_points

logger = logging.getLogger(__name__)

_MAX_MEAN_ITERATIONS: int = 20
"""Maximum number of outer iterations of the manifold mean solver."""

_MIN_STEP_SIZE: float = 1e-3
"""Line search step size at which the manifold mean solver gives up."""


class UnscentedKalmanFilter:
    """Unscented Kalman filter owning a Gaussian belief over ``n`` states.

    The state dimension ``n`` is taken from the initial belief. Call
    :meth:`predict` once per control or time step and :meth:`observe` once
    per sensor reading, strictly in event order; the filter does no
    locking of its own.

    Args:
        initial_belief: Initial :class:`GaussianDistribution`. Its
            covariance must be symmetric positive semi-definite.
        delta_operators: Manifold structure of the state. Default:
            :func:`~slamjax.kalman_filter.manifolds.euclidean_operators`.
        config: Unscented transform parameters. Default: ``UKFConfig()``
            (``alpha=1e-3``, ``beta=2``, ``kappa=0``).

    Raises:
        ValueError: If the initial belief is malformed.
        SymmetryViolationError: If the initial covariance is not symmetric.
        NegativeDefinitenessError: If the initial covariance is indefinite.

    Examples:
        ```python
        import jax.numpy as jnp
        from slamjax.kalman_filter import GaussianDistribution, UnscentedKalmanFilter

        ukf = UnscentedKalmanFilter(GaussianDistribution(jnp.zeros(1), jnp.eye(1)))
        ukf.predict(lambda x: x, GaussianDistribution(jnp.zeros(1), jnp.eye(1)))
        ukf.observe(lambda x: x, GaussianDistribution(jnp.zeros(1), jnp.eye(1)))
        ukf.get_belief().covariance  # [[0.667]]
        ```
    """

    def __init__(
        self,
        initial_belief: GaussianDistribution,
        delta_operators: DeltaOperators | None = None,
        config: UKFConfig | None = None,
    ) -> None:
        belief = _as_distribution(initial_belief, name="initial belief")
        check_non_negative_definite(belief.covariance)

        self._belief = belief
        self._n = belief.dimension
        self._ops = delta_operators if delta_operators is not None else euclidean_operators()
        self._config = config if config is not None else UKFConfig()

        self._weights = compute_weights(self._n, self._config)
        self._mean_weights = self._weights.mean_weights()
        self._cov_weights = self._weights.covariance_weights()

    @property
    def dimension(self) -> int:
        """State dimension ``n``."""
        return self._n

    @property
    def config(self) -> UKFConfig:
        """Unscented transform parameters of this filter."""
        return self._config

    def get_belief(self) -> GaussianDistribution:
        """Return the current belief.

        Returns:
            GaussianDistribution: Mean of shape ``(n,)`` and covariance of
                shape ``(n, n)``.
        """
        return self._belief

    def predict(
        self,
        g: Callable[[Array], ArrayLike],
        epsilon: GaussianDistribution,
    ) -> None:
        """Run the control/prediction step.

        The control input must be folded into ``g``, which also performs
        the state transition. ``epsilon`` is the additive combination of
        control and model noise; a non-zero mean shifts the predicted mean.

        Args:
            g: State transition ``g(state) -> state``.
            epsilon: Process noise over the state space.

        Raises:
            SymmetryViolationError: If ``epsilon`` or a computed covariance
                is not symmetric.
            NegativeDefinitenessError: If the belief or predicted covariance is
                indefinite.
            MeanSolverDivergenceError: If the predicted mean does not converge.
        """
        epsilon = _as_distribution(epsilon, name="process noise", dimension=self._n)
        check_symmetric(epsilon.covariance)

        mu = self._belief.mean
        sqrt_sigma = matrix_sqrt(self._belief.covariance)
        offsets = sigma_offsets(sqrt_sigma, self._weights)

        Y = jnp.stack(
            [
                self._as_state(g(point), "transition function")
                for point in sigma_points(mu, offsets, self._ops.add_delta)
            ]
        )

        new_mu = self._compute_mean(Y)
        deltas = jnp.stack([self._ops.compute_delta(new_mu, y) for y in Y])
        new_sigma = jnp.einsum("i,ij,ik->jk", self._cov_weights, deltas, deltas)
        check_symmetric(new_sigma)

        predicted = GaussianDistribution(new_mu, new_sigma) + epsilon
        check_non_negative_definite(predicted.covariance)

        self._belief = predicted
        logger.debug("Predicted mean %s", self._belief.mean)

    def observe(
        self,
        h: Callable[[Array], ArrayLike],
        delta: GaussianDistribution,
    ) -> None:
        """Run the observation step.

        ``h`` maps a state to a residual that should be zero, i.e. the
        sensor reading must already be included in ``h``. The residual
        space is treated as Euclidean.

        Args:
            h: Observation residual ``h(state) -> (k,)`` (or a scalar,
                treated as ``k = 1``).
            delta: Measurement noise of dimension ``k``. Must have zero mean.

        Raises:
            NonZeroMeanNoiseError: If ``delta`` has a non-zero mean.
            SymmetryViolationError: If ``delta`` or a computed covariance is
                not symmetric.
            NegativeDefinitenessError: If the belief or corrected covariance is
                indefinite.
            SingularInnovationError: If the innovation covariance is singular.
        """
        delta = _as_distribution(delta, name="measurement noise")
        check_symmetric(delta.covariance)
        mean_norm = float(jnp.linalg.norm(delta.mean))
        if mean_norm > get_mean_tolerance():
            raise NonZeroMeanNoiseError(
                f"Measurement noise must have zero mean, got mean {delta.mean} "
                f"with norm {mean_norm}"
            )

        mu = self._belief.mean
        sqrt_sigma = matrix_sqrt(self._belief.covariance)

        # Zero-mean sigma points, as in Kraft's paper
        W = sigma_offsets(sqrt_sigma, self._weights)
        Z = jnp.stack(
            [
                self._as_residual(h(point), delta.dimension)
                for point in sigma_points(mu, W, self._ops.add_delta)
            ]
        )

        z_hat = self._mean_weights @ Z
        z_diff = Z - z_hat[None, :]

        S = jnp.einsum("i,ij,ik->jk", self._cov_weights, z_diff, z_diff)
        check_symmetric(S)
        S = S + delta.covariance

        sigma_xz = jnp.einsum("i,ij,ik->jk", self._cov_weights, W, z_diff)

        _check_invertible(S)
        # K = sigma_xz S^-1, solved as S K^T = sigma_xz^T since S is symmetric
        kalman_gain = jnp.linalg.solve(S, sigma_xz.T).T

        new_sigma = self._belief.covariance - kalman_gain @ S @ kalman_gain.T
        check_non_negative_definite(new_sigma)

        self._belief = GaussianDistribution(
            self._ops.add_delta(mu, kalman_gain @ -z_hat), new_sigma
        )
        logger.debug("Observed residual %s, corrected mean %s", z_hat, self._belief.mean)

    # Internals

    def _weighted_error(self, mean_estimate: Array, states: Array) -> Array:
        deltas = jnp.stack([self._ops.compute_delta(mean_estimate, s) for s in states])
        return self._mean_weights @ deltas

    def _compute_mean(self, states: Array) -> Array:
        """Weighted mean of states under the ``compute_delta`` metric.

        Damped fixed-point iteration from Kraft, section 3.4: step from the
        current estimate along the weighted error, halving the step until
        the error norm strictly decreases.
        """
        tolerance = get_mean_tolerance()
        current_estimate = states[0]
        weighted_error = self._weighted_error(current_estimate, states)
        error_norm = float(jnp.linalg.norm(weighted_error))

        iterations = 0
        while error_norm > tolerance:
            if iterations >= _MAX_MEAN_ITERATIONS:
                raise MeanSolverDivergenceError(
                    f"Too many iterations: weighted error norm {error_norm} after "
                    f"{iterations} iterations"
                )

            step_size = 1.0
            while True:
                next_estimate = self._ops.add_delta(current_estimate, step_size * weighted_error)
                next_error = self._weighted_error(next_estimate, states)
                next_norm = float(jnp.linalg.norm(next_error))
                if next_norm < error_norm:
                    current_estimate = next_estimate
                    weighted_error = next_error
                    error_norm = next_norm
                    break
                step_size *= 0.5
                if step_size <= _MIN_STEP_SIZE:
                    raise MeanSolverDivergenceError(
                        f"Step size too small, line search failed at weighted "
                        f"error norm {error_norm}"
                    )

            iterations += 1
            logger.debug("Mean solver iteration %d: error norm %g", iterations, error_norm)

        return current_estimate

    def _as_state(self, value: ArrayLike, source: str) -> Array:
        x = jnp.asarray(value, dtype=get_dtype())
        if x.shape != (self._n,):
            raise ValueError(f"{source} returned shape {x.shape}, expected ({self._n},)")
        return x

    @staticmethod
    def _as_residual(value: ArrayLike, k: int) -> Array:
        z = jnp.atleast_1d(jnp.asarray(value, dtype=get_dtype()))
        if z.shape != (k,):
            raise ValueError(
                f"observation function returned shape {z.shape}, expected ({k},) "
                f"to match the measurement noise"
            )
        return z


def _as_distribution(
    distribution: GaussianDistribution | Sequence[ArrayLike],
    name: str,
    dimension: int | None = None,
) -> GaussianDistribution:
    """Cast a distribution to the configured dtype and validate its shapes."""
    dtype = get_dtype()
    mean, covariance = distribution
    mean = jnp.atleast_1d(jnp.asarray(mean, dtype=dtype))
    covariance = jnp.atleast_2d(jnp.asarray(covariance, dtype=dtype))

    if mean.ndim != 1:
        raise ValueError(f"{name} mean must be a vector, got shape {mean.shape}")
    n = mean.shape[0]
    if covariance.shape != (n, n):
        raise ValueError(
            f"{name} covariance must have shape ({n}, {n}), got {covariance.shape}"
        )
    if dimension is not None and n != dimension:
        raise ValueError(f"{name} must have dimension {dimension}, got {n}")
    return GaussianDistribution(mean=mean, covariance=covariance)


def _check_invertible(S: Array) -> None:
    """Raise unless ``S`` is numerically invertible."""
    condition = float(jnp.linalg.cond(S))
    if not math.isfinite(condition) or condition * jnp.finfo(S.dtype).eps >= 1.0:
        raise SingularInnovationError(
            f"Innovation covariance is singular (condition number {condition}):\n{S}"
        )
