"""Unscented Kalman filtering over arbitrary state manifolds.

Provides the probabilistic state estimator used to track poses from noisy,
non-linear motion and sensor models.

Available components:

- :class:`GaussianDistribution` -- Belief and noise type (mean, covariance)
- :class:`UKFConfig` -- Unscented transform parameters
- :class:`SigmaWeights` -- Sigma point weights for a state dimension
- :class:`DeltaOperators` -- Manifold structure of a state space
- :class:`UnscentedKalmanFilter` -- The filter (predict, observe, get_belief)
- :func:`matrix_sqrt` -- Symmetric square root of a PSD matrix
- :func:`check_symmetric` -- Covariance symmetry gate
- :func:`check_non_negative_definite` -- Covariance PSD gate
- :func:`compute_weights` / :func:`sigma_offsets` -- Sigma point machinery
- :func:`euclidean_operators`, :func:`angle_operators`,
  :func:`rotation_vector_operators` -- Delta operator strategies

Violated numerical invariants raise subclasses of :class:`FilterError`.
"""

from slamjax.kalman_filter._errors import (
    FilterError,
    MeanSolverDivergenceError,
    NegativeDefinitenessError,
    NonZeroMeanNoiseError,
    SingularInnovationError,
    SymmetryViolationError,
)
from slamjax.kalman_filter._types import (
    DeltaOperators,
    GaussianDistribution,
    SigmaWeights,
    UKFConfig,
)
from slamjax.kalman_filter.linalg import (
    check_non_negative_definite,
    check_symmetric,
    matrix_sqrt,
    outer_product,
)
from slamjax.kalman_filter.manifolds import (
    angle_operators,
    euclidean_operators,
    rotation_vector_operators,
)
from slamjax.kalman_filter.sigma_points import compute_weights, sigma_offsets, sigma_points
from slamjax.kalman_filter.ukf import UnscentedKalmanFilter

__all__ = [
    # Types
    "GaussianDistribution",
    "UKFConfig",
    "SigmaWeights",
    "DeltaOperators",
    # Filter
    "UnscentedKalmanFilter",
    # Linear algebra
    "matrix_sqrt",
    "check_symmetric",
    "check_non_negative_definite",
    "outer_product",
    # Sigma points
    "compute_weights",
    "sigma_offsets",
    "sigma_points",
    # Manifolds
    "euclidean_operators",
    "angle_operators",
    "rotation_vector_operators",
    # Errors
    "FilterError",
    "SymmetryViolationError",
    "NegativeDefinitenessError",
    "NonZeroMeanNoiseError",
    "MeanSolverDivergenceError",
    "SingularInnovationError",
]
