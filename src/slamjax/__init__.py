"""
slamjax is the probabilistic state estimation core of a SLAM stack, implemented in JAX.
"""

from .config import set_dtype, get_dtype

from .kalman_filter import (
    GaussianDistribution,
    UKFConfig,
    DeltaOperators,
    UnscentedKalmanFilter,
    euclidean_operators,
    angle_operators,
    rotation_vector_operators,
    FilterError,
)

from .transform import (
    normalize_angle,
    rotation_vector_to_quaternion,
    quaternion_to_rotation_vector,
)

__all__ = [
    # Config
    "set_dtype",
    "get_dtype",
    # Kalman Filter
    "GaussianDistribution",
    "UKFConfig",
    "DeltaOperators",
    "UnscentedKalmanFilter",
    "euclidean_operators",
    "angle_operators",
    "rotation_vector_operators",
    "FilterError",
    # Transform
    "normalize_angle",
    "rotation_vector_to_quaternion",
    "quaternion_to_rotation_vector",
]
