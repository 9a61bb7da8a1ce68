"""Rotation helpers for orientation-valued states.

Provides the angle-axis / quaternion conversions used by the rotation
vector manifold in :mod:`slamjax.kalman_filter.manifolds`:

- :func:`normalize_angle` -- wrap angles to ``(-pi, pi]``
- :func:`quaternion_multiply` -- Hamilton product
- :func:`quaternion_conjugate` -- inverse of a unit quaternion
- :func:`get_yaw` -- heading of a 3D rotation
- :func:`rotation_vector_to_quaternion` -- angle-axis vector to quaternion
- :func:`quaternion_to_rotation_vector` -- quaternion to angle-axis vector
"""

from .rotations import (
    get_yaw,
    normalize_angle,
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_rotation_vector,
    rotation_vector_to_quaternion,
)

__all__ = [
    "get_yaw",
    "normalize_angle",
    "quaternion_conjugate",
    "quaternion_multiply",
    "quaternion_to_rotation_vector",
    "rotation_vector_to_quaternion",
]
