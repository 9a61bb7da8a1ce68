"""Delta operators for common state manifolds.

A filter state need not be a plain vector: headings wrap around and 3D
orientations compose multiplicatively.  Each factory here returns a
:class:`~slamjax.kalman_filter.DeltaOperators` pair that the
:class:`~slamjax.kalman_filter.UnscentedKalmanFilter` uses to move states by
tangent-space deltas and to measure deltas between states.

- :func:`euclidean_operators` -- ordinary vector addition/subtraction
- :func:`angle_operators` -- selected components are wrapped angles
- :func:`rotation_vector_operators` -- three components hold an angle-axis
  orientation composed through quaternions
"""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp
from jax import Array

from slamjax.kalman_filter._types import DeltaOperators
from slamjax.transform import (
    normalize_angle,
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_rotation_vector,
    rotation_vector_to_quaternion,
)


def _add(state: Array, delta: Array) -> Array:
    return state + delta


def _subtract(origin: Array, target: Array) -> Array:
    return target - origin


def euclidean_operators() -> DeltaOperators:
    """Vector addition and subtraction, the default for a filter.

    Returns:
        DeltaOperators: ``add_delta = state + delta`` and
            ``compute_delta = target - origin``.
    """
    return DeltaOperators(add_delta=_add, compute_delta=_subtract)


def angle_operators(angle_indices: Sequence[int]) -> DeltaOperators:
    """Operators for states where some components are angles.

    The components at ``angle_indices`` are wrapped to ``(-pi, pi]`` both
    after adding a delta and in the computed delta, so that the delta
    between headings of ``pi - 0.1`` and ``-pi + 0.1`` is ``0.2`` rather
    than ``-2 pi + 0.2``.

    Args:
        angle_indices: Indices of the angular components.

    Returns:
        DeltaOperators: Operators for the mixed state.

    Examples:
        ```python
        from slamjax.kalman_filter import UnscentedKalmanFilter, angle_operators

        # Planar pose [x, y, theta]
        ops = angle_operators([2])
        ```
    """
    idx = jnp.asarray(list(angle_indices), dtype=jnp.int32)

    def _wrap(x: Array) -> Array:
        return x.at[idx].set(normalize_angle(x[idx]))

    def add_delta(state: Array, delta: Array) -> Array:
        return _wrap(state + delta)

    def compute_delta(origin: Array, target: Array) -> Array:
        return _wrap(target - origin)

    return DeltaOperators(add_delta=add_delta, compute_delta=compute_delta)


def rotation_vector_operators(start: int = 0) -> DeltaOperators:
    """Operators for states holding an orientation as a rotation vector.

    Components ``start:start + 3`` are an angle-axis rotation vector. A
    delta rotation is applied in the body frame, ``q(state) * q(delta)``,
    and the delta between two orientations is the rotation vector of
    ``q(origin)^-1 * q(target)``.  All other components are Euclidean.

    Args:
        start: Index of the first rotation component. Default: 0.

    Returns:
        DeltaOperators: Operators for the mixed state.

    Examples:
        ```python
        from slamjax.kalman_filter import rotation_vector_operators

        # State [px, py, pz, rx, ry, rz, vx, vy, vz]
        ops = rotation_vector_operators(start=3)
        ```
    """
    if start < 0:
        raise ValueError(f"Rotation components must start at index >= 0, got {start}")
    rot = slice(start, start + 3)

    def add_delta(state: Array, delta: Array) -> Array:
        result = state + delta
        q = quaternion_multiply(
            rotation_vector_to_quaternion(state[rot]),
            rotation_vector_to_quaternion(delta[rot]),
        )
        return result.at[rot].set(quaternion_to_rotation_vector(q))

    def compute_delta(origin: Array, target: Array) -> Array:
        result = target - origin
        q = quaternion_multiply(
            quaternion_conjugate(rotation_vector_to_quaternion(origin[rot])),
            rotation_vector_to_quaternion(target[rot]),
        )
        return result.at[rot].set(quaternion_to_rotation_vector(q))

    return DeltaOperators(add_delta=add_delta, compute_delta=compute_delta)
