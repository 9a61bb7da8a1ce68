"""Pure rotation kernels on raw JAX arrays.

Only the pieces of rotation algebra that orientation-valued filter states
need: angle wrapping, and conversions between angle-axis rotation vectors
and unit quaternions.

Convention:
    Quaternion layout is scalar-first: ``[w, x, y, z]`` (shape ``(4,)``).
    A rotation vector points along the rotation axis and has the rotation
    angle in radians as its length (shape ``(3,)``).
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

# Below these thresholds the trigonometric conversions are linearized.
_ROTATION_VECTOR_CUTOFF_SQ = 1e-8
_QUATERNION_ANGLE_CUTOFF = 1e-7


def normalize_angle(angle: ArrayLike) -> jax.Array:
    """Wrap an angle (or array of angles) to ``(-pi, pi]``.

    Args:
        angle (ArrayLike): Angle in radians.

    Returns:
        jnp.ndarray: Wrapped angle in radians.
    """
    angle = jnp.asarray(angle)
    wrapped = jnp.remainder(angle + jnp.pi, 2.0 * jnp.pi) - jnp.pi
    return jnp.where(wrapped == -jnp.pi, jnp.pi, wrapped)


# ---------------------------------------------------------------------------
# Quaternion algebra
# ---------------------------------------------------------------------------

def quaternion_multiply(q1: jax.Array, q2: jax.Array) -> jax.Array:
    """Hamilton product of two quaternions.

    Args:
        q1 (jax.Array): First quaternion of shape ``(4,)`` in scalar-first order.
        q2 (jax.Array): Second quaternion of shape ``(4,)`` in scalar-first order.

    Returns:
        jnp.ndarray: Product quaternion of shape ``(4,)``, normalized.
    """
    s1, v1 = q1[0], q1[1:]
    s2, v2 = q2[0], q2[1:]

    s = s1 * s2 - jnp.dot(v1, v2)
    v = s1 * v2 + s2 * v1 + jnp.cross(v1, v2)

    result = jnp.concatenate([jnp.array([s], dtype=v.dtype), v])
    return result / jnp.linalg.norm(result)


def quaternion_conjugate(q: jax.Array) -> jax.Array:
    """Conjugate of a quaternion, the inverse rotation for unit quaternions.

    Args:
        q (jax.Array): Quaternion of shape ``(4,)`` in scalar-first order.

    Returns:
        jnp.ndarray: ``[w, -x, -y, -z]``.
    """
    return q * jnp.array([1.0, -1.0, -1.0, -1.0], dtype=q.dtype)


def get_yaw(q: jax.Array) -> jax.Array:
    """Return the yaw of a rotation.

    Assuming the rotation is composed of rotations about X, then Y, then Z,
    this is the angle of the Z rotation: the heading of the rotated x axis
    in the XY plane.

    Args:
        q (jax.Array): Unit quaternion of shape ``(4,)`` in scalar-first order.

    Returns:
        jnp.ndarray: Yaw angle in radians, in ``(-pi, pi]``.
    """
    w, x, y, z = q[0], q[1], q[2], q[3]
    # First column of the rotation matrix: R @ [1, 0, 0]
    dx = w * w + x * x - y * y - z * z
    dy = 2.0 * (x * y + w * z)
    return jnp.arctan2(dy, dx)


# ---------------------------------------------------------------------------
# Rotation vector <-> Quaternion
# ---------------------------------------------------------------------------

def rotation_vector_to_quaternion(rotation_vector: ArrayLike) -> jax.Array:
    """Convert an angle-axis rotation vector to a quaternion.

    For ``|v|^2 <= 1e-8`` the conversion is linearized to
    ``[1, v / 2]``.

    Args:
        rotation_vector (ArrayLike): Rotation vector of shape ``(3,)``.

    Returns:
        jnp.ndarray: Quaternion of shape ``(4,)`` in scalar-first order.
    """
    v = jnp.asarray(rotation_vector)
    sq_norm = jnp.dot(v, v)
    small = sq_norm <= _ROTATION_VECTOR_CUTOFF_SQ

    # Keep the unused branch finite
    norm = jnp.sqrt(jnp.where(small, 1.0, sq_norm))
    scale = jnp.where(small, 0.5, jnp.sin(norm / 2.0) / norm)
    w = jnp.where(small, 1.0, jnp.cos(norm / 2.0))

    return jnp.concatenate([jnp.reshape(w, (1,)).astype(v.dtype), scale * v])


def quaternion_to_rotation_vector(q: ArrayLike) -> jax.Array:
    """Convert a quaternion to an angle-axis rotation vector.

    The quaternion is normalized and, of the two quaternions representing
    the same rotation, the one with non-negative ``w`` (the smaller angle)
    is used.  For angles below ``1e-7`` the conversion is linearized.

    Args:
        q (ArrayLike): Quaternion of shape ``(4,)`` in scalar-first order.

    Returns:
        jnp.ndarray: Rotation vector of shape ``(3,)``.
    """
    q = jnp.asarray(q)
    q = q / jnp.linalg.norm(q)
    q = jnp.where(q[0] < 0.0, -q, q)

    angle = 2.0 * jnp.arctan2(jnp.linalg.norm(q[1:]), q[0])
    small = angle < _QUATERNION_ANGLE_CUTOFF
    safe_angle = jnp.where(small, 1.0, angle)
    scale = jnp.where(small, 2.0, safe_angle / jnp.sin(safe_angle / 2.0))

    return scale * q[1:]
