# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "slamjax"]
#
# [tool.uv.sources]
# slamjax = { path = ".." }
# ///
"""Track a 3D orientation from gyroscope rates and absolute attitude fixes.

The state is a rotation vector. Each step the filter rotates the estimate
by the integrated body rates, and every ``--fix-every`` steps it corrects
with a noisy absolute attitude reading (e.g. from a star tracker or a
visual marker). Deltas are composed through quaternions with rotation
vector delta operators.

Requires slamjax to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/track_orientation.py [OPTIONS]

Examples:
    uv run examples/track_orientation.py --steps 500 --fix-every 20
"""

import time
from typing import Annotated

import jax
import jax.numpy as jnp
import typer

from slamjax import (
    GaussianDistribution,
    UnscentedKalmanFilter,
    quaternion_to_rotation_vector,
    rotation_vector_operators,
    rotation_vector_to_quaternion,
)
from slamjax.transform import quaternion_conjugate, quaternion_multiply


def rotate_body(rotation_vector, body_rotation):
    """Apply a body-frame rotation to an orientation."""
    q = quaternion_multiply(
        rotation_vector_to_quaternion(rotation_vector),
        rotation_vector_to_quaternion(body_rotation),
    )
    return quaternion_to_rotation_vector(q)


def angle_between(a, b):
    q = quaternion_multiply(
        quaternion_conjugate(rotation_vector_to_quaternion(a)),
        rotation_vector_to_quaternion(b),
    )
    return float(jnp.linalg.norm(quaternion_to_rotation_vector(q)))


def main(
    steps: Annotated[int, typer.Option(help="Number of gyro samples")] = 300,
    dt: Annotated[float, typer.Option(help="Gyro sample period in seconds")] = 0.01,
    gyro_std: Annotated[float, typer.Option(help="Gyro noise std in rad/s")] = 0.05,
    fix_std: Annotated[float, typer.Option(help="Attitude fix noise std in rad")] = 0.02,
    fix_every: Annotated[int, typer.Option(help="Steps between attitude fixes")] = 10,
    seed: Annotated[int, typer.Option(help="PRNG seed")] = 0,
) -> None:
    key = jax.random.PRNGKey(seed)
    true_rate = jnp.array([0.3, -0.2, 0.5])

    process_noise = GaussianDistribution(jnp.zeros(3), jnp.eye(3) * (gyro_std * dt) ** 2)
    fix_noise = GaussianDistribution(jnp.zeros(3), jnp.eye(3) * fix_std**2)

    truth = jnp.array([0.1, 0.0, 0.0])
    ukf = UnscentedKalmanFilter(
        GaussianDistribution(jnp.zeros(3), jnp.eye(3) * 0.05),
        rotation_vector_operators(),
    )

    print(f"── Tracking orientation: {steps} gyro samples, fix every {fix_every} ──")
    t0 = time.perf_counter()

    for step in range(1, steps + 1):
        key, k_gyro, k_fix = jax.random.split(key, 3)
        truth = rotate_body(truth, true_rate * dt)
        measured_rate = true_rate + gyro_std * jax.random.normal(k_gyro, (3,))

        ukf.predict(lambda s, w=measured_rate: rotate_body(s, w * dt), process_noise)

        if step % fix_every == 0:
            reading = rotate_body(truth, fix_std * jax.random.normal(k_fix, (3,)))
            q_reading_inv = quaternion_conjugate(rotation_vector_to_quaternion(reading))

            def residual(s, q_reading_inv=q_reading_inv):
                return quaternion_to_rotation_vector(
                    quaternion_multiply(q_reading_inv, rotation_vector_to_quaternion(s))
                )

            ukf.observe(residual, fix_noise)
            print(f"  step {step:4d}: attitude error {angle_between(ukf.get_belief().mean, truth):.4f} rad")

    belief = ukf.get_belief()
    print(f"  Ran {steps} steps in {time.perf_counter() - t0:.1f}s")
    print(f"  Final attitude error: {angle_between(belief.mean, truth):.4f} rad")
    print(f"  Posterior std: {[round(float(s), 4) for s in jnp.sqrt(jnp.diag(belief.covariance))]}")
    print("\nDone.")


if __name__ == "__main__":
    typer.run(main)
