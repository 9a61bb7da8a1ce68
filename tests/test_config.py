"""Tests for the slamjax.config module."""

import jax
import jax.numpy as jnp
import pytest

from slamjax.config import get_dtype, get_mean_tolerance, get_symmetry_tolerance, set_dtype
from slamjax.kalman_filter import GaussianDistribution, UKFConfig, UnscentedKalmanFilter


@pytest.fixture(autouse=True)
def reset_dtype():
    """Reset dtype to the float64 default before and after each test."""
    set_dtype(jnp.float64)
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_default_dtype(self):
        assert get_dtype() == jnp.float64

    def test_set_float32(self):
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_set_float16(self):
        set_dtype(jnp.float16)
        assert get_dtype() == jnp.float16

    def test_set_bfloat16(self):
        set_dtype(jnp.bfloat16)
        assert get_dtype() == jnp.bfloat16

    def test_roundtrip(self):
        for dtype in (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")

    def test_float64_enables_x64(self):
        set_dtype(jnp.float64)
        assert jax.config.jax_enable_x64 is True


class TestTolerances:
    def test_float64_tolerances(self):
        assert get_symmetry_tolerance() == 1e-5
        assert get_mean_tolerance() == 1e-9

    def test_float32_tolerances(self):
        set_dtype(jnp.float32)
        assert get_symmetry_tolerance() == 1e-5
        assert get_mean_tolerance() == 1e-5

    def test_float16_tolerances(self):
        set_dtype(jnp.float16)
        assert get_symmetry_tolerance() == 1e-2
        assert get_mean_tolerance() == 1e-2

    def test_bfloat16_tolerances(self):
        set_dtype(jnp.bfloat16)
        assert get_symmetry_tolerance() == 1e-2
        assert get_mean_tolerance() == 1e-2


class TestDtypeSwitchingOutputs:
    """Verify that the filter runs in the configured dtype."""

    def test_belief_dtype_float64(self):
        ukf = UnscentedKalmanFilter(GaussianDistribution(jnp.zeros(1), jnp.eye(1)))
        assert ukf.get_belief().mean.dtype == jnp.float64
        assert ukf.get_belief().covariance.dtype == jnp.float64

    def test_float32_filter_with_unit_alpha(self):
        """float32 is usable with well-conditioned weights (alpha=1)."""
        set_dtype(jnp.float32)
        one = GaussianDistribution(jnp.zeros(1), jnp.eye(1))
        ukf = UnscentedKalmanFilter(one, config=UKFConfig(alpha=1.0))

        ukf.predict(lambda x: x, one)
        ukf.observe(lambda x: x, one)

        belief = ukf.get_belief()
        assert belief.covariance.dtype == jnp.float32
        assert float(belief.covariance[0, 0]) == pytest.approx(2.0 / 3.0, abs=1e-5)
        assert float(belief.mean[0]) == pytest.approx(0.0, abs=1e-6)
