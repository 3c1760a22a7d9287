"""
Unit tests for local interpolation schemes and the factory.
"""

import numpy as np
import pytest

from curvelib.errors import ExtrapolationError, InterpolationError
from curvelib.interpolation import (
    BackwardFlat,
    ConvexMonotone,
    CubicNaturalSpline,
    ForwardFlat,
    Kernel,
    Linear,
    LinearInterpolation,
    LogLinear,
    MixedBehavior,
    MixedInterpolation,
    MixedLinearCubic,
    available_interpolators,
    create_interpolator,
)


@pytest.fixture
def sample_points():
    """Simple increasing dataset."""
    x = np.array([0.0, 1.0, 2.0, 5.0])
    y = np.array([1.0, 3.0, 2.0, 8.0])
    return x, y


class TestLinearInterpolation:
    """Tests for linear interpolation."""

    def test_knots_reproduced(self, sample_points):
        """Values at knots equal knot values."""
        x, y = sample_points
        interp = Linear().interpolate(x, y)
        for xi, yi in zip(x, y):
            assert abs(interp(xi) - yi) < 1e-14

    def test_midpoint(self, sample_points):
        """Midpoint is the average of neighbours."""
        x, y = sample_points
        interp = Linear().interpolate(x, y)
        assert abs(interp(0.5) - 2.0) < 1e-14
        assert abs(interp(3.5) - 5.0) < 1e-14

    def test_derivative(self, sample_points):
        """Derivative is the segment slope."""
        x, y = sample_points
        interp = Linear().interpolate(x, y)
        assert abs(interp.derivative(0.5) - 2.0) < 1e-14
        assert abs(interp.derivative(1.5) + 1.0) < 1e-14
        assert interp.second_derivative(1.5) == 0.0

    def test_primitive(self, sample_points):
        """Primitive is the trapezoidal area."""
        x, y = sample_points
        interp = Linear().interpolate(x, y)
        assert abs(interp.primitive(1.0) - 2.0) < 1e-14
        assert abs(interp.primitive(2.0) - 4.5) < 1e-14
        assert abs(interp.primitive(5.0) - 19.5) < 1e-14

    def test_extrapolation_disallowed(self, sample_points):
        """Out-of-range queries raise unless extrapolation is allowed."""
        x, y = sample_points
        interp = Linear().interpolate(x, y)
        with pytest.raises(ExtrapolationError):
            interp(6.0)
        assert abs(interp(6.0, True) - 10.0) < 1e-14

    def test_enable_extrapolation(self, sample_points):
        """Enabled extrapolation applies to all queries."""
        x, y = sample_points
        interp = Linear().interpolate(x, y)
        interp.enable_extrapolation()
        assert abs(interp(-1.0) + 1.0) < 1e-14
        interp.disable_extrapolation()
        with pytest.raises(ExtrapolationError):
            interp(-1.0)

    def test_too_few_points(self):
        """A single point cannot be interpolated."""
        with pytest.raises(InterpolationError):
            LinearInterpolation([1.0], [1.0])

    def test_unsorted_x(self):
        """x must be strictly increasing."""
        with pytest.raises(InterpolationError):
            LinearInterpolation([0.0, 2.0, 1.0], [1.0, 2.0, 3.0])
        with pytest.raises(InterpolationError):
            LinearInterpolation([0.0, 1.0, 1.0], [1.0, 2.0, 3.0])

    def test_length_mismatch(self):
        """x and y must have the same length."""
        with pytest.raises(InterpolationError):
            LinearInterpolation([0.0, 1.0, 2.0], [1.0, 2.0])


class TestLogLinearInterpolation:
    """Tests for log-linear interpolation."""

    def test_geometric_midpoint(self):
        """Log-linear gives the geometric mean at the midpoint."""
        interp = LogLinear().interpolate([0.0, 1.0], [1.0, 0.25])
        assert abs(interp(0.5) - 0.5) < 1e-14

    def test_exact_for_exponential(self):
        """Flat continuous rates are reproduced exactly."""
        x = np.array([0.0, 1.0, 3.0, 10.0])
        interp = LogLinear().interpolate(x, np.exp(-0.04 * x))
        for t in [0.3, 2.2, 7.7]:
            assert abs(interp(t) - np.exp(-0.04 * t)) < 1e-14
            assert abs(interp.derivative(t) + 0.04 * np.exp(-0.04 * t)) < 1e-13

    def test_non_positive_rejected(self):
        """Non-positive values cannot be log-interpolated."""
        with pytest.raises(InterpolationError):
            LogLinear().interpolate([0.0, 1.0], [1.0, 0.0])


class TestFlatInterpolation:
    """Tests for backward and forward flat schemes."""

    def test_backward_flat(self, sample_points):
        """Backward flat takes the right knot value."""
        x, y = sample_points
        interp = BackwardFlat().interpolate(x, y)
        assert interp(0.5) == 3.0
        assert interp(1.0) == 3.0
        assert interp(1.5) == 2.0
        assert abs(interp.primitive(2.0) - 5.0) < 1e-14

    def test_forward_flat(self, sample_points):
        """Forward flat takes the left knot value."""
        x, y = sample_points
        interp = ForwardFlat().interpolate(x, y)
        assert interp(0.5) == 1.0
        assert interp(1.0) == 3.0
        assert interp(5.0) == 8.0
        assert abs(interp.primitive(2.0) - 4.0) < 1e-14


class TestMixedInterpolation:
    """Tests for mixed linear/cubic interpolation."""

    def test_linear_before_switch(self):
        """Before the switch knot the scheme is linear."""
        x = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
        y = np.array([0.0, 1.0, 4.0, 9.0, 16.0])
        interp = MixedLinearCubic(2, MixedBehavior.SPLIT_RANGES).interpolate(x, y)
        assert abs(interp(0.5) - 0.5) < 1e-14
        assert abs(interp(1.5) - 2.5) < 1e-14
        for xi, yi in zip(x, y):
            assert abs(interp(xi) - yi) < 1e-12

    def test_primitive_continuous_at_switch(self):
        """Primitive has no jump at the switch point."""
        x = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
        y = np.array([1.0, 2.0, 1.5, 3.0, 2.0])
        interp = MixedLinearCubic(2, MixedBehavior.SHARE_RANGES).interpolate(x, y)
        eps = 1e-9
        assert abs(interp.primitive(2.0 - eps) - interp.primitive(2.0)) < 1e-6

    def test_invalid_switch(self):
        """Switch index must be interior."""
        with pytest.raises(InterpolationError):
            MixedInterpolation([0.0, 1.0, 2.0], [1.0, 2.0, 3.0], 3, MixedBehavior.SHARE_RANGES)
        with pytest.raises(InterpolationError):
            MixedInterpolation([0.0, 1.0, 2.0], [1.0, 2.0, 3.0], 0, MixedBehavior.SHARE_RANGES)

    def test_default_schemes(self):
        """Without explicit schemes the mix is linear then Kruger cubic."""
        interp = MixedInterpolation([0.0, 1.0, 2.0, 3.0], [1.0, 2.0, 4.0, 3.0], 2)
        assert isinstance(interp.first, Linear)
        assert type(interp.second).__name__ == "Cubic"
        assert abs(interp(0.5) - 1.5) < 1e-14


class TestInterpolatorFactory:
    """Tests for name-based construction."""

    def test_known_names(self):
        """Names map to the expected strategies."""
        assert isinstance(create_interpolator("linear"), Linear)
        assert isinstance(create_interpolator("Log-Linear"), LogLinear)
        assert isinstance(create_interpolator("natural_spline"), CubicNaturalSpline)
        assert isinstance(create_interpolator("convex_monotone"), ConvexMonotone)
        assert isinstance(create_interpolator("kernel"), Kernel)

    def test_kwargs_forwarded(self):
        """Keyword arguments reach the strategy."""
        interp = create_interpolator("mixed_linear_cubic", n=3)
        assert interp.n == 3

    def test_unknown_name(self):
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError):
            create_interpolator("quintic")

    def test_available(self):
        """Listed names are all constructible without arguments."""
        for name in available_interpolators():
            if name == "mixed_linear_cubic":
                continue
            assert create_interpolator(name) is not None

    def test_global_flags(self):
        """Only coupled schemes are global."""
        assert not Linear().is_global
        assert not LogLinear().is_global
        assert CubicNaturalSpline().is_global
        assert ConvexMonotone().is_global
        assert Kernel().is_global
