"""
Unit tests for convex monotone interpolation.
"""

import numpy as np
import pytest

from curvelib.errors import InterpolationError
from curvelib.interpolation import ConvexMonotone, ConvexMonotoneInterpolation


@pytest.fixture
def forward_points():
    """Period-average forwards; y[0] is a placeholder at t=0."""
    x = np.array([0.0, 1.0, 2.0, 3.0, 5.0, 7.0, 10.0])
    y = np.array([0.030, 0.030, 0.035, 0.033, 0.040, 0.042, 0.041])
    return x, y


class TestConvexMonotone:
    """Tests for convex monotone interpolation."""

    @pytest.mark.parametrize("quadraticity", [0.0, 0.3, 1.0])
    def test_period_averages(self, forward_points, quadraticity):
        """Integral over each period equals the period value times its length."""
        x, y = forward_points
        interp = ConvexMonotone(quadraticity=quadraticity).interpolate(x, y)
        for i in range(1, len(x)):
            average = (interp.primitive(x[i]) - interp.primitive(x[i - 1])) / (x[i] - x[i - 1])
            assert abs(average - y[i]) < 1e-12

    def test_flat_data(self):
        """Flat averages give a flat forward curve."""
        x = np.array([0.0, 1.0, 2.0, 4.0, 8.0])
        y = np.full(5, 0.05)
        interp = ConvexMonotone().interpolate(x, y)
        for t in [0.0, 0.5, 1.7, 3.3, 7.9, 8.0]:
            assert abs(interp(t) - 0.05) < 1e-14

    def test_two_points(self):
        """Two points give a single constant section."""
        interp = ConvexMonotone().interpolate([0.0, 2.0], [0.01, 0.04])
        assert abs(interp(0.5) - 0.04) < 1e-14
        assert abs(interp.primitive(2.0) - 0.08) < 1e-14

    def test_continuous_at_knots(self, forward_points):
        """The forward curve has no jumps at interior knots."""
        x, y = forward_points
        interp = ConvexMonotone().interpolate(x, y)
        eps = 1e-9
        for xi in x[1:-1]:
            assert abs(interp(xi - eps) - interp(xi + eps)) < 1e-6

    def test_flat_extrapolation(self, forward_points):
        """Past the last knot the forward stays at its end value."""
        x, y = forward_points
        interp = ConvexMonotone().interpolate(x, y)
        end = interp(x[-1])
        assert abs(interp(15.0, True) - end) < 1e-14
        expected = interp.primitive(x[-1]) + end * 5.0
        assert abs(interp.primitive(15.0, True) - expected) < 1e-12

    def test_derivative_not_implemented(self, forward_points):
        """Derivatives are not provided."""
        x, y = forward_points
        interp = ConvexMonotone().interpolate(x, y)
        with pytest.raises(NotImplementedError):
            interp.derivative(1.5)
        with pytest.raises(NotImplementedError):
            interp.second_derivative(1.5)

    def test_invalid_parameters(self, forward_points):
        """Quadraticity and monotonicity lie in [0, 1]."""
        x, y = forward_points
        with pytest.raises(InterpolationError):
            ConvexMonotoneInterpolation(x, y, quadraticity=1.5)
        with pytest.raises(InterpolationError):
            ConvexMonotoneInterpolation(x, y, monotonicity=-0.1)


class TestLocalInterpolate:
    """Tests for frozen-section refits."""

    def test_frozen_sections_unchanged(self, forward_points):
        """Extending a fit keeps earlier sections intact."""
        x, y = forward_points
        scheme = ConvexMonotone()
        first = scheme.local_interpolate(x[:3], y[:3], 2, None, len(x))
        second = scheme.local_interpolate(x[:4], y[:4], 2, first, len(x))
        frozen = first.existing_helpers()
        assert second.helpers[:len(frozen)] == frozen
        assert abs(second(0.5) - first(0.5)) < 1e-15

    def test_constant_last_period(self, forward_points):
        """Until the final size the last period is flat."""
        x, y = forward_points
        interp = ConvexMonotone().local_interpolate(x[:4], y[:4], 2, None, len(x))
        assert abs(interp(2.5) - y[3]) < 1e-14
        assert abs(interp(2.9) - y[3]) < 1e-14
