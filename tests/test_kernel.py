"""
Unit tests for kernel interpolation.
"""

import numpy as np
import pytest

from curvelib.errors import KernelInversionError
from curvelib.interpolation import GaussianKernel, Kernel, KernelInterpolation


DELTA_GRID = [0.10, 0.25, 0.50, 0.75, 0.90]
YD1 = [11.275, 11.125, 11.250, 11.825, 12.625]
YD2 = [16.025, 13.450, 11.350, 10.150, 10.075]
YD3 = [10.3000, 9.6375, 9.2000, 9.1125, 9.4000]

TEST_GRID = [0.121, 0.279, 0.678, 0.790, 0.980]
YTD1 = [11.23847, 11.12003, 11.58932, 11.99168, 13.29650]
YTD2 = [15.55922, 13.11088, 10.41615, 10.05153, 10.50741]
YTD3 = [10.17473, 9.557842, 9.09339, 9.149687, 9.779971]


class TestGaussianKernel:
    """Tests for the Gaussian kernel."""

    def test_density(self):
        """Kernel is the normal density."""
        k = GaussianKernel(0.0, 1.0)
        assert abs(k(0.0) - 1.0 / np.sqrt(2.0 * np.pi)) < 1e-15
        assert abs(k(1.0) - np.exp(-0.5) / np.sqrt(2.0 * np.pi)) < 1e-15

    def test_vectorised(self):
        """Kernel evaluates arrays elementwise."""
        k = GaussianKernel(0.0, 0.5)
        values = k(np.array([-1.0, 0.0, 1.0]))
        assert values.shape == (3,)
        assert values[0] == values[2]

    def test_invalid_width(self):
        """Kernel width must be positive."""
        with pytest.raises(ValueError):
            GaussianKernel(0.0, 0.0)


class TestKernelInterpolation:
    """Tests for kernel interpolation."""

    @pytest.mark.parametrize("sigma", [0.05, 0.50, 0.75])
    @pytest.mark.parametrize("y", [YD1, YD2, YD3])
    def test_reproduces_knots(self, sigma, y):
        """Interpolant passes through the data."""
        interp = Kernel(GaussianKernel(0.0, sigma)).interpolate(DELTA_GRID, y)
        for xi, yi in zip(DELTA_GRID, y):
            assert abs(interp(xi) - yi) < 2.0e-5

    @pytest.mark.parametrize("y, expected", [(YD1, YTD1), (YD2, YTD2), (YD3, YTD3)])
    def test_off_grid_values(self, y, expected):
        """Off-grid values match reference smiles."""
        interp = KernelInterpolation(DELTA_GRID, y, GaussianKernel(0.0, 2.05))
        interp.enable_extrapolation()
        for x, e in zip(TEST_GRID, expected):
            assert abs(interp(x) - e) < 1.0e-4

    def test_near_duplicate_abscissae(self):
        """Nearly coincident points make the matrix uninvertible."""
        with pytest.raises(KernelInversionError):
            KernelInterpolation([0.1, 0.1 + 1e-14, 0.5], [1.0, 2.0, 3.0])

    def test_duplicate_abscissae(self):
        """Coincident points make the matrix singular."""
        with pytest.raises(KernelInversionError):
            KernelInterpolation([0.1, 0.1, 0.5], [1.0, 2.0, 3.0])

    def test_derivative_not_implemented(self):
        """Kernel interpolation has no derivative."""
        interp = Kernel().interpolate(DELTA_GRID, YD1)
        with pytest.raises(NotImplementedError):
            interp.derivative(0.3)
