"""
Kernel interpolation.

The interpolant is a normalised kernel expansion

    f(x) = sum_i alpha_i k(x - x_i) / sum_i k(x - x_i)

where the weights alpha solve M alpha = y with
M[r, c] = k(x_r - x_c) / sum_j k(x_r - x_j). Ill-conditioned kernel
matrices (close or duplicate x values, very wide kernels) are detected
by checking the residual of the solve.
"""

from typing import Callable, Optional, Sequence
import numpy as np

from ..errors import InterpolationError, KernelInversionError
from .base import Interpolation, Interpolator


class GaussianKernel:
    """
    Gaussian density kernel.

    Args:
        average: Mean of the density
        sigma: Standard deviation (positive)
    """

    def __init__(self, average: float = 0.0, sigma: float = 1.0):
        if sigma <= 0:
            raise ValueError(f"Kernel width must be positive, got {sigma}")
        self.average = average
        self.sigma = sigma
        self._norm = 1.0 / (sigma * np.sqrt(2.0 * np.pi))

    def __call__(self, x):
        z = (np.asarray(x) - self.average) / self.sigma
        return self._norm * np.exp(-0.5 * z * z)

    def __repr__(self) -> str:
        return f"GaussianKernel(average={self.average}, sigma={self.sigma})"


class KernelInterpolation(Interpolation):
    """
    Normalised kernel interpolation.

    Args:
        x: Knot abscissae (sorted; duplicates make the system singular)
        y: Knot values
        kernel: Vectorised callable k(d)
        epsilon: Maximum admissible residual |M alpha - y| per knot

    Raises:
        KernelInversionError: If the weights do not reproduce y within epsilon
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        kernel: Optional[Callable] = None,
        epsilon: float = 1.0e-7
    ):
        self.kernel = kernel if kernel is not None else GaussianKernel()
        self.epsilon = epsilon
        super().__init__(x, y)

    def _validate(self) -> None:
        if len(self.x) != len(self.y):
            raise InterpolationError(
                f"x and y must have same length ({len(self.x)} != {len(self.y)})"
            )
        if len(self.x) < self.min_points:
            raise InterpolationError(
                f"Need at least {self.min_points} points for interpolation, got {len(self.x)}"
            )
        if np.any(np.diff(self.x) < 0):
            raise InterpolationError("x values must be sorted")

    def update(self) -> None:
        distances = self.x[:, None] - self.x[None, :]
        K = self.kernel(distances)
        self.M = K / K.sum(axis=1, keepdims=True)

        try:
            self.alpha = np.linalg.solve(self.M, self.y)
        except np.linalg.LinAlgError as exc:
            raise KernelInversionError(f"Inversion failed in 1d kernel interpolation: {exc}") from exc

        residuals = np.abs(self.M @ self.alpha - self.y)
        if not np.all(residuals < self.epsilon):
            raise KernelInversionError(
                f"Inversion failed in 1d kernel interpolation: "
                f"max residual {np.max(residuals):.3e} exceeds {self.epsilon:.1e}"
            )

    def _value(self, x: float) -> float:
        weights = self.kernel(x - self.x)
        return float(np.dot(self.alpha, weights) / np.sum(weights))


class Kernel(Interpolator):
    """Kernel interpolation strategy."""

    is_global = True

    def __init__(self, kernel: Optional[Callable] = None, epsilon: float = 1.0e-7):
        self.kernel = kernel if kernel is not None else GaussianKernel()
        self.epsilon = epsilon

    def interpolate(self, x, y) -> Interpolation:
        return KernelInterpolation(x, y, self.kernel, self.epsilon)

    def __repr__(self) -> str:
        return f"Kernel({self.kernel!r}, epsilon={self.epsilon})"


__all__ = [
    "GaussianKernel",
    "KernelInterpolation",
    "Kernel",
]
