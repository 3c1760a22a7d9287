"""
Base classes for interpolation.

Two layers are kept apart:
- Interpolator: stateless strategy (scheme + parameters) that knows how to
  fit a dataset, whether the fit couples all points (is_global) and how
  many points it needs (required_points)
- Interpolation: the fitted object for one dataset, exposing value,
  derivative, second derivative and primitive with optional extrapolation

An Interpolation is never patched in place: curves build a new one from
their current arrays whenever the data changes.
"""

from abc import ABC, abstractmethod
from typing import Sequence
import numpy as np

from ..errors import ExtrapolationError, InterpolationError


class Interpolation(ABC):
    """
    Fitted interpolant over strictly increasing x.

    Subclasses set their parameters before calling ``super().__init__``,
    which validates the points and calls ``update()`` to compute
    coefficients.
    """

    min_points = 2

    def __init__(self, x: Sequence[float], y: Sequence[float]):
        self.x = np.array(x, dtype=np.float64)
        self.y = np.array(y, dtype=np.float64)
        self._extrapolate = False
        self._validate()
        self.update()

    def _validate(self) -> None:
        if self.x.ndim != 1 or self.y.ndim != 1:
            raise InterpolationError("x and y must be one-dimensional")
        if len(self.x) != len(self.y):
            raise InterpolationError(
                f"x and y must have same length ({len(self.x)} != {len(self.y)})"
            )
        if len(self.x) < self.min_points:
            raise InterpolationError(
                f"Need at least {self.min_points} points for interpolation, got {len(self.x)}"
            )
        if np.any(np.diff(self.x) <= 0):
            raise InterpolationError("x values must be strictly increasing")

    def update(self) -> None:
        """Recompute coefficients from x and y."""
        pass

    @property
    def size(self) -> int:
        return len(self.x)

    @property
    def x_min(self) -> float:
        return float(self.x[0])

    @property
    def x_max(self) -> float:
        return float(self.x[-1])

    def is_in_range(self, x: float) -> bool:
        return self.x[0] <= x <= self.x[-1]

    def enable_extrapolation(self, flag: bool = True) -> None:
        self._extrapolate = flag

    def disable_extrapolation(self) -> None:
        self._extrapolate = False

    @property
    def allows_extrapolation(self) -> bool:
        return self._extrapolate

    def _check_range(self, x: float, allow_extrapolation: bool) -> None:
        if not (allow_extrapolation or self._extrapolate or self.is_in_range(x)):
            raise ExtrapolationError(
                f"Interpolation range is [{self.x_min}, {self.x_max}]: "
                f"extrapolation at {x} not allowed"
            )

    def _locate(self, x: float) -> int:
        """Index of the segment containing x (end segments for x outside)."""
        if x < self.x[0]:
            return 0
        if x >= self.x[-1]:
            return len(self.x) - 2
        return int(np.searchsorted(self.x, x, side='right') - 1)

    def value(self, x: float, allow_extrapolation: bool = False) -> float:
        """Interpolated value at x."""
        self._check_range(x, allow_extrapolation)
        return float(self._value(x))

    def __call__(self, x: float, allow_extrapolation: bool = False) -> float:
        return self.value(x, allow_extrapolation)

    def derivative(self, x: float, allow_extrapolation: bool = False) -> float:
        """First derivative at x."""
        self._check_range(x, allow_extrapolation)
        return float(self._derivative(x))

    def second_derivative(self, x: float, allow_extrapolation: bool = False) -> float:
        """Second derivative at x."""
        self._check_range(x, allow_extrapolation)
        return float(self._second_derivative(x))

    def primitive(self, x: float, allow_extrapolation: bool = False) -> float:
        """Integral of the interpolant from x[0] to x."""
        self._check_range(x, allow_extrapolation)
        return float(self._primitive(x))

    @abstractmethod
    def _value(self, x: float) -> float:
        pass

    def _derivative(self, x: float) -> float:
        raise NotImplementedError(f"{type(self).__name__} does not provide a derivative")

    def _second_derivative(self, x: float) -> float:
        raise NotImplementedError(f"{type(self).__name__} does not provide a second derivative")

    def _primitive(self, x: float) -> float:
        raise NotImplementedError(f"{type(self).__name__} does not provide a primitive")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.size}, range=[{self.x_min}, {self.x_max}])"


class Interpolator(ABC):
    """
    Interpolation strategy.

    Attributes:
        is_global: True if moving one point changes the fit everywhere
        required_points: Minimum number of points the scheme can fit
    """

    is_global = False
    required_points = 2

    @abstractmethod
    def interpolate(self, x: Sequence[float], y: Sequence[float]) -> Interpolation:
        """Fit the scheme to the given points."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = [
    "Interpolation",
    "Interpolator",
]
