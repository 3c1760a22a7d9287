"""
Local piecewise interpolations.

Provides:
- LinearInterpolation: straight lines between knots
- LogInterpolation: any scheme applied to log(y), e.g. log-linear discounts
- BackwardFlatInterpolation: value of the right knot on each segment
- ForwardFlatInterpolation: value of the left knot on each segment

and the matching strategies Linear, LogLinear, BackwardFlat, ForwardFlat.
"""

from typing import Callable, Sequence
import numpy as np

from ..errors import InterpolationError
from .base import Interpolation, Interpolator


class LinearInterpolation(Interpolation):
    """
    Linear interpolation.

    Extrapolates linearly using the first/last segment slope.
    """

    def update(self) -> None:
        dx = np.diff(self.x)
        self.slopes = np.diff(self.y) / dx
        self.primitive_const = np.zeros(len(self.x) - 1)
        self.primitive_const[1:] = np.cumsum(dx * (self.y[:-1] + 0.5 * dx * self.slopes))[:-1]

    def _value(self, x: float) -> float:
        i = self._locate(x)
        return self.y[i] + (x - self.x[i]) * self.slopes[i]

    def _derivative(self, x: float) -> float:
        return self.slopes[self._locate(x)]

    def _second_derivative(self, x: float) -> float:
        return 0.0

    def _primitive(self, x: float) -> float:
        i = self._locate(x)
        dx = x - self.x[i]
        return self.primitive_const[i] + dx * (self.y[i] + 0.5 * dx * self.slopes[i])


class LogInterpolation(Interpolation):
    """
    Interpolation of log(y) with an arbitrary inner scheme.

    Args:
        x: Knot abscissae
        y: Strictly positive knot values
        factory: Callable fitting the inner scheme, e.g. LinearInterpolation
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        factory: Callable[[np.ndarray, np.ndarray], Interpolation] = LinearInterpolation
    ):
        self._factory = factory
        super().__init__(x, y)

    def update(self) -> None:
        if np.any(self.y <= 0):
            bad = float(self.y[self.y <= 0][0])
            raise InterpolationError(f"Invalid value ({bad}) for log interpolation: must be positive")
        self.log_interpolation = self._factory(self.x, np.log(self.y))

    def _value(self, x: float) -> float:
        return np.exp(self.log_interpolation._value(x))

    def _derivative(self, x: float) -> float:
        return self._value(x) * self.log_interpolation._derivative(x)

    def _second_derivative(self, x: float) -> float:
        g1 = self.log_interpolation._derivative(x)
        g2 = self.log_interpolation._second_derivative(x)
        return self._value(x) * (g2 + g1 * g1)


class BackwardFlatInterpolation(Interpolation):
    """Piecewise constant, taking the value of the right knot on (x[i], x[i+1]]."""

    def update(self) -> None:
        dx = np.diff(self.x)
        self.primitive_const = np.zeros(len(self.x))
        self.primitive_const[1:] = np.cumsum(dx * self.y[1:])

    def _value(self, x: float) -> float:
        if x <= self.x[0]:
            return self.y[0]
        i = self._locate(x)
        if x == self.x[i]:
            return self.y[i]
        return self.y[i + 1]

    def _derivative(self, x: float) -> float:
        return 0.0

    def _second_derivative(self, x: float) -> float:
        return 0.0

    def _primitive(self, x: float) -> float:
        i = self._locate(x)
        return self.primitive_const[i] + (x - self.x[i]) * self.y[i + 1]


class ForwardFlatInterpolation(Interpolation):
    """Piecewise constant, taking the value of the left knot on [x[i], x[i+1])."""

    def update(self) -> None:
        dx = np.diff(self.x)
        self.primitive_const = np.zeros(len(self.x))
        self.primitive_const[1:] = np.cumsum(dx * self.y[:-1])

    def _value(self, x: float) -> float:
        if x >= self.x[-1]:
            return self.y[-1]
        return self.y[self._locate(x)]

    def _derivative(self, x: float) -> float:
        return 0.0

    def _second_derivative(self, x: float) -> float:
        return 0.0

    def _primitive(self, x: float) -> float:
        if x >= self.x[-1]:
            return self.primitive_const[-1] + (x - self.x[-1]) * self.y[-1]
        i = self._locate(x)
        return self.primitive_const[i] + (x - self.x[i]) * self.y[i]


class Linear(Interpolator):
    """Linear interpolation strategy."""

    def interpolate(self, x, y) -> Interpolation:
        return LinearInterpolation(x, y)


class LogLinear(Interpolator):
    """Log-linear interpolation strategy (piecewise flat forwards on discounts)."""

    def interpolate(self, x, y) -> Interpolation:
        return LogInterpolation(x, y, LinearInterpolation)


class BackwardFlat(Interpolator):
    """Backward-flat interpolation strategy."""

    def interpolate(self, x, y) -> Interpolation:
        return BackwardFlatInterpolation(x, y)


class ForwardFlat(Interpolator):
    """Forward-flat interpolation strategy."""

    def interpolate(self, x, y) -> Interpolation:
        return ForwardFlatInterpolation(x, y)


__all__ = [
    "LinearInterpolation",
    "LogInterpolation",
    "BackwardFlatInterpolation",
    "ForwardFlatInterpolation",
    "Linear",
    "LogLinear",
    "BackwardFlat",
    "ForwardFlat",
]
