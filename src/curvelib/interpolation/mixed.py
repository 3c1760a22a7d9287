"""
Mixed interpolation: one scheme up to a switch knot, another after it.

With SHARE_RANGES both schemes are fitted over all points; with
SPLIT_RANGES the first is fitted on x[0..n] and the second on x[n..].
The primitive is stitched at the switch point so that it stays
continuous.
"""

from enum import Enum
from typing import Optional, Sequence

from ..errors import InterpolationError
from .base import Interpolation, Interpolator
from .cubic import BoundaryCondition, Cubic, DerivativeApprox
from .linear import Linear


class MixedBehavior(Enum):
    """How the two schemes share the points."""
    SHARE_RANGES = "ShareRanges"
    SPLIT_RANGES = "SplitRanges"


class MixedInterpolation(Interpolation):
    """
    Interpolation switching scheme at knot n.

    Args:
        x: Knot abscissae
        y: Knot values
        n: Index of the switch knot; x < x[n] uses the first scheme
        behavior: Whether the schemes share or split the points
        first: Strategy used before the switch
        second: Strategy used from the switch on
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        n: int,
        behavior: MixedBehavior = MixedBehavior.SHARE_RANGES,
        first: Optional[Interpolator] = None,
        second: Optional[Interpolator] = None
    ):
        self.n = n
        self.behavior = behavior
        self.first = first if first is not None else Linear()
        self.second = second if second is not None else Cubic()
        self.min_points = max(self.first.required_points, self.second.required_points)
        super().__init__(x, y)

    def update(self) -> None:
        size = len(self.x)
        if not 0 < self.n < size:
            raise InterpolationError(f"Switch index {self.n} out of range for {size}-element x sequence")

        if self.behavior == MixedBehavior.SHARE_RANGES:
            self.interpolation1 = self.first.interpolate(self.x, self.y)
            self.interpolation2 = self.second.interpolate(self.x, self.y)
        else:
            self.interpolation1 = self.first.interpolate(self.x[:self.n + 1], self.y[:self.n + 1])
            self.interpolation2 = self.second.interpolate(self.x[self.n:], self.y[self.n:])

    @property
    def switch_point(self) -> float:
        return float(self.x[self.n])

    def _value(self, x: float) -> float:
        if x < self.switch_point:
            return self.interpolation1.value(x, True)
        return self.interpolation2.value(x, True)

    def _primitive(self, x: float) -> float:
        if x < self.switch_point:
            return self.interpolation1.primitive(x, True)
        s = self.switch_point
        return (self.interpolation2.primitive(x, True)
                - self.interpolation2.primitive(s, True)
                + self.interpolation1.primitive(s, True))

    def _derivative(self, x: float) -> float:
        if x < self.switch_point:
            return self.interpolation1.derivative(x, True)
        return self.interpolation2.derivative(x, True)

    def _second_derivative(self, x: float) -> float:
        if x < self.switch_point:
            return self.interpolation1.second_derivative(x, True)
        return self.interpolation2.second_derivative(x, True)


class MixedLinearCubic(Interpolator):
    """
    Linear up to knot n, cubic afterwards.

    Args:
        n: Switch knot index
        behavior: Range sharing behaviour
        derivative_approx, monotonic, left_condition, left_value,
        right_condition, right_value: Parameters of the cubic part
    """

    is_global = True
    required_points = 3

    def __init__(
        self,
        n: int,
        behavior: MixedBehavior = MixedBehavior.SHARE_RANGES,
        derivative_approx: DerivativeApprox = DerivativeApprox.SPLINE,
        monotonic: bool = True,
        left_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        right_value: float = 0.0
    ):
        self.n = n
        self.behavior = behavior
        self.cubic = Cubic(derivative_approx, monotonic, left_condition, left_value,
                           right_condition, right_value)

    def interpolate(self, x, y) -> Interpolation:
        return MixedInterpolation(x, y, self.n, self.behavior, Linear(), self.cubic)

    def __repr__(self) -> str:
        return f"MixedLinearCubic(n={self.n}, {self.behavior.value}, {self.cubic!r})"


__all__ = [
    "MixedBehavior",
    "MixedInterpolation",
    "MixedLinearCubic",
]
