"""
Cubic interpolation family.

Each segment i is the cubic

    y(x) = y[i] + a[i]*dx + b[i]*dx**2 + c[i]*dx**3,   dx = x - x[i]

determined by the values and the first derivatives at its two knots.
The knot derivatives come from one of several schemes:

- SPLINE: non-local; solves a tri-diagonal system so that the second
  derivative is continuous, closed at each end by a boundary condition
  (not-a-knot, first derivative or second derivative)
- PARABOLIC: derivative of the parabola through three neighbouring knots
- FRITSCH_BUTLAND: weighted harmonic blend of neighbouring secants
- AKIMA: four-point weighted average of secants
- KRUGER: harmonic mean of secants, zero at local extrema

Any scheme can be followed by the Hyman monotonicity filter, which
clamps derivatives that would create extrema not present in the data.
The filter leaves an already monotone cubic untouched.

See R. L. Dougherty, A. Edelman and J. M. Hyman, "Nonnegativity-,
Monotonicity-, or Convexity-Preserving Cubic and Quintic Hermite
Interpolation", Mathematics of Computation 52 (1989), 471-494.
"""

from enum import Enum
from functools import partial
from typing import Sequence, Tuple
import numpy as np
from scipy.linalg import solve_banded

from ..errors import InterpolationError
from .base import Interpolation, Interpolator
from .linear import LogInterpolation


class DerivativeApprox(Enum):
    """Scheme used to estimate first derivatives at the knots."""
    SPLINE = "Spline"
    FOURTH_ORDER = "FourthOrder"
    MODIFIED_PARABOLIC = "ModifiedParabolic"
    PARABOLIC = "Parabolic"
    FRITSCH_BUTLAND = "FritschButland"
    AKIMA = "Akima"
    KRUGER = "Kruger"


class BoundaryCondition(Enum):
    """End condition closing the spline system."""
    NOT_A_KNOT = "NotAKnot"
    FIRST_DERIVATIVE = "FirstDerivative"
    SECOND_DERIVATIVE = "SecondDerivative"
    PERIODIC = "Periodic"
    LAGRANGE = "Lagrange"


_UNSUPPORTED_CONDITIONS = (BoundaryCondition.PERIODIC, BoundaryCondition.LAGRANGE)
_UNSUPPORTED_APPROXIMATIONS = (DerivativeApprox.FOURTH_ORDER, DerivativeApprox.MODIFIED_PARABOLIC)


def spline_derivatives(
    dx: np.ndarray,
    S: np.ndarray,
    left_condition: BoundaryCondition,
    left_value: float,
    right_condition: BoundaryCondition,
    right_value: float
) -> np.ndarray:
    """
    Knot derivatives of the C2 cubic spline.

    Args:
        dx: Segment widths
        S: Segment secant slopes
        left_condition: Boundary condition at x[0]
        left_value: Derivative value for the left condition (ignored for not-a-knot)
        right_condition: Boundary condition at x[-1]
        right_value: Derivative value for the right condition (ignored for not-a-knot)

    Returns:
        Array of first derivatives at the knots
    """
    n = len(dx) + 1
    not_a_knot = BoundaryCondition.NOT_A_KNOT
    if not_a_knot in (left_condition, right_condition) and n < 3:
        raise InterpolationError("Not-a-knot boundary condition requires at least 3 points")
    if left_condition == not_a_knot and right_condition == not_a_knot and n == 3:
        # both ends constrain the single interior knot: the fit is the parabola
        return parabolic_derivatives(dx, S)

    # banded storage: ab[0] super-diagonal, ab[1] diagonal, ab[2] sub-diagonal
    ab = np.zeros((3, n))
    rhs = np.zeros(n)

    i = np.arange(1, n - 1)
    ab[2, i - 1] = dx[i]
    ab[1, i] = 2.0 * (dx[i] + dx[i - 1])
    ab[0, i + 1] = dx[i - 1]
    rhs[i] = 3.0 * (dx[i] * S[i - 1] + dx[i - 1] * S[i])

    if left_condition == not_a_knot:
        ab[1, 0] = dx[1] * (dx[1] + dx[0])
        ab[0, 1] = (dx[0] + dx[1]) ** 2
        rhs[0] = S[0] * dx[1] * (2.0 * dx[1] + 3.0 * dx[0]) + S[1] * dx[0] ** 2
    elif left_condition == BoundaryCondition.FIRST_DERIVATIVE:
        ab[1, 0] = 1.0
        ab[0, 1] = 0.0
        rhs[0] = left_value
    else:
        ab[1, 0] = 2.0
        ab[0, 1] = 1.0
        rhs[0] = 3.0 * S[0] - left_value * dx[0] / 2.0

    if right_condition == not_a_knot:
        ab[2, n - 2] = (dx[n - 2] + dx[n - 3]) ** 2
        ab[1, n - 1] = dx[n - 3] * (dx[n - 3] + dx[n - 2])
        rhs[n - 1] = (S[n - 3] * dx[n - 2] ** 2
                      + S[n - 2] * dx[n - 3] * (3.0 * dx[n - 2] + 2.0 * dx[n - 3]))
    elif right_condition == BoundaryCondition.FIRST_DERIVATIVE:
        ab[2, n - 2] = 0.0
        ab[1, n - 1] = 1.0
        rhs[n - 1] = right_value
    else:
        ab[2, n - 2] = 1.0
        ab[1, n - 1] = 2.0
        rhs[n - 1] = 3.0 * S[n - 2] + right_value * dx[n - 2] / 2.0

    try:
        return solve_banded((1, 1), ab, rhs)
    except np.linalg.LinAlgError as exc:
        raise InterpolationError(f"Singular spline system: {exc}") from exc


def _parabolic_end_points(dx: np.ndarray, S: np.ndarray) -> Tuple[float, float]:
    first = ((2.0 * dx[0] + dx[1]) * S[0] - dx[0] * S[1]) / (dx[0] + dx[1])
    last = ((2.0 * dx[-1] + dx[-2]) * S[-1] - dx[-1] * S[-2]) / (dx[-1] + dx[-2])
    return first, last


def parabolic_derivatives(dx: np.ndarray, S: np.ndarray) -> np.ndarray:
    """Derivatives of the parabolas through each triple of neighbouring knots."""
    tmp = np.empty(len(dx) + 1)
    tmp[1:-1] = (dx[:-1] * S[1:] + dx[1:] * S[:-1]) / (dx[1:] + dx[:-1])
    tmp[0], tmp[-1] = _parabolic_end_points(dx, S)
    return tmp


def fritsch_butland_derivatives(dx: np.ndarray, S: np.ndarray) -> np.ndarray:
    tmp = np.empty(len(dx) + 1)
    for i in range(1, len(tmp) - 1):
        s_min = min(S[i - 1], S[i])
        s_max = max(S[i - 1], S[i])
        denominator = s_max + 2.0 * s_min
        tmp[i] = 3.0 * s_min * s_max / denominator if denominator != 0.0 else 0.0
    tmp[0], tmp[-1] = _parabolic_end_points(dx, S)
    return tmp


def _weighted(w1: float, v1: float, w2: float, v2: float) -> float:
    total = w1 + w2
    if total == 0.0:
        return 0.5 * (v1 + v2)
    return (w1 * v1 + w2 * v2) / total


def akima_derivatives(dx: np.ndarray, S: np.ndarray) -> np.ndarray:
    n = len(dx) + 1
    if n < 5:
        raise InterpolationError(f"Akima approximation needs at least 5 points, got {n}")

    tmp = np.empty(n)
    tmp[0] = _weighted(abs(S[1] - S[0]), 2.0 * S[0] * S[1],
                       abs(2.0 * S[0] * S[1] - 4.0 * S[0] * S[0] * S[1]), S[0])
    tmp[1] = _weighted(abs(S[2] - S[1]), S[0], abs(S[0] - 2.0 * S[0] * S[1]), S[1])

    for i in range(2, n - 2):
        if S[i - 2] == S[i - 1] and S[i] != S[i + 1]:
            tmp[i] = S[i - 1]
        elif S[i - 2] != S[i - 1] and S[i] == S[i + 1]:
            tmp[i] = S[i]
        elif S[i] == S[i - 1]:
            tmp[i] = S[i]
        elif S[i - 2] == S[i - 1] and S[i] == S[i + 1]:
            tmp[i] = (S[i - 1] + S[i]) / 2.0
        else:
            tmp[i] = _weighted(abs(S[i + 1] - S[i]), S[i - 1], abs(S[i - 1] - S[i - 2]), S[i])

    tmp[n - 2] = _weighted(abs(2.0 * S[n - 2] * S[n - 3] - S[n - 2]), S[n - 3],
                           abs(S[n - 3] - S[n - 4]), S[n - 2])
    tmp[n - 1] = _weighted(abs(4.0 * S[n - 2] ** 2 * S[n - 3] - 2.0 * S[n - 2] * S[n - 3]), S[n - 2],
                           abs(S[n - 2] - S[n - 3]), 2.0 * S[n - 2] * S[n - 3])
    return tmp


def kruger_derivatives(dx: np.ndarray, S: np.ndarray) -> np.ndarray:
    tmp = np.empty(len(dx) + 1)
    for i in range(1, len(tmp) - 1):
        if S[i - 1] * S[i] <= 0.0:
            # local extremum (or flat segment) at the knot
            tmp[i] = 0.0
        else:
            tmp[i] = 2.0 / (1.0 / S[i - 1] + 1.0 / S[i])
    tmp[0] = (3.0 * S[0] - tmp[1]) / 2.0
    tmp[-1] = (3.0 * S[-1] - tmp[-2]) / 2.0
    return tmp


def hyman_filter(tmp: np.ndarray, dx: np.ndarray, S: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Apply the Hyman monotonicity constraint to knot derivatives.

    Args:
        tmp: Knot derivatives
        dx: Segment widths
        S: Segment secant slopes

    Returns:
        Tuple of (filtered derivatives, boolean array flagging adjusted knots)
    """
    n = len(tmp)
    tmp = np.array(tmp, dtype=np.float64)
    adjusted = np.zeros(n, dtype=bool)

    for i in range(n):
        if i == 0 or i == n - 1:
            s = S[0] if i == 0 else S[n - 2]
            if tmp[i] * s > 0.0:
                correction = np.sign(tmp[i]) * min(abs(tmp[i]), abs(3.0 * s))
            else:
                correction = 0.0
        else:
            pm = (S[i - 1] * dx[i] + S[i] * dx[i - 1]) / (dx[i - 1] + dx[i])
            M = 3.0 * min(abs(S[i - 1]), abs(S[i]), abs(pm))
            if i > 1 and (S[i - 1] - S[i - 2]) * (S[i] - S[i - 1]) > 0.0:
                pd = (S[i - 1] * (2.0 * dx[i - 1] + dx[i - 2]) - S[i - 2] * dx[i - 1]) / (dx[i - 2] + dx[i - 1])
                if pm * pd > 0.0 and pm * (S[i - 1] - S[i - 2]) > 0.0:
                    M = max(M, 1.5 * min(abs(pm), abs(pd)))
            if i < n - 2 and (S[i] - S[i - 1]) * (S[i + 1] - S[i]) > 0.0:
                pu = (S[i] * (2.0 * dx[i] + dx[i + 1]) - S[i + 1] * dx[i]) / (dx[i] + dx[i + 1])
                if pm * pu > 0.0 and -pm * (S[i] - S[i - 1]) > 0.0:
                    M = max(M, 1.5 * min(abs(pm), abs(pu)))
            if tmp[i] * pm > 0.0:
                correction = np.sign(tmp[i]) * min(abs(tmp[i]), M)
            else:
                correction = 0.0

        if correction != tmp[i]:
            tmp[i] = correction
            adjusted[i] = True

    return tmp, adjusted


class CubicInterpolation(Interpolation):
    """
    Piecewise cubic Hermite interpolation.

    Args:
        x: Knot abscissae (strictly increasing)
        y: Knot values
        derivative_approx: Scheme estimating knot derivatives
        monotonic: Apply the Hyman filter after estimating derivatives
        left_condition: Spline boundary condition at x[0]
        left_value: Value used by the left condition
        right_condition: Spline boundary condition at x[-1]
        right_value: Value used by the right condition

    Attributes:
        a, b, c: Per-segment polynomial coefficients
        primitive_const: Integral from x[0] up to each segment start
        monotonicity_adjustments: Knots whose derivative the Hyman filter changed
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        derivative_approx: DerivativeApprox = DerivativeApprox.SPLINE,
        monotonic: bool = False,
        left_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        right_value: float = 0.0
    ):
        for condition in (left_condition, right_condition):
            if condition in _UNSUPPORTED_CONDITIONS:
                raise NotImplementedError(f"{condition.value} boundary condition is not implemented")
        if derivative_approx in _UNSUPPORTED_APPROXIMATIONS:
            raise NotImplementedError(f"{derivative_approx.value} derivative approximation is not implemented")

        self.derivative_approx = derivative_approx
        self.monotonic = monotonic
        self.left_condition = left_condition
        self.left_value = left_value
        self.right_condition = right_condition
        self.right_value = right_value
        super().__init__(x, y)

    def _knot_derivatives(self, dx: np.ndarray, S: np.ndarray) -> np.ndarray:
        if self.derivative_approx == DerivativeApprox.SPLINE:
            return spline_derivatives(
                dx, S,
                self.left_condition, self.left_value,
                self.right_condition, self.right_value
            )
        if len(dx) == 1:
            return np.array([S[0], S[0]])

        schemes = {
            DerivativeApprox.PARABOLIC: parabolic_derivatives,
            DerivativeApprox.FRITSCH_BUTLAND: fritsch_butland_derivatives,
            DerivativeApprox.AKIMA: akima_derivatives,
            DerivativeApprox.KRUGER: kruger_derivatives,
        }
        if self.derivative_approx not in schemes:
            raise ValueError(f"Unknown derivative approximation: {self.derivative_approx}")
        return schemes[self.derivative_approx](dx, S)

    def update(self) -> None:
        """Solve knot derivatives and rebuild all segment coefficients."""
        dx = np.diff(self.x)
        S = np.diff(self.y) / dx

        tmp = self._knot_derivatives(dx, S)

        if self.monotonic:
            tmp, self.monotonicity_adjustments = hyman_filter(tmp, dx, S)
        else:
            self.monotonicity_adjustments = np.zeros(len(self.x), dtype=bool)

        self.knot_derivatives = tmp
        self.a = tmp[:-1].copy()
        self.b = (3.0 * S - tmp[1:] - 2.0 * tmp[:-1]) / dx
        self.c = (tmp[1:] + tmp[:-1] - 2.0 * S) / (dx * dx)

        segment_integrals = dx * (self.y[:-1] + dx * (self.a / 2.0 + dx * (self.b / 3.0 + dx * self.c / 4.0)))
        self.primitive_const = np.zeros(len(dx))
        self.primitive_const[1:] = np.cumsum(segment_integrals)[:-1]

    def _value(self, x: float) -> float:
        j = self._locate(x)
        dx = x - self.x[j]
        return self.y[j] + dx * (self.a[j] + dx * (self.b[j] + dx * self.c[j]))

    def _primitive(self, x: float) -> float:
        j = self._locate(x)
        dx = x - self.x[j]
        return self.primitive_const[j] + dx * (
            self.y[j] + dx * (self.a[j] / 2.0 + dx * (self.b[j] / 3.0 + dx * self.c[j] / 4.0))
        )

    def _derivative(self, x: float) -> float:
        j = self._locate(x)
        dx = x - self.x[j]
        return self.a[j] + (2.0 * self.b[j] + 3.0 * self.c[j] * dx) * dx

    def _second_derivative(self, x: float) -> float:
        j = self._locate(x)
        dx = x - self.x[j]
        return 2.0 * self.b[j] + 6.0 * self.c[j] * dx


class Cubic(Interpolator):
    """
    Cubic interpolation strategy.

    The default is the Kruger scheme with natural (zero second
    derivative) end conditions.

    Attributes:
        required_points: 5 for Akima, 3 for a spline with a not-a-knot
            end, 2 otherwise
    """

    is_global = True
    required_points = 2

    def __init__(
        self,
        derivative_approx: DerivativeApprox = DerivativeApprox.KRUGER,
        monotonic: bool = False,
        left_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        right_value: float = 0.0
    ):
        self.derivative_approx = derivative_approx
        self.monotonic = monotonic
        self.left_condition = left_condition
        self.left_value = left_value
        self.right_condition = right_condition
        self.right_value = right_value
        if derivative_approx == DerivativeApprox.AKIMA:
            self.required_points = 5
        elif (derivative_approx == DerivativeApprox.SPLINE
              and BoundaryCondition.NOT_A_KNOT in (left_condition, right_condition)):
            self.required_points = 3

    def _parameters(self) -> dict:
        return dict(
            derivative_approx=self.derivative_approx,
            monotonic=self.monotonic,
            left_condition=self.left_condition,
            left_value=self.left_value,
            right_condition=self.right_condition,
            right_value=self.right_value,
        )

    def interpolate(self, x, y) -> Interpolation:
        return CubicInterpolation(x, y, **self._parameters())

    def __repr__(self) -> str:
        return (f"{type(self).__name__}({self.derivative_approx.value}, monotonic={self.monotonic}, "
                f"left={self.left_condition.value}, right={self.right_condition.value})")


class CubicNaturalSpline(Cubic):
    """C2 spline with zero second derivative at both ends."""

    def __init__(self):
        super().__init__(DerivativeApprox.SPLINE, False)


class MonotonicCubicNaturalSpline(Cubic):
    """Natural spline followed by the Hyman filter."""

    def __init__(self):
        super().__init__(DerivativeApprox.SPLINE, True)


class CubicSplineNotAKnot(Cubic):
    """C2 spline with not-a-knot conditions at both ends."""

    def __init__(self):
        super().__init__(
            DerivativeApprox.SPLINE, False,
            BoundaryCondition.NOT_A_KNOT, 0.0,
            BoundaryCondition.NOT_A_KNOT, 0.0
        )


class Parabolic(Cubic):
    def __init__(self):
        super().__init__(DerivativeApprox.PARABOLIC, False)


class MonotonicParabolic(Cubic):
    def __init__(self):
        super().__init__(DerivativeApprox.PARABOLIC, True)


class FritschButlandCubic(Cubic):
    def __init__(self):
        super().__init__(DerivativeApprox.FRITSCH_BUTLAND, False)


class AkimaCubic(Cubic):
    def __init__(self):
        super().__init__(DerivativeApprox.AKIMA, False)


class KrugerCubic(Cubic):
    def __init__(self):
        super().__init__(DerivativeApprox.KRUGER, False)


class LogCubic(Cubic):
    """Cubic interpolation of log(y); y must be strictly positive."""

    def __init__(
        self,
        derivative_approx: DerivativeApprox = DerivativeApprox.SPLINE,
        monotonic: bool = True,
        left_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        left_value: float = 0.0,
        right_condition: BoundaryCondition = BoundaryCondition.SECOND_DERIVATIVE,
        right_value: float = 0.0
    ):
        super().__init__(derivative_approx, monotonic, left_condition, left_value,
                         right_condition, right_value)

    def interpolate(self, x, y) -> Interpolation:
        return LogInterpolation(x, y, partial(CubicInterpolation, **self._parameters()))


__all__ = [
    "DerivativeApprox",
    "BoundaryCondition",
    "spline_derivatives",
    "parabolic_derivatives",
    "fritsch_butland_derivatives",
    "akima_derivatives",
    "kruger_derivatives",
    "hyman_filter",
    "CubicInterpolation",
    "Cubic",
    "CubicNaturalSpline",
    "MonotonicCubicNaturalSpline",
    "CubicSplineNotAKnot",
    "Parabolic",
    "MonotonicParabolic",
    "FritschButlandCubic",
    "AkimaCubic",
    "KrugerCubic",
    "LogCubic",
]
