"""
Convex monotone interpolation (Hagan & West).

Interpolates instantaneous forwards given period-average forwards, as in
"Interpolation Methods for Curve Construction", P. Hagan and G. West,
Applied Mathematical Finance 13(2), 2006.

y[i] is the average of the interpolant over (x[i-1], x[i]); the first
y value is ignored. Each period is represented by a section helper
(constant, constant gradient, quadratic or one of the piecewise
quadratic convex-monotone shapes) that knows its value and primitive.

monotonicity = 1 and quadraticity = 0 reproduce the basic Hagan/West
method. Lower monotonicity and/or positive quadraticity produce
smoother curves. force_positive avoids negative forwards.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple
import numpy as np

from ..errors import InterpolationError
from .base import Interpolation, Interpolator


class SectionHelper(ABC):
    """Closed-form representation of one interpolation period."""

    @abstractmethod
    def value(self, x: float) -> float:
        pass

    @abstractmethod
    def primitive(self, x: float) -> float:
        pass

    @abstractmethod
    def f_next(self) -> float:
        """Value at the right end of the period."""
        pass


class EverywhereConstantHelper(SectionHelper):
    def __init__(self, value: float, prev_primitive: float, x_prev: float):
        self._value = value
        self.prev_primitive = prev_primitive
        self.x_prev = x_prev

    def value(self, x: float) -> float:
        return self._value

    def primitive(self, x: float) -> float:
        return self.prev_primitive + (x - self.x_prev) * self._value

    def f_next(self) -> float:
        return self._value


class ConstantGradHelper(SectionHelper):
    def __init__(self, f_prev: float, prev_primitive: float, x_prev: float, x_next: float, f_next: float):
        self.f_prev = f_prev
        self.prev_primitive = prev_primitive
        self.x_prev = x_prev
        self.grad = (f_next - f_prev) / (x_next - x_prev)
        self._f_next = f_next

    def value(self, x: float) -> float:
        return self.f_prev + (x - self.x_prev) * self.grad

    def primitive(self, x: float) -> float:
        dx = x - self.x_prev
        return self.prev_primitive + dx * (self.f_prev + 0.5 * dx * self.grad)

    def f_next(self) -> float:
        return self._f_next


class QuadraticHelper(SectionHelper):
    """Quadratic matching both end forwards and the period average."""

    def __init__(self, x_prev: float, x_next: float, f_prev: float, f_next: float,
                 f_average: float, prev_primitive: float):
        self.x_prev = x_prev
        self.x_scaling = x_next - x_prev
        self._f_next = f_next
        self.prev_primitive = prev_primitive
        self.a = 3 * f_prev + 3 * f_next - 6 * f_average
        self.b = -(4 * f_prev + 2 * f_next - 6 * f_average)
        self.c = f_prev

    def value(self, x: float) -> float:
        u = (x - self.x_prev) / self.x_scaling
        return self.a * u * u + self.b * u + self.c

    def primitive(self, x: float) -> float:
        u = (x - self.x_prev) / self.x_scaling
        return self.prev_primitive + self.x_scaling * (self.a / 3 * u * u + self.b / 2 * u + self.c) * u

    def f_next(self) -> float:
        return self._f_next


class QuadraticMinHelper(SectionHelper):
    """
    Quadratic section that is floored at zero.

    When the plain quadratic would dip below zero, the period is split
    into a rescaled quadratic on each side of a zero region.
    """

    def __init__(self, x_prev: float, x_next: float, f_prev: float, f_next: float,
                 f_average: float, prev_primitive: float):
        self.split_region = False
        self.x1 = x_prev
        self.x4 = x_next
        self.primitive1 = prev_primitive
        self._f_next = f_next
        self.a = 3 * f_prev + 3 * f_next - 6 * f_average
        self.b = -(4 * f_prev + 2 * f_next - 6 * f_average)
        self.c = f_prev
        self.x_scaling = x_next - x_prev
        self.x_ratio = 1.0

        d = self.b * self.b - 4 * self.a * self.c
        if d > 0:
            a_av = 36.0
            b_av = -24.0 * (f_prev + f_next)
            c_av = 4.0 * (f_prev * f_prev + f_prev * f_next + f_next * f_next)
            d_av = b_av * b_av - 4.0 * a_av * c_av
            if d_av >= 0.0:
                self.split_region = True
                av_root = (-b_av - np.sqrt(d_av)) / (2 * a_av)

                self.x_ratio = f_average / av_root
                self.x_scaling *= self.x_ratio

                self.a = 3 * f_prev + 3 * f_next - 6 * av_root
                self.b = -(4 * f_prev + 2 * f_next - 6 * av_root)
                self.c = f_prev
                x_root = -self.b / (2 * self.a)
                self.x2 = self.x1 + self.x_ratio * (self.x4 - self.x1) * x_root
                self.x3 = self.x4 - self.x_ratio * (self.x4 - self.x1) * (1 - x_root)
                self.primitive2 = self.primitive1 + self.x_scaling * (
                    self.a / 3 * x_root * x_root + self.b / 2 * x_root + self.c) * x_root

    def value(self, x: float) -> float:
        u = (x - self.x1) / (self.x4 - self.x1)
        if self.split_region:
            if x <= self.x2:
                u /= self.x_ratio
            elif x < self.x3:
                return 0.0
            else:
                u = 1.0 - (1.0 - u) / self.x_ratio
        return self.c + self.b * u + self.a * u * u

    def primitive(self, x: float) -> float:
        u = (x - self.x1) / (self.x4 - self.x1)
        if self.split_region:
            if x < self.x2:
                u /= self.x_ratio
            elif x < self.x3:
                return self.primitive2
            else:
                u = 1.0 - (1.0 - u) / self.x_ratio
        return self.primitive1 + self.x_scaling * (self.a / 3 * u * u + self.b / 2 * u + self.c) * u

    def f_next(self) -> float:
        return self._f_next


class ConvexMonotone2Helper(SectionHelper):
    """Flat then quadratic, for gradients in region 2 of Hagan-West."""

    def __init__(self, x_prev: float, x_next: float, g_prev: float, g_next: float,
                 f_average: float, eta2: float, prev_primitive: float):
        self.x_prev = x_prev
        self.x_scaling = x_next - x_prev
        self.g_prev = g_prev
        self.g_next = g_next
        self.f_average = f_average
        self.eta2 = eta2
        self.prev_primitive = prev_primitive

    def value(self, x: float) -> float:
        u = (x - self.x_prev) / self.x_scaling
        if u <= self.eta2:
            return self.f_average + self.g_prev
        k = (self.g_next - self.g_prev) / ((1 - self.eta2) * (1 - self.eta2))
        return self.f_average + self.g_prev + k * (u - self.eta2) * (u - self.eta2)

    def primitive(self, x: float) -> float:
        u = (x - self.x_prev) / self.x_scaling
        base = self.f_average * u + self.g_prev * u
        if u <= self.eta2:
            return self.prev_primitive + self.x_scaling * base
        e = self.eta2
        k = (self.g_next - self.g_prev) / ((1 - e) * (1 - e))
        return self.prev_primitive + self.x_scaling * (
            base + k * (1.0 / 3.0 * (u * u * u - e * e * e) - e * u * u + e * e * u))

    def f_next(self) -> float:
        return self.f_average + self.g_next


class ConvexMonotone3Helper(SectionHelper):
    """Quadratic then flat, for gradients in region 3 of Hagan-West."""

    def __init__(self, x_prev: float, x_next: float, g_prev: float, g_next: float,
                 f_average: float, eta3: float, prev_primitive: float):
        self.x_prev = x_prev
        self.x_scaling = x_next - x_prev
        self.g_prev = g_prev
        self.g_next = g_next
        self.f_average = f_average
        self.eta3 = eta3
        self.prev_primitive = prev_primitive

    def value(self, x: float) -> float:
        u = (x - self.x_prev) / self.x_scaling
        if u <= self.eta3:
            k = (self.g_prev - self.g_next) / (self.eta3 * self.eta3)
            return self.f_average + self.g_next + k * (self.eta3 - u) * (self.eta3 - u)
        return self.f_average + self.g_next

    def primitive(self, x: float) -> float:
        u = (x - self.x_prev) / self.x_scaling
        e = self.eta3
        k = (self.g_prev - self.g_next) / (e * e)
        base = self.f_average * u + self.g_next * u
        if u <= e:
            return self.prev_primitive + self.x_scaling * (
                base + k * (1.0 / 3.0 * u * u * u - e * u * u + e * e * u))
        return self.prev_primitive + self.x_scaling * (base + k * (1.0 / 3.0 * e * e * e))

    def f_next(self) -> float:
        return self.f_average + self.g_next


class ConvexMonotone4Helper(SectionHelper):
    """Two quadratics meeting at eta4, for gradients in region 4 of Hagan-West."""

    def __init__(self, x_prev: float, x_next: float, g_prev: float, g_next: float,
                 f_average: float, eta4: float, prev_primitive: float):
        self.x_prev = x_prev
        self.x_scaling = x_next - x_prev
        self.g_prev = g_prev
        self.g_next = g_next
        self.f_average = f_average
        self.eta4 = eta4
        self.prev_primitive = prev_primitive
        self.A = -0.5 * (eta4 * g_prev + (1 - eta4) * g_next)

    def _value_scaled(self, u: float) -> float:
        e = self.eta4
        if u <= e:
            return self.f_average + self.A + (self.g_prev - self.A) * (e - u) * (e - u) / (e * e)
        return self.f_average + self.A + (self.g_next - self.A) * (u - e) * (u - e) / ((1 - e) * (1 - e))

    def _primitive_scaled(self, u: float) -> float:
        """Integral over [0, u] in units of the period length."""
        e = self.eta4
        if u <= e:
            return (self.f_average + self.A + (self.g_prev - self.A) / (e * e)
                    * (e * e - e * u + 1.0 / 3.0 * u * u)) * u
        return (self.f_average * u + self.A * u + (self.g_prev - self.A) * (1.0 / 3.0 * e)
                + (self.g_next - self.A) / ((1 - e) * (1 - e))
                * (1.0 / 3.0 * u * u * u - e * u * u + e * e * u - 1.0 / 3.0 * e * e * e))

    def value(self, x: float) -> float:
        return self._value_scaled((x - self.x_prev) / self.x_scaling)

    def primitive(self, x: float) -> float:
        return self.prev_primitive + self.x_scaling * self._primitive_scaled((x - self.x_prev) / self.x_scaling)

    def f_next(self) -> float:
        return self.f_average + self.g_next


class ConvexMonotone4MinHelper(ConvexMonotone4Helper):
    """Region-4 helper floored at zero by inserting a zero region."""

    def __init__(self, x_prev: float, x_next: float, g_prev: float, g_next: float,
                 f_average: float, eta4: float, prev_primitive: float):
        super().__init__(x_prev, x_next, g_prev, g_next, f_average, eta4, prev_primitive)
        self._f_next = f_average + g_next
        self.split_region = False
        if self.A + self.f_average <= 0.0:
            self.split_region = True
            f_prev = self.g_prev + self.f_average
            f_next = self.g_next + self.f_average
            reqd_shift = (eta4 * f_prev + (1 - eta4) * f_next) / 3.0 - self.f_average
            reqd_period = reqd_shift * self.x_scaling / (self.f_average + reqd_shift)
            x_adjust = self.x_scaling - reqd_period
            self.x_ratio = x_adjust / self.x_scaling

            self.f_average += reqd_shift
            self.g_next = f_next - self.f_average
            self.g_prev = f_prev - self.f_average
            self.A = -(eta4 * self.g_prev + (1.0 - eta4) * self.g_next) / 2.0
            self.x2 = self.x_prev + x_adjust * eta4
            self.x3 = self.x_prev + self.x_scaling - x_adjust * (1.0 - eta4)

    def value(self, x: float) -> float:
        if not self.split_region:
            return super().value(x)
        u = (x - self.x_prev) / self.x_scaling
        if x <= self.x2:
            return self._value_scaled(u / self.x_ratio)
        if x < self.x3:
            return 0.0
        return self._value_scaled(1.0 - (1.0 - u) / self.x_ratio)

    def primitive(self, x: float) -> float:
        if not self.split_region:
            return super().primitive(x)
        u = (x - self.x_prev) / self.x_scaling
        scale = self.x_scaling * self.x_ratio
        if x <= self.x2:
            return self.prev_primitive + scale * self._primitive_scaled(u / self.x_ratio)
        if x <= self.x3:
            return self.prev_primitive + scale * self._primitive_scaled(self.eta4)
        return self.prev_primitive + scale * self._primitive_scaled(1.0 - (1.0 - u) / self.x_ratio)

    def f_next(self) -> float:
        return self._f_next


class ComboHelper(SectionHelper):
    """Blend of a quadratic and a convex-monotone helper."""

    def __init__(self, quadratic_helper: SectionHelper, convex_monotone_helper: SectionHelper,
                 quadraticity: float):
        if not 0.0 < quadraticity < 1.0:
            raise InterpolationError("Quadraticity must lie strictly between 0 and 1")
        self.quadratic_helper = quadratic_helper
        self.convex_monotone_helper = convex_monotone_helper
        self.quadraticity = quadraticity

    def _blend(self, q: float, c: float) -> float:
        return self.quadraticity * q + (1.0 - self.quadraticity) * c

    def value(self, x: float) -> float:
        return self._blend(self.quadratic_helper.value(x), self.convex_monotone_helper.value(x))

    def primitive(self, x: float) -> float:
        return self._blend(self.quadratic_helper.primitive(x), self.convex_monotone_helper.primitive(x))

    def f_next(self) -> float:
        return self._blend(self.quadratic_helper.f_next(), self.convex_monotone_helper.f_next())


# (section end, helper) pairs in increasing x
HelperList = List[Tuple[float, SectionHelper]]


class ConvexMonotoneInterpolation(Interpolation):
    """
    Convex monotone interpolation of period-average values.

    Args:
        x: Period boundaries
        y: Period averages; y[i] applies to (x[i-1], x[i]) and y[0] is ignored
        quadraticity: Weight of the quadratic helper, in [0, 1]
        monotonicity: Degree of monotonicity enforcement, in [0, 1]
        force_positive: Floor the interpolant at zero
        constant_last_period: Represent the final period as flat
        pre_existing_helpers: Frozen helpers for the leading periods
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        quadraticity: float = 0.3,
        monotonicity: float = 0.7,
        force_positive: bool = True,
        constant_last_period: bool = False,
        pre_existing_helpers: Optional[HelperList] = None
    ):
        if not 0.0 <= monotonicity <= 1.0:
            raise InterpolationError("Monotonicity must lie between 0 and 1")
        if not 0.0 <= quadraticity <= 1.0:
            raise InterpolationError("Quadraticity must lie between 0 and 1")
        self.quadraticity = quadraticity
        self.monotonicity = monotonicity
        self.force_positive = force_positive
        self.constant_last_period = constant_last_period
        self.pre_existing_helpers: HelperList = list(pre_existing_helpers or [])
        if len(x) - len(self.pre_existing_helpers) <= 1:
            raise InterpolationError("Too many existing helpers have been supplied")
        super().__init__(x, y)

    def _section_helper(self, i: int, f: np.ndarray, primitive: float) -> SectionHelper:
        x, y = self.x, self.y
        g_prev = f[i - 1] - y[i]
        g_next = f[i] - y[i]

        if abs(g_prev) < 1.0e-14 and abs(g_next) < 1.0e-14:
            return ConstantGradHelper(f[i - 1], primitive, x[i - 1], x[i], f[i])

        quadraticity = self.quadraticity
        quadratic_helper = None
        convex_monotone_helper = None

        def make_quadratic(floored: bool) -> SectionHelper:
            cls = QuadraticMinHelper if floored else QuadraticHelper
            return cls(x[i - 1], x[i], f[i - 1], f[i], y[i], primitive)

        def make_region4(eta: float) -> SectionHelper:
            cls = ConvexMonotone4MinHelper if self.force_positive else ConvexMonotone4Helper
            return cls(x[i - 1], x[i], g_prev, g_next, y[i], eta, primitive)

        if self.quadraticity > 0.0:
            floored = g_prev >= -2.0 * g_next and g_prev > -0.5 * g_next and self.force_positive
            quadratic_helper = make_quadratic(floored)

        if self.quadraticity < 1.0:
            b2 = (1.0 + self.monotonicity) / 2.0
            b3 = (1.0 - self.monotonicity) / 2.0
            if ((g_prev > 0.0 and -0.5 * g_prev >= g_next >= -2.0 * g_prev)
                    or (g_prev < 0.0 and -0.5 * g_prev <= g_next <= -2.0 * g_prev)):
                # region 1: the quadratic is already monotone
                quadraticity = 1.0
                if self.quadraticity == 0.0:
                    quadratic_helper = make_quadratic(self.force_positive)
            elif (g_prev < 0.0 and g_next > -2.0 * g_prev) or (g_prev > 0.0 and g_next < -2.0 * g_prev):
                eta = (g_next + 2.0 * g_prev) / (g_next - g_prev)
                if eta < b2:
                    convex_monotone_helper = ConvexMonotone2Helper(
                        x[i - 1], x[i], g_prev, g_next, y[i], eta, primitive)
                else:
                    convex_monotone_helper = make_region4(b2)
            elif ((g_prev > 0.0 and 0.0 > g_next > -0.5 * g_prev)
                    or (g_prev < 0.0 and 0.0 < g_next < -0.5 * g_prev)):
                eta = g_next / (g_next - g_prev) * 3.0
                if eta > b3:
                    convex_monotone_helper = ConvexMonotone3Helper(
                        x[i - 1], x[i], g_prev, g_next, y[i], eta, primitive)
                else:
                    convex_monotone_helper = make_region4(b3)
            else:
                eta = g_next / (g_prev + g_next)
                eta = min(max(eta, b3), b2)
                convex_monotone_helper = make_region4(eta)

        if quadraticity == 1.0:
            return quadratic_helper
        if quadraticity == 0.0:
            return convex_monotone_helper
        return ComboHelper(quadratic_helper, convex_monotone_helper, quadraticity)

    def update(self) -> None:
        x, y = self.x, self.y
        n = len(x)

        if n == 2:
            single = EverywhereConstantHelper(y[1], 0.0, x[0])
            self.helpers: HelperList = [(x[1], single)]
            self.extrapolation_helper = single
            self._index_helpers()
            return

        helpers = list(self.pre_existing_helpers)
        start = len(helpers) + 1

        # boundary forwards
        f = np.zeros(n)
        for i in range(start, n - 1):
            dx_prev = x[i] - x[i - 1]
            dx = x[i + 1] - x[i]
            f[i] = dx_prev / (dx + dx_prev) * y[i] + dx / (dx + dx_prev) * y[i + 1]

        if start > 1:
            f[start - 1] = helpers[-1][1].f_next()
        else:
            f[0] = 1.5 * y[1] - 0.5 * f[1]
        f[n - 1] = 1.5 * y[n - 1] - 0.5 * f[n - 2]

        if self.force_positive:
            f[0] = max(f[0], 0.0)
            f[n - 1] = max(f[n - 1], 0.0)

        primitive = float(np.sum(y[1:start] * np.diff(x[:start])))

        end = n - 1 if self.constant_last_period else n
        for i in range(start, end):
            helpers.append((x[i], self._section_helper(i, f, primitive)))
            primitive += y[i] * (x[i] - x[i - 1])

        if self.constant_last_period:
            last = EverywhereConstantHelper(y[n - 1], primitive, x[n - 2])
            helpers.append((x[n - 1], last))
            self.extrapolation_helper = last
        else:
            self.extrapolation_helper = EverywhereConstantHelper(
                helpers[-1][1].value(x[n - 1]), primitive, x[n - 1])

        self.helpers = helpers
        self._index_helpers()

    def _index_helpers(self) -> None:
        self._section_ends = np.array([end for end, _ in self.helpers])

    def _helper_at(self, x: float) -> SectionHelper:
        i = int(np.searchsorted(self._section_ends, x, side='right'))
        i = min(i, len(self.helpers) - 1)
        return self.helpers[i][1]

    def existing_helpers(self) -> HelperList:
        """Helpers to freeze when extending the interpolation by one period."""
        helpers = list(self.helpers)
        if self.constant_last_period:
            helpers = helpers[:-1]
        return helpers

    def _value(self, x: float) -> float:
        if x >= self.x[-1]:
            return self.extrapolation_helper.value(x)
        return self._helper_at(x).value(x)

    def _primitive(self, x: float) -> float:
        if x >= self.x[-1]:
            return self.extrapolation_helper.primitive(x)
        return self._helper_at(x).primitive(x)

    def _derivative(self, x: float) -> float:
        raise NotImplementedError("Convex-monotone spline derivative not implemented")

    def _second_derivative(self, x: float) -> float:
        raise NotImplementedError("Convex-monotone spline second derivative not implemented")


class ConvexMonotone(Interpolator):
    """
    Convex monotone interpolation strategy.

    Attributes:
        data_size_adjustment: Leading data points that do not enter the fit
    """

    is_global = True
    required_points = 2
    data_size_adjustment = 1

    def __init__(self, quadraticity: float = 0.3, monotonicity: float = 0.7, force_positive: bool = True):
        self.quadraticity = quadraticity
        self.monotonicity = monotonicity
        self.force_positive = force_positive

    def interpolate(self, x, y) -> Interpolation:
        return ConvexMonotoneInterpolation(
            x, y, self.quadraticity, self.monotonicity, self.force_positive, False)

    def local_interpolate(
        self,
        x,
        y,
        localisation: int,
        previous: Optional[ConvexMonotoneInterpolation],
        final_size: int
    ) -> ConvexMonotoneInterpolation:
        """
        Fit for a localised bootstrap step.

        The first call (len(x) == localisation + 1) starts from scratch;
        later calls freeze the helpers of the previous fit. Until the
        final size is reached the last period is held flat.
        """
        length = len(x)
        constant_last = length != final_size
        if length - localisation == 1 or previous is None:
            return ConvexMonotoneInterpolation(
                x, y, self.quadraticity, self.monotonicity, self.force_positive, constant_last)
        return ConvexMonotoneInterpolation(
            x, y, self.quadraticity, self.monotonicity, self.force_positive, constant_last,
            previous.existing_helpers())

    def __repr__(self) -> str:
        return (f"ConvexMonotone(quadraticity={self.quadraticity}, "
                f"monotonicity={self.monotonicity}, force_positive={self.force_positive})")


__all__ = [
    "SectionHelper",
    "EverywhereConstantHelper",
    "ConstantGradHelper",
    "QuadraticHelper",
    "QuadraticMinHelper",
    "ConvexMonotone2Helper",
    "ConvexMonotone3Helper",
    "ConvexMonotone4Helper",
    "ConvexMonotone4MinHelper",
    "ComboHelper",
    "ConvexMonotoneInterpolation",
    "ConvexMonotone",
]
