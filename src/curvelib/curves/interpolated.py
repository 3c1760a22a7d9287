"""
Interpolated yield curves.

Provides:
- InterpolatedCurve: pillar dates, times and data plus the fitted
  interpolation; all queries go through the curve's traits
- InterpolatedDiscountCurve, InterpolatedZeroCurve, InterpolatedForwardCurve:
  curves built directly from given pillar data

The pillar arrays are numpy arrays owned by the curve and filled in by
its calculation; reading them brings the curve up to date first. Any
change to them is followed by building a new interpolation from the
arrays.
"""

from datetime import date
from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from ..conventions import DayCount
from ..errors import CurveConstructionError
from ..interpolation.base import Interpolation, Interpolator
from ..interpolation.linear import Linear, LogLinear
from .term_structure import YieldTermStructure
from .traits import BootstrapTraits, Discount, ForwardRate, ZeroYield, traits_for


logger = logging.getLogger(__name__)


class InterpolatedCurve(YieldTermStructure):
    """
    Yield curve interpolating a stored quantity between pillars.

    Attributes:
        traits: Stored quantity and its mapping to discount factors
        interpolator: Interpolation strategy
        dates: Pillar dates, the first being the reference date
        times: Pillar times
        data: Pillar values
        interpolation: Fitted interpolation over (times, data)
        allow_negative_rates: Whether decreasing discount factors are required
    """

    def __init__(
        self,
        traits,
        interpolator: Interpolator,
        reference_date: Optional[date] = None,
        settlement_days: Optional[int] = None,
        day_count: DayCount = DayCount.ACT_365,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None,
        allow_negative_rates: bool = True
    ):
        super().__init__(reference_date, settlement_days, day_count, jumps, jump_dates)
        self.traits: BootstrapTraits = traits_for(traits)
        self.interpolator = interpolator
        self.allow_negative_rates = allow_negative_rates
        self._dates: List[date] = []
        self._times = np.array([], dtype=np.float64)
        self._data = np.array([], dtype=np.float64)
        self.interpolation: Optional[Interpolation] = None

    @property
    def dates(self) -> List[date]:
        self.recalculate()
        return self._dates

    @dates.setter
    def dates(self, value: Sequence[date]) -> None:
        self._dates = list(value)

    @property
    def times(self) -> np.ndarray:
        self.recalculate()
        return self._times

    @times.setter
    def times(self, value: np.ndarray) -> None:
        self._times = value

    @property
    def data(self) -> np.ndarray:
        self.recalculate()
        return self._data

    @data.setter
    def data(self, value: np.ndarray) -> None:
        self._data = value

    def build_interpolation(self, size: Optional[int] = None, interpolator: Optional[Interpolator] = None) -> None:
        """
        Fit a new interpolation on the first size pillars.

        Args:
            size: Number of leading pillars to use (all by default)
            interpolator: Strategy to use instead of the curve's own
        """
        size = len(self._times) if size is None else size
        scheme = self.interpolator if interpolator is None else interpolator
        self.interpolation = scheme.interpolate(self._times[:size], self._data[:size])

    def _require_interpolation(self) -> Interpolation:
        if self.interpolation is None:
            raise CurveConstructionError(
                f"{type(self).__name__} has no pillars beyond its reference date"
            )
        return self.interpolation

    @property
    def max_date(self) -> date:
        self.recalculate()
        if not self._dates:
            return self.reference_date
        return self._dates[-1]

    def check_range(self, t: float, extrapolate: bool = False) -> None:
        self.recalculate()
        self._require_interpolation()
        super().check_range(t, extrapolate)

    def discount_impl(self, t: float) -> float:
        return self.traits.discount_impl(self._require_interpolation(), t)

    def zero_yield_impl(self, t: float) -> float:
        return self.traits.zero_yield_impl(self._require_interpolation(), t)

    def forward_impl(self, t: float) -> float:
        return self.traits.forward_impl(self._require_interpolation(), t)

    def instantaneous_forward(self, t, extrapolate: bool = False) -> float:
        """
        Instantaneous forward rate f(t), taken from the interpolation.

        Args:
            t: Year fraction or date
            extrapolate: Allow queries past the last pillar
        """
        t = self._to_time(t)
        self.check_range(t, extrapolate)
        self.recalculate()
        if self.jumps:
            return super().instantaneous_forward(t, True)
        return float(self.forward_impl(t))

    def nodes(self) -> List[Tuple[date, float]]:
        """Pillar (date, value) pairs."""
        self.recalculate()
        return [(d, float(v)) for d, v in zip(self.dates, self.data)]

    def to_frame(self) -> pd.DataFrame:
        """
        Pillars as a DataFrame.

        Columns: date, time, value, discount, zero_rate
        """
        self.recalculate()
        rows = []
        for d, t, v in zip(self.dates, self.times, self.data):
            if self.interpolation is None:
                discount, zero = 1.0, np.nan
            else:
                discount = self.discount(float(t), True)
                zero = self.zero_rate(float(t), extrapolate=True)
            rows.append({
                "date": d,
                "time": float(t),
                "value": float(v),
                "discount": discount,
                "zero_rate": zero,
            })
        return pd.DataFrame(rows, columns=["date", "time", "value", "discount", "zero_rate"])

    def __repr__(self) -> str:
        # no recalculation here; n_pillars is that of the last calculation
        return (f"{type(self).__name__}(ref={self.reference_date}, kind={self.traits.kind.value}, "
                f"interpolator={self.interpolator!r}, n_pillars={len(self._dates)}, valid={self.valid})")


class _GivenDataCurve(InterpolatedCurve):
    """Interpolated curve over externally supplied pillar data."""

    def __init__(
        self,
        traits,
        dates: Sequence[date],
        data: Sequence[float],
        interpolator: Interpolator,
        day_count: DayCount = DayCount.ACT_365,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None,
        allow_negative_rates: bool = True
    ):
        dates = list(dates)
        if len(dates) != len(data):
            raise CurveConstructionError(
                f"Dates/data count mismatch ({len(dates)} != {len(data)})"
            )
        if len(dates) < interpolator.required_points:
            raise CurveConstructionError(
                f"Not enough pillars: {len(dates)} provided, {interpolator.required_points} required"
            )
        super().__init__(traits, interpolator, dates[0], None, day_count, jumps, jump_dates,
                         allow_negative_rates)

        for i in range(1, len(dates)):
            if dates[i] <= dates[i - 1]:
                raise CurveConstructionError(
                    f"Invalid date ({dates[i]}, vs {dates[i - 1]}): dates must be strictly increasing"
                )
        self._dates = dates
        self._times = np.array([self.time_from_reference(d) for d in dates], dtype=np.float64)
        self._data = np.array(data, dtype=np.float64)
        self.traits.validate(self._data, allow_negative_rates)
        self.build_interpolation()
        self.valid = True
        logger.debug("Built %s with %d pillars to %s", type(self).__name__, len(dates), dates[-1])

    @property
    def max_date(self) -> date:
        return self._dates[-1]


class InterpolatedDiscountCurve(_GivenDataCurve):
    """
    Curve interpolating given discount factors.

    The first date is the reference date and its discount must be 1.0.

    Example:
        >>> curve = InterpolatedDiscountCurve(
        ...     [date(2024, 1, 15), date(2025, 1, 15)], [1.0, 0.96])
        >>> curve.discount(0.5)
    """

    def __init__(
        self,
        dates: Sequence[date],
        discounts: Sequence[float],
        interpolator: Optional[Interpolator] = None,
        day_count: DayCount = DayCount.ACT_365,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None,
        allow_negative_rates: bool = True
    ):
        super().__init__(Discount(), dates, discounts, interpolator or LogLinear(), day_count,
                         jumps, jump_dates, allow_negative_rates)


class InterpolatedZeroCurve(_GivenDataCurve):
    """Curve interpolating given continuously-compounded zero yields."""

    def __init__(
        self,
        dates: Sequence[date],
        yields: Sequence[float],
        interpolator: Optional[Interpolator] = None,
        day_count: DayCount = DayCount.ACT_365,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None,
        allow_negative_rates: bool = True
    ):
        super().__init__(ZeroYield(), dates, yields, interpolator or Linear(), day_count,
                         jumps, jump_dates, allow_negative_rates)


class InterpolatedForwardCurve(_GivenDataCurve):
    """Curve interpolating given instantaneous forward rates."""

    def __init__(
        self,
        dates: Sequence[date],
        forwards: Sequence[float],
        interpolator: Optional[Interpolator] = None,
        day_count: DayCount = DayCount.ACT_365,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None,
        allow_negative_rates: bool = True
    ):
        super().__init__(ForwardRate(), dates, forwards, interpolator or Linear(), day_count,
                         jumps, jump_dates, allow_negative_rates)


__all__ = [
    "InterpolatedCurve",
    "InterpolatedDiscountCurve",
    "InterpolatedZeroCurve",
    "InterpolatedForwardCurve",
]
