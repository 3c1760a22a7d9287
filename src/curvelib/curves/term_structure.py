"""
Yield term structure base class.

The YieldTermStructure provides:
- Discount factor P(0,t)
- Zero rate z(t) under any compounding convention
- Forward rate f(t1, t2)
- Instantaneous forward rate f(t)

Times are year fractions from the reference date under the curve's day
count. The reference date is either fixed or follows the global
evaluation date (plus settlement days). Optional jumps multiply the
discount factor past given dates, e.g. for turn-of-year effects.
"""

from abc import abstractmethod
from datetime import date
from typing import List, Optional, Sequence, Union
import logging

import numpy as np

from ..conventions import CompoundingConvention, DayCount, implied_rate
from ..dates import DateUtils
from ..errors import CurveConstructionError, DomainError, ExtrapolationError
from ..observable import LazyObject
from ..quotes import SimpleQuote, make_quote
from ..settings import settings


logger = logging.getLogger(__name__)

TimeOrDate = Union[float, date]


class YieldTermStructure(LazyObject):
    """
    Abstract yield curve.

    Subclasses implement discount_impl(t) for t within [0, max_time];
    everything else is derived from it.

    Attributes:
        day_count: Day count used to convert dates to times, or its name
        dt: Time step used for zero and forward rates at a single point
    """

    dt = 1.0e-4

    def __init__(
        self,
        reference_date: Optional[date] = None,
        settlement_days: Optional[int] = None,
        day_count: Union[DayCount, str] = DayCount.ACT_365,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None
    ):
        super().__init__()
        if reference_date is None and settlement_days is None:
            raise CurveConstructionError("Either a reference date or settlement days must be given")

        self._fixed_reference_date = reference_date
        self.settlement_days = settlement_days
        self.day_count = DayCount.from_string(day_count) if isinstance(day_count, str) else day_count
        self._extrapolate = False

        if reference_date is None:
            settings.register_observer(self)

        self.jumps: List[SimpleQuote] = [make_quote(j) for j in (jumps or [])]
        self._jump_dates = list(jump_dates or [])
        if self._jump_dates and len(self._jump_dates) != len(self.jumps):
            raise CurveConstructionError(
                f"Mismatch between number of jumps ({len(self.jumps)}) "
                f"and jump dates ({len(self._jump_dates)})"
            )
        for jump in self.jumps:
            jump.register_observer(self)

    @property
    def reference_date(self) -> date:
        if self._fixed_reference_date is not None:
            return self._fixed_reference_date
        return DateUtils.add_tenor(settings.evaluation_date, f"{self.settlement_days}D")

    @property
    def moving(self) -> bool:
        return self._fixed_reference_date is None

    def time_from_reference(self, d: date) -> float:
        return self.day_count.year_fraction(self.reference_date, d)

    def _to_time(self, t: TimeOrDate) -> float:
        if isinstance(t, date):
            return self.time_from_reference(t)
        return float(t)

    @property
    def jump_dates(self) -> List[date]:
        """Jump dates; defaults to 31 December of successive years."""
        if self._jump_dates or not self.jumps:
            return self._jump_dates
        year = self.reference_date.year
        return [date(year + i, 12, 31) for i in range(len(self.jumps))]

    @property
    def jump_times(self) -> List[float]:
        return [self.time_from_reference(d) for d in self.jump_dates]

    @property
    @abstractmethod
    def max_date(self) -> date:
        pass

    @property
    def max_time(self) -> float:
        return self.time_from_reference(self.max_date)

    def enable_extrapolation(self, flag: bool = True) -> None:
        self._extrapolate = flag

    def disable_extrapolation(self) -> None:
        self._extrapolate = False

    @property
    def allows_extrapolation(self) -> bool:
        return self._extrapolate

    def check_range(self, t: float, extrapolate: bool = False) -> None:
        """
        Validate a query time.

        Raises:
            DomainError: If t is negative
            ExtrapolationError: If t is past max_time and extrapolation is off
        """
        if t < 0.0:
            raise DomainError(f"Negative time ({t}) given")
        if not (extrapolate or self._extrapolate) and t > self.max_time + 1e-12:
            raise ExtrapolationError(f"Time ({t}) is past max curve time ({self.max_time})")

    def perform_calculations(self) -> None:
        pass

    @abstractmethod
    def discount_impl(self, t: float) -> float:
        """Discount factor at t, jumps excluded; t is range-checked."""
        pass

    def _jump_effect(self, t: float) -> float:
        effect = 1.0
        for jump, jump_time in zip(self.jumps, self.jump_times):
            if 0.0 < jump_time < t:
                if not jump.is_valid():
                    raise CurveConstructionError(f"Invalid jump quote at {jump_time}")
                value = jump.value
                if not 0.0 < value <= 1.0:
                    logger.error("Jump value %s at t=%.6f is outside (0, 1]", value, jump_time)
                    raise CurveConstructionError(f"Invalid jump value {value}: must be in (0, 1]")
                effect *= value
        return effect

    def discount(self, t: TimeOrDate, extrapolate: bool = False) -> float:
        """
        Get discount factor P(0,t).

        Args:
            t: Year fraction or date
            extrapolate: Allow queries past the last pillar

        Returns:
            Discount factor
        """
        t = self._to_time(t)
        self.check_range(t, extrapolate)
        self.recalculate()
        if not self.jumps:
            return float(self.discount_impl(t))
        return float(self._jump_effect(t) * self.discount_impl(t))

    def zero_rate(
        self,
        t: TimeOrDate,
        compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS,
        extrapolate: bool = False
    ) -> float:
        """
        Get zero rate z(t).

        At t == 0 the rate over the first dt is returned.

        Args:
            t: Year fraction or date
            compounding: Compounding convention for output
            extrapolate: Allow queries past the last pillar

        Returns:
            Zero rate
        """
        t = self._to_time(t)
        if t == 0.0:
            t = self.dt
        compound = 1.0 / self.discount(t, extrapolate)
        return implied_rate(compound, t, compounding)

    def forward_rate(
        self,
        t1: TimeOrDate,
        t2: TimeOrDate,
        compounding: CompoundingConvention = CompoundingConvention.SIMPLE,
        extrapolate: bool = False
    ) -> float:
        """
        Get forward rate f(t1, t2).

        When t1 == t2 the rate over a dt-wide window around t1 is returned.

        Args:
            t1: Start time (year fraction or date)
            t2: End time (year fraction or date)
            compounding: Compounding convention
            extrapolate: Allow queries past the last pillar

        Returns:
            Forward rate between t1 and t2
        """
        t1 = self._to_time(t1)
        t2 = self._to_time(t2)
        if t2 < t1:
            raise DomainError(f"t2 ({t2}) < t1 ({t1})")
        if t2 == t1:
            t1 = max(t1 - self.dt / 2.0, 0.0)
            t2 = t1 + self.dt
        compound = self.discount(t1, extrapolate) / self.discount(t2, extrapolate)
        return implied_rate(compound, t2 - t1, compounding)

    def instantaneous_forward(self, t: TimeOrDate, extrapolate: bool = False) -> float:
        """
        Get instantaneous (continuously compounded) forward rate f(t).

        f(t) = -d/dt [log P(0,t)]
        """
        return self.forward_rate(t, t, CompoundingConvention.CONTINUOUS, extrapolate)

    def discount_array(self, times: Sequence[float], extrapolate: bool = False) -> np.ndarray:
        """Vector of discount factors for a set of times."""
        return np.array([self.discount(float(t), extrapolate) for t in times])


__all__ = [
    "YieldTermStructure",
    "TimeOrDate",
]
