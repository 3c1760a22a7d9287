"""
Interpolated volatility smile for a single expiry.

The section is quoted in standard deviations (vol * sqrt(T)) per strike.
Volatilities are interpolated across strikes with any interpolation
strategy and rebuilt lazily when a quote changes.
"""

from typing import Optional, Sequence
import math

import numpy as np

from ..errors import CurveConstructionError, DomainError
from ..interpolation.base import Interpolation, Interpolator
from ..interpolation.linear import Linear
from ..observable import LazyObject
from ..quotes import SimpleQuote, make_quote


class InterpolatedSmileSection(LazyObject):
    """
    Smile section interpolating volatilities across strikes.

    Attributes:
        expiry_time: Time to expiry in years
        strikes: Strike grid (strictly increasing)
        std_devs: Standard deviation quotes per strike
        atm_level: At-the-money forward level quote (optional)
        interpolator: Strategy used across strikes
    """

    def __init__(
        self,
        expiry_time: float,
        strikes: Sequence[float],
        std_devs: Sequence,
        atm_level=None,
        interpolator: Optional[Interpolator] = None
    ):
        super().__init__()
        if expiry_time <= 0.0:
            raise CurveConstructionError(f"Expiry time must be positive, got {expiry_time}")
        if len(strikes) != len(std_devs):
            raise CurveConstructionError(
                f"Mismatch between number of strikes ({len(strikes)}) "
                f"and standard deviations ({len(std_devs)})"
            )
        self.expiry_time = float(expiry_time)
        self.strikes = np.array(strikes, dtype=np.float64)
        self.interpolator = interpolator if interpolator is not None else Linear()
        if len(self.strikes) < self.interpolator.required_points:
            raise CurveConstructionError(
                f"Not enough strikes: {len(self.strikes)} provided, "
                f"{self.interpolator.required_points} required"
            )

        self.std_devs = [make_quote(s) for s in std_devs]
        for quote in self.std_devs:
            quote.register_observer(self)
        self.atm_level: Optional[SimpleQuote] = None
        if atm_level is not None:
            self.atm_level = make_quote(atm_level)
            self.atm_level.register_observer(self)

        self.interpolation: Optional[Interpolation] = None

    def perform_calculations(self) -> None:
        sqrt_t = math.sqrt(self.expiry_time)
        vols = []
        for strike, quote in zip(self.strikes, self.std_devs):
            if not quote.is_valid():
                raise CurveConstructionError(f"Invalid standard deviation quote at strike {strike}")
            vols.append(quote.value / sqrt_t)
        self.interpolation = self.interpolator.interpolate(self.strikes, vols)

    @property
    def min_strike(self) -> float:
        return float(self.strikes[0])

    @property
    def max_strike(self) -> float:
        return float(self.strikes[-1])

    def atm(self) -> Optional[float]:
        """ATM level, if one was given."""
        if self.atm_level is None:
            return None
        return self.atm_level.value

    def volatility(self, strike: float) -> float:
        """Implied volatility at strike; outside the grid the scheme extrapolates."""
        self.recalculate()
        return self.interpolation.value(strike, True)

    def variance(self, strike: float) -> float:
        """Total variance vol^2 * T at strike."""
        vol = self.volatility(strike)
        return vol * vol * self.expiry_time

    def std_dev(self, strike: float) -> float:
        """Standard deviation vol * sqrt(T) at strike."""
        return self.volatility(strike) * math.sqrt(self.expiry_time)

    def smile(self, strikes: Sequence[float]) -> np.ndarray:
        """Volatilities over a strike grid."""
        strikes = np.asarray(strikes, dtype=np.float64)
        if np.any(strikes < 0.0):
            raise DomainError("Strikes must be non-negative")
        return np.array([self.volatility(float(k)) for k in strikes])

    def __repr__(self) -> str:
        return (f"InterpolatedSmileSection(T={self.expiry_time}, "
                f"strikes=[{self.min_strike}, {self.max_strike}], interpolator={self.interpolator!r})")


__all__ = [
    "InterpolatedSmileSection",
]
