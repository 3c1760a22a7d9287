"""
Piecewise yield curve bootstrapped from rate helpers.

The curve observes its instruments (and, through them, their quotes).
A quote change invalidates the curve; the next query re-runs the
bootstrap, restarting from the previously solved pillars.
"""

from datetime import date
from typing import Optional, Sequence, Union
import logging

from ..conventions import DayCount
from ..errors import CurveConstructionError
from ..interpolation.base import Interpolator
from ..interpolation.linear import LogLinear
from .bootstrap import BootstrapConfig, IterativeBootstrap, LocalBootstrap
from .helpers import RateHelper
from .interpolated import InterpolatedCurve
from .traits import BootstrapTraits, CurveKind


logger = logging.getLogger(__name__)

Bootstrap = Union[IterativeBootstrap, LocalBootstrap]


class PiecewiseYieldCurve(InterpolatedCurve):
    """
    Yield curve whose pillar values reprice a set of instruments.

    Args:
        reference_date: Curve reference date (None for a moving curve)
        instruments: Rate helpers, in any order
        kind: Stored quantity: CurveKind, its name, or traits instance
        interpolator: Interpolation strategy (default log-linear)
        bootstrap: Bootstrap engine (default IterativeBootstrap)
        day_count: Day count for times
        settlement_days: Business days from the evaluation date to the
            reference date, for moving curves
        jumps: Discount jump quotes
        jump_dates: Dates of the jumps (default: successive year ends)
        config: Solver settings for the default bootstrap; pass them to the
            bootstrap itself when one is given

    Raises:
        CurveConstructionError: If both bootstrap and config are given

    Example:
        >>> helpers = [DepositRateHelper.from_tenor(0.03, ref, "3M"),
        ...            SwapRateHelper.from_tenor(0.035, ref, "2Y")]
        >>> curve = PiecewiseYieldCurve(ref, helpers, CurveKind.DISCOUNT, LogLinear())
        >>> curve.discount(1.0)
    """

    def __init__(
        self,
        reference_date: Optional[date],
        instruments: Sequence[RateHelper],
        kind: Union[CurveKind, str, BootstrapTraits] = CurveKind.DISCOUNT,
        interpolator: Optional[Interpolator] = None,
        bootstrap: Optional[Bootstrap] = None,
        day_count: DayCount = DayCount.ACT_365,
        settlement_days: Optional[int] = None,
        jumps: Optional[Sequence] = None,
        jump_dates: Optional[Sequence[date]] = None,
        config: Optional[BootstrapConfig] = None
    ):
        if bootstrap is not None and config is not None:
            raise CurveConstructionError("Both bootstrap and config given; pass the config to the bootstrap")
        interpolator = interpolator if interpolator is not None else LogLinear()
        super().__init__(kind, interpolator, reference_date, settlement_days, day_count,
                         jumps, jump_dates)
        self.instruments = list(instruments)
        for helper in self.instruments:
            helper.register_observer(self)

        self.bootstrap = bootstrap if bootstrap is not None else IterativeBootstrap(config)
        self.bootstrap.setup(self)

    def perform_calculations(self) -> None:
        logger.debug("Recalculating %s curve (reference date %s)", self.traits.kind.value, self.reference_date)
        self.bootstrap.calculate()

    @property
    def result(self):
        """Diagnostics of the last bootstrap run."""
        self.recalculate()
        return self.bootstrap.result


__all__ = [
    "PiecewiseYieldCurve",
]
