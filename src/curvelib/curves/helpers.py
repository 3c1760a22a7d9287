"""
Rate helpers: market instruments used as bootstrap targets.

Defines the instruments used to build yield curves:
- DepositRateHelper: money market deposits
- FraRateHelper: forward rate agreements
- FuturesRateHelper: interest rate futures quoted as 100 - rate
- SwapRateHelper: fixed-vs-floating par swaps (single curve)

Each helper knows how to:
1. Report the dates it depends on (earliest, latest, pillar)
2. Imply its quote from the curve being bootstrapped
3. Return the quote error the bootstrap drives to zero

Helpers observe their quote and forward changes to the curves built on
them.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ..conventions import BusinessDayConvention, DayCount, year_fraction
from ..dates import DateUtils
from ..errors import CurveConstructionError
from ..observable import Observable
from ..quotes import SimpleQuote, make_quote


class RateHelper(Observable, ABC):
    """
    Abstract base for bootstrap instruments.

    Attributes:
        quote: Market quote (observable)
        earliest_date: First date the instrument depends on
        latest_date: Last date the instrument depends on
        term_structure: Curve used to imply the quote
    """

    def __init__(self, quote, earliest_date: date, latest_date: date):
        super().__init__()
        if latest_date <= earliest_date:
            raise CurveConstructionError(
                f"Latest date ({latest_date}) must be after earliest date ({earliest_date})"
            )
        self.quote: SimpleQuote = make_quote(quote)
        self.quote.register_observer(self)
        self.earliest_date = earliest_date
        self.latest_date = latest_date
        self.term_structure = None

    @property
    def pillar_date(self) -> date:
        """Date at which the instrument fixes a curve pillar."""
        return self.latest_date

    def update(self) -> None:
        self.notify_observers()

    def set_term_structure(self, term_structure) -> None:
        self.term_structure = term_structure

    def _curve(self):
        if self.term_structure is None:
            raise CurveConstructionError(f"{type(self).__name__}: term structure not set")
        return self.term_structure

    @abstractmethod
    def implied_quote(self) -> float:
        """Quote implied by the current term structure."""
        pass

    def quote_error(self) -> float:
        """Market quote minus implied quote."""
        return self.quote.value - self.implied_quote()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(quote={self.quote.value}, pillar={self.pillar_date})"


class DepositRateHelper(RateHelper):
    """
    Money market deposit.

    Simple interest instrument: the depositor receives (1 + R*tau) at maturity.

    Implied rate: R = (P(start) / P(end) - 1) / tau
    """

    def __init__(self, quote, start_date: date, end_date: date, day_count: DayCount = DayCount.ACT_360):
        super().__init__(quote, start_date, end_date)
        self.day_count = day_count
        self.tau = year_fraction(start_date, end_date, day_count)

    @classmethod
    def from_tenor(
        cls,
        quote,
        reference_date: date,
        tenor: str,
        settlement_days: int = 0,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    ) -> "DepositRateHelper":
        """
        Deposit starting settlement_days business days after reference_date.

        Args:
            quote: Deposit rate (decimal)
            reference_date: Trade date
            tenor: Deposit tenor (e.g., "3M")
            settlement_days: Spot lag in business days
            day_count: Accrual day count
            convention: Business day adjustment of the end date
        """
        start = DateUtils.add_tenor(reference_date, f"{settlement_days}D")
        end = DateUtils.add_tenor(start, tenor, convention)
        return cls(quote, start, end, day_count)

    def implied_quote(self) -> float:
        curve = self._curve()
        compound = curve.discount(self.earliest_date) / curve.discount(self.latest_date)
        return (compound - 1.0) / self.tau


class FraRateHelper(DepositRateHelper):
    """
    Forward rate agreement on a simple forward rate.

    Same pricing as a forward-starting deposit.
    """

    @classmethod
    def from_months(
        cls,
        quote,
        reference_date: date,
        months_to_start: int,
        months_to_end: int,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    ) -> "FraRateHelper":
        """
        FRA from an "AxB" description (e.g., 3x6).

        Args:
            quote: FRA rate (decimal)
            reference_date: Trade date
            months_to_start: Months until the accrual start
            months_to_end: Months until the accrual end
        """
        if months_to_end <= months_to_start:
            raise CurveConstructionError(
                f"Invalid FRA {months_to_start}x{months_to_end}: end must follow start"
            )
        start = DateUtils.add_tenor(reference_date, f"{months_to_start}M", convention)
        end = DateUtils.add_tenor(reference_date, f"{months_to_end}M", convention)
        return cls(quote, start, end, day_count)


class FuturesRateHelper(RateHelper):
    """
    Interest rate future quoted as a price.

    Implied price: 100 * (1 - (F + convexity_adjustment))
    where F is the simple forward rate over the underlying period.
    """

    def __init__(
        self,
        price,
        start_date: date,
        end_date: Optional[date] = None,
        months: int = 3,
        day_count: DayCount = DayCount.ACT_360,
        convexity_adjustment=0.0
    ):
        if end_date is None:
            end_date = DateUtils.add_tenor(start_date, f"{months}M",
                                           BusinessDayConvention.MODIFIED_FOLLOWING)
        super().__init__(price, start_date, end_date)
        self.day_count = day_count
        self.tau = year_fraction(start_date, end_date, day_count)
        self.convexity_adjustment: SimpleQuote = make_quote(convexity_adjustment)
        self.convexity_adjustment.register_observer(self)

    def implied_quote(self) -> float:
        curve = self._curve()
        forward = (curve.discount(self.earliest_date) / curve.discount(self.latest_date) - 1.0) / self.tau
        return 100.0 * (1.0 - (forward + self.convexity_adjustment.value))


class SwapRateHelper(RateHelper):
    """
    Par fixed-vs-floating swap, single curve.

    Floating leg PV = P(start) - P(end), so the par rate is
    R = (P(start) - P(T_n)) / sum(tau_i * P(T_i))
    """

    def __init__(
        self,
        quote,
        start_date: date,
        tenor: str,
        fixed_frequency: int = 1,
        fixed_day_count: DayCount = DayCount.THIRTY_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None
    ):
        _, unit = DateUtils.parse_tenor(tenor)
        if unit == 'D':
            raise CurveConstructionError(f"Swap tenor must be in weeks, months or years, got {tenor}")
        end = DateUtils.add_tenor(start_date, tenor, BusinessDayConvention.UNADJUSTED)
        self.tenor = tenor
        self.fixed_day_count = fixed_day_count
        self.payment_dates: List[date] = DateUtils.generate_schedule(
            start_date, end, fixed_frequency, convention, holidays)
        super().__init__(quote, start_date, self.payment_dates[-1])

        accrual_start = [start_date] + self.payment_dates[:-1]
        self.accruals = [year_fraction(s, e, fixed_day_count)
                         for s, e in zip(accrual_start, self.payment_dates)]

    @classmethod
    def from_tenor(
        cls,
        quote,
        reference_date: date,
        tenor: str,
        settlement_days: int = 0,
        **kwargs
    ) -> "SwapRateHelper":
        """Spot-starting swap settling settlement_days business days after reference_date."""
        start = DateUtils.add_tenor(reference_date, f"{settlement_days}D")
        return cls(quote, start, tenor, **kwargs)

    def annuity(self) -> float:
        """Fixed leg PV01 per unit rate: sum(tau_i * P(T_i))."""
        curve = self._curve()
        return sum(tau * curve.discount(d) for tau, d in zip(self.accruals, self.payment_dates))

    def implied_quote(self) -> float:
        curve = self._curve()
        floating = curve.discount(self.earliest_date) - curve.discount(self.latest_date)
        return floating / self.annuity()


__all__ = [
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
]
