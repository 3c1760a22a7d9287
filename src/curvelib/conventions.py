"""
Day count, business day and compounding conventions.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, OIS)
- ACT/365: Actual days / 365 (curve time axis default)
- ACT/ACT: Actual days / actual days in year
- 30/360: 30 days per month / 360 (some swaps)

Business Day Conventions:
- Modified Following: Move to next business day, unless it falls in next month (then previous)
- Following: Move to next business day
- Preceding: Move to previous business day

Compounding:
- Simple, continuous and periodic (annual, semi-annual, quarterly) rates,
  with conversions to and from compound factors.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Optional
import calendar

import numpy as np


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")

    def year_fraction(self, start: date, end: date) -> float:
        """Year fraction between two dates under this convention."""
        return year_fraction(start, end, self)


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"


class CompoundingConvention(Enum):
    """Interest rate compounding convention."""
    CONTINUOUS = "Continuous"
    ANNUAL = "Annual"
    SEMI_ANNUAL = "SemiAnnual"
    QUARTERLY = "Quarterly"
    SIMPLE = "Simple"

    @property
    def frequency(self) -> Optional[int]:
        """Compounding periods per year, or None for simple/continuous."""
        return {"Annual": 1, "SemiAnnual": 2, "Quarterly": 4}.get(self.value)


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction as float (negative when end precedes start)

    Conventions:
        ACT/360: (end - start).days / 360
        ACT/365: (end - start).days / 365
        ACT/ACT: Actual days / actual days in period's year(s)
        30/360: Assumes 30 days per month, 360 days per year
    """
    if start == end:
        return 0.0
    if start > end:
        return -year_fraction(end, start, day_count)

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        # ISDA ACT/ACT: split by year boundaries
        if start.year == end.year:
            days_in_year = 366 if calendar.isleap(start.year) else 365
            return actual_days / days_in_year
        total = (date(start.year + 1, 1, 1) - start).days / (366 if calendar.isleap(start.year) else 365)
        total += end.year - start.year - 1
        total += (end - date(end.year, 1, 1)).days / (366 if calendar.isleap(end.year) else 365)
        return total

    elif day_count == DayCount.THIRTY_360:
        # 30/360 US convention
        d1 = min(start.day, 30)
        d2 = end.day
        if end.day == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def compound_factor(rate: float, t: float, compounding: CompoundingConvention) -> float:
    """
    Growth factor of one unit invested at rate for t years.

    Args:
        rate: Interest rate (decimal)
        t: Year fraction
        compounding: Compounding convention of rate

    Returns:
        Compound factor (1 / discount factor)
    """
    if compounding == CompoundingConvention.CONTINUOUS:
        return float(np.exp(rate * t))
    if compounding == CompoundingConvention.SIMPLE:
        return 1.0 + rate * t
    f = compounding.frequency
    return float((1.0 + rate / f) ** (f * t))


def implied_rate(factor: float, t: float, compounding: CompoundingConvention) -> float:
    """
    Rate reproducing a compound factor over t years.

    Args:
        factor: Compound factor (must be positive)
        t: Year fraction (must be positive)
        compounding: Compounding convention of the result

    Returns:
        Implied rate (decimal)
    """
    if factor <= 0:
        raise ValueError(f"Compound factor must be positive, got {factor}")
    if t <= 0:
        raise ValueError(f"Year fraction must be positive, got {t}")

    if compounding == CompoundingConvention.CONTINUOUS:
        return float(np.log(factor) / t)
    if compounding == CompoundingConvention.SIMPLE:
        return (factor - 1.0) / t
    f = compounding.frequency
    return float((factor ** (1.0 / (f * t)) - 1.0) * f)


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).

    Args:
        d: Date to check
        holidays: Optional set of holiday dates

    Returns:
        True if business day, False otherwise
    """
    # Weekend check (0 = Monday, 5 = Saturday, 6 = Sunday)
    if d.weekday() >= 5:
        return False

    if holidays and d in holidays:
        return False

    return True


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """
    Adjust a date according to business day convention.

    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d

    if convention == BusinessDayConvention.PRECEDING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted -= timedelta(days=1)
        return adjusted

    adjusted = d
    while not is_business_day(adjusted, holidays):
        adjusted += timedelta(days=1)

    # Modified following rolls back if we crossed into the next month
    if convention == BusinessDayConvention.MODIFIED_FOLLOWING and adjusted.month != d.month:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted -= timedelta(days=1)

    return adjusted


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "year_fraction",
    "compound_factor",
    "implied_rate",
    "is_business_day",
    "adjust_business_day",
]
