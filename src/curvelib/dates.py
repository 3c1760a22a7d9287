"""
Date utilities for curve construction.

Provides:
- Tenor parsing and tenor arithmetic
- Periodic schedule generation for swap legs
"""

from datetime import date, timedelta
from typing import List, Optional, Tuple
import calendar
import re

from .conventions import BusinessDayConvention, adjust_business_day, is_business_day


class DateUtils:
    """Utility class for date manipulation in rates contexts."""

    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Args:
            tenor: Tenor string like "1D", "3M", "2Y"

        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y

        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def add_tenor(
        start: date,
        tenor: str,
        convention: BusinessDayConvention = BusinessDayConvention.UNADJUSTED,
        holidays: Optional[set] = None
    ) -> date:
        """
        Add a tenor to a date.

        Day tenors count business days; week, month and year tenors are
        calendar periods adjusted with the given convention.

        Args:
            start: Starting date
            tenor: Tenor string (e.g., "1D", "3M", "2Y")
            convention: Business day adjustment for W/M/Y tenors
            holidays: Optional holiday calendar

        Returns:
            End date
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            result = start
            days_added = 0
            while days_added < amount:
                result += timedelta(days=1)
                if is_business_day(result, holidays):
                    days_added += 1
            return result

        if unit == 'W':
            result = start + timedelta(weeks=amount)
        elif unit == 'M':
            result = _add_months(start, amount)
        else:
            result = _add_months(start, 12 * amount)

        return adjust_business_day(result, convention, holidays)

    @staticmethod
    def generate_schedule(
        start: date,
        end: date,
        frequency: int,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        holidays: Optional[set] = None
    ) -> List[date]:
        """
        Generate a payment schedule between start and end dates.

        Dates are rolled backward from maturity, so any stub is at the front.

        Args:
            start: Schedule start (accrual start)
            end: Schedule end (maturity)
            frequency: Payments per year (1=annual, 2=semi, 4=quarterly, 12=monthly)
            convention: Business day adjustment
            holidays: Holiday calendar

        Returns:
            List of payment dates (adjusted for business days), excluding start
        """
        if frequency <= 0 or 12 % frequency != 0:
            raise ValueError(f"Frequency must divide 12, got {frequency}")

        months_per_period = 12 // frequency

        unadjusted = [end]
        n = 1
        while True:
            prev_date = _add_months(end, -n * months_per_period)
            if prev_date <= start:
                break
            unadjusted.insert(0, prev_date)
            n += 1

        return [adjust_business_day(d, convention, holidays) for d in unadjusted]


def _add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clipping to month end."""
    year = d.year + (d.month + months - 1) // 12
    month = (d.month + months - 1) % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


__all__ = [
    "DateUtils",
]
