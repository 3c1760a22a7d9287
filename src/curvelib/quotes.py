"""
Market quotes.

A SimpleQuote holds a mutable market value and notifies its observers
(rate helpers, smile sections) whenever the value changes.
"""

from typing import Optional
import math

from .observable import Observable


class SimpleQuote(Observable):
    """
    Mutable market quote.

    Attributes:
        value: Current quoted value (None when not yet available)
    """

    def __init__(self, value: Optional[float] = None):
        super().__init__()
        self._value = None if value is None else float(value)

    @property
    def value(self) -> Optional[float]:
        return self._value

    @value.setter
    def value(self, new_value: Optional[float]) -> None:
        self.set_value(new_value)

    def set_value(self, new_value: Optional[float]) -> float:
        """
        Set a new value and notify observers if it changed.

        Returns:
            Difference between new and old value (0.0 if either is missing)
        """
        new_value = None if new_value is None else float(new_value)
        old_value = self._value
        if new_value == old_value:
            return 0.0
        self._value = new_value
        self.notify_observers()
        if old_value is None or new_value is None:
            return 0.0
        return new_value - old_value

    def reset(self) -> None:
        """Clear the value."""
        self.set_value(None)

    def is_valid(self) -> bool:
        return self._value is not None and not math.isnan(self._value)

    def __float__(self) -> float:
        if not self.is_valid():
            raise ValueError("Invalid quote")
        return self._value

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value})"


def make_quote(value) -> SimpleQuote:
    """Wrap a plain number in a SimpleQuote; quotes pass through unchanged."""
    if isinstance(value, SimpleQuote):
        return value
    return SimpleQuote(value)


__all__ = [
    "SimpleQuote",
    "make_quote",
]
