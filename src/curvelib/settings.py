"""
Global evaluation settings.

The evaluation date is observable: curves whose reference date moves
with it register with ``settings`` and are invalidated when it changes.
"""

from datetime import date
from typing import Optional

from .observable import Observable


class Settings(Observable):
    """Holder of the global evaluation date."""

    def __init__(self):
        super().__init__()
        self._evaluation_date: Optional[date] = None

    @property
    def evaluation_date(self) -> date:
        """Evaluation date; defaults to today when never set."""
        if self._evaluation_date is None:
            return date.today()
        return self._evaluation_date

    @evaluation_date.setter
    def evaluation_date(self, d: Optional[date]) -> None:
        if d != self._evaluation_date:
            self._evaluation_date = d
            self.notify_observers()


settings = Settings()


__all__ = [
    "Settings",
    "settings",
]
