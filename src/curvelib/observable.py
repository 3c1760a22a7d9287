"""
Observer and lazy-evaluation primitives.

Provides:
- Observable: explicit list of dependants notified on change
- LazyObject: cached result guarded by a valid flag, recomputed on demand

Dependencies are wired explicitly with register_observer; nothing is
notified implicitly. Observers are held by weak reference so that a
long-lived observable (e.g. global settings) does not keep curves alive.
"""

from abc import ABC, abstractmethod
from typing import List
import weakref


class Observable:
    """Object that notifies registered observers when it changes."""

    def __init__(self):
        self._observers: List[weakref.ref] = []

    def register_observer(self, observer) -> None:
        """
        Register an observer exposing an update() method.

        Registering the same observer twice has no effect.
        """
        for ref in self._observers:
            if ref() is observer:
                return
        self._observers.append(weakref.ref(observer))

    def unregister_observer(self, observer) -> None:
        """Remove an observer; unknown observers are ignored."""
        self._observers = [
            ref for ref in self._observers
            if ref() is not None and ref() is not observer
        ]

    def notify_observers(self) -> None:
        """Call update() on every live observer."""
        live = []
        for ref in list(self._observers):
            observer = ref()
            if observer is not None:
                live.append(ref)
                observer.update()
        self._observers = live

    @property
    def observer_count(self) -> int:
        return sum(1 for ref in self._observers if ref() is not None)


class LazyObject(Observable, ABC):
    """
    Observable whose results are computed lazily.

    The object holds an explicit ``valid`` flag. ``recalculate()`` runs
    ``perform_calculations()`` only when the flag is down and is a no-op
    otherwise. ``update()`` is the observer callback: it lowers the flag
    and forwards the notification to dependants.
    """

    def __init__(self):
        super().__init__()
        self.valid = False
        self._calculating = False

    def update(self) -> None:
        """Mark results stale and notify dependants."""
        was_valid = self.valid
        self.valid = False
        if was_valid:
            self.notify_observers()

    def invalidate(self) -> None:
        """Explicitly mark results stale."""
        self.update()

    def recalculate(self) -> None:
        """
        Bring results up to date.

        Re-entrant calls made while a calculation is running return
        immediately; a failed calculation leaves the object invalid.
        """
        if self.valid or self._calculating:
            return
        self._calculating = True
        try:
            self.perform_calculations()
        finally:
            self._calculating = False
        self.valid = True

    @abstractmethod
    def perform_calculations(self) -> None:
        """Compute and cache results."""
        pass


__all__ = [
    "Observable",
    "LazyObject",
]
