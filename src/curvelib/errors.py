"""
Exception hierarchy for curve construction and evaluation.

Four families of failure are distinguished:
- Construction errors: malformed input detected at build time
- Unimplemented features: raised as the built-in NotImplementedError
- Calibration errors: root-finding or residual checks that do not converge
- Domain errors: caller-triggered misuse at evaluation time
"""

from typing import Optional


class CurveLibError(Exception):
    """Base class for all curvelib errors."""
    pass


class CurveConstructionError(CurveLibError, ValueError):
    """Raised when curve input data is malformed or inconsistent."""
    pass


class InterpolationError(CurveConstructionError):
    """Raised when interpolation points cannot be fitted."""
    pass


class CalibrationError(CurveLibError, RuntimeError):
    """
    Raised when a bootstrap pillar cannot be solved.

    Attributes:
        pillar: 1-based index of the failing pillar, if known
        maturity: Pillar date of the failing instrument, if known
    """

    def __init__(self, message: str, pillar: Optional[int] = None, maturity=None):
        super().__init__(message)
        self.pillar = pillar
        self.maturity = maturity


class ConvergenceError(CalibrationError):
    """
    Raised when successive global bootstrap passes do not agree.

    Attributes:
        iterations: Number of passes performed
        improvement: Largest pillar change in the last pass
        accuracy: Required accuracy
    """

    def __init__(self, message: str, iterations: int, improvement: float, accuracy: float):
        super().__init__(message)
        self.iterations = iterations
        self.improvement = improvement
        self.accuracy = accuracy


class KernelInversionError(CalibrationError):
    """Raised when the kernel interpolation matrix cannot be inverted accurately."""
    pass


class DomainError(CurveLibError, ValueError):
    """Raised when a curve is queried outside its domain (e.g. negative time)."""
    pass


class ExtrapolationError(DomainError):
    """Raised when extrapolation is required but not enabled."""
    pass


__all__ = [
    "CurveLibError",
    "CurveConstructionError",
    "InterpolationError",
    "CalibrationError",
    "ConvergenceError",
    "KernelInversionError",
    "DomainError",
    "ExtrapolationError",
]
