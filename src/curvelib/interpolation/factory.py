"""
Name-based construction of interpolation strategies.
"""

from .base import Interpolator
from .convex_monotone import ConvexMonotone
from .cubic import (
    AkimaCubic,
    Cubic,
    CubicNaturalSpline,
    CubicSplineNotAKnot,
    FritschButlandCubic,
    KrugerCubic,
    LogCubic,
    MonotonicCubicNaturalSpline,
    MonotonicParabolic,
    Parabolic,
)
from .kernel import Kernel
from .linear import BackwardFlat, ForwardFlat, Linear, LogLinear
from .mixed import MixedLinearCubic


_REGISTRY = {
    "linear": Linear,
    "lin": Linear,
    "log_linear": LogLinear,
    "loglinear": LogLinear,
    "backward_flat": BackwardFlat,
    "forward_flat": ForwardFlat,
    "cubic": Cubic,
    "cubic_spline": CubicNaturalSpline,
    "natural_spline": CubicNaturalSpline,
    "spline": CubicNaturalSpline,
    "monotonic_cubic_spline": MonotonicCubicNaturalSpline,
    "not_a_knot": CubicSplineNotAKnot,
    "parabolic": Parabolic,
    "monotonic_parabolic": MonotonicParabolic,
    "fritsch_butland": FritschButlandCubic,
    "akima": AkimaCubic,
    "kruger": KrugerCubic,
    "log_cubic": LogCubic,
    "convex_monotone": ConvexMonotone,
    "kernel": Kernel,
    "mixed_linear_cubic": MixedLinearCubic,
}


def create_interpolator(method: str, **kwargs) -> Interpolator:
    """
    Factory function to create an interpolation strategy by name.

    Args:
        method: Scheme name, e.g. "linear", "log_linear", "cubic_spline",
            "monotonic_cubic_spline", "kruger", "convex_monotone"
        **kwargs: Parameters forwarded to the strategy constructor

    Returns:
        Interpolator instance
    """
    key = method.lower().replace("-", "_").replace(" ", "_")

    if key not in _REGISTRY:
        raise ValueError(f"Unknown interpolation method: {method}")
    return _REGISTRY[key](**kwargs)


def available_interpolators() -> list:
    """Sorted list of recognised scheme names."""
    return sorted(_REGISTRY)


__all__ = [
    "create_interpolator",
    "available_interpolators",
]
