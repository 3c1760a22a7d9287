"""
Interpolation package - strategies and fitted interpolants.

Provides:
- Linear, LogLinear, BackwardFlat, ForwardFlat: local piecewise schemes
- Cubic and its presets: spline, parabolic, Fritsch-Butland, Akima, Kruger,
  optionally filtered for monotonicity (Hyman)
- ConvexMonotone: Hagan-West forward interpolation
- Kernel: normalised Gaussian-kernel interpolation
- MixedLinearCubic: linear up to a switch knot, cubic afterwards
"""

from .base import Interpolation, Interpolator
from .linear import (
    LinearInterpolation,
    LogInterpolation,
    BackwardFlatInterpolation,
    ForwardFlatInterpolation,
    Linear,
    LogLinear,
    BackwardFlat,
    ForwardFlat,
)
from .cubic import (
    DerivativeApprox,
    BoundaryCondition,
    CubicInterpolation,
    Cubic,
    CubicNaturalSpline,
    MonotonicCubicNaturalSpline,
    CubicSplineNotAKnot,
    Parabolic,
    MonotonicParabolic,
    FritschButlandCubic,
    AkimaCubic,
    KrugerCubic,
    LogCubic,
    hyman_filter,
)
from .convex_monotone import ConvexMonotoneInterpolation, ConvexMonotone
from .kernel import GaussianKernel, KernelInterpolation, Kernel
from .mixed import MixedBehavior, MixedInterpolation, MixedLinearCubic
from .factory import create_interpolator, available_interpolators

__all__ = [
    "Interpolation",
    "Interpolator",
    "LinearInterpolation",
    "LogInterpolation",
    "BackwardFlatInterpolation",
    "ForwardFlatInterpolation",
    "Linear",
    "LogLinear",
    "BackwardFlat",
    "ForwardFlat",
    "DerivativeApprox",
    "BoundaryCondition",
    "CubicInterpolation",
    "Cubic",
    "CubicNaturalSpline",
    "MonotonicCubicNaturalSpline",
    "CubicSplineNotAKnot",
    "Parabolic",
    "MonotonicParabolic",
    "FritschButlandCubic",
    "AkimaCubic",
    "KrugerCubic",
    "LogCubic",
    "hyman_filter",
    "ConvexMonotoneInterpolation",
    "ConvexMonotone",
    "GaussianKernel",
    "KernelInterpolation",
    "Kernel",
    "MixedBehavior",
    "MixedInterpolation",
    "MixedLinearCubic",
    "create_interpolator",
    "available_interpolators",
]
