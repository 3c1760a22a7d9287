"""
CurveLib: Term-Structure Bootstrapping & Interpolation Library

A modular library for:
- Bootstrapping yield curves from deposits, FRAs, futures and swaps
- Interpolating discount factors, zero yields or forwards with linear,
  cubic, convex monotone, kernel and mixed schemes
- Lazily recomputing curves when market quotes change
- Interpolated volatility smile sections

Scope: single-curve bootstrapping; no multi-curve or vol-surface fitting.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import (
    DayCount,
    BusinessDayConvention,
    CompoundingConvention,
    year_fraction,
    compound_factor,
    implied_rate,
)
from .dates import DateUtils
from .errors import (
    CurveLibError,
    CurveConstructionError,
    InterpolationError,
    CalibrationError,
    ConvergenceError,
    KernelInversionError,
    DomainError,
    ExtrapolationError,
)
from .observable import Observable, LazyObject
from .quotes import SimpleQuote, make_quote
from .settings import Settings, settings

# Interpolation
from .interpolation import (
    Interpolation,
    Interpolator,
    Linear,
    LogLinear,
    BackwardFlat,
    ForwardFlat,
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
    ConvexMonotone,
    Kernel,
    GaussianKernel,
    MixedLinearCubic,
    DerivativeApprox,
    BoundaryCondition,
    create_interpolator,
)

# Curves
from .curves import (
    YieldTermStructure,
    CurveKind,
    Discount,
    ZeroYield,
    ForwardRate,
    InterpolatedDiscountCurve,
    InterpolatedZeroCurve,
    InterpolatedForwardCurve,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
    BootstrapConfig,
    IterativeBootstrap,
    LocalBootstrap,
    PiecewiseYieldCurve,
)

# Volatility
from .vol import InterpolatedSmileSection

__all__ = [
    "__version__",
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "year_fraction",
    "compound_factor",
    "implied_rate",
    "DateUtils",
    "CurveLibError",
    "CurveConstructionError",
    "InterpolationError",
    "CalibrationError",
    "ConvergenceError",
    "KernelInversionError",
    "DomainError",
    "ExtrapolationError",
    "Observable",
    "LazyObject",
    "SimpleQuote",
    "make_quote",
    "Settings",
    "settings",
    "Interpolation",
    "Interpolator",
    "Linear",
    "LogLinear",
    "BackwardFlat",
    "ForwardFlat",
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
    "ConvexMonotone",
    "Kernel",
    "GaussianKernel",
    "MixedLinearCubic",
    "DerivativeApprox",
    "BoundaryCondition",
    "create_interpolator",
    "YieldTermStructure",
    "CurveKind",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "InterpolatedDiscountCurve",
    "InterpolatedZeroCurve",
    "InterpolatedForwardCurve",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
    "BootstrapConfig",
    "IterativeBootstrap",
    "LocalBootstrap",
    "PiecewiseYieldCurve",
    "InterpolatedSmileSection",
]
