"""
Curves package - yield term structures and their bootstrap.

Provides:
- YieldTermStructure: discount, zero and forward queries with jumps
- Bootstrap traits: Discount, ZeroYield, ForwardRate
- Interpolated curves over given pillar data
- Rate helpers: deposits, FRAs, futures, swaps
- PiecewiseYieldCurve with IterativeBootstrap or LocalBootstrap
"""

from .term_structure import YieldTermStructure
from .traits import (
    CurveKind,
    BootstrapTraits,
    RateTraits,
    Discount,
    ZeroYield,
    ForwardRate,
    traits_for,
)
from .interpolated import (
    InterpolatedCurve,
    InterpolatedDiscountCurve,
    InterpolatedZeroCurve,
    InterpolatedForwardCurve,
)
from .helpers import (
    RateHelper,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
)
from .bootstrap import BootstrapConfig, BootstrapResult, IterativeBootstrap, LocalBootstrap
from .piecewise import PiecewiseYieldCurve

__all__ = [
    "YieldTermStructure",
    "CurveKind",
    "BootstrapTraits",
    "RateTraits",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "traits_for",
    "InterpolatedCurve",
    "InterpolatedDiscountCurve",
    "InterpolatedZeroCurve",
    "InterpolatedForwardCurve",
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
    "BootstrapConfig",
    "BootstrapResult",
    "IterativeBootstrap",
    "LocalBootstrap",
    "PiecewiseYieldCurve",
]
