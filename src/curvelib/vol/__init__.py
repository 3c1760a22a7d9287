"""
Volatility package.

Provides:
- InterpolatedSmileSection: per-expiry smile interpolated across strikes
"""

from .smile import InterpolatedSmileSection

__all__ = [
    "InterpolatedSmileSection",
]
