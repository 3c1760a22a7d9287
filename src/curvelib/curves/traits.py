"""
Bootstrap traits: what quantity a curve stores at its pillars.

Provides:
- CurveKind: discount factors, zero yields or instantaneous forwards
- Discount, ZeroYield, ForwardRate: per-kind initial values, first
  guesses, solver brackets and the mapping from the stored quantity to
  discount factors, zero yields and forwards

Traits are stateless. They read the curve being bootstrapped through
its ``times``, ``data``, ``interpolation`` and ``allow_negative_rates``
attributes. Past the last pillar every kind extrapolates with a flat
instantaneous forward.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence
import math
import sys

import numpy as np

from ..errors import CurveConstructionError
from ..interpolation.base import Interpolation


class CurveKind(Enum):
    """Quantity stored at the curve pillars."""
    DISCOUNT = "Discount"
    ZERO_YIELD = "ZeroYield"
    FORWARD_RATE = "ForwardRate"


class BootstrapTraits(ABC):
    """
    Base class for bootstrap traits.

    Attributes:
        kind: Stored quantity
        max_rate: Largest rate the solver brackets allow
        avg_rate: Rate used for the very first guess
    """

    kind: CurveKind
    max_rate = 1.0
    avg_rate = 0.05

    @abstractmethod
    def initial_value(self) -> float:
        """Value stored at the reference date."""
        pass

    @abstractmethod
    def guess(self, i: int, curve, valid_data: bool) -> float:
        pass

    @abstractmethod
    def min_value_after(self, i: int, curve, valid_data: bool) -> float:
        pass

    @abstractmethod
    def max_value_after(self, i: int, curve, valid_data: bool) -> float:
        pass

    def update_guess(self, data: np.ndarray, value: float, i: int) -> None:
        data[i] = value

    @abstractmethod
    def max_iterations(self) -> int:
        pass

    @abstractmethod
    def discount_impl(self, interpolation: Interpolation, t: float) -> float:
        pass

    @abstractmethod
    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        pass

    @abstractmethod
    def forward_impl(self, interpolation: Interpolation, t: float) -> float:
        pass

    def validate(self, data: Sequence[float], allow_negative_rates: bool) -> None:
        """Check externally supplied pillar data; raises CurveConstructionError."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Discount(BootstrapTraits):
    """Pillars hold discount factors P(0, t_i)."""

    kind = CurveKind.DISCOUNT

    def initial_value(self) -> float:
        return 1.0

    def max_iterations(self) -> int:
        return 100

    def guess(self, i: int, curve, valid_data: bool) -> float:
        if valid_data:
            return float(curve.data[i])
        if i == 1:
            return 1.0 / (1.0 + self.avg_rate * curve.times[1])
        # flat rate extrapolation
        r = -math.log(curve.data[i - 1]) / curve.times[i - 1]
        return math.exp(-r * curve.times[i])

    def min_value_after(self, i: int, curve, valid_data: bool) -> float:
        if valid_data:
            if curve.allow_negative_rates:
                return float(np.min(curve.data)) / 2.0
            return float(curve.data[-1]) / 2.0
        dt = curve.times[i] - curve.times[i - 1]
        return curve.data[i - 1] * math.exp(-self.max_rate * dt)

    def max_value_after(self, i: int, curve, valid_data: bool) -> float:
        if curve.allow_negative_rates:
            dt = curve.times[i] - curve.times[i - 1]
            return curve.data[i - 1] * math.exp(self.max_rate * dt)
        # non-negative forwards only
        return float(curve.data[i - 1])

    def discount_impl(self, interpolation: Interpolation, t: float) -> float:
        t_max = interpolation.x_max
        if t <= t_max:
            return interpolation.value(t, True)
        d_max = interpolation.value(t_max)
        inst_fwd_max = self.forward_impl(interpolation, t_max)
        return d_max * math.exp(-inst_fwd_max * (t - t_max))

    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        if t == 0.0:
            return self.forward_impl(interpolation, 0.0)
        return -math.log(self.discount_impl(interpolation, t)) / t

    def forward_impl(self, interpolation: Interpolation, t: float) -> float:
        t = min(t, interpolation.x_max)
        return -interpolation.derivative(t, True) / interpolation.value(t, True)

    def validate(self, data: Sequence[float], allow_negative_rates: bool) -> None:
        if data[0] != 1.0:
            raise CurveConstructionError(
                "The first discount must be 1.0 to flag the corresponding date as reference date"
            )
        for i in range(1, len(data)):
            if data[i] <= 0.0:
                raise CurveConstructionError(f"Non-positive discount factor ({data[i]}) at pillar {i}")
            if not allow_negative_rates and data[i] > data[i - 1]:
                raise CurveConstructionError(
                    f"Negative forward rate implied by the discount {data[i]} "
                    f"following {data[i - 1]} at pillar {i}"
                )


class RateTraits(BootstrapTraits):
    """Common behaviour of traits whose pillars hold rates."""

    max_rate = 3.0

    def initial_value(self) -> float:
        # dummy; overwritten with the first pillar's value
        return self.avg_rate

    def max_iterations(self) -> int:
        return 30

    def update_guess(self, data: np.ndarray, value: float, i: int) -> None:
        data[i] = value
        if i == 1:
            data[0] = value

    def guess(self, i: int, curve, valid_data: bool) -> float:
        if valid_data:
            return float(curve.data[i])
        if i == 1:
            return self.avg_rate
        return self._extrapolated_guess(curve, i)

    @abstractmethod
    def _extrapolated_guess(self, curve, i: int) -> float:
        pass

    def min_value_after(self, i: int, curve, valid_data: bool) -> float:
        if valid_data:
            r = float(np.min(curve.data))
            if curve.allow_negative_rates:
                return r * 2.0 if r < 0.0 else r / 2.0
            return r / 2.0
        if curve.allow_negative_rates:
            return -self.max_rate
        return sys.float_info.epsilon

    def max_value_after(self, i: int, curve, valid_data: bool) -> float:
        if valid_data:
            r = float(np.max(curve.data))
            if curve.allow_negative_rates:
                return r / 2.0 if r < 0.0 else r * 2.0
            return r * 2.0
        return self.max_rate

    def discount_impl(self, interpolation: Interpolation, t: float) -> float:
        return math.exp(-self.zero_yield_impl(interpolation, t) * t)


class ZeroYield(RateTraits):
    """Pillars hold continuously-compounded zero yields z(t_i)."""

    kind = CurveKind.ZERO_YIELD

    def _extrapolated_guess(self, curve, i: int) -> float:
        return self.zero_yield_impl(curve.interpolation, curve.times[i])

    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        t_max = interpolation.x_max
        if t <= t_max:
            return interpolation.value(t, True)
        z_max = interpolation.value(t_max)
        inst_fwd_max = self.forward_impl(interpolation, t_max)
        return (z_max * t_max + inst_fwd_max * (t - t_max)) / t

    def forward_impl(self, interpolation: Interpolation, t: float) -> float:
        # f(t) = z(t) + t z'(t)
        t = min(t, interpolation.x_max)
        return interpolation.value(t, True) + t * interpolation.derivative(t, True)


class ForwardRate(RateTraits):
    """Pillars hold instantaneous forward rates f(t_i)."""

    kind = CurveKind.FORWARD_RATE

    def _extrapolated_guess(self, curve, i: int) -> float:
        return self.forward_impl(curve.interpolation, curve.times[i])

    def zero_yield_impl(self, interpolation: Interpolation, t: float) -> float:
        if t == 0.0:
            return self.forward_impl(interpolation, 0.0)
        t_max = interpolation.x_max
        if t <= t_max:
            integral = interpolation.primitive(t, True)
        else:
            integral = interpolation.primitive(t_max) + interpolation.y[-1] * (t - t_max)
        return integral / t

    def forward_impl(self, interpolation: Interpolation, t: float) -> float:
        if t <= interpolation.x_max:
            return interpolation.value(t, True)
        return float(interpolation.y[-1])


_TRAITS = {
    CurveKind.DISCOUNT: Discount,
    CurveKind.ZERO_YIELD: ZeroYield,
    CurveKind.FORWARD_RATE: ForwardRate,
}


def traits_for(kind) -> BootstrapTraits:
    """
    Resolve traits from a CurveKind, its name, or a traits instance.

    Args:
        kind: CurveKind, string such as "discount" or "zero_yield", or traits

    Returns:
        BootstrapTraits instance
    """
    if isinstance(kind, BootstrapTraits):
        return kind
    if isinstance(kind, str):
        key = kind.lower().replace("_", "").replace(" ", "")
        for member in CurveKind:
            if member.value.lower() == key:
                kind = member
                break
        else:
            raise ValueError(f"Unknown curve kind: {kind}")
    return _TRAITS[kind]()


__all__ = [
    "CurveKind",
    "BootstrapTraits",
    "RateTraits",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "traits_for",
]
