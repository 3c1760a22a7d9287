"""
Curve bootstrapping engines.

Implements sequential bootstrap of an interpolated curve from rate helpers:
1. Sort instruments by pillar date and drop expired ones
2. Solve for each pillar value in turn so that its instrument reprices
3. For global interpolation schemes, repeat the sweep until the pillar
   values stop moving

Provides:
- BootstrapConfig: solver accuracy and iteration limits
- BootstrapResult: diagnostics of the last successful run
- IterativeBootstrap: one-dimensional Brent solve per pillar
- LocalBootstrap: least-squares solve over a sliding window of pillars,
  for convex monotone forward curves
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional
import logging

import numpy as np
from scipy.optimize import brentq, least_squares

from ..errors import CalibrationError, ConvergenceError, CurveConstructionError
from ..interpolation.linear import Linear
from .helpers import RateHelper


logger = logging.getLogger(__name__)


@dataclass
class BootstrapConfig:
    """
    Bootstrap solver settings.

    Attributes:
        accuracy: Root-finding tolerance and convergence threshold between passes
        max_passes: Pass limit for global schemes (None: traits default)
        max_evaluations: Function evaluation limit per pillar solve
        allow_negative_rates: Whether pillar brackets admit negative forwards
    """
    accuracy: float = 1.0e-12
    max_passes: Optional[int] = None
    max_evaluations: int = 100
    allow_negative_rates: bool = True


@dataclass
class BootstrapResult:
    """Diagnostics of a successful bootstrap."""
    passes: int
    improvement: float
    repricing_errors: Dict[date, float] = field(default_factory=dict)

    @property
    def max_repricing_error(self) -> float:
        if not self.repricing_errors:
            return 0.0
        return max(abs(e) for e in self.repricing_errors.values())


def _solve_pillar(
    f: Callable[[float], float],
    guess: float,
    x_min: float,
    x_max: float,
    accuracy: float,
    max_evaluations: int
) -> float:
    """
    Brent root search on [x_min, x_max], narrowed with the guess.

    Raises:
        ValueError: If the root is not bracketed
        RuntimeError: If Brent does not converge
    """
    f_min = f(x_min)
    if f_min == 0.0:
        return x_min
    f_max = f(x_max)
    if f_max == 0.0:
        return x_max
    if f_min * f_max > 0.0:
        raise ValueError(
            f"root not bracketed: f[{x_min:.6g}, {x_max:.6g}] -> [{f_min:.3e}, {f_max:.3e}]"
        )

    f_guess = f(guess)
    if f_guess == 0.0:
        return guess
    if f_min * f_guess < 0.0:
        x_max = guess
    else:
        x_min = guess
    return brentq(f, x_min, x_max, xtol=accuracy, maxiter=max_evaluations)


def _prepare_helpers(curve, instruments: List[RateHelper]) -> List[RateHelper]:
    """
    Sort live instruments by pillar and check them.

    Instruments whose pillar is on or before the reference date are
    skipped. Duplicate pillars and invalid quotes are rejected.
    """
    reference = curve.reference_date
    alive = []
    for helper in instruments:
        if helper.pillar_date <= reference:
            logger.warning(
                "Skipping expired instrument %r (pillar %s, reference %s)",
                helper, helper.pillar_date, reference,
            )
            continue
        alive.append(helper)

    alive.sort(key=lambda h: h.pillar_date)

    for i in range(1, len(alive)):
        if alive[i].pillar_date == alive[i - 1].pillar_date:
            raise CurveConstructionError(
                f"More than one instrument with pillar {alive[i].pillar_date}"
            )
    for i, helper in enumerate(alive):
        if not helper.quote.is_valid():
            raise CurveConstructionError(
                f"Instrument {i + 1} (maturity: {helper.pillar_date}) has an invalid quote"
            )
    return alive


class IterativeBootstrap:
    """
    Pillar-by-pillar bootstrap.

    Each pillar value is found with a bracketed Brent solve so that the
    corresponding instrument reprices exactly, given the pillars already
    solved. Local schemes need a single sweep. Global schemes (splines,
    kernels) couple all pillars, so sweeps are repeated until the largest
    pillar change falls below the accuracy.

    A curve that bootstrapped successfully restarts from its previous
    pillar values when a quote changes.

    Example:
        >>> curve = PiecewiseYieldCurve(ref, helpers, "discount", LogLinear(),
        ...                             bootstrap=IterativeBootstrap())
    """

    def __init__(self, config: Optional[BootstrapConfig] = None):
        self.config = config or BootstrapConfig()
        self.result: Optional[BootstrapResult] = None
        self._curve = None
        self._valid_curve = False

    def setup(self, curve) -> None:
        """Attach to the curve to be bootstrapped."""
        self._curve = curve
        self._valid_curve = False
        curve.allow_negative_rates = self.config.allow_negative_rates

    def calculate(self) -> None:
        """
        Bootstrap the attached curve in place.

        Raises:
            CurveConstructionError: On insufficient, duplicate or unquoted instruments
            CalibrationError: If a pillar cannot be solved
            ConvergenceError: If global sweeps do not converge
        """
        curve = self._curve
        if curve is None:
            raise CurveConstructionError("Bootstrap is not attached to a curve")
        try:
            self._calculate(curve)
        except Exception:
            self._valid_curve = False
            raise

    def _calculate(self, curve) -> None:
        traits = curve.traits
        interpolator = curve.interpolator
        accuracy = self.config.accuracy

        helpers = _prepare_helpers(curve, curve.instruments)
        n = len(helpers)

        curve.dates = [curve.reference_date]
        if n == 0:
            logger.info("No live instruments; curve holds its reference pillar only")
            curve.times = np.array([0.0])
            curve.data = np.array([traits.initial_value()])
            curve.interpolation = None
            self._valid_curve = False
            self.result = None
            return

        if n + 1 < interpolator.required_points:
            raise CurveConstructionError(
                f"Not enough instruments: {n} provided, "
                f"{interpolator.required_points - 1} required by {interpolator!r}"
            )

        for helper in helpers:
            helper.set_term_structure(curve)

        curve.dates = [curve.reference_date] + [h.pillar_date for h in helpers]
        curve.times = np.array([curve.time_from_reference(d) for d in curve.dates], dtype=np.float64)

        valid_curve = self._valid_curve and len(curve.data) == n + 1
        if not valid_curve:
            curve.data = np.full(n + 1, traits.initial_value(), dtype=np.float64)

        max_passes = self.config.max_passes or traits.max_iterations()
        logger.info(
            "Bootstrapping %s curve: %d instruments, %r, %s start",
            traits.kind.value, n, interpolator, "warm" if valid_curve else "cold",
        )

        data = curve.data
        scheme = interpolator
        size = n + 1
        improvement = 0.0
        iteration = 0
        while True:
            previous_data = data.copy()
            if valid_curve:
                curve.build_interpolation()

            for i in range(1, n + 1):
                valid_data = valid_curve or iteration > 0
                guess = traits.guess(i, curve, valid_data)
                x_min = traits.min_value_after(i, curve, valid_data)
                x_max = traits.max_value_after(i, curve, valid_data)
                if guess <= x_min or guess >= x_max:
                    guess = (x_min + x_max) / 2.0

                if not valid_data:
                    # extend the interpolation to the new pillar
                    size = i + 1
                    scheme = interpolator
                    try:
                        curve.build_interpolation(size, scheme)
                    except (ValueError, RuntimeError, ArithmeticError) as exc:
                        if not interpolator.is_global:
                            raise
                        logger.debug("Pillar %d: %r failed (%s), using linear until complete",
                                     i, interpolator, exc)
                        scheme = Linear()
                        curve.build_interpolation(size, scheme)

                helper = helpers[i - 1]

                def error(x, i=i, helper=helper, size=size, scheme=scheme):
                    traits.update_guess(data, x, i)
                    curve.build_interpolation(size, scheme)
                    return helper.quote_error()

                try:
                    root = _solve_pillar(error, guess, x_min, x_max, accuracy,
                                         self.config.max_evaluations)
                except (ValueError, RuntimeError, ArithmeticError) as exc:
                    logger.error("Pillar %d (%s) failed on pass %d: %s",
                                 i, helper.pillar_date, iteration + 1, exc)
                    raise CalibrationError(
                        f"Iteration {iteration + 1}: could not bootstrap instrument {i}, "
                        f"maturity {helper.pillar_date}: {exc}",
                        pillar=i, maturity=helper.pillar_date,
                    ) from exc
                error(root)
                logger.debug("Pass %d pillar %d (%s): %.15g", iteration + 1, i, helper.pillar_date, root)

            if not interpolator.is_global:
                break

            if not valid_curve and iteration == 0:
                # first sweep ran on partial interpolations
                size = n + 1
                scheme = interpolator
                curve.build_interpolation()
                iteration += 1
                continue

            improvement = float(np.max(np.abs(data - previous_data)))
            logger.debug("Pass %d: improvement %.3e", iteration + 1, improvement)
            if improvement <= accuracy:
                break

            if iteration + 1 >= max_passes:
                logger.error("No convergence after %d passes (improvement %.3e)",
                             iteration + 1, improvement)
                raise ConvergenceError(
                    f"Convergence not reached after {iteration + 1} iterations; "
                    f"last improvement {improvement:.3e}, required accuracy {accuracy:.3e}",
                    iterations=iteration + 1, improvement=improvement, accuracy=accuracy,
                )
            iteration += 1

        curve.build_interpolation()
        self._valid_curve = True
        self.result = BootstrapResult(
            passes=iteration + 1,
            improvement=improvement,
            repricing_errors={h.pillar_date: h.quote_error() for h in helpers},
        )
        logger.info("Bootstrap converged in %d pass(es); max repricing error %.3e",
                    self.result.passes, self.result.max_repricing_error)


class LocalBootstrap:
    """
    Localised bootstrap for schemes exposing local_interpolate.

    Pillars are solved in overlapping windows of ``localisation`` instruments
    by least squares. Interpolation sections behind the window are frozen,
    so earlier pillars are not disturbed by later instruments.

    Args:
        localisation: Number of instruments per window (at least 2)
        force_positive: Restrict pillar values to be non-negative
        config: Solver accuracy and evaluation limits
    """

    def __init__(self, localisation: int = 2, force_positive: bool = True,
                 config: Optional[BootstrapConfig] = None):
        if localisation < 2:
            raise CurveConstructionError(f"Localisation must be at least 2, got {localisation}")
        self.localisation = localisation
        self.force_positive = force_positive
        self.config = config or BootstrapConfig()
        self.result: Optional[BootstrapResult] = None
        self._curve = None
        self._valid_curve = False

    def setup(self, curve) -> None:
        """Attach to the curve to be bootstrapped."""
        if not hasattr(curve.interpolator, "local_interpolate"):
            raise CurveConstructionError(
                f"{curve.interpolator!r} does not support localised bootstrapping"
            )
        self._curve = curve
        self._valid_curve = False
        curve.allow_negative_rates = self.config.allow_negative_rates

    def calculate(self) -> None:
        """
        Bootstrap the attached curve in place.

        Raises:
            CurveConstructionError: On insufficient, duplicate or unquoted instruments
            CalibrationError: If a window cannot be solved
        """
        curve = self._curve
        if curve is None:
            raise CurveConstructionError("Bootstrap is not attached to a curve")
        try:
            self._calculate(curve)
        except Exception:
            self._valid_curve = False
            raise

    def _calculate(self, curve) -> None:
        traits = curve.traits
        interpolator = curve.interpolator
        localisation = self.localisation
        tolerance = max(self.config.accuracy, 1.0e-15)

        helpers = _prepare_helpers(curve, curve.instruments)
        n = len(helpers)

        if n <= localisation:
            raise CurveConstructionError(
                f"Not enough instruments: {n} provided, more than {localisation} required"
            )
        if n + 1 < interpolator.required_points:
            raise CurveConstructionError(
                f"Not enough instruments: {n} provided, "
                f"{interpolator.required_points - 1} required by {interpolator!r}"
            )

        for helper in helpers:
            helper.set_term_structure(curve)

        curve.dates = [curve.reference_date] + [h.pillar_date for h in helpers]
        curve.times = np.array([curve.time_from_reference(d) for d in curve.dates], dtype=np.float64)

        if not (self._valid_curve and len(curve.data) == n + 1):
            curve.data = np.full(n + 1, traits.initial_value(), dtype=np.float64)
        data = curve.data

        logger.info("Local bootstrap of %s curve: %d instruments, localisation %d",
                    traits.kind.value, n, localisation)

        adjustment = getattr(interpolator, "data_size_adjustment", 0)
        dimension = localisation + 1 - adjustment
        previous = None
        for i_inst in range(localisation - 1, n):
            first = i_inst + 1 - localisation + adjustment
            size = i_inst + 2
            window = helpers[i_inst + 1 - localisation:i_inst + 1]

            start = data[first:first + dimension].copy()
            start[-1] = data[i_inst]
            if self.force_positive:
                start = np.maximum(start, tolerance)

            def residuals(x, first=first, size=size, window=window, previous=previous):
                for j, value in enumerate(x):
                    traits.update_guess(data, value, first + j)
                curve.interpolation = interpolator.local_interpolate(
                    curve.times[:size], data[:size], localisation, previous, n + 1)
                return np.array([h.quote_error() for h in window])

            if self.force_positive:
                solution = least_squares(residuals, start, method="trf", bounds=(0.0, np.inf),
                                         xtol=tolerance, ftol=tolerance, gtol=tolerance)
            else:
                solution = least_squares(residuals, start, method="lm",
                                         xtol=tolerance, ftol=tolerance, gtol=tolerance)

            final = residuals(solution.x)
            if not solution.success:
                logger.error("Window ending at instrument %d failed: %s", i_inst + 1, solution.message)
                raise CalibrationError(
                    f"Unable to strip yield curve to required accuracy at instrument {i_inst + 1} "
                    f"(maturity {helpers[i_inst].pillar_date}): {solution.message}",
                    pillar=i_inst + 1, maturity=helpers[i_inst].pillar_date,
                )
            logger.debug("Window ending at instrument %d: max residual %.3e",
                         i_inst + 1, float(np.max(np.abs(final))))
            previous = curve.interpolation

        self._valid_curve = True
        self.result = BootstrapResult(
            passes=1,
            improvement=0.0,
            repricing_errors={h.pillar_date: h.quote_error() for h in helpers},
        )
        logger.info("Local bootstrap done; max repricing error %.3e", self.result.max_repricing_error)


__all__ = [
    "BootstrapConfig",
    "BootstrapResult",
    "IterativeBootstrap",
    "LocalBootstrap",
]
