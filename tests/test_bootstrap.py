"""
Unit tests for rate helpers and curve bootstrapping.

Market quotes are implied from known reference curves, so a correct
bootstrap reprices every instrument and, where the interpolation can
represent the reference exactly, recovers its rates.
"""

from datetime import date, timedelta
import logging
import math

import numpy as np
import pytest

from curvelib.conventions import DayCount, year_fraction
from curvelib.curves import (
    BootstrapConfig,
    CurveKind,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    InterpolatedZeroCurve,
    IterativeBootstrap,
    LocalBootstrap,
    PiecewiseYieldCurve,
    SwapRateHelper,
)
from curvelib.errors import CalibrationError, ConvergenceError, CurveConstructionError
from curvelib.interpolation import (
    AkimaCubic,
    ConvexMonotone,
    CubicNaturalSpline,
    KrugerCubic,
    Linear,
    LogLinear,
    MixedLinearCubic,
    MonotonicCubicNaturalSpline,
)
from curvelib.quotes import SimpleQuote
from curvelib.settings import settings


REF = date(2024, 1, 15)
DEPOSIT_TENORS = ["1M", "3M", "6M"]
SWAP_TENORS = ["1Y", "2Y", "3Y", "4Y", "5Y", "7Y", "10Y"]


def flat_reference(rate=0.03):
    """Flat continuously-compounded reference curve."""
    return InterpolatedZeroCurve([REF, REF + timedelta(days=365 * 40)], [rate, rate])


def sloped_reference():
    """Upward sloping reference curve."""
    dates = [REF, REF + timedelta(days=365), REF + timedelta(days=365 * 5),
             REF + timedelta(days=365 * 40)]
    return InterpolatedZeroCurve(dates, [0.02, 0.025, 0.035, 0.04])


def make_helpers():
    """Deposits and annual swaps with empty quotes."""
    helpers = [DepositRateHelper.from_tenor(SimpleQuote(), REF, t) for t in DEPOSIT_TENORS]
    helpers += [SwapRateHelper.from_tenor(SimpleQuote(), REF, t) for t in SWAP_TENORS]
    return helpers


def quote_from(helpers, reference):
    """Set each quote to the value implied by the reference curve."""
    for helper in helpers:
        helper.set_term_structure(reference)
        helper.quote.value = helper.implied_quote()
    return helpers


@pytest.fixture
def flat_helpers():
    return quote_from(make_helpers(), flat_reference())


@pytest.fixture
def sloped_helpers():
    return quote_from(make_helpers(), sloped_reference())


@pytest.fixture
def reset_settings():
    """Restore the global evaluation date after a test."""
    yield settings
    settings.evaluation_date = None


class TestRateHelpers:
    """Tests for implied quotes."""

    def test_deposit(self):
        """Deposit rate is the simple rate between its dates."""
        curve = flat_reference()
        helper = DepositRateHelper.from_tenor(0.0, REF, "3M")
        helper.set_term_structure(curve)
        t = year_fraction(helper.earliest_date, helper.latest_date, DayCount.ACT_365)
        tau = year_fraction(helper.earliest_date, helper.latest_date, DayCount.ACT_360)
        assert abs(helper.implied_quote() - (math.exp(0.03 * t) - 1.0) / tau) < 1e-15
        assert abs(helper.quote_error() + helper.implied_quote()) < 1e-15

    def test_deposit_settlement(self):
        """Spot lag counts business days."""
        helper = DepositRateHelper.from_tenor(0.03, date(2024, 1, 12), "1M", settlement_days=2)
        assert helper.earliest_date == date(2024, 1, 16)
        assert helper.pillar_date == date(2024, 2, 16)

    def test_fra(self):
        """FRA prices as a forward-starting deposit."""
        curve = flat_reference()
        fra = FraRateHelper.from_months(0.0, REF, 3, 6)
        fra.set_term_structure(curve)
        t = year_fraction(fra.earliest_date, fra.latest_date, DayCount.ACT_365)
        assert abs(fra.implied_quote() - (math.exp(0.03 * t) - 1.0) / fra.tau) < 1e-14
        with pytest.raises(CurveConstructionError):
            FraRateHelper.from_months(0.0, REF, 6, 3)

    def test_futures(self):
        """Futures price is 100 minus the adjusted forward in percent."""
        curve = flat_reference()
        start = date(2024, 3, 20)
        futures = FuturesRateHelper(0.0, start, convexity_adjustment=0.0005)
        futures.set_term_structure(curve)
        t = year_fraction(start, futures.latest_date, DayCount.ACT_365)
        forward = (math.exp(0.03 * t) - 1.0) / futures.tau
        assert futures.latest_date == date(2024, 6, 20)
        assert abs(futures.implied_quote() - 100.0 * (1.0 - forward - 0.0005)) < 1e-12

    def test_swap_par_rate(self):
        """Par rate sets fixed leg equal to floating leg."""
        curve = sloped_reference()
        swap = SwapRateHelper.from_tenor(0.0, REF, "5Y")
        swap.set_term_structure(curve)
        rate = swap.implied_quote()
        floating = curve.discount(swap.earliest_date) - curve.discount(swap.latest_date)
        assert abs(rate * swap.annuity() - floating) < 1e-15
        assert len(swap.payment_dates) == 5
        assert swap.pillar_date == swap.payment_dates[-1]

    def test_swap_day_tenor_rejected(self):
        """Swaps need week, month or year tenors."""
        with pytest.raises(CurveConstructionError):
            SwapRateHelper(0.03, REF, "10D")

    def test_invalid_dates(self):
        """Latest date must follow earliest date."""
        with pytest.raises(CurveConstructionError):
            DepositRateHelper(0.03, REF, REF)

    def test_no_term_structure(self):
        """Implying a quote needs a curve."""
        helper = DepositRateHelper.from_tenor(0.03, REF, "3M")
        with pytest.raises(CurveConstructionError):
            helper.implied_quote()


class TestIterativeBootstrap:
    """Round-trip tests of the iterative bootstrap."""

    @pytest.mark.parametrize("kind, interpolator", [
        (CurveKind.DISCOUNT, LogLinear()),
        (CurveKind.ZERO_YIELD, Linear()),
        (CurveKind.FORWARD_RATE, Linear()),
        (CurveKind.ZERO_YIELD, CubicNaturalSpline()),
        (CurveKind.ZERO_YIELD, MonotonicCubicNaturalSpline()),
        (CurveKind.FORWARD_RATE, ConvexMonotone()),
        (CurveKind.ZERO_YIELD, AkimaCubic()),
    ], ids=lambda v: getattr(v, "value", type(v).__name__))
    def test_flat_curve_recovered(self, flat_helpers, kind, interpolator):
        """A flat market gives a flat curve for every exact scheme."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, kind, interpolator)
        assert len(curve.dates) == len(flat_helpers) + 1
        for d in curve.dates[1:]:
            assert abs(curve.zero_rate(d) - 0.03) < 1e-9
        assert curve.result.max_repricing_error < 1e-10

    @pytest.mark.parametrize("kind, interpolator", [
        (CurveKind.DISCOUNT, LogLinear()),
        (CurveKind.DISCOUNT, CubicNaturalSpline()),
        (CurveKind.DISCOUNT, KrugerCubic()),
        (CurveKind.ZERO_YIELD, Linear()),
        (CurveKind.ZERO_YIELD, MonotonicCubicNaturalSpline()),
        (CurveKind.FORWARD_RATE, Linear()),
        (CurveKind.FORWARD_RATE, ConvexMonotone()),
    ], ids=lambda v: getattr(v, "value", type(v).__name__))
    def test_sloped_curve_reprices(self, sloped_helpers, kind, interpolator):
        """Every instrument reprices off the bootstrapped curve."""
        curve = PiecewiseYieldCurve(REF, sloped_helpers, kind, interpolator)
        curve.recalculate()
        assert len(curve.dates) == len(sloped_helpers) + 1
        assert curve.dates[0] == REF
        for helper in sloped_helpers:
            assert helper.term_structure is curve
            assert abs(helper.quote_error()) < 1e-8

    @pytest.mark.parametrize("kind, interpolator", [
        (CurveKind.DISCOUNT, LogLinear()),
        (CurveKind.DISCOUNT, CubicNaturalSpline()),
        (CurveKind.ZERO_YIELD, Linear()),
        (CurveKind.ZERO_YIELD, MonotonicCubicNaturalSpline()),
        (CurveKind.FORWARD_RATE, ConvexMonotone()),
    ], ids=lambda v: getattr(v, "value", type(v).__name__))
    def test_sloped_curve_pillar_discounts(self, sloped_helpers, kind, interpolator):
        """Pillars whose cash flows all fall on pillars recover the reference discounts."""
        reference = sloped_reference()
        curve = PiecewiseYieldCurve(REF, sloped_helpers, kind, interpolator)
        # up to 5Y every swap payment date is itself a pillar
        last_exact = sloped_helpers[len(DEPOSIT_TENORS) + SWAP_TENORS.index("5Y")].pillar_date
        checked = 0
        for d in curve.dates[1:]:
            if d <= last_exact:
                assert abs(curve.discount(d) - reference.discount(d)) < 1e-10
                checked += 1
        assert checked == len(DEPOSIT_TENORS) + SWAP_TENORS.index("5Y") + 1

    def test_pillars_sorted(self, flat_helpers):
        """Instruments may be given in any order."""
        curve = PiecewiseYieldCurve(REF, list(reversed(flat_helpers)))
        assert curve.dates == [REF] + [h.pillar_date for h in flat_helpers]

    def test_kind_by_name(self, flat_helpers):
        """Curve kind may be given by name."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, "zero_yield", Linear())
        assert curve.traits.kind == CurveKind.ZERO_YIELD
        assert abs(curve.data[1] - 0.03) < 1e-9

    def test_mixed_instruments(self):
        """Deposits, futures, FRAs and swaps bootstrap together."""
        deposit_1m = DepositRateHelper.from_tenor(SimpleQuote(), REF, "1M")
        deposit_3m = DepositRateHelper.from_tenor(SimpleQuote(), REF, "3M")
        futures = FuturesRateHelper(SimpleQuote(), deposit_3m.latest_date)
        fra = FraRateHelper.from_months(SimpleQuote(), REF, 6, 9)
        swaps = [SwapRateHelper.from_tenor(SimpleQuote(), REF, t) for t in ["1Y", "2Y", "3Y"]]
        helpers = quote_from([deposit_1m, deposit_3m, futures, fra] + swaps, flat_reference())

        curve = PiecewiseYieldCurve(REF, helpers, CurveKind.DISCOUNT, LogLinear())
        for d in curve.dates[1:]:
            assert abs(curve.zero_rate(d) - 0.03) < 1e-9

    def test_non_negative_discounts_decrease(self, sloped_helpers):
        """Without negative rates discount factors never increase."""
        config = BootstrapConfig(allow_negative_rates=False)
        curve = PiecewiseYieldCurve(REF, sloped_helpers, CurveKind.DISCOUNT, LogLinear(),
                                    config=config)
        curve.recalculate()
        assert np.all(np.diff(curve.data) < 0.0)

    def test_single_pass_for_local_scheme(self, sloped_helpers):
        """Local schemes need one sweep."""
        curve = PiecewiseYieldCurve(REF, sloped_helpers, CurveKind.DISCOUNT, LogLinear())
        assert curve.result.passes == 1

    def test_global_scheme_iterates(self, sloped_helpers):
        """Global schemes sweep more than once."""
        curve = PiecewiseYieldCurve(REF, sloped_helpers, CurveKind.DISCOUNT, CubicNaturalSpline())
        assert curve.result.passes > 1
        assert curve.result.improvement <= 1e-12

    def test_extrapolation_past_last_pillar(self, flat_helpers):
        """Beyond the last pillar the curve keeps a flat forward."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, CurveKind.DISCOUNT, LogLinear())
        t_max = curve.max_time
        assert abs(curve.zero_rate(t_max + 5.0, extrapolate=True) - 0.03) < 1e-9


class TestBootstrapLaziness:
    """Tests for recalculation after market changes."""

    def test_quote_change_rebuilds(self, flat_helpers):
        """A quote change invalidates and rebuilds the curve."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, CurveKind.DISCOUNT, LogLinear())
        before = curve.discount(5.0)
        assert curve.valid

        swap_5y = flat_helpers[7]
        swap_5y.quote.value = swap_5y.quote.value + 0.001
        assert not curve.valid

        after = curve.discount(5.0)
        assert after < before
        assert abs(swap_5y.quote_error()) < 1e-10

    def test_warm_restart_global(self, sloped_helpers):
        """A global curve re-converges from its previous pillars."""
        curve = PiecewiseYieldCurve(REF, sloped_helpers, CurveKind.ZERO_YIELD,
                                    MonotonicCubicNaturalSpline())
        before = curve.data.copy()
        sloped_helpers[4].quote.value = sloped_helpers[4].quote.value + 0.0005
        curve.recalculate()
        for helper in sloped_helpers:
            assert abs(helper.quote_error()) < 1e-8
        assert curve.result.improvement <= 1e-12
        assert curve.data[5] > before[5]

    def test_pillars_read_lazily(self, flat_helpers):
        """Reading the pillar arrays runs the bootstrap."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, CurveKind.DISCOUNT, LogLinear())
        assert not curve.valid
        assert len(curve.dates) == len(flat_helpers) + 1
        assert curve.valid
        assert len(curve.times) == len(curve.data) == len(flat_helpers) + 1

    def test_pillars_follow_quote_change(self, flat_helpers):
        """Pillar data read after a quote change reflects the new quote."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, CurveKind.ZERO_YIELD, Linear())
        before = curve.data.copy()
        swap_2y = flat_helpers[4]
        swap_2y.quote.value = swap_2y.quote.value + 0.001
        after = curve.data
        assert after[5] > before[5]
        assert np.allclose(after[:5], before[:5], atol=1e-10)
        assert "valid=True" in repr(curve)

    def test_downstream_notified(self, flat_helpers):
        """Observers of a calculated curve hear about quote changes."""

        class Recorder:
            calls = 0

            def update(self):
                self.calls += 1

        curve = PiecewiseYieldCurve(REF, flat_helpers)
        recorder = Recorder()
        curve.register_observer(recorder)
        curve.discount(1.0)
        flat_helpers[0].quote.value = 0.031
        assert recorder.calls == 1

    def test_moving_curve(self, flat_helpers, reset_settings):
        """A moving curve is invalidated when the evaluation date changes."""
        reset_settings.evaluation_date = REF
        curve = PiecewiseYieldCurve(None, flat_helpers, settlement_days=0)
        assert curve.reference_date == REF
        curve.discount(1.0)
        reset_settings.evaluation_date = date(2024, 1, 16)
        assert not curve.valid


class TestBootstrapErrors:
    """Tests for invalid input and calibration failures."""

    def test_duplicate_pillars(self, flat_helpers):
        """Two instruments on one pillar are rejected."""
        helpers = flat_helpers + [DepositRateHelper.from_tenor(0.03, REF, "3M")]
        curve = PiecewiseYieldCurve(REF, helpers)
        with pytest.raises(CurveConstructionError):
            curve.discount(1.0)

    def test_invalid_quote(self, flat_helpers):
        """Instruments without a quote are rejected."""
        flat_helpers[2].quote.reset()
        curve = PiecewiseYieldCurve(REF, flat_helpers)
        with pytest.raises(CurveConstructionError, match="invalid quote"):
            curve.discount(1.0)

    def test_expired_instrument_skipped(self, flat_helpers, caplog):
        """Instruments maturing before the reference date are dropped."""
        expired = DepositRateHelper(0.03, REF - timedelta(days=90), REF - timedelta(days=1))
        with caplog.at_level(logging.WARNING, logger="curvelib.curves.bootstrap"):
            curve = PiecewiseYieldCurve(REF, [expired] + flat_helpers)
            curve.recalculate()
        assert len(curve.dates) == len(flat_helpers) + 1
        assert "expired" in caplog.text

    def test_no_instruments(self):
        """A curve without instruments only holds its reference pillar."""
        curve = PiecewiseYieldCurve(REF, [])
        assert curve.nodes() == [(REF, 1.0)]
        assert curve.max_date == REF
        with pytest.raises(CurveConstructionError):
            curve.discount(0.5)

    def test_too_few_instruments(self, flat_helpers):
        """The interpolator's minimum number of points is enforced."""
        curve = PiecewiseYieldCurve(REF, flat_helpers[:1], CurveKind.ZERO_YIELD,
                                    MixedLinearCubic(2))
        with pytest.raises(CurveConstructionError):
            curve.discount(0.01)

    def test_too_few_instruments_for_akima(self, flat_helpers):
        """Akima needs five points, so three instruments are too few."""
        curve = PiecewiseYieldCurve(REF, flat_helpers[:3], CurveKind.ZERO_YIELD, AkimaCubic())
        with pytest.raises(CurveConstructionError, match="Not enough instruments"):
            curve.discount(0.01)

    def test_bootstrap_and_config_conflict(self, flat_helpers):
        """Solver settings go to the bootstrap when one is given."""
        with pytest.raises(CurveConstructionError):
            PiecewiseYieldCurve(REF, flat_helpers, bootstrap=IterativeBootstrap(),
                                config=BootstrapConfig())

    def test_unsolvable_pillar(self):
        """A negative forward cannot be bootstrapped when rates must be positive."""
        helpers = [
            DepositRateHelper.from_tenor(0.05, REF, "3M"),
            DepositRateHelper.from_tenor(0.005, REF, "6M"),
        ]
        config = BootstrapConfig(allow_negative_rates=False)
        curve = PiecewiseYieldCurve(REF, helpers, CurveKind.DISCOUNT, LogLinear(), config=config)
        with pytest.raises(CalibrationError) as excinfo:
            curve.discount(0.1)
        assert excinfo.value.pillar == 2
        assert excinfo.value.maturity == helpers[1].pillar_date
        assert not curve.valid

    def test_no_convergence(self, sloped_helpers):
        """Global sweeps that do not settle raise ConvergenceError."""
        config = BootstrapConfig(max_passes=1)
        curve = PiecewiseYieldCurve(REF, sloped_helpers, CurveKind.DISCOUNT, CubicNaturalSpline(),
                                    config=config)
        with pytest.raises(ConvergenceError) as excinfo:
            curve.discount(1.0)
        assert excinfo.value.iterations == 2
        assert excinfo.value.improvement > excinfo.value.accuracy

    def test_recovers_after_failure(self, flat_helpers):
        """A fixed quote lets a failed curve bootstrap again."""
        flat_helpers[3].quote.reset()
        curve = PiecewiseYieldCurve(REF, flat_helpers)
        with pytest.raises(CurveConstructionError):
            curve.discount(1.0)
        flat_helpers[3].quote.value = 0.0305
        assert curve.discount(1.0) < 1.0


class TestLocalBootstrap:
    """Tests for the localised least-squares bootstrap."""

    def test_flat_forwards(self, flat_helpers):
        """A flat market gives flat convex monotone forwards."""
        curve = PiecewiseYieldCurve(REF, flat_helpers, CurveKind.FORWARD_RATE, ConvexMonotone(),
                                    bootstrap=LocalBootstrap())
        assert np.allclose(curve.data[1:], 0.03, atol=1e-8)
        assert curve.result.max_repricing_error < 1e-8

    def test_sloped_market_reprices(self, sloped_helpers):
        """Every instrument reprices."""
        curve = PiecewiseYieldCurve(REF, sloped_helpers, CurveKind.FORWARD_RATE, ConvexMonotone(),
                                    bootstrap=LocalBootstrap(localisation=2, force_positive=True))
        curve.recalculate()
        for helper in sloped_helpers:
            assert abs(helper.quote_error()) < 1e-8

    def test_requires_local_scheme(self, flat_helpers):
        """Only schemes with frozen-section refits are accepted."""
        with pytest.raises(CurveConstructionError):
            PiecewiseYieldCurve(REF, flat_helpers, CurveKind.DISCOUNT, LogLinear(),
                                bootstrap=LocalBootstrap())

    def test_too_few_instruments(self, flat_helpers):
        """More instruments than the window size are needed."""
        curve = PiecewiseYieldCurve(REF, flat_helpers[:2], CurveKind.FORWARD_RATE, ConvexMonotone(),
                                    bootstrap=LocalBootstrap(localisation=2))
        with pytest.raises(CurveConstructionError):
            curve.discount(0.01)

    def test_invalid_localisation(self):
        """Windows hold at least two instruments."""
        with pytest.raises(CurveConstructionError):
            LocalBootstrap(localisation=1)
