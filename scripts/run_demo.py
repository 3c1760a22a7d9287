#!/usr/bin/env python
"""
CurveLib Demo Script

This script demonstrates the bootstrap workflow:
1. Build rate helpers from a quote table
2. Bootstrap a piecewise curve with the chosen kind and interpolation
3. Print pillars and a sample of zero and forward rates
4. Bump a quote and show the lazy rebuild

Usage:
    python run_demo.py [--kind discount] [--interpolation log_linear] [--output-dir DIR]
                       [--plot curve.html]
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from curvelib.conventions import CompoundingConvention
from curvelib.curves import (
    DepositRateHelper,
    PiecewiseYieldCurve,
    SwapRateHelper,
)
from curvelib.interpolation import create_interpolator


SAMPLE_QUOTES = pd.DataFrame(
    [
        ("DEPOSIT", "1M", 0.0530),
        ("DEPOSIT", "3M", 0.0533),
        ("DEPOSIT", "6M", 0.0528),
        ("SWAP", "1Y", 0.0505),
        ("SWAP", "2Y", 0.0462),
        ("SWAP", "3Y", 0.0437),
        ("SWAP", "5Y", 0.0415),
        ("SWAP", "7Y", 0.0409),
        ("SWAP", "10Y", 0.0408),
        ("SWAP", "20Y", 0.0410),
        ("SWAP", "30Y", 0.0398),
    ],
    columns=["instrument_type", "tenor", "rate"],
)


def build_helpers(quotes: pd.DataFrame, valuation_date: date) -> list:
    """Create rate helpers from a quote table."""
    helpers = []
    for _, row in quotes.iterrows():
        if row["instrument_type"] == "DEPOSIT":
            helpers.append(DepositRateHelper.from_tenor(row["rate"], valuation_date, row["tenor"]))
        elif row["instrument_type"] == "SWAP":
            helpers.append(SwapRateHelper.from_tenor(row["rate"], valuation_date, row["tenor"]))
        else:
            raise ValueError(f"Unknown instrument type: {row['instrument_type']}")
    return helpers


def rate_table(curve: PiecewiseYieldCurve, max_years: int) -> pd.DataFrame:
    """Zero and 1Y forward rates on a yearly grid."""
    rows = []
    for t in np.arange(1.0, max_years + 1.0):
        rows.append({
            "years": t,
            "discount": curve.discount(t, True),
            "zero_cc": curve.zero_rate(t, extrapolate=True),
            "zero_annual": curve.zero_rate(t, CompoundingConvention.ANNUAL, True),
            "fwd_1y": curve.forward_rate(t - 1.0, t, CompoundingConvention.SIMPLE, True),
        })
    return pd.DataFrame(rows)


def plot_curve(curve: PiecewiseYieldCurve, max_years: int, path: Path) -> None:
    """Write zero and instantaneous forward rates to an HTML chart."""
    import plotly.graph_objects as go

    grid = np.linspace(0.0, max_years, 361)
    zeros = [curve.zero_rate(t, extrapolate=True) * 100 for t in grid]
    forwards = [curve.instantaneous_forward(t, True) * 100 for t in grid]
    pillars = curve.to_frame()

    fig = go.Figure(data=[
        go.Scatter(x=grid, y=zeros, mode="lines", name="Zero (cc)"),
        go.Scatter(x=grid, y=forwards, mode="lines", name="Inst. forward"),
        go.Scatter(
            x=pillars["time"],
            y=pillars["zero_rate"] * 100,
            mode="markers",
            name="Pillars",
        ),
    ])
    fig.update_layout(
        margin=dict(l=40, r=40, t=40, b=40),
        title=f"{curve.traits.kind.value} curve, {curve.interpolator!r}",
        xaxis_title="Years",
        yaxis_title="Rate (%)",
        plot_bgcolor="white",
    )
    fig.write_html(str(path))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="CurveLib Bootstrap Demo")
    parser.add_argument("--kind", type=str, default="discount",
                        help="Stored quantity: discount, zero_yield or forward_rate")
    parser.add_argument("--interpolation", type=str, default="log_linear",
                        help="Interpolation scheme name (e.g. log_linear, cubic_spline, kruger)")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Directory for CSV output")
    parser.add_argument("--plot", type=str, default=None,
                        help="Write an HTML chart of the curve to this path (needs plotly)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    valuation_date = date(2024, 1, 15)

    print("=" * 60)
    print("CURVELIB BOOTSTRAP DEMO")
    print(f"Valuation Date: {valuation_date}")
    print("=" * 60)

    helpers = build_helpers(SAMPLE_QUOTES, valuation_date)
    for _, row in SAMPLE_QUOTES.iterrows():
        print(f"  {row['instrument_type']:<8s} {row['tenor']:>4s} @ {row['rate'] * 100:.3f}%")

    interpolator = create_interpolator(args.interpolation)
    curve = PiecewiseYieldCurve(valuation_date, helpers, args.kind, interpolator)

    print("\n" + "=" * 60)
    print(f"Pillars ({args.kind}, {interpolator!r})")
    print("=" * 60)
    pillars = curve.to_frame()
    print(pillars.to_string(index=False))
    print(f"\nPasses: {curve.result.passes}, "
          f"max repricing error: {curve.result.max_repricing_error:.2e}")

    rates = rate_table(curve, 30)
    print("\n" + "=" * 60)
    print("Rates")
    print("=" * 60)
    print(rates.to_string(index=False, float_format=lambda x: f"{x:.6f}"))

    print("\nBumping 5Y swap by +1bp...")
    five_year = helpers[6]
    before = curve.zero_rate(5.0)
    five_year.quote.value = five_year.quote.value + 0.0001
    after = curve.zero_rate(5.0)
    print(f"  5Y zero: {before * 100:.4f}% -> {after * 100:.4f}% "
          f"({(after - before) * 1e4:.3f}bp)")

    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        pillars.to_csv(output_dir / "pillars.csv", index=False)
        rates.to_csv(output_dir / "rates.csv", index=False)
        print(f"\nResults written to {output_dir}")

    if args.plot:
        plot_curve(curve, 30, Path(args.plot))
        print(f"Chart written to {args.plot}")


if __name__ == "__main__":
    main()
