#!/usr/bin/env python3
"""
Compute indicator correlations (RSI, SMA, EMA, Returns) for crypto markets.

**Purpose**: This script builds the data behind the dashboard's correlation
heatmap. For each market it computes the indicator series from closing prices
and the Pearson correlation of every indicator pair, then prints either one
market's correlations or the cross-market average ("ALL").

**Usage**:
    python actions/compute_indicator_correlations.py
    python actions/compute_indicator_correlations.py --instrument BTC-EUR
    python actions/compute_indicator_correlations.py --output data/results/correlations.csv \\
        --series-dir data/indicators

**Outputs**:
  - Console: the selected correlations, "N/A" where undefined.
  - --output: instrument x pair correlation table as CSV (optional).
  - --series-dir: one <MARKET>.csv of indicator series per market (optional).
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from crypto_dashboard.analytics.correlations import (
    ALL_INSTRUMENTS,
    build_correlation_table,
    format_correlation,
    select_correlations,
)
from crypto_dashboard.analytics.indicators import build_indicator_frame
from crypto_dashboard.config.settings import IndicatorSettings, get_settings
from crypto_dashboard.data.io import write_indicator_csv, write_table_csv
from crypto_dashboard.data.loaders import load_universe


logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: candles_dir, instruments, instrument,
        output, series_dir.
    """
    parser = argparse.ArgumentParser(
        description="Compute indicator correlations for crypto markets",
        epilog="""
Examples:
  # Average correlations across the default markets
  python actions/compute_indicator_correlations.py

  # One market, from a custom candles directory
  python actions/compute_indicator_correlations.py --instrument ETH-EUR --candles-dir /tmp/candles

  # Save the table and per-market indicator series
  python actions/compute_indicator_correlations.py --output data/results/correlations.csv --series-dir data/indicators
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--candles-dir",
        type=str,
        help="Directory of <MARKET>.csv candle exports (default: DASHBOARD_CANDLES_DIR)",
        default=None,
    )

    parser.add_argument(
        "--instruments",
        type=str,
        help="Comma-separated markets to load (default: DASHBOARD_INSTRUMENTS)",
        default=None,
    )

    parser.add_argument(
        "--instrument",
        type=str,
        help=f"Market to display, or {ALL_INSTRUMENTS} for the average (default: {ALL_INSTRUMENTS})",
        default=ALL_INSTRUMENTS,
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the full correlation table to this CSV path",
        default=None,
    )

    parser.add_argument(
        "--series-dir",
        type=str,
        help="Write per-market indicator series CSVs into this directory",
        default=None,
    )

    return parser.parse_args(argv)


def parse_instruments(raw: str | None) -> tuple[str, ...] | None:
    """
    Split a comma-separated market list, dropping blanks.

    Returns None for None so callers fall back to settings.
    """
    if raw is None:
        return None
    return tuple(symbol.strip() for symbol in raw.split(",") if symbol.strip())


def export_indicator_series(
    universe: dict[str, pd.DataFrame],
    series_dir: Path,
    indicators: IndicatorSettings,
) -> list[Path]:
    """
    Write one indicator CSV (timestamp, close, rsi, sma, ema, returns) per market.

    Returns:
        Paths written, in universe order.
    """
    written = []
    for symbol, candles in universe.items():
        frame = build_indicator_frame(
            candles["close"],
            rsi_period=indicators.rsi_period,
            sma_period=indicators.sma_period,
            ema_period=indicators.ema_period,
        )
        frame.insert(0, "timestamp", candles["timestamp"])

        path = series_dir / f"{symbol}.csv"
        write_indicator_csv(frame, path)
        written.append(path)
    return written


def main(argv=None):
    """
    Main entrypoint.

    Steps:
      1. Load candle histories for the requested markets.
      2. Build the correlation table.
      3. Display the selected market (or the ALL average).
      4. Optionally save the table and indicator series.

    **Exit codes**:
      - 0: Success
      - 1: Bad arguments or configuration, or no market could be loaded
    """
    args = parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    indicators = settings.indicators
    instruments = parse_instruments(args.instruments) or settings.instruments
    candles_dir = Path(args.candles_dir) if args.candles_dir else settings.candles_dir

    print("=" * 80)
    print("Indicator Correlations")
    print("=" * 80)
    print()

    # ========================================================================
    # Step 1: Load candles
    # ========================================================================
    print(f"Step 1: Loading {len(instruments)} market(s) from {candles_dir}...")
    universe = load_universe(instruments, candles_dir=candles_dir)
    if not universe:
        print(f"  ✗ No candle data could be loaded from {candles_dir}", file=sys.stderr)
        sys.exit(1)
    for symbol, candles in universe.items():
        print(f"  ✓ {symbol}: {len(candles)} candles")
    print()

    # ========================================================================
    # Step 2: Correlate indicator pairs
    # ========================================================================
    print(
        f"Step 2: Computing correlations "
        f"(RSI {indicators.rsi_period}, SMA {indicators.sma_period}, EMA {indicators.ema_period})..."
    )
    table = build_correlation_table(
        universe,
        rsi_period=indicators.rsi_period,
        sma_period=indicators.sma_period,
        ema_period=indicators.ema_period,
    )
    logger.debug("Correlation table:\n%s", table)
    print()

    # ========================================================================
    # Step 3: Display selection
    # ========================================================================
    try:
        selected = select_correlations(table, args.instrument)
    except KeyError:
        print(
            f"Error: '{args.instrument}' was not loaded. "
            f"Choose {ALL_INSTRUMENTS} or one of: {', '.join(table.index)}",
            file=sys.stderr,
        )
        sys.exit(1)

    print(f"Step 3: Correlations for {args.instrument}:")
    print("-" * 80)
    for label, value in selected.items():
        print(f"  {label:<15} {format_correlation(value):>8}")
    print("-" * 80)
    print()

    # ========================================================================
    # Step 4: Save outputs
    # ========================================================================
    if args.output:
        output_path = Path(args.output)
        write_table_csv(table, output_path, index=True)
        print(f"  ✓ Saved correlation table: {output_path}")

    if args.series_dir:
        written = export_indicator_series(universe, Path(args.series_dir), indicators)
        print(f"  ✓ Saved {len(written)} indicator series to {args.series_dir}")

    print("=" * 80)
    print("Done!")
    print("=" * 80)


if __name__ == "__main__":
    main()
