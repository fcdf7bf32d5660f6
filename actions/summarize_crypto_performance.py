#!/usr/bin/env python3
"""
Summarize crypto market performance and risk/return.

**Purpose**: This script produces the tables behind the dashboard's
performance bar chart and risk/return bubble chart:
  - Percentage change over the loaded history, bucketed strong/moderate/low.
  - Annualized expected return, risk and Sharpe ratio, with an RSI-based
    technical signal.

**Usage**:
    python actions/summarize_crypto_performance.py
    python actions/summarize_crypto_performance.py --instruments BTC-EUR,ETH-EUR

**Outputs** (saved to --output-dir, default data/results/):
  - crypto_performance.csv
  - crypto_risk_return.csv
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

from crypto_dashboard.analytics.performance import build_performance_table, compute_date_span
from crypto_dashboard.analytics.risk_return import build_risk_return_table
from crypto_dashboard.config.settings import Settings, get_settings
from crypto_dashboard.data.io import write_table_csv
from crypto_dashboard.data.loaders import load_universe


logger = logging.getLogger(__name__)

PERFORMANCE_FILENAME = "crypto_performance.csv"
RISK_RETURN_FILENAME = "crypto_risk_return.csv"


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Summarize crypto market performance and risk/return",
        epilog="""
Examples:
  # Default markets and candles directory
  python actions/summarize_crypto_performance.py

  # Two markets, results to a scratch directory
  python actions/summarize_crypto_performance.py --instruments BTC-EUR,ETH-EUR --output-dir /tmp/results
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
        "--output-dir",
        type=str,
        help="Output directory for CSV files (default: data/results/)",
        default=str(repo_root / "data" / "results"),
    )

    return parser.parse_args(argv)


def summarize_universe(
    universe: dict[str, pd.DataFrame],
    settings: Settings,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Build the performance and risk/return tables for loaded markets.

    Returns:
        (performance table, risk/return table)
    """
    performance = build_performance_table(universe)
    risk_return = build_risk_return_table(
        universe,
        rsi_period=settings.indicators.rsi_period,
        periods_per_year=settings.periods_per_year,
        risk_free_rate=settings.risk_free_rate,
    )
    return performance, risk_return


def main(argv=None):
    """
    Main entrypoint.

    Steps:
      1. Load candle histories.
      2. Build performance and risk/return tables.
      3. Display and save them.

    **Exit codes**:
      - 0: Success
      - 1: Bad configuration, or no market could be loaded
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

    if args.instruments:
        instruments = tuple(s.strip() for s in args.instruments.split(",") if s.strip())
    else:
        instruments = settings.instruments
    candles_dir = Path(args.candles_dir) if args.candles_dir else settings.candles_dir
    output_dir = Path(args.output_dir)

    print("=" * 80)
    print("Crypto Performance Summary")
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

    span = compute_date_span(universe)
    if span is not None:
        print(f"  ✓ Loaded {len(universe)} market(s), {span[0].date()} to {span[1].date()}")
    else:
        print(f"  ✓ Loaded {len(universe)} market(s) (too short for a performance range)")
    print()

    # ========================================================================
    # Step 2: Build tables
    # ========================================================================
    print("Step 2: Building performance and risk/return tables...")
    performance, risk_return = summarize_universe(universe, settings)
    print()

    # ========================================================================
    # Step 3: Display
    # ========================================================================
    print("Performance (% change over loaded history):")
    print("-" * 80)
    for row in performance.itertuples(index=False):
        print(f"  {row.instrument:<10} {row.change_pct:>8.1f}%   {row.category}")
    print("-" * 80)
    print()

    print("Risk / return (annualized):")
    print("-" * 80)
    for row in risk_return.itertuples(index=False):
        print(
            f"  {row.instrument:<10} return {row.expected_return:>8.1f}%  "
            f"risk {row.risk:>7.1f}%  sharpe {row.sharpe_ratio:>6.2f}  "
            f"{row.technical_signal}"
        )
    print("-" * 80)
    print()

    # ========================================================================
    # Step 4: Save
    # ========================================================================
    performance_path = output_dir / PERFORMANCE_FILENAME
    risk_return_path = output_dir / RISK_RETURN_FILENAME
    write_table_csv(performance, performance_path)
    write_table_csv(risk_return, risk_return_path)
    print(f"  ✓ Saved performance table: {performance_path}")
    print(f"  ✓ Saved risk/return table: {risk_return_path}")
    logger.info("Summarized %d markets", len(universe))

    print("=" * 80)
    print("Done!")
    print("=" * 80)


if __name__ == "__main__":
    main()
