"""
Tests for the dashboard action scripts.

**Purpose**: Verify that the correlation and performance scripts load candle
CSVs, build their tables, and write the expected files.

**Testing philosophy**: Run each script's main() end to end against synthetic
candles written to a temporary directory, so no real exchange data is needed.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path so we can import actions module
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions.compute_indicator_correlations import (
    export_indicator_series,
    main as correlations_main,
    parse_instruments,
)
from actions.summarize_crypto_performance import (
    PERFORMANCE_FILENAME,
    RISK_RETURN_FILENAME,
    main as performance_main,
)
from crypto_dashboard.analytics.correlations import PAIR_LABELS
from crypto_dashboard.analytics.synthetic_data import generate_candles, generate_gbm_paths
from crypto_dashboard.config.settings import IndicatorSettings
from crypto_dashboard.data.io import read_indicator_csv, write_candle_csv
from crypto_dashboard.data.loaders import load_universe


def make_candles_dir(tmp_path, symbols=("BTC-EUR", "ETH-EUR")):
    """
    Write 90 days of synthetic candles per symbol.

    Returns:
        Directory holding <SYMBOL>.csv files.
    """
    candles_dir = tmp_path / "candles"
    for seed, symbol in enumerate(symbols):
        closes = generate_gbm_paths(1000.0 * (seed + 1), 0.3, 0.8, n_steps=89, seed=seed)
        write_candle_csv(
            generate_candles(closes, market=symbol, seed=seed),
            candles_dir / f"{symbol}.csv",
        )
    return candles_dir


def test_parse_instruments():
    """Test comma-separated parsing with blanks dropped."""
    assert parse_instruments("BTC-EUR, ETH-EUR,,") == ("BTC-EUR", "ETH-EUR")
    assert parse_instruments(None) is None


def test_export_indicator_series(tmp_path):
    """Test one indicator CSV per market with all indicator columns."""
    candles_dir = make_candles_dir(tmp_path)
    universe = load_universe(["BTC-EUR", "ETH-EUR"], candles_dir=candles_dir)

    written = export_indicator_series(universe, tmp_path / "series", IndicatorSettings())

    assert [path.name for path in written] == ["BTC-EUR.csv", "ETH-EUR.csv"]
    series = read_indicator_csv(written[0], required_features=['rsi', 'sma', 'ema', 'returns'])
    assert len(series) == 90
    assert series['returns'].iloc[0] == 0.0


def test_correlations_main_writes_table(tmp_path, capsys):
    """Test the correlation script end to end."""
    candles_dir = make_candles_dir(tmp_path)
    output = tmp_path / "results" / "correlations.csv"

    correlations_main([
        "--candles-dir", str(candles_dir),
        "--instruments", "BTC-EUR,ETH-EUR,XRP-EUR",
        "--output", str(output),
        "--series-dir", str(tmp_path / "series"),
    ])

    table = pd.read_csv(output, index_col="instrument")
    assert list(table.index) == ["BTC-EUR", "ETH-EUR"]
    assert list(table.columns) == PAIR_LABELS
    assert (tmp_path / "series" / "ETH-EUR.csv").exists()

    out = capsys.readouterr().out
    assert "Correlations for ALL" in out
    assert "SMA-EMA" in out


def test_correlations_main_unknown_instrument_exits(tmp_path):
    """Test exit code 1 when the requested market wasn't loaded."""
    candles_dir = make_candles_dir(tmp_path)

    with pytest.raises(SystemExit) as exc_info:
        correlations_main([
            "--candles-dir", str(candles_dir),
            "--instruments", "BTC-EUR",
            "--instrument", "ETH-EUR",
        ])

    assert exc_info.value.code == 1


def test_correlations_main_no_data_exits(tmp_path):
    """Test exit code 1 when no market could be loaded."""
    with pytest.raises(SystemExit) as exc_info:
        correlations_main(["--candles-dir", str(tmp_path / "empty")])

    assert exc_info.value.code == 1


def test_performance_main_writes_tables(tmp_path, capsys):
    """Test the performance script end to end."""
    candles_dir = make_candles_dir(tmp_path, symbols=("BTC-EUR", "ETH-EUR", "LTC-EUR"))
    output_dir = tmp_path / "results"

    performance_main([
        "--candles-dir", str(candles_dir),
        "--instruments", "BTC-EUR,ETH-EUR,LTC-EUR",
        "--output-dir", str(output_dir),
    ])

    performance = pd.read_csv(output_dir / PERFORMANCE_FILENAME)
    risk_return = pd.read_csv(output_dir / RISK_RETURN_FILENAME)

    assert sorted(performance['instrument']) == ["BTC-EUR", "ETH-EUR", "LTC-EUR"]
    assert performance['change_pct'].is_monotonic_decreasing
    assert set(performance['category']) <= {"strong", "moderate", "low"}
    assert risk_return['expected_return'].is_monotonic_decreasing
    assert "Crypto Performance Summary" in capsys.readouterr().out
