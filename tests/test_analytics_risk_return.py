"""
Tests for crypto_dashboard/analytics/risk_return.py

Verifies annualized expected return and risk, the Sharpe ratio (including
the risk-free conversion from decimal to percent), the RSI-based technical
signal, and the per-market bubble chart table.
"""

import numpy as np
import pandas as pd
import pytest

from crypto_dashboard.analytics.indicators import compute_returns
from crypto_dashboard.analytics.risk_return import (
    RISK_RETURN_TABLE_COLUMNS,
    build_risk_return_table,
    compute_expected_return,
    compute_risk,
    compute_sharpe_ratio,
    technical_signal,
)


def make_candles(closes) -> pd.DataFrame:
    """Create a minimal candle frame (timestamp + close)."""
    closes = list(closes)
    return pd.DataFrame({
        'timestamp': pd.date_range("2022-01-01", periods=len(closes), freq="D"),
        'close': closes,
    })


def test_compute_expected_return_annualizes_mean():
    """Test mean of observed returns times periods per year."""
    returns_pct = compute_returns([100.0, 110.0, 99.0, 108.9])  # [0, 10, -10, 10]

    # The leading 0 is a placeholder and is not averaged
    expected = np.mean([10.0, -10.0, 10.0]) * 365
    assert np.isclose(compute_expected_return(returns_pct), expected)
    assert np.isclose(compute_expected_return(returns_pct, periods_per_year=252), expected / 365 * 252)


def test_compute_expected_return_no_observations():
    """Test NaN when there is no return to average."""
    assert pd.isna(compute_expected_return(compute_returns([100.0])))


def test_compute_risk_sample_std():
    """Test sample std (ddof=1) scaled by sqrt(periods per year)."""
    returns_pct = compute_returns([100.0, 110.0, 99.0, 108.9])

    expected = np.std([10.0, -10.0, 10.0], ddof=1) * np.sqrt(365)
    assert np.isclose(compute_risk(returns_pct), expected)


def test_compute_risk_needs_two_observations():
    """Test NaN with a single observed return."""
    assert pd.isna(compute_risk(compute_returns([100.0, 105.0])))


def test_compute_risk_ignores_nan_returns():
    """Test that undefined returns are dropped before the std."""
    returns_pct = pd.Series([0.0, 1.0, np.nan, 3.0])

    assert np.isclose(compute_risk(returns_pct, periods_per_year=1), np.std([1.0, 3.0], ddof=1))


def test_compute_sharpe_ratio():
    """Test excess return over risk, risk-free given as a decimal."""
    # (20% - 3%) / 10% = 1.7
    assert np.isclose(compute_sharpe_ratio(20.0, 10.0, risk_free_rate=0.03), 1.7)
    assert np.isclose(compute_sharpe_ratio(20.0, 10.0), 2.0)


@pytest.mark.parametrize("risk", [0.0, float("nan")])
def test_compute_sharpe_ratio_undefined_risk(risk):
    """Test NaN when risk is zero or undefined."""
    assert pd.isna(compute_sharpe_ratio(15.0, risk))


@pytest.mark.parametrize("score, expected", [
    (85.0, "Strong Buy"),
    (70.0, "Strong Buy"),
    (65.0, "Buy"),
    (60.0, "Buy"),
    (50.0, "Hold"),
    (49.9, "Sell"),
    (float("nan"), "Sell"),
])
def test_technical_signal(score, expected):
    """Test the score thresholds (inclusive)."""
    assert technical_signal(score) == expected


def test_build_risk_return_table_columns_and_order():
    """Test one row per market, sorted by expected return descending."""
    universe = {
        "ETH-EUR": make_candles([100.0, 99.0, 98.0, 97.0]),
        "BTC-EUR": make_candles([100.0, 102.0, 104.0, 106.0]),
    }
    table = build_risk_return_table(universe)

    assert list(table.columns) == RISK_RETURN_TABLE_COLUMNS
    assert table["instrument"].tolist() == ["BTC-EUR", "ETH-EUR"]
    assert table.loc[0, "latest_price"] == 106.0
    # 4 candles with the default RSI period of 14: still in warm-up
    assert table.loc[0, "technical_score"] == 50.0
    assert table.loc[0, "technical_signal"] == "Hold"


def test_build_risk_return_table_uses_latest_defined_rsi():
    """Test that a NaN RSI at the last bar falls back to the previous value."""
    # period 2: RSI = [50, 50, 90.9, 90.9, NaN]
    universe = {"BTC-EUR": make_candles([10.0, 20.0, 30.0, 40.0, 50.0])}
    table = build_risk_return_table(universe, rsi_period=2)

    assert np.isclose(table.loc[0, "technical_score"], 100.0 - 100.0 / 11.0)
    assert table.loc[0, "technical_signal"] == "Strong Buy"


def test_build_risk_return_table_values_match_helpers():
    """Test that the table uses the same helpers and settings."""
    closes = [100.0, 104.0, 101.0, 107.0, 103.0, 110.0]
    table = build_risk_return_table(
        {"BTC-EUR": make_candles(closes)},
        periods_per_year=252,
        risk_free_rate=0.02,
    )
    returns_pct = compute_returns(closes)
    expected_return = compute_expected_return(returns_pct, 252)
    risk = compute_risk(returns_pct, 252)

    assert np.isclose(table.loc[0, "expected_return"], expected_return)
    assert np.isclose(table.loc[0, "risk"], risk)
    assert np.isclose(table.loc[0, "sharpe_ratio"], (expected_return - 2.0) / risk)


def test_build_risk_return_table_skips_empty_markets():
    """Test that a market without candles is left out."""
    universe = {
        "BTC-EUR": make_candles([100.0, 101.0]),
        "LTC-EUR": make_candles([]),
    }
    table = build_risk_return_table(universe)

    assert table["instrument"].tolist() == ["BTC-EUR"]
    # Single observed return: risk and Sharpe undefined
    assert pd.isna(table.loc[0, "risk"])
    assert pd.isna(table.loc[0, "sharpe_ratio"])
