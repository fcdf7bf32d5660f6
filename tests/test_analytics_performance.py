"""
Tests for crypto_dashboard/analytics/performance.py

Covers the percentage-change bar chart: the change calculation, the
strong/moderate/low buckets, table ranking, and the date span shown in the
chart subtitle.
"""

import numpy as np
import pandas as pd
import pytest

from crypto_dashboard.analytics.performance import (
    PERFORMANCE_TABLE_COLUMNS,
    build_performance_table,
    classify_performance,
    compute_date_span,
    compute_percentage_change,
)


def make_candles(closes, start="2022-01-01") -> pd.DataFrame:
    """Create a minimal candle frame with daily timestamps."""
    closes = list(closes)
    return pd.DataFrame({
        'timestamp': pd.date_range(start, periods=len(closes), freq="D"),
        'close': closes,
    })


def test_compute_percentage_change():
    """Test first-to-last change in percent."""
    # (150 - 100) / 100 * 100 = 50
    assert np.isclose(compute_percentage_change(pd.Series([100.0, 80.0, 150.0])), 50.0)
    assert np.isclose(compute_percentage_change([200.0, 100.0]), -50.0)


def test_compute_percentage_change_uses_positions():
    """Test that index labels don't decide first and last."""
    prices = pd.Series([100.0, 120.0], index=[5, 0])

    assert np.isclose(compute_percentage_change(prices), 20.0)


def test_compute_percentage_change_too_short():
    """Test that fewer than two prices gives NaN."""
    assert pd.isna(compute_percentage_change([100.0]))
    assert pd.isna(compute_percentage_change([]))


@pytest.mark.parametrize("change, expected", [
    (75.0, "strong"),
    (60.5, "strong"),
    (60.0, "moderate"),  # Thresholds are strict
    (45.0, "moderate"),
    (40.0, "low"),
    (-20.0, "low"),
    (float("nan"), "low"),
])
def test_classify_performance(change, expected):
    """Test the bar colour buckets."""
    assert classify_performance(change) == expected


def test_build_performance_table_ranks_and_rounds():
    """Test sorting by change (best first) and rounding to one decimal."""
    universe = {
        "BTC-EUR": make_candles([100.0, 120.0, 165.04]),   # +65.04%
        "ETH-EUR": make_candles([100.0, 95.0, 90.0]),      # -10%
        "ADA-EUR": make_candles([10.0, 12.0, 14.5]),       # +45%
    }
    table = build_performance_table(universe)

    assert list(table.columns) == PERFORMANCE_TABLE_COLUMNS
    assert table["instrument"].tolist() == ["BTC-EUR", "ADA-EUR", "ETH-EUR"]
    assert table["category"].tolist() == ["strong", "moderate", "low"]
    assert table.loc[0, "change_pct"] == 65.0
    assert table.loc[2, "change_pct"] == -10.0
    assert table.loc[1, "start"] == pd.Timestamp("2022-01-01")
    assert table.loc[1, "end"] == pd.Timestamp("2022-01-03")


def test_build_performance_table_skips_short_histories():
    """Test that markets with fewer than two candles are left out."""
    universe = {
        "BTC-EUR": make_candles([100.0, 110.0]),
        "XRP-EUR": make_candles([0.5]),
        "LTC-EUR": make_candles([]),
    }
    table = build_performance_table(universe)

    assert table["instrument"].tolist() == ["BTC-EUR"]


def test_build_performance_table_empty_universe():
    """Test that no markets gives an empty table with the right columns."""
    table = build_performance_table({})

    assert table.empty
    assert list(table.columns) == PERFORMANCE_TABLE_COLUMNS


def test_compute_date_span():
    """Test earliest start and latest end across qualifying markets."""
    universe = {
        "BTC-EUR": make_candles([1.0, 2.0, 3.0], start="2022-03-01"),
        "ETH-EUR": make_candles([1.0, 2.0], start="2022-01-15"),
        "ADA-EUR": make_candles([1.0], start="2021-01-01"),  # Too short, ignored
    }
    span = compute_date_span(universe)

    assert span == (pd.Timestamp("2022-01-15"), pd.Timestamp("2022-03-03"))


def test_compute_date_span_none_when_nothing_qualifies():
    """Test None when no market has two candles."""
    assert compute_date_span({"BTC-EUR": make_candles([1.0])}) is None
    assert compute_date_span({}) is None
