"""
Tests for crypto_dashboard/utils/time.py

These tests verify the epoch-millisecond conversions used by the candle CSV
reader and writer.
"""

import pandas as pd
import pytest

from crypto_dashboard.utils.time import epoch_ms_to_timestamp, timestamp_to_epoch_ms


def test_epoch_ms_to_timestamp():
    """Test conversion of epoch milliseconds to naive UTC timestamps."""
    result = epoch_ms_to_timestamp([1640995200000, 1672444800000])

    assert result.tolist() == [pd.Timestamp("2022-01-01"), pd.Timestamp("2022-12-31")]
    assert result.dt.tz is None


def test_epoch_ms_to_timestamp_accepts_numeric_strings():
    """Test that CSV cells read as strings still convert."""
    result = epoch_ms_to_timestamp(pd.Series(["1640995200000"]))

    assert result.iloc[0] == pd.Timestamp("2022-01-01")


def test_epoch_ms_to_timestamp_rejects_text():
    """Test that non-numeric values raise ValueError."""
    with pytest.raises(ValueError):
        epoch_ms_to_timestamp(["yesterday"])


def test_timestamp_to_epoch_ms_naive_is_utc():
    """Test that naive timestamps are taken as UTC."""
    result = timestamp_to_epoch_ms([pd.Timestamp("2022-01-01 00:00:00.250")])

    assert result.iloc[0] == 1640995200250
    assert result.dtype == "int64"


def test_timestamp_to_epoch_ms_converts_aware_to_utc():
    """Test that timezone-aware input is converted to UTC first."""
    # 01:00 in Amsterdam (CET, UTC+1) is midnight UTC
    aware = pd.Series([pd.Timestamp("2022-01-01 01:00", tz="Europe/Amsterdam")])

    assert timestamp_to_epoch_ms(aware).iloc[0] == 1640995200000


def test_round_trip_preserves_timestamps():
    """Test epoch -> timestamp -> epoch is the identity at ms precision."""
    millis = [1640995200000, 1641081600123]

    assert timestamp_to_epoch_ms(epoch_ms_to_timestamp(millis)).tolist() == millis
