"""
Timestamp conversions between the candle CSV format and pandas.

Candle files store `time` as a Unix epoch in milliseconds (what the exchange
export produces). In memory we work with naive `datetime64` values that are
understood to be UTC, like every other timestamp in this project. These two
helpers are the only place the conversion happens, so the unit cannot drift
between readers and writers.
"""

import pandas as pd


_EPOCH = pd.Timestamp("1970-01-01")
_ONE_MILLISECOND = pd.Timedelta(milliseconds=1)


def epoch_ms_to_timestamp(values) -> pd.Series:
    """
    Convert Unix epoch milliseconds to naive UTC timestamps.

    **Functionally**:
    - Accepts ints, floats or numeric strings (CSV cells arrive as strings when
      a column has mixed content).
    - Returns a datetime64 Series aligned with the input.

    Args:
        values: Sequence or Series of epoch milliseconds.

    Returns:
        Series of naive UTC timestamps.

    Raises:
        ValueError: If any value is not numeric.

    Example:
        >>> epoch_ms_to_timestamp([1672444800000]).iloc[0]
        Timestamp('2022-12-31 00:00:00')
    """
    millis = pd.to_numeric(pd.Series(values), errors="raise")
    return pd.to_datetime(millis, unit="ms")


def timestamp_to_epoch_ms(values) -> pd.Series:
    """
    Convert timestamps to Unix epoch milliseconds (int64).

    Timezone-aware inputs are converted to UTC first; naive inputs are taken to
    be UTC already. Sub-millisecond precision is truncated.

    Args:
        values: Sequence or Series of datetimes, pandas Timestamps or ISO strings.

    Returns:
        Series of int64 epoch milliseconds.
    """
    timestamps = pd.to_datetime(pd.Series(values))
    if timestamps.dt.tz is not None:
        timestamps = timestamps.dt.tz_convert("UTC").dt.tz_localize(None)
    return ((timestamps - _EPOCH) // _ONE_MILLISECOND).astype("int64")
