"""
Candle-level helpers behind the price/volume volatility panel.

Filtering by candle direction, choosing the visible date window, the rolling
volume average line, and the small key-metrics box. All functions take a candle
DataFrame as produced by `crypto_dashboard.data.io.read_candle_csv` (oldest
first, columns timestamp/open/high/low/close/volume) and never modify it.
"""

import pandas as pd


DIRECTIONS = ("Both", "Up", "Down")

DEFAULT_WINDOW_END = "2022-12-31"
DEFAULT_WINDOW_MONTHS = 6
DEFAULT_VOLUME_WINDOW = 5


def filter_by_direction(candles: pd.DataFrame, direction: str = "Both") -> pd.DataFrame:
    """
    Keep only up candles (close > open), down candles (close < open), or both.

    Doji candles (close == open) only appear under "Both".

    Raises:
        ValueError: If `direction` is not one of "Both", "Up", "Down".
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

    if direction == "Up":
        mask = candles["close"] > candles["open"]
    elif direction == "Down":
        mask = candles["close"] < candles["open"]
    else:
        return candles.copy()
    return candles[mask].copy()


def select_index_range(candles: pd.DataFrame, start: int, end: int) -> pd.DataFrame:
    """Return candles at positions start..end inclusive (empty when end < start)."""
    if end < start:
        return candles.iloc[0:0].copy()
    return candles.iloc[start:end + 1].copy()


def default_date_range(
    candles: pd.DataFrame,
    end_date: str | pd.Timestamp = DEFAULT_WINDOW_END,
    months: int = DEFAULT_WINDOW_MONTHS,
) -> tuple[int, int]:
    """
    Choose the initial visible window: the `months` months ending on `end_date`.

    **Functionally**:
      - start index: first candle on or after (end_date - months), else 0.
      - end index: the candle before the first one after end_date, else the
        last candle.
      - If that leaves no candle inside the window (history entirely before or
        after it), the whole history is selected instead.

    Args:
        candles: Candle DataFrame, oldest first.
        end_date: Last day of the window (inclusive).
        months: Window length in calendar months.

    Returns:
        (start, end) positional indices, inclusive. (0, -1) for no candles.
    """
    n = len(candles)
    if n == 0:
        return 0, -1

    end_ts = pd.Timestamp(end_date)
    start_ts = end_ts - pd.DateOffset(months=months)
    timestamps = candles["timestamp"].reset_index(drop=True)

    on_or_after_start = timestamps.index[timestamps >= start_ts]
    start = int(on_or_after_start[0]) if len(on_or_after_start) else 0

    after_end = timestamps.index[timestamps > end_ts]
    end = int(after_end[0]) - 1 if len(after_end) else n - 1

    if end < start:
        return 0, n - 1
    return start, end


def compute_volume_moving_average(
    candles: pd.DataFrame,
    window: int = DEFAULT_VOLUME_WINDOW,
) -> pd.DataFrame:
    """
    Rolling mean of volume, emitted only once the window is full.

    Unlike the indicator SMA there is no pass-through warm-up: the first row
    corresponds to candle `window - 1`. NaN volumes are skipped inside a window.

    Returns:
        DataFrame with columns timestamp and avg.
    """
    if window < 1:
        raise ValueError(f"window must be a positive integer, got {window!r}")

    averages = candles["volume"].rolling(window=window, min_periods=1).mean()
    result = pd.DataFrame({
        "timestamp": candles["timestamp"],
        "avg": averages,
    }).iloc[window - 1:]
    return result.reset_index(drop=True)


def summarize_candles(candles: pd.DataFrame) -> dict[str, float]:
    """
    Key metrics for the visible candles.

    Returns:
        Dict with average_volume, price_low (lowest low) and price_high
        (highest high). All NaN when there are no candles.
    """
    if candles.empty:
        nan = float("nan")
        return {"average_volume": nan, "price_low": nan, "price_high": nan}

    return {
        "average_volume": float(candles["volume"].mean()),
        "price_low": float(candles["low"].min()),
        "price_high": float(candles["high"].max()),
    }
