"""
Technical indicators over a closing-price series.

**Conceptual**: This module is the single indicator engine behind every chart
in the dashboard. The price panel, the correlation heatmap and the
risk/return view all consume these functions instead of re-deriving the
math, so an RSI shown in one place is the same RSI correlated in another.

**Conventions**:
  - Input prices are ordered oldest first (ascending by timestamp). Sorting is
    the caller's job; `crypto_dashboard.data.io.read_candle_csv` already does it.
  - Every series-producing function returns a float `pd.Series` with exactly
    the same length as its input. A Series input keeps its index; any other
    sequence gets a RangeIndex.
  - Degenerate numeric input never raises. Too-short windows pass prices
    through, the RSI warm-up is a neutral 50, and undefined statistics are NaN.
    Non-numeric entries are coerced to NaN and flow through the arithmetic.
  - A non-positive period is a programming error and raises ValueError.

**Compatibility note**: RSI and EMA here intentionally reproduce the dashboard's
historical numbers rather than the textbook definitions (block-averaged RSI,
EMA recurrence on the raw previous price). Downstream CSV exports and the
heatmap values depend on them, so do not "fix" either without a migration.
"""

from typing import Sequence

import numpy as np
import pandas as pd


DEFAULT_RSI_PERIOD = 14
DEFAULT_SMA_PERIOD = 20
DEFAULT_EMA_PERIOD = 20

# RSI value used before a full period of changes is available
NEUTRAL_RSI = 50.0


def _to_price_series(prices: pd.Series | Sequence[float] | np.ndarray) -> pd.Series:
    """Coerce any 1-D price input to a float Series, non-numeric values -> NaN."""
    if isinstance(prices, pd.Series):
        series = prices
    else:
        series = pd.Series(list(prices), dtype=object)
    return pd.to_numeric(series, errors="coerce").astype(float)


def _check_period(period: int, name: str = "period") -> None:
    if not isinstance(period, (int, np.integer)) or period < 1:
        raise ValueError(f"{name} must be a positive integer, got {period!r}")


def compute_rsi(
    prices: pd.Series | Sequence[float] | np.ndarray,
    period: int = DEFAULT_RSI_PERIOD,
) -> pd.Series:
    """
    Compute the Relative Strength Index (RSI) with block-averaged gains/losses.

    **Conceptual**: RSI compares the size of recent up-moves with recent
    down-moves and maps the ratio onto 0..100. Readings above 70 are usually
    read as overbought, below 30 as oversold.

    **Mathematical**: With changes c_j = P_{j+1} - P_j (j = 0..n-2):
        gain_j = max(c_j, 0)            loss_j = max(-c_j, 0)
        bucket(j) = floor(j / period)
        avgGain_b, avgLoss_b = mean of gains/losses whose bucket is b
    and for each price index i:
        RSI_i = 50                                    if i < period
        RS_i  = avgGain_b / max(avgLoss_b, 1)         with b = floor(i / period)
        RSI_i = 100 - 100 / (1 + RS_i)

    The averages are per fixed block of `period` changes, not a rolling or
    Wilder-smoothed window, and the loss floor of 1 keeps RS finite. A block
    without any losses therefore gives RS = avgGain, pushing RSI towards 100.

    **Edge cases**:
      - len(prices) <= period: every value is 50.
      - When (n - 1) is a multiple of `period`, the last index looks up a block
        that has no changes yet; that value is NaN.
      - Empty input returns an empty Series.

    Args:
        prices: Closing prices, oldest first.
        period: Block size in bars (default 14).

    Returns:
        RSI series, same length and index as the input.
    """
    _check_period(period)
    series = _to_price_series(prices)
    values = series.to_numpy()
    n = len(values)

    rsi = np.full(n, NEUTRAL_RSI)

    if n > period:
        changes = np.diff(values)
        gains = np.where(changes > 0, changes, 0.0)
        losses = np.where(changes < 0, -changes, 0.0)

        # Block index of each change, then the mean per block
        blocks = np.arange(len(changes)) // period
        avg_gains = pd.Series(gains).groupby(blocks).mean().to_numpy()
        avg_losses = pd.Series(losses).groupby(blocks).mean().to_numpy()

        lookup = np.arange(period, n) // period
        known = lookup < len(avg_gains)

        avg_gain = np.full(len(lookup), np.nan)
        avg_loss = np.full(len(lookup), np.nan)
        avg_gain[known] = avg_gains[lookup[known]]
        avg_loss[known] = avg_losses[lookup[known]]

        rs = avg_gain / np.maximum(avg_loss, 1.0)
        rsi[period:] = 100.0 - 100.0 / (1.0 + rs)

    return pd.Series(rsi, index=series.index, name="rsi")


def compute_sma(
    prices: pd.Series | Sequence[float] | np.ndarray,
    period: int = DEFAULT_SMA_PERIOD,
) -> pd.Series:
    """
    Compute a simple moving average (SMA) that passes prices through during warm-up.

    **Mathematical**:
        SMA_i = P_i                                          if i < period - 1
        SMA_i = (1 / period) * sum(P_{i-period+1} .. P_i)    otherwise

    Unlike `Series.rolling().mean()`, the first `period - 1` values are the raw
    prices rather than NaN, so the chart line starts at the first candle.

    Example:
        >>> compute_sma([1, 2, 3, 4, 5], period=3).tolist()
        [1.0, 2.0, 2.0, 3.0, 4.0]
    """
    _check_period(period)
    series = _to_price_series(prices)
    values = series.to_numpy()

    sma = values.copy()
    if len(values) >= period:
        windows = np.lib.stride_tricks.sliding_window_view(values, period)
        sma[period - 1:] = windows.mean(axis=1)

    return pd.Series(sma, index=series.index, name="sma")


def compute_ema(
    prices: pd.Series | Sequence[float] | np.ndarray,
    period: int = DEFAULT_EMA_PERIOD,
) -> pd.Series:
    """
    Compute the dashboard's exponential moving average (EMA).

    **Mathematical**: With multiplier α = 2 / (period + 1):
        EMA_0 = P_0
        EMA_i = α * P_i + (1 - α) * P_{i-1}

    Note the second term uses the previous *price*, not the previous EMA as in
    the textbook recurrence. The result is a two-point weighted average that
    reacts almost immediately to each bar. Kept as-is for compatibility with
    existing exports.

    Example:
        >>> compute_ema([10, 20, 30], period=20).round(3).tolist()
        [10.0, 10.952, 20.952]
    """
    _check_period(period)
    series = _to_price_series(prices)
    values = series.to_numpy()

    multiplier = 2.0 / (period + 1)
    ema = values.copy()
    if len(values) > 1:
        ema[1:] = values[1:] * multiplier + values[:-1] * (1.0 - multiplier)

    return pd.Series(ema, index=series.index, name="ema")


def compute_returns(prices: pd.Series | Sequence[float] | np.ndarray) -> pd.Series:
    """
    Compute simple period-over-period returns in percent.

    **Mathematical**:
        R_0 = 0
        R_i = (P_i - P_{i-1}) / P_{i-1} * 100

    The first value is 0 rather than NaN so the series stays fully populated for
    correlation. A zero previous price yields inf/NaN without raising.

    Example:
        >>> compute_returns([100, 110, 99]).round(6).tolist()
        [0.0, 10.0, -10.0]
    """
    series = _to_price_series(prices)
    values = series.to_numpy()

    returns = np.zeros(len(values))
    if len(values) > 1:
        with np.errstate(divide="ignore", invalid="ignore"):
            returns[1:] = (values[1:] - values[:-1]) / values[:-1] * 100.0

    return pd.Series(returns, index=series.index, name="returns")


def pearson_correlation(
    x: pd.Series | Sequence[float] | np.ndarray,
    y: pd.Series | Sequence[float] | np.ndarray,
) -> float:
    """
    Compute the sample Pearson correlation between two series.

    **Conceptual**: Measures how strongly two indicator series move together
    linearly: +1 in lock-step, -1 mirror images, 0 unrelated. This is the value
    shown in each cell of the indicator correlation heatmap.

    **Mathematical**: Both inputs are truncated to n = min(len(x), len(y)) by
    position (index labels are ignored). Then
        cov(x, y) = Σ (x_i - x̄)(y_i - ȳ) / (n - 1)
        s_x       = sqrt(Σ (x_i - x̄)^2 / (n - 1))
        r         = cov(x, y) / (s_x * s_y)
    The (n - 1) factors cancel, so r is evaluated as
    Σ dx·dy / sqrt(Σ dx² · Σ dy²), which keeps perfectly (anti-)correlated
    inputs at exactly ±1.

    **Edge cases**:
      - n < 2: returns 0.0 (nothing to correlate).
      - Either series constant (zero variance): returns NaN. Callers display
        it as "N/A" via `format_correlation`.
      - NaN anywhere in the truncated inputs: returns NaN.

    Args:
        x: First series.
        y: Second series.

    Returns:
        Correlation in [-1, 1], 0.0, or NaN as described above.
    """
    x_values = _to_price_series(x).to_numpy()
    y_values = _to_price_series(y).to_numpy()

    n = min(len(x_values), len(y_values))
    if n < 2:
        return 0.0

    x_values = x_values[:n]
    y_values = y_values[:n]

    # Compare extremes, not the sum of squares: the mean of a constant series
    # can be off by one ulp, leaving tiny non-zero deviations
    if x_values.max() == x_values.min() or y_values.max() == y_values.min():
        return float("nan")

    dx = x_values - x_values.mean()
    dy = y_values - y_values.mean()

    sum_xy = (dx * dy).sum()
    sum_xx = (dx * dx).sum()
    sum_yy = (dy * dy).sum()

    return float(sum_xy / np.sqrt(sum_xx * sum_yy))


def build_indicator_frame(
    prices: pd.Series | Sequence[float] | np.ndarray,
    rsi_period: int = DEFAULT_RSI_PERIOD,
    sma_period: int = DEFAULT_SMA_PERIOD,
    ema_period: int = DEFAULT_EMA_PERIOD,
) -> pd.DataFrame:
    """
    Compute all indicator series for one price history, side by side.

    Returns a DataFrame with columns close, rsi, sma, ema and returns, aligned
    to the input index. This is the one place chart and table builders get
    their indicators from.
    """
    close = _to_price_series(prices)
    return pd.DataFrame({
        "close": close,
        "rsi": compute_rsi(close, period=rsi_period),
        "sma": compute_sma(close, period=sma_period),
        "ema": compute_ema(close, period=ema_period),
        "returns": compute_returns(close),
    }, index=close.index)
