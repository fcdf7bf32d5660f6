"""
Indicator-pair correlations for the correlation heatmap.

**Conceptual**: For each instrument we ask how the four indicators relate to
each other: does RSI move with returns, are SMA and EMA nearly identical, and so
on. The heatmap shows one row per pair, either for a single instrument or the
average across all of them (the "ALL" view).

**Functionally**:
  - `compute_indicator_correlations` builds the indicator frame for one price
    series and correlates the six pairs in `INDICATOR_PAIRS`.
  - `build_correlation_table` does that for every instrument in a loaded
    universe (symbol -> candle DataFrame).
  - `average_correlations` / `select_correlations` produce the displayed column.
  - `format_correlation` renders a value for display, with NaN as "N/A".
"""

import numpy as np
import pandas as pd

from crypto_dashboard.analytics.indicators import (
    DEFAULT_EMA_PERIOD,
    DEFAULT_RSI_PERIOD,
    DEFAULT_SMA_PERIOD,
    build_indicator_frame,
    pearson_correlation,
)


# Heatmap rows, in display order
INDICATOR_PAIRS = [
    ("RSI", "Returns"),
    ("SMA", "Returns"),
    ("EMA", "Returns"),
    ("RSI", "SMA"),
    ("RSI", "EMA"),
    ("SMA", "EMA"),
]

# Indicator label -> column in build_indicator_frame output
INDICATOR_COLUMNS = {
    "RSI": "rsi",
    "SMA": "sma",
    "EMA": "ema",
    "Returns": "returns",
}

ALL_INSTRUMENTS = "ALL"


def pair_label(first: str, second: str) -> str:
    """Return the display label for an indicator pair, e.g. 'RSI-Returns'."""
    return f"{first}-{second}"


PAIR_LABELS = [pair_label(first, second) for first, second in INDICATOR_PAIRS]


def compute_indicator_correlations(
    prices: pd.Series,
    rsi_period: int = DEFAULT_RSI_PERIOD,
    sma_period: int = DEFAULT_SMA_PERIOD,
    ema_period: int = DEFAULT_EMA_PERIOD,
) -> dict[str, float]:
    """
    Correlate every indicator pair for one closing-price series.

    **Functionally**:
      - Computes RSI, SMA, EMA and returns once via `build_indicator_frame`.
      - Calls `pearson_correlation` for each pair in `INDICATOR_PAIRS`.
      - Returns a dict keyed by pair label in display order.

    Values follow the engine's sentinels: 0.0 for fewer than two prices,
    NaN when one of the indicators is constant (e.g. RSI stuck at 50 on a
    short history).

    Args:
        prices: Closing prices, oldest first.
        rsi_period: RSI block size.
        sma_period: SMA window.
        ema_period: EMA period (sets the multiplier).

    Returns:
        Dict mapping pair label (e.g. "RSI-Returns") to correlation.
    """
    frame = build_indicator_frame(
        prices,
        rsi_period=rsi_period,
        sma_period=sma_period,
        ema_period=ema_period,
    )

    correlations = {}
    for first, second in INDICATOR_PAIRS:
        correlations[pair_label(first, second)] = pearson_correlation(
            frame[INDICATOR_COLUMNS[first]],
            frame[INDICATOR_COLUMNS[second]],
        )
    return correlations


def build_correlation_table(
    universe: dict[str, pd.DataFrame],
    rsi_period: int = DEFAULT_RSI_PERIOD,
    sma_period: int = DEFAULT_SMA_PERIOD,
    ema_period: int = DEFAULT_EMA_PERIOD,
    price_column: str = "close",
) -> pd.DataFrame:
    """
    Build the instrument x indicator-pair correlation table.

    Each instrument's candles must already be sorted oldest first (the loaders
    guarantee this). Instruments are kept in the universe's iteration order.

    Args:
        universe: Mapping of market symbol to candle DataFrame.
        rsi_period: RSI block size.
        sma_period: SMA window.
        ema_period: EMA period.
        price_column: Column holding closing prices.

    Returns:
        DataFrame indexed by instrument (index name "instrument") with one
        column per pair label.
    """
    rows = {}
    for symbol, candles in universe.items():
        rows[symbol] = compute_indicator_correlations(
            candles[price_column],
            rsi_period=rsi_period,
            sma_period=sma_period,
            ema_period=ema_period,
        )

    table = pd.DataFrame.from_dict(rows, orient="index", columns=PAIR_LABELS)
    table.index.name = "instrument"
    return table


def average_correlations(table: pd.DataFrame) -> pd.Series:
    """
    Average each pair's correlation across instruments (the "ALL" view).

    NaN is not skipped: if any instrument's value is undefined the average is
    undefined too, and an empty table yields NaN for every pair.
    """
    if table.empty:
        return pd.Series(np.nan, index=PAIR_LABELS, name=ALL_INSTRUMENTS)
    averages = table[PAIR_LABELS].mean(axis=0, skipna=False)
    averages.name = ALL_INSTRUMENTS
    return averages


def select_correlations(table: pd.DataFrame, instrument: str = ALL_INSTRUMENTS) -> pd.Series:
    """
    Return the correlations to display for one instrument, or "ALL" for the average.

    Raises:
        KeyError: If `instrument` is neither "ALL" nor a row of `table`.
    """
    if instrument == ALL_INSTRUMENTS:
        return average_correlations(table)
    if instrument not in table.index:
        raise KeyError(
            f"Unknown instrument '{instrument}'. "
            f"Available: {[ALL_INSTRUMENTS] + list(table.index)}"
        )
    row = table.loc[instrument, PAIR_LABELS].astype(float)
    row.name = instrument
    return row


def format_correlation(value: float | None, decimals: int = 3) -> str:
    """Format a correlation for display; None and NaN render as 'N/A'."""
    if value is None or pd.isna(value):
        return "N/A"
    return f"{value:.{decimals}f}"
