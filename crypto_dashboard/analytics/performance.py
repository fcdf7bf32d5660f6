"""
Per-instrument performance over the loaded history (performance bar chart).

Answers "how much did each market move from its first to its last candle?"
and buckets the answer into the three bands the chart legend uses.
"""

import numpy as np
import pandas as pd


STRONG_PERFORMANCE_THRESHOLD = 60.0
MODERATE_PERFORMANCE_THRESHOLD = 40.0

PERFORMANCE_TABLE_COLUMNS = ["instrument", "change_pct", "category", "start", "end"]


def compute_percentage_change(prices: pd.Series) -> float:
    """
    Compute the percentage change from the first to the last price.

    **Mathematical**:
        change = (P_last - P_first) / P_first * 100

    Positions, not index labels, decide first and last, so the caller must pass
    prices oldest first.

    **Edge cases**:
      - Fewer than two prices: NaN (no period to measure).
      - First price of zero: inf or NaN, no exception.

    Args:
        prices: Closing prices, oldest first.

    Returns:
        Percentage change as a float (e.g. 65.3 for +65.3%).
    """
    values = pd.to_numeric(pd.Series(prices), errors="coerce").to_numpy(dtype=float)
    if len(values) < 2:
        return float("nan")

    first_price = values[0]
    last_price = values[-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        return float((last_price - first_price) / first_price * 100.0)


def classify_performance(change_pct: float) -> str:
    """
    Bucket a percentage change into 'strong' (> 60), 'moderate' (> 40) or 'low'.

    NaN falls through to 'low'.
    """
    if change_pct > STRONG_PERFORMANCE_THRESHOLD:
        return "strong"
    if change_pct > MODERATE_PERFORMANCE_THRESHOLD:
        return "moderate"
    return "low"


def build_performance_table(
    universe: dict[str, pd.DataFrame],
    price_column: str = "close",
    timestamp_column: str = "timestamp",
) -> pd.DataFrame:
    """
    Rank instruments by percentage change over their loaded history.

    **Functionally**:
      - Skips instruments with fewer than two candles.
      - Rounds the change to one decimal, as displayed on the chart.
      - Sorts by change descending (best performer first).

    Args:
        universe: Mapping of market symbol to candle DataFrame (oldest first).
        price_column: Column holding closing prices.
        timestamp_column: Column holding candle timestamps.

    Returns:
        DataFrame with columns instrument, change_pct, category, start, end.
    """
    rows = []
    for symbol, candles in universe.items():
        if len(candles) < 2:
            continue

        change = compute_percentage_change(candles[price_column])
        rows.append({
            "instrument": symbol,
            "change_pct": round(change, 1),
            "category": classify_performance(change),
            "start": candles[timestamp_column].iloc[0],
            "end": candles[timestamp_column].iloc[-1],
        })

    table = pd.DataFrame(rows, columns=PERFORMANCE_TABLE_COLUMNS)
    return table.sort_values("change_pct", ascending=False, kind="stable").reset_index(drop=True)


def compute_date_span(
    universe: dict[str, pd.DataFrame],
    timestamp_column: str = "timestamp",
) -> tuple[pd.Timestamp, pd.Timestamp] | None:
    """
    Return (earliest first timestamp, latest last timestamp) across instruments.

    Only instruments with at least two candles count, matching the table above.
    Returns None when no instrument qualifies.
    """
    starts = []
    ends = []
    for candles in universe.values():
        if len(candles) < 2:
            continue
        starts.append(candles[timestamp_column].iloc[0])
        ends.append(candles[timestamp_column].iloc[-1])

    if not starts:
        return None
    return min(starts), max(ends)
