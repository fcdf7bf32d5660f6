"""
Synthetic crypto price paths and candles for tests and demos.

This module provides:
  - Geometric Brownian Motion (GBM) closing-price paths, for trending,
    compounding behaviour with controllable drift and volatility.
  - A candle builder that wraps any closing-price path into the same CSV layout
    the dashboard reads from disk (market, time, open, high, low, close, volume).

These generators are useful for:
  - Exercising the indicator engine and the table builders on realistic lengths
  - Producing fixture CSVs without shipping exchange data in the repository
"""

import numpy as np
import pandas as pd

from crypto_dashboard.utils.time import timestamp_to_epoch_ms


def generate_gbm_paths(
    initial_price: float,
    drift: float,
    volatility: float,
    n_steps: int,
    dt: float = 1 / 365,
    seed: int | None = None,
) -> pd.Series:
    """
    Generate a price path using Geometric Brownian Motion (GBM).

    **Conceptual**: GBM assumes log returns are normally distributed and
    independent, with constant drift (μ) and volatility (σ). It is the usual
    first-order model for an asset whose price compounds, and it never goes
    negative, which keeps percentage returns well defined.

    **Mathematical**: The discrete update for each step is:
        S_{t+1} = S_t * exp((μ - 0.5 * σ^2) * dt + σ * sqrt(dt) * Z_t)
    where Z_t ~ N(0, 1). The (μ - 0.5 * σ^2) term is the Itô correction.

    **Functionally**:
    - Output: pandas Series of length (n_steps + 1) including the initial
      price, indexed 0..n_steps.
    - dt defaults to 1/365 because crypto markets trade every day.
    - volatility = 0 gives the deterministic path S_0 * exp(μ * t).

    **Edge cases**:
    - n_steps = 0 returns just [initial_price].

    Args:
        initial_price: Starting price (must be positive).
        drift: Annualized drift rate (e.g. 0.50 for 50%).
        volatility: Annualized volatility (e.g. 0.80 for 80%).
        n_steps: Number of steps to simulate.
        dt: Time increment per step in years.
        seed: Seed for a local random generator (None for random).

    Returns:
        pandas Series of prices indexed by step number.
    """
    rng = np.random.default_rng(seed)

    z = rng.standard_normal(n_steps)
    log_steps = (drift - 0.5 * volatility**2) * dt + volatility * np.sqrt(dt) * z

    # Cumulative log growth, with 0 for the initial price
    log_path = np.concatenate([[0.0], np.cumsum(log_steps)])
    prices = initial_price * np.exp(log_path)

    return pd.Series(prices, index=range(n_steps + 1), name='price')


def generate_candles(
    closes: pd.Series,
    market: str,
    start: str | pd.Timestamp = "2022-01-01",
    freq: str = "D",
    spread: float = 0.01,
    base_volume: float = 1_000_000.0,
    seed: int | None = None,
) -> pd.DataFrame:
    """
    Wrap a closing-price path into candle rows in the on-disk CSV layout.

    **Functionally**:
      - open is the previous close (the first open equals the first close).
      - high/low sit a random fraction (up to `spread`) above/below the larger
        and smaller of open and close, so high >= max(open, close) and
        low <= min(open, close) always hold.
      - volume is `base_volume` scaled by a random factor in [0.5, 1.5).
      - time is the candle's start in Unix epoch milliseconds, one candle per
        `freq` starting at `start`.

    Args:
        closes: Closing prices, oldest first.
        market: Market symbol written to every row (e.g. "BTC-EUR").
        start: Timestamp of the first candle.
        freq: pandas frequency string between candles.
        spread: Maximum high/low excursion as a fraction of price.
        base_volume: Typical volume per candle.
        seed: Seed for a local random generator.

    Returns:
        DataFrame with columns market, time, open, high, low, close, volume.
    """
    rng = np.random.default_rng(seed)
    close = pd.Series(closes, dtype=float).to_numpy()
    n = len(close)

    open_ = np.concatenate([close[:1], close[:-1]]) if n else close.copy()
    upper = np.maximum(open_, close)
    lower = np.minimum(open_, close)

    high = upper * (1.0 + rng.uniform(0.0, spread, n))
    low = lower * (1.0 - rng.uniform(0.0, spread, n))
    volume = base_volume * rng.uniform(0.5, 1.5, n)

    timestamps = pd.date_range(start=start, periods=n, freq=freq)

    return pd.DataFrame({
        'market': market,
        'time': timestamp_to_epoch_ms(pd.Series(timestamps)).to_numpy(),
        'open': open_,
        'high': high,
        'low': low,
        'close': close,
        'volume': volume,
    })
