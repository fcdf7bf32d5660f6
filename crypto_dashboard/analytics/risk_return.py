"""
Risk/return figures per instrument for the portfolio bubble chart.

**Conceptual**: Each market is placed on a risk (x) versus expected return (y)
plane, labelled with a Sharpe ratio and a simple technical signal. Markets up
and to the left offer more return per unit of volatility.

**Conventions**:
  - Inputs are percentage returns from `compute_returns` (10.0 means +10%).
    Its leading 0 is a placeholder, not an observed return, and is dropped.
  - Crypto trades every day, so annualization defaults to 365 periods.
  - Undefined ratios are NaN, never an exception.
"""

import numpy as np
import pandas as pd

from crypto_dashboard.analytics.indicators import (
    DEFAULT_RSI_PERIOD,
    compute_returns,
    compute_rsi,
)


DEFAULT_PERIODS_PER_YEAR = 365

RISK_RETURN_TABLE_COLUMNS = [
    "instrument",
    "expected_return",
    "risk",
    "sharpe_ratio",
    "technical_score",
    "technical_signal",
    "latest_price",
]


def _observed_returns(returns_pct: pd.Series) -> pd.Series:
    """Drop the leading placeholder return and any NaNs."""
    returns_pct = pd.Series(returns_pct, dtype=float)
    return returns_pct.iloc[1:].dropna()


def compute_expected_return(
    returns_pct: pd.Series,
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
) -> float:
    """
    Annualize the mean per-period return.

    **Mathematical**:
        E[R]_annual = mean(r_t) * periods_per_year

    Simple scaling (no compounding), matching how the chart reads: a market
    averaging +0.2% a day shows roughly +73% a year.

    **Edge cases**:
      - No observed returns (fewer than two prices): NaN.

    Args:
        returns_pct: Output of `compute_returns` (percent, leading 0 included).
        periods_per_year: Periods per year (365 for daily crypto candles).

    Returns:
        Annualized expected return in percent.
    """
    observed = _observed_returns(returns_pct)
    if observed.empty:
        return float("nan")
    return float(observed.mean() * periods_per_year)


def compute_risk(
    returns_pct: pd.Series,
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
) -> float:
    """
    Annualized volatility of per-period returns, in percent.

    **Mathematical**:
        σ_annual = std(r_t, ddof=1) * sqrt(periods_per_year)

    Sample standard deviation (Bessel's correction), as in the correlation
    engine. Fewer than two observed returns yields NaN.
    """
    observed = _observed_returns(returns_pct)
    if len(observed) < 2:
        return float("nan")
    return float(observed.std(ddof=1) * np.sqrt(periods_per_year))


def compute_sharpe_ratio(
    expected_return: float,
    risk: float,
    risk_free_rate: float = 0.0,
) -> float:
    """
    Excess return per unit of risk.

    **Mathematical**:
        Sharpe = (E[R]_annual - r_f) / σ_annual
    where r_f is given as a decimal (0.03 for 3%) and converted to percent to
    match the other two inputs.

    Zero or NaN risk gives NaN (undefined, e.g. a constant price).
    """
    if pd.isna(risk) or risk == 0:
        return float("nan")
    return float((expected_return - risk_free_rate * 100.0) / risk)


def technical_signal(score: float) -> str:
    """
    Map a 0..100 technical score to a signal label.

    >= 70 'Strong Buy', >= 60 'Buy', >= 50 'Hold', otherwise (including NaN) 'Sell'.
    """
    if score >= 70:
        return "Strong Buy"
    if score >= 60:
        return "Buy"
    if score >= 50:
        return "Hold"
    return "Sell"


def build_risk_return_table(
    universe: dict[str, pd.DataFrame],
    rsi_period: int = DEFAULT_RSI_PERIOD,
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
    risk_free_rate: float = 0.0,
    price_column: str = "close",
) -> pd.DataFrame:
    """
    Build one risk/return row per instrument.

    **Functionally**:
      - Returns come from `compute_returns`; the technical score is the latest
        defined RSI from `compute_rsi`.
      - Instruments with no candles are skipped.
      - Rows are sorted by expected return, highest first.

    Args:
        universe: Mapping of market symbol to candle DataFrame (oldest first).
        rsi_period: RSI block size for the technical score.
        periods_per_year: Annualization factor.
        risk_free_rate: Annual risk-free rate as a decimal.
        price_column: Column holding closing prices.

    Returns:
        DataFrame with the columns listed in `RISK_RETURN_TABLE_COLUMNS`.
    """
    rows = []
    for symbol, candles in universe.items():
        if candles.empty:
            continue

        closes = candles[price_column]
        returns_pct = compute_returns(closes)
        expected_return = compute_expected_return(returns_pct, periods_per_year)
        risk = compute_risk(returns_pct, periods_per_year)
        # Latest defined RSI; the final bar can fall in a block with no changes yet
        rsi = compute_rsi(closes, period=rsi_period).dropna()
        score = float(rsi.iloc[-1]) if not rsi.empty else float("nan")

        rows.append({
            "instrument": symbol,
            "expected_return": expected_return,
            "risk": risk,
            "sharpe_ratio": compute_sharpe_ratio(expected_return, risk, risk_free_rate),
            "technical_score": score,
            "technical_signal": technical_signal(score),
            "latest_price": float(closes.iloc[-1]),
        })

    table = pd.DataFrame(rows, columns=RISK_RETURN_TABLE_COLUMNS)
    return table.sort_values("expected_return", ascending=False, kind="stable").reset_index(drop=True)
