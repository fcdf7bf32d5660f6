"""
Technical indicators, correlation tables, and performance/risk summaries.

Includes the indicator engine (RSI, SMA, EMA, returns, Pearson correlation)
and the table builders that turn per-market candle histories into the
figures shown on the dashboard.
"""
