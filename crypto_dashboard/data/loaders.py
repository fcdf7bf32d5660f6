"""
Market-level convenience loaders for candle data.

**Conceptual**: Thin wrappers around io.py that resolve the standard path of
a market's candle export (<candles_dir>/<MARKET>.csv) so analytics and action
code never hardcode paths. The candles directory comes from settings unless a
caller passes one explicitly (tests do).

**Failure policy**: Loading a universe is per-market. A missing or malformed
file for one market is logged and skipped; the others still load and the
dashboard renders what it has.
"""

import logging
from pathlib import Path

import pandas as pd

from crypto_dashboard.config.settings import get_settings
from crypto_dashboard.data.io import read_candle_csv
from crypto_dashboard.data.schemas import SchemaValidationError


logger = logging.getLogger(__name__)


def _resolve_candles_dir(candles_dir: Path | str | None) -> Path:
    if candles_dir is not None:
        return Path(candles_dir)
    return get_settings().candles_dir


def instrument_csv_path(symbol: str, candles_dir: Path | str | None = None) -> Path:
    """Return the expected candle CSV path for a market symbol."""
    return _resolve_candles_dir(candles_dir) / f"{symbol}.csv"


def load_instrument_history(
    symbol: str,
    candles_dir: Path | str | None = None,
) -> pd.DataFrame:
    """
    Load the candle history for one market.

    Args:
        symbol: Market symbol, e.g. "BTC-EUR". Case-sensitive; must match the
                CSV filename.
        candles_dir: Directory of candle CSVs. Defaults to settings.candles_dir.

    Returns:
        Candle DataFrame, oldest first (see `read_candle_csv`).

    Raises:
        FileNotFoundError: If the market's CSV doesn't exist.
        SchemaValidationError: If the CSV doesn't conform to the candle schema.
    """
    csv_path = instrument_csv_path(symbol, candles_dir)
    return read_candle_csv(csv_path, instrument_name=symbol)


def load_universe(
    symbols: list[str] | tuple[str, ...] | None = None,
    candles_dir: Path | str | None = None,
) -> dict[str, pd.DataFrame]:
    """
    Load candle histories for several markets, skipping any that fail.

    **Functionally**:
      - Defaults to settings.instruments when `symbols` is None.
      - Missing files and schema violations are logged at WARNING and the market
        is left out of the result; other errors propagate.
      - Result order follows `symbols`.

    Args:
        symbols: Market symbols to load.
        candles_dir: Directory of candle CSVs. Defaults to settings.candles_dir.

    Returns:
        Dict mapping symbol to candle DataFrame. Failed markets are absent
        (no entry, not an empty frame).

    Example:
        >>> universe = load_universe(["BTC-EUR", "ETH-EUR"])
        >>> list(universe)
        ['BTC-EUR', 'ETH-EUR']
    """
    if symbols is None:
        symbols = get_settings().instruments

    universe = {}
    for symbol in symbols:
        try:
            universe[symbol] = load_instrument_history(symbol, candles_dir=candles_dir)
        except FileNotFoundError as e:
            logger.warning("Skipping %s: %s", symbol, e)
        except SchemaValidationError as e:
            logger.warning("Skipping %s: invalid candle data: %s", symbol, e)

    logger.info("Loaded %d of %d markets", len(universe), len(symbols))
    return universe
