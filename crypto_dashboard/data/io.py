"""
CSV readers and writers with schema enforcement.

**Conceptual**: This module is the only I/O boundary for CSV data in the
project. Exchange candle exports come in through `read_candle_csv`, and
indicator series and summary tables go out through the writers below. Keeping
all of it here gives:
  - One timestamp convention (epoch milliseconds on disk for candles,
    "YYYY-MM-DD HH:MM:SS" for exports, naive UTC datetime64 in memory).
  - Validation (via schemas.py) at every read/write.
  - Guaranteed sort order: ascending by timestamp, oldest first.

**Rule**: Do not call pd.read_csv or df.to_csv directly in analytics or action
code. Import these functions instead so the data contracts stay enforceable.
"""

import pandas as pd
from pathlib import Path

from crypto_dashboard.data.schemas import (
    CANDLE_CSV_COLUMNS,
    CANDLE_NUMERIC_COLUMNS,
    SchemaValidationError,
    validate_candle_schema,
    validate_indicator_schema,
)
from crypto_dashboard.utils.time import epoch_ms_to_timestamp, timestamp_to_epoch_ms


TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

_READ_ERRORS = (
    pd.errors.ParserError,
    pd.errors.EmptyDataError,
    UnicodeDecodeError,
)


def _read_csv(path: Path, context: str) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(
            f"CSV not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )
    try:
        return pd.read_csv(path)
    except _READ_ERRORS as e:
        raise SchemaValidationError(
            f"{context}: Failed to read CSV. Error: {e}"
        )


def _write_csv(df: pd.DataFrame, path: Path, context: str, **kwargs) -> None:
    try:
        df.to_csv(path, **kwargs)
    except OSError as e:
        raise OSError(
            f"{context}: Failed to write CSV. Error: {e}"
        ) from e


def read_candle_csv(
    path: Path | str,
    instrument_name: str | None = None,
) -> pd.DataFrame:
    """
    Read an exchange candle CSV and return a validated, time-sorted frame.

    **Functionally**:
      - Reads `market, time, open, high, low, close, volume` (market optional;
        filled from `instrument_name` or the file stem when absent).
      - Coerces OHLCV to float. Unparseable cells become NaN rather than
        failing the whole file, and propagate through the indicators.
      - Derives `timestamp` from the epoch-millisecond `time` column.
      - Sorts ascending by timestamp (exports are not guaranteed to be sorted).
      - Validates the in-memory candle schema.

    Args:
        path: Path to the CSV (e.g. "data/candles/BTC-EUR.csv").
        instrument_name: Optional market symbol for messages and the market column.

    Returns:
        DataFrame with columns market, time, open, high, low, close, volume,
        timestamp; RangeIndex; oldest candle first.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SchemaValidationError: If the CSV is unreadable, lacks columns, has
            non-numeric/missing times, or contains duplicate candles.

    Example:
        >>> df = read_candle_csv("data/candles/BTC-EUR.csv", instrument_name="BTC-EUR")
        >>> df[['timestamp', 'close']].head(2)
                    timestamp     close
        0 2022-01-01 00:00:00  41000.0
        1 2022-01-02 00:00:00  41550.0
    """
    path = Path(path)
    context = instrument_name or str(path)

    df = _read_csv(path, context)

    required = [col for col in CANDLE_CSV_COLUMNS if col != 'market']
    missing_cols = set(required) - set(df.columns)
    if missing_cols:
        raise SchemaValidationError(
            f"{context}: Missing required columns: {sorted(missing_cols)}. "
            f"Expected columns: {CANDLE_CSV_COLUMNS}. "
            f"Found columns: {list(df.columns)}."
        )

    if 'market' not in df.columns:
        df['market'] = instrument_name or path.stem

    for col in CANDLE_NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors='coerce').astype(float)

    try:
        df['timestamp'] = epoch_ms_to_timestamp(df['time']).to_numpy()
    except (TypeError, ValueError) as e:
        raise SchemaValidationError(
            f"{context}: Failed to parse 'time' column as epoch milliseconds. "
            f"Error: {e}"
        )

    df = df.sort_values('timestamp', ascending=True, kind='stable').reset_index(drop=True)
    df = df[CANDLE_CSV_COLUMNS + ['timestamp']]

    validate_candle_schema(df, context=context)

    return df


def write_candle_csv(
    df: pd.DataFrame,
    path: Path | str,
) -> None:
    """
    Write candles in the exchange export layout (epoch-millisecond `time`).

    **Functionally**:
      - Derives `time` from `timestamp` when only the latter is present.
      - Sorts ascending and validates before touching the disk.
      - Writes the columns in `CANDLE_CSV_COLUMNS` order, no index.

    Args:
        df: Candle DataFrame (from `read_candle_csv` or `generate_candles`).
        path: Destination path; parent directories are created.

    Raises:
        SchemaValidationError: If the frame doesn't conform to the candle schema.
        OSError: If the file can't be written.
    """
    path = Path(path)
    context = str(path)

    df_to_write = df.copy()

    if 'timestamp' not in df_to_write.columns and 'time' in df_to_write.columns:
        df_to_write['timestamp'] = epoch_ms_to_timestamp(df_to_write['time']).to_numpy()
    if 'time' not in df_to_write.columns and 'timestamp' in df_to_write.columns:
        df_to_write['time'] = timestamp_to_epoch_ms(df_to_write['timestamp']).to_numpy()
    if 'market' not in df_to_write.columns:
        df_to_write['market'] = path.stem

    if 'timestamp' in df_to_write.columns:
        df_to_write = df_to_write.sort_values('timestamp', ascending=True).reset_index(drop=True)

    validate_candle_schema(df_to_write, context=context)

    path.parent.mkdir(parents=True, exist_ok=True)
    _write_csv(df_to_write, path, context, index=False, columns=CANDLE_CSV_COLUMNS)


def write_indicator_csv(
    df: pd.DataFrame,
    path: Path | str,
) -> None:
    """
    Write an indicator frame (timestamp, close, rsi, sma, ema, returns, ...) to CSV.

    Sorts oldest first, validates, and writes timestamps as
    "YYYY-MM-DD HH:MM:SS". All columns are written; the index is not.

    Raises:
        SchemaValidationError: If timestamp/close are missing or out of order.
        OSError: If the file can't be written.
    """
    path = Path(path)
    context = str(path)

    df_to_write = df.copy()
    if 'timestamp' in df_to_write.columns:
        df_to_write = df_to_write.sort_values('timestamp', ascending=True).reset_index(drop=True)

    validate_indicator_schema(df_to_write, context=context)

    df_to_write['timestamp'] = pd.to_datetime(df_to_write['timestamp']).dt.strftime(TIMESTAMP_FORMAT)

    path.parent.mkdir(parents=True, exist_ok=True)
    _write_csv(df_to_write, path, context, index=False)


def read_indicator_csv(
    path: Path | str,
    instrument_name: str | None = None,
    required_features: list[str] | None = None,
) -> pd.DataFrame:
    """
    Read an indicator export written by `write_indicator_csv`.

    Args:
        path: Path to the CSV.
        instrument_name: Optional market symbol for error context.
        required_features: Extra columns that must be present.

    Returns:
        DataFrame with `timestamp` parsed to datetime64, oldest first.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SchemaValidationError: If the CSV doesn't conform to the indicator schema.
    """
    path = Path(path)
    context = instrument_name or str(path)

    df = _read_csv(path, context)

    if 'timestamp' not in df.columns:
        raise SchemaValidationError(
            f"{context}: 'timestamp' column missing. "
            f"Found columns: {list(df.columns)}."
        )
    try:
        df['timestamp'] = pd.to_datetime(df['timestamp'], format='ISO8601')
    except (TypeError, ValueError) as e:
        raise SchemaValidationError(
            f"{context}: Failed to parse 'timestamp' column as datetime. "
            f"Expected ISO 8601 format. Error: {e}"
        )

    validate_indicator_schema(df, required_features=required_features, context=context)

    return df


def write_table_csv(
    df: pd.DataFrame,
    path: Path | str,
    index: bool = False,
) -> None:
    """
    Write a summary table (correlations, performance, risk/return) to CSV.

    Datetime columns are written as "YYYY-MM-DD HH:MM:SS"; NaN cells are left
    empty. Parent directories are created.

    Raises:
        OSError: If the file can't be written.
    """
    path = Path(path)
    df_to_write = df.copy()

    for col in df_to_write.columns:
        if pd.api.types.is_datetime64_any_dtype(df_to_write[col]):
            df_to_write[col] = df_to_write[col].dt.strftime(TIMESTAMP_FORMAT)

    path.parent.mkdir(parents=True, exist_ok=True)
    _write_csv(df_to_write, path, str(path), index=index)
