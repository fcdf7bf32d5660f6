"""
Canonical schemas and validation for candle and indicator data.

**Conceptual**: This module defines the data contracts for every CSV the
dashboard reads or writes: exported exchange candles (one file per market) and
indicator exports derived from them. Validating at the I/O boundary means the
indicator engine and table builders can assume well-formed, time-sorted input.

**Schema philosophy**:
  - Candle files carry `time` as Unix epoch milliseconds; in memory every frame
    also has a parsed `timestamp` column (naive datetime64, UTC).
  - In-memory frames are sorted in strictly ascending order (oldest first),
    the order the indicator recurrences require.
  - Validation raises SchemaValidationError with actionable messages.
"""

import pandas as pd


class SchemaValidationError(Exception):
    """
    Raised when a DataFrame does not conform to the expected schema.

    The message always starts with the data source (file path or market symbol)
    so a failure while loading several markets points at the broken file.
    """
    pass


# Columns of an exported candle CSV, in on-disk order
CANDLE_CSV_COLUMNS = [
    'market',
    'time',
    'open',
    'high',
    'low',
    'close',
    'volume',
]

# Columns required of an in-memory candle frame
CANDLE_REQUIRED_COLUMNS = [
    'timestamp',
    'open',
    'high',
    'low',
    'close',
    'volume',
]

CANDLE_NUMERIC_COLUMNS = ['open', 'high', 'low', 'close', 'volume']

# Indicator export minimal required columns
INDICATOR_REQUIRED_COLUMNS = [
    'timestamp',
    'close',
]


def _check_ascending_timestamps(timestamp_col: pd.Series, ctx: str) -> None:
    """Raise unless timestamps are parseable and strictly ascending."""
    if not pd.api.types.is_datetime64_any_dtype(timestamp_col):
        try:
            timestamp_col = pd.to_datetime(timestamp_col, format='ISO8601')
        except (TypeError, ValueError) as e:
            raise SchemaValidationError(
                f"{ctx}'timestamp' column contains non-parseable values. "
                f"Expected datetimes or ISO 8601 strings. Error: {e}"
            )

    if timestamp_col.isna().any():
        bad_indices = timestamp_col[timestamp_col.isna()].index.tolist()
        raise SchemaValidationError(
            f"{ctx}'timestamp' column has missing values at row indices: "
            f"{bad_indices[:5]} (showing first 5)."
        )

    # diffs[i] = ts[i] - ts[i-1]; all must be positive after the leading NaT
    if len(timestamp_col) > 1:
        diffs_valid = timestamp_col.diff().iloc[1:]
        if not (diffs_valid > pd.Timedelta(0)).all():
            bad_indices = diffs_valid[diffs_valid <= pd.Timedelta(0)].index.tolist()
            raise SchemaValidationError(
                f"{ctx}Timestamps are not in strictly ascending order. "
                f"Violations found at row indices: {bad_indices[:5]} (showing first 5). "
                f"Hint: sort by timestamp (oldest first) and drop duplicate candles."
            )


def validate_candle_schema(
    df: pd.DataFrame,
    context: str | None = None,
) -> None:
    """
    Validate that a DataFrame conforms to the in-memory candle schema.

    **Functionally**:
      - Checks that timestamp and OHLCV columns are present.
      - Verifies that `timestamp` is datetime (or parseable as such) with no gaps.
      - Enforces strictly ascending order (no duplicate candles).

    OHLCV values themselves are not range-checked: a non-numeric cell is NaN by
    the time it gets here and propagates through the indicators as NaN.

    Args:
        df: DataFrame to validate (normally from `read_candle_csv`).
        context: Optional source description (path or market) for messages.

    Raises:
        SchemaValidationError: On missing columns, bad timestamps, or order.
    """
    ctx = f"{context}: " if context else ""

    missing_cols = set(CANDLE_REQUIRED_COLUMNS) - set(df.columns)
    if missing_cols:
        raise SchemaValidationError(
            f"{ctx}Missing required columns: {sorted(missing_cols)}. "
            f"Expected columns: {CANDLE_REQUIRED_COLUMNS}. "
            f"Found columns: {list(df.columns)}."
        )

    _check_ascending_timestamps(df['timestamp'], ctx)


def validate_indicator_schema(
    df: pd.DataFrame,
    required_features: list[str] | None = None,
    context: str | None = None,
) -> None:
    """
    Validate an indicator export (timestamp + close + derived columns).

    Args:
        df: DataFrame to validate.
        required_features: Extra columns that must be present, e.g.
                           ['rsi', 'sma', 'ema', 'returns'].
        context: Optional source description for messages.

    Raises:
        SchemaValidationError: If schema validation fails.
    """
    ctx = f"{context}: " if context else ""

    required_cols = INDICATOR_REQUIRED_COLUMNS.copy()
    if required_features:
        required_cols.extend(required_features)

    missing_cols = set(required_cols) - set(df.columns)
    if missing_cols:
        raise SchemaValidationError(
            f"{ctx}Missing required columns: {sorted(missing_cols)}. "
            f"Expected at minimum: {INDICATOR_REQUIRED_COLUMNS}. "
            f"Additional required features: {required_features or []}. "
            f"Found columns: {list(df.columns)}."
        )

    _check_ascending_timestamps(df['timestamp'], ctx)
