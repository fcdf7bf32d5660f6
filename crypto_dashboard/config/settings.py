"""
Configuration settings for the dashboard analytics.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (optionally via a .env file at the project
root). Everything is validated when settings are built, so a typo such as
DASHBOARD_RSI_PERIOD=fourteen fails at startup with a clear message instead of
surfacing as odd numbers in a chart.

**Why centralized config?**
  - Single source of truth for paths, markets and indicator periods.
  - Easy to test (construct Settings directly instead of reading the environment).
  - Fail-fast validation.

All variables share the DASHBOARD_ prefix:
  - DASHBOARD_CANDLES_DIR        directory of <MARKET>.csv candle exports
  - DASHBOARD_INSTRUMENTS        comma-separated market symbols
  - DASHBOARD_RSI_PERIOD / DASHBOARD_SMA_PERIOD / DASHBOARD_EMA_PERIOD
  - DASHBOARD_PERIODS_PER_YEAR   annualization factor (365 for daily crypto)
  - DASHBOARD_RISK_FREE_RATE     annual rate as a decimal (0.03 = 3%)
  - DASHBOARD_LOG_LEVEL          logging level name for action scripts
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Load .env from project root; real environment variables take precedence
load_dotenv(dotenv_path=PROJECT_ROOT / ".env")

DEFAULT_CANDLES_DIR = PROJECT_ROOT / "data" / "candles"
DEFAULT_INSTRUMENTS = ("BTC-EUR", "ETH-EUR", "ADA-EUR", "XRP-EUR", "LTC-EUR")

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got: {raw}")


@dataclass(frozen=True)
class IndicatorSettings:
    """
    Lookback periods for the indicator engine.

    Attributes:
        rsi_period: RSI block size in candles (default 14).
        sma_period: SMA window in candles (default 20).
        ema_period: EMA period, sets the multiplier 2 / (period + 1) (default 20).
    """
    rsi_period: int = 14
    sma_period: int = 20
    ema_period: int = 20

    def __post_init__(self):
        """Validate periods after initialization."""
        for name in ("rsi_period", "sma_period", "ema_period"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(
                    f"{name} must be a positive integer, got: {value}"
                )

    @classmethod
    def from_env(cls) -> "IndicatorSettings":
        """
        Load indicator periods from DASHBOARD_RSI_PERIOD, DASHBOARD_SMA_PERIOD
        and DASHBOARD_EMA_PERIOD, falling back to 14/20/20.

        Raises:
            ValueError: If a value is not a positive integer.
        """
        return cls(
            rsi_period=_int_from_env("DASHBOARD_RSI_PERIOD", 14),
            sma_period=_int_from_env("DASHBOARD_SMA_PERIOD", 20),
            ema_period=_int_from_env("DASHBOARD_EMA_PERIOD", 20),
        )


@dataclass(frozen=True)
class Settings:
    """
    Global settings for the dashboard analytics.

    **Usage pattern**:
      ```python
      from crypto_dashboard.config.settings import get_settings

      settings = get_settings()
      universe = load_universe(settings.instruments, settings.candles_dir)
      ```

    Attributes:
        candles_dir: Directory holding one <MARKET>.csv candle export per market.
        instruments: Market symbols loaded by default, in display order.
        indicators: Indicator lookback periods.
        periods_per_year: Annualization factor for risk/return (365: crypto
                          trades every day).
        risk_free_rate: Annual risk-free rate as a decimal, for Sharpe ratios.
        log_level: Logging level name used by action scripts.
    """
    candles_dir: Path = DEFAULT_CANDLES_DIR
    instruments: tuple[str, ...] = DEFAULT_INSTRUMENTS
    indicators: IndicatorSettings = field(default_factory=IndicatorSettings)
    periods_per_year: int = 365
    risk_free_rate: float = 0.0
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.instruments:
            raise ValueError(
                "DASHBOARD_INSTRUMENTS must list at least one market symbol."
            )
        if self.periods_per_year < 1:
            raise ValueError(
                f"DASHBOARD_PERIODS_PER_YEAR must be positive, got: {self.periods_per_year}"
            )
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"DASHBOARD_LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, "
                f"got: {self.log_level}"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables (and .env, if present).

        Unset variables fall back to the dataclass defaults. A relative
        DASHBOARD_CANDLES_DIR is resolved against the project root, so scripts
        behave the same from any working directory.

        Returns:
            Validated Settings object.

        Raises:
            ValueError: If any variable is malformed or out of range.

        Usage example:
            >>> # In .env file:
            >>> # DASHBOARD_CANDLES_DIR=data/candles
            >>> # DASHBOARD_INSTRUMENTS=BTC-EUR,ETH-EUR
            >>>
            >>> settings = Settings.from_env()
            >>> settings.instruments
            ('BTC-EUR', 'ETH-EUR')
        """
        candles_dir = Path(os.getenv("DASHBOARD_CANDLES_DIR", str(DEFAULT_CANDLES_DIR)))
        if not candles_dir.is_absolute():
            candles_dir = PROJECT_ROOT / candles_dir

        instruments_raw = os.getenv("DASHBOARD_INSTRUMENTS", ",".join(DEFAULT_INSTRUMENTS))
        instruments = tuple(
            symbol.strip() for symbol in instruments_raw.split(",") if symbol.strip()
        )

        return cls(
            candles_dir=candles_dir,
            instruments=instruments,
            indicators=IndicatorSettings.from_env(),
            periods_per_year=_int_from_env("DASHBOARD_PERIODS_PER_YEAR", 365),
            risk_free_rate=_float_from_env("DASHBOARD_RISK_FREE_RATE", 0.0),
            log_level=os.getenv("DASHBOARD_LOG_LEVEL", "INFO").upper(),
        )


# Lazily-loaded singleton; tests construct Settings directly or call reset_settings()
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton, loading it from the environment on first use.

    Returns:
        Global Settings object.

    Raises:
        ValueError: If the environment holds invalid values.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """
    Clear the cached settings so the next get_settings() re-reads the environment.

    **Testing pattern**:
      ```python
      def test_something(monkeypatch):
          monkeypatch.setenv("DASHBOARD_RSI_PERIOD", "7")
          reset_settings()
          assert get_settings().indicators.rsi_period == 7
      ```
    """
    global _default_settings
    _default_settings = None
