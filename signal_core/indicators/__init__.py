"""Technical indicators (pure math, no I/O)."""

from signal_core.indicators.indicators import (
    MACD_FAST_PERIOD,
    MACD_SIGNAL_PERIOD,
    MACD_SLOW_PERIOD,
    ema,
    macd_series,
)
from signal_core.indicators.crossover import last_macd_cross

__all__ = [
    "MACD_FAST_PERIOD",
    "MACD_SIGNAL_PERIOD",
    "MACD_SLOW_PERIOD",
    "ema",
    "macd_series",
    "last_macd_cross",
]
