"""Bitcoin price and monthly candle models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Sentiment(str, Enum):
    """Classification produced by the short-term pipeline."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    LOADING = "loading"  # Insufficient data, not an error


class CrossDirection(str, Enum):
    """Direction of a MACD / signal line crossover."""

    UP = "up"
    DOWN = "down"
    NONE = "none"


class RawPricePoint(BaseModel):
    """One daily BTC observation as returned by the chart API."""

    model_config = ConfigDict(frozen=True)

    timestamp: float  # Unix seconds
    price: float


class MonthlyCandle(BaseModel):
    """Last daily point seen within a UTC calendar month."""

    model_config = ConfigDict(frozen=True)

    month_key: str  # "YYYY-MM"
    close: float
    observed_at: datetime


class MacdState(BaseModel):
    """MACD and signal lines, index-aligned with the candle sequence."""

    model_config = ConfigDict(frozen=True)

    macd_line: list[float | None]
    signal_line: list[float | None]

    def diff_at(self, i: int) -> float | None:
        """Get macd - signal at index i, or None if either is absent."""
        macd = self.macd_line[i]
        signal = self.signal_line[i]
        if macd is None or signal is None:
            return None
        return macd - signal


class CrossEvent(BaseModel):
    """The most recent sign change of (macd - signal)."""

    model_config = ConfigDict(frozen=True)

    direction: CrossDirection = CrossDirection.NONE
    at_month_key: str | None = None
    index: int = -1
