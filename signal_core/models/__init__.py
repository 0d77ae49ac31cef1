"""Data models."""

from signal_core.models.market import (
    CrossDirection,
    CrossEvent,
    MacdState,
    MonthlyCandle,
    RawPricePoint,
    Sentiment,
)
from signal_core.models.macro import RawObservation, SignalResult

__all__ = [
    "CrossDirection",
    "CrossEvent",
    "MacdState",
    "MonthlyCandle",
    "RawPricePoint",
    "Sentiment",
    "RawObservation",
    "SignalResult",
]
