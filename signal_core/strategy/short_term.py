"""Short-term BTC sentiment from a monthly MACD crossover.

Pipeline:
- Daily prices -> monthly candles (last close per UTC month)
- EMA(12) / EMA(26) -> MACD line -> EMA(9) signal line
- Last MACD / signal crossover -> bullish / bearish
- No crossover: sign of the final (macd - signal) decides
- Nothing to decide on: loading (insufficient data, not an error)

This module is pure business logic with no I/O dependencies.
"""

import logging
from collections.abc import Iterable

from signal_core.aggregation import resample_to_month_end_closes
from signal_core.errors import AppError, ErrorCode
from signal_core.indicators import last_macd_cross, macd_series
from signal_core.models import (
    CrossDirection,
    CrossEvent,
    MacdState,
    RawPricePoint,
    Sentiment,
)

logger = logging.getLogger(__name__)

MIN_MONTHLY_CANDLES = 40


def classify_short_term(state: MacdState, cross: CrossEvent) -> Sentiment:
    """Map the last crossover (or the final MACD spread) to a sentiment."""
    if cross.direction == CrossDirection.DOWN:
        return Sentiment.BEARISH
    if cross.direction == CrossDirection.UP:
        return Sentiment.BULLISH

    if not state.macd_line:
        return Sentiment.LOADING
    final_diff = state.diff_at(len(state.macd_line) - 1)
    if final_diff is None:
        return Sentiment.LOADING
    return Sentiment.BULLISH if final_diff >= 0 else Sentiment.BEARISH


def compute_short_term_sentiment(points: Iterable[RawPricePoint]) -> Sentiment:
    """Compute the short-term sentiment from daily price points.

    Raises:
        AppError: NOT_ENOUGH_DATA if fewer than 40 monthly candles exist
    """
    candles = resample_to_month_end_closes(points)

    if len(candles) < MIN_MONTHLY_CANDLES:
        raise AppError(
            status=422,
            code=ErrorCode.NOT_ENOUGH_DATA,
            message="Not enough monthly points.",
            details={"months": len(candles)},
        )

    state = macd_series([c.close for c in candles])
    cross = last_macd_cross(state, candles)
    logger.info(
        f"Last MACD cross detected: {cross.direction.value} "
        f"at {cross.at_month_key} (index {cross.index})"
    )

    return classify_short_term(state, cross)
