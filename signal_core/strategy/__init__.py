"""Signal strategies.

- short_term: BTC monthly MACD crossover
- mid_term: M2 year-over-year momentum
"""

from signal_core.strategy.short_term import (
    MIN_MONTHLY_CANDLES,
    classify_short_term,
    compute_short_term_sentiment,
)
from signal_core.strategy.mid_term import (
    DEFAULT_SERIES_ID,
    MIN_YOY_POINTS,
    compute_mid_term_signal,
    compute_yoy,
    parse_monthly_levels,
)

__all__ = [
    "MIN_MONTHLY_CANDLES",
    "classify_short_term",
    "compute_short_term_sentiment",
    "DEFAULT_SERIES_ID",
    "MIN_YOY_POINTS",
    "compute_mid_term_signal",
    "compute_yoy",
    "parse_monthly_levels",
]
