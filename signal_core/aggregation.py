"""Monthly resampling of daily BTC prices.

Aggregation rule:
- Each point is bucketed by its UTC calendar month ("YYYY-MM")
- The point with the latest timestamp in a month becomes its close
- Points with a non-finite price or an unrepresentable timestamp are
  dropped before bucketing
"""

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timezone

from signal_core.models import MonthlyCandle, RawPricePoint
from signal_core.months import month_key_utc

logger = logging.getLogger(__name__)


def resample_to_month_end_closes(points: Iterable[RawPricePoint]) -> list[MonthlyCandle]:
    """Resample daily points into one candle per calendar month.

    Args:
        points: Daily observations in any order

    Returns:
        Monthly candles sorted ascending by observation time
    """
    latest_by_month: dict[str, MonthlyCandle] = {}

    for point in points:
        if not (math.isfinite(point.price) and math.isfinite(point.timestamp)):
            continue

        try:
            observed_at = datetime.fromtimestamp(point.timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            continue
        key = month_key_utc(observed_at)

        existing = latest_by_month.get(key)
        # Equal timestamps: last seen wins
        if existing is None or observed_at >= existing.observed_at:
            latest_by_month[key] = MonthlyCandle(
                month_key=key,
                close=point.price,
                observed_at=observed_at,
            )

    candles = sorted(latest_by_month.values(), key=lambda c: c.observed_at)
    logger.info(f"Resampled to {len(candles)} monthly candles")
    return candles
