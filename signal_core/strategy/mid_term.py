"""Mid-term liquidity signal from M2 year-over-year growth.

Rule: compare the latest YoY % against the YoY % roughly three months
earlier. A rising YoY (delta > 0) is bullish; flat or falling is bearish.

This module is pure business logic with no I/O dependencies.
"""

import logging
import math
from collections.abc import Iterable

from signal_core.errors import AppError, ErrorCode
from signal_core.models import RawObservation, Sentiment, SignalResult
from signal_core.months import add_months, find_month_at_or_before, month_key_from_date

logger = logging.getLogger(__name__)

DEFAULT_SERIES_ID = "M2SL"
MIN_YOY_POINTS = 6
PRIOR_OFFSET_MONTHS = 3
PRIOR_SEARCH_STEPS = 12


def parse_monthly_levels(observations: Iterable[RawObservation]) -> dict[str, float]:
    """Build a month -> level map from raw observations.

    Missing readings ("." or empty) and unparseable values are dropped.
    A later observation for the same month overwrites an earlier one, in
    input order.
    """
    levels: dict[str, float] = {}
    for obs in observations:
        if not obs.date or obs.is_missing:
            continue
        try:
            value = float(obs.value.strip())
        except ValueError:
            continue
        if not math.isfinite(value):
            continue
        levels[month_key_from_date(obs.date)] = value
    return levels


def compute_yoy(levels: dict[str, float]) -> dict[str, float]:
    """Compute YoY % change for months with a nonzero level 12 months earlier."""
    yoy: dict[str, float] = {}
    for month in sorted(levels):
        base = levels.get(add_months(month, -12))
        if base is None or base == 0:
            continue
        yoy[month] = (levels[month] / base - 1) * 100
    return yoy


def compute_mid_term_signal(
    observations: Iterable[RawObservation],
    series_id: str = DEFAULT_SERIES_ID,
) -> SignalResult:
    """Compute the mid-term signal from raw observations.

    Raises:
        AppError: TOO_FEW_YOY_POINTS or PRIOR_MONTH_NOT_FOUND
    """
    levels = parse_monthly_levels(observations)
    yoy = compute_yoy(levels)
    yoy_months = sorted(yoy)

    if len(yoy_months) < MIN_YOY_POINTS:
        raise AppError(
            status=422,
            code=ErrorCode.TOO_FEW_YOY_POINTS,
            message="Too few YoY points (need >= 12 months of levels).",
            details={"yoy_points": len(yoy_months), "levels": len(levels)},
        )

    latest_month = yoy_months[-1]
    target_month = add_months(latest_month, -PRIOR_OFFSET_MONTHS)
    prior_month = find_month_at_or_before(
        yoy_months, target_month, max_steps=PRIOR_SEARCH_STEPS
    )
    if prior_month is None:
        raise AppError(
            status=422,
            code=ErrorCode.PRIOR_MONTH_NOT_FOUND,
            message="Could not find prior month near 3 months ago.",
            details={"latest": latest_month, "target": target_month},
        )

    latest_yoy = yoy[latest_month]
    prior_yoy = yoy[prior_month]
    delta = latest_yoy - prior_yoy

    result = SignalResult(
        signal=Sentiment.BULLISH if delta > 0 else Sentiment.BEARISH,
        latest_month_key=latest_month,
        latest_yoy=latest_yoy,
        prior_month_key=prior_month,
        prior_yoy=prior_yoy,
        delta_value=delta,
        meta=f"series_id={series_id} | rule: latest > prior",
    )
    logger.info(
        f"latest={latest_month} yoy={latest_yoy:.2f} "
        f"prior={prior_month} yoy={prior_yoy:.2f} delta={delta:.2f}"
    )
    return result
