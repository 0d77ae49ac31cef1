"""MACD / signal line crossover detection."""

from collections.abc import Sequence

from signal_core.models import CrossDirection, CrossEvent, MacdState, MonthlyCandle


def last_macd_cross(
    state: MacdState,
    candles: Sequence[MonthlyCandle] | None = None,
) -> CrossEvent:
    """Find the chronologically last sign change of (macd - signal).

    - UP: previous diff <= 0 and current diff > 0
    - DOWN: previous diff >= 0 and current diff < 0

    Indices where any of the four required values is absent are skipped.

    Args:
        state: MACD and signal lines
        candles: Candles aligned with the lines, used to label the cross month

    Returns:
        The last CrossEvent, or a NONE event if no cross occurred
    """
    last = CrossEvent()

    for i in range(1, len(state.macd_line)):
        prev_diff = state.diff_at(i - 1)
        curr_diff = state.diff_at(i)
        if prev_diff is None or curr_diff is None:
            continue

        if prev_diff <= 0 and curr_diff > 0:
            direction = CrossDirection.UP
        elif prev_diff >= 0 and curr_diff < 0:
            direction = CrossDirection.DOWN
        else:
            continue

        month_key = None
        if candles is not None and i < len(candles):
            month_key = candles[i].month_key
        last = CrossEvent(direction=direction, at_month_key=month_key, index=i)

    return last
