"""Moving-average indicators for the short-term signal.

Series are plain lists where ``None`` marks an absent value. Non-finite
floats (NaN, inf) are treated the same as ``None`` on input.
"""

from collections.abc import Sequence

import numpy as np

from signal_core.models import MacdState

MACD_FAST_PERIOD = 12
MACD_SLOW_PERIOD = 26
MACD_SIGNAL_PERIOD = 9


def _to_array(values: Sequence[float | None]) -> np.ndarray:
    return np.array(
        [np.nan if v is None else float(v) for v in values],
        dtype=np.float64,
    )


def _first_full_window(present: np.ndarray, period: int) -> int:
    """Index ending the first run of `period` consecutive present values, or -1."""
    if len(present) < period:
        return -1
    counts = np.convolve(
        present.astype(np.int64), np.ones(period, dtype=np.int64), mode="valid"
    )
    full = np.flatnonzero(counts == period)
    if full.size == 0:
        return -1
    return int(full[0]) + period - 1


def ema(values: Sequence[float | None], period: int) -> list[float | None]:
    """Calculate an exponential moving average over a gappy series.

    The filter is seeded with the mean of the first window of `period`
    consecutive present values, placed at the window's last index. After
    that, absent inputs produce absent outputs and are skipped: the last
    EMA value carries forward to the next present input.

    Args:
        values: Input series, None for absent values
        period: EMA period (k = 2 / (period + 1))

    Returns:
        EMA series of the same length as values
    """
    out: list[float | None] = [None] * len(values)
    if period <= 0 or not values:
        return out

    arr = _to_array(values)
    present = np.isfinite(arr)

    start = _first_full_window(present, period)
    if start == -1:
        return out

    k = 2.0 / (period + 1)
    prev = float(np.sum(arr[start - period + 1 : start + 1]) / period)
    out[start] = prev

    for i in range(start + 1, len(arr)):
        if not present[i]:
            continue
        prev = (float(arr[i]) - prev) * k + prev
        out[i] = prev

    return out


def macd_series(
    closes: Sequence[float | None],
    fast_period: int = MACD_FAST_PERIOD,
    slow_period: int = MACD_SLOW_PERIOD,
    signal_period: int = MACD_SIGNAL_PERIOD,
) -> MacdState:
    """Calculate MACD line (fast EMA - slow EMA) and its signal line."""
    ema_fast = ema(closes, fast_period)
    ema_slow = ema(closes, slow_period)

    macd_line: list[float | None] = [
        None if f is None or s is None else f - s
        for f, s in zip(ema_fast, ema_slow)
    ]
    signal_line = ema(macd_line, signal_period)

    return MacdState(macd_line=macd_line, signal_line=signal_line)
