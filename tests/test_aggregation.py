"""Tests for monthly resampling."""

import math
from datetime import datetime, timezone

from signal_core.aggregation import resample_to_month_end_closes
from signal_core.models import RawPricePoint


def make_point(year: int, month: int, day: int, price: float, hour: int = 0) -> RawPricePoint:
    """Helper to create a daily point."""
    ts = datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp()
    return RawPricePoint(timestamp=ts, price=price)


class TestResample:
    """Tests for resample_to_month_end_closes."""

    def test_later_timestamp_wins(self):
        """Only the later point of a month is kept, whatever the input order."""
        points = [
            make_point(2024, 1, 20, 200.0),
            make_point(2024, 1, 10, 100.0),
        ]
        candles = resample_to_month_end_closes(points)

        assert len(candles) == 1
        assert candles[0].month_key == "2024-01"
        assert candles[0].close == 200.0
        assert candles[0].observed_at == datetime(2024, 1, 20, tzinfo=timezone.utc)

    def test_equal_timestamps_last_seen_wins(self):
        points = [
            make_point(2024, 1, 20, 1.0),
            make_point(2024, 1, 20, 2.0),
        ]
        assert resample_to_month_end_closes(points)[0].close == 2.0

    def test_sorted_ascending(self):
        points = [
            make_point(2024, 3, 1, 3.0),
            make_point(2023, 12, 31, 1.0),
            make_point(2024, 1, 15, 2.0),
        ]
        candles = resample_to_month_end_closes(points)

        assert [c.month_key for c in candles] == ["2023-12", "2024-01", "2024-03"]

    def test_utc_month_boundary(self):
        points = [
            make_point(2024, 1, 31, 1.0, hour=23),
            make_point(2024, 2, 1, 2.0, hour=0),
        ]
        candles = resample_to_month_end_closes(points)

        assert [c.month_key for c in candles] == ["2024-01", "2024-02"]

    def test_non_finite_prices_dropped(self):
        """A NaN price must not replace an earlier valid close."""
        points = [
            make_point(2024, 1, 10, 100.0),
            make_point(2024, 1, 20, math.nan),
            make_point(2024, 2, 5, math.inf),
        ]
        candles = resample_to_month_end_closes(points)

        assert len(candles) == 1
        assert candles[0].close == 100.0

    def test_empty_input(self):
        assert resample_to_month_end_closes([]) == []

    def test_out_of_range_timestamp_dropped(self):
        points = [
            make_point(2024, 1, 10, 100.0),
            RawPricePoint(timestamp=1e20, price=5.0),
        ]
        candles = resample_to_month_end_closes(points)

        assert [c.month_key for c in candles] == ["2024-01"]
