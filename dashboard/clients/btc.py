"""Blockchain.info chart API client for daily BTC market prices."""

import logging
import math
from datetime import datetime, timezone
from typing import Any

import httpx

from dashboard.clients.http import DEFAULT_TIMEOUT_MS, CancelToken, fetch_json
from signal_core.errors import AppError, ErrorCode
from signal_core.models import RawPricePoint

logger = logging.getLogger(__name__)

MIN_CHART_POINTS = 60


def _to_number(value: Any) -> float:
    """Parse a number leniently; unparseable values become NaN."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return math.nan


def _is_valid_timestamp(value: float) -> bool:
    """Finite and representable as a UTC datetime."""
    if not math.isfinite(value):
        return False
    try:
        datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return False
    return True


def parse_chart_payload(payload: Any, url: str) -> list[RawPricePoint]:
    """Validate a chart payload and convert its values to price points.

    Expected shape: {"status": "ok", "values": [{"x": secs, "y": price}, ...]}
    with at least 60 values.

    Raises:
        AppError: BAD_UPSTREAM_SHAPE if the payload does not match
    """
    values = payload.get("values") if isinstance(payload, dict) else None
    if (
        not isinstance(payload, dict)
        or payload.get("status") != "ok"
        or not isinstance(values, list)
        or len(values) < MIN_CHART_POINTS
    ):
        raise AppError(
            status=502,
            code=ErrorCode.BAD_UPSTREAM_SHAPE,
            message="Upstream data shape unexpected.",
            details={"url": url},
        )

    points = []
    for item in values:
        if not isinstance(item, dict):
            continue
        timestamp = _to_number(item.get("x"))
        if not _is_valid_timestamp(timestamp):
            continue
        points.append(RawPricePoint(timestamp=timestamp, price=_to_number(item.get("y"))))
    return points


class BlockchainChartClient:
    """Client for the daily market-price chart (direct or through the relay)."""

    BASE_URL = "https://api.blockchain.info/charts/market-price"

    def __init__(
        self,
        base_url: str | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url or self.BASE_URL
        self.timeout_ms = timeout_ms
        self._client = client

    async def get_market_price_daily(
        self,
        timespan: str = "10years",
        sampled: bool = False,
        cancel_token: CancelToken | None = None,
    ) -> list[RawPricePoint]:
        """Fetch daily BTC prices.

        Args:
            timespan: Chart timespan (e.g., "10years")
            sampled: Let the API downsample the series
            cancel_token: Cancels the in-flight request when fired

        Returns:
            Price points in upstream order
        """
        url = str(
            httpx.URL(self.base_url).copy_merge_params(
                {
                    "timespan": timespan,
                    "format": "json",
                    "sampled": "true" if sampled else "false",
                    "cors": "true",
                }
            )
        )
        logger.info(f"Fetching data from: {url}")

        payload = await fetch_json(
            url,
            timeout_ms=self.timeout_ms,
            cancel_token=cancel_token,
            client=self._client,
        )
        points = parse_chart_payload(payload, url)
        logger.info(f"Data fetch successful. Data points: {len(points)}")
        return points
