"""Upstream data clients."""

from dashboard.clients.http import DEFAULT_TIMEOUT_MS, CancelToken, fetch_json
from dashboard.clients.btc import BlockchainChartClient, parse_chart_payload
from dashboard.clients.fred import (
    FRED_DIRECT_URL,
    LOCAL_RELAY_URL,
    FredClient,
    build_fred_url,
    default_relay_url,
    is_local_origin_relay,
)

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "CancelToken",
    "fetch_json",
    "BlockchainChartClient",
    "parse_chart_payload",
    "FRED_DIRECT_URL",
    "LOCAL_RELAY_URL",
    "FredClient",
    "build_fred_url",
    "default_relay_url",
    "is_local_origin_relay",
]
