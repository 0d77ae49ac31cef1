"""FRED series observations client (through the relay or direct)."""

import logging
from typing import Any
from urllib.parse import urljoin, urlsplit

import httpx

from dashboard.clients.http import DEFAULT_TIMEOUT_MS, CancelToken, fetch_json
from signal_core.errors import AppError, ErrorCode
from signal_core.models import RawObservation

logger = logging.getLogger(__name__)

FRED_DIRECT_URL = "https://api.stlouisfed.org/fred/series/observations"
LOCAL_RELAY_URL = "http://localhost:8787/fred"
LOCAL_RELAY_PORT = 8787
RELAY_PATH = "/fred"
LOCALHOST_NAMES = ("localhost", "127.0.0.1")


def default_relay_url(page_origin: str | None) -> str:
    """Pick the relay URL for a dashboard served from page_origin.

    A page opened from disk (no origin) or from a localhost dev server on
    another port talks to the local relay; anything else uses its own
    origin's /fred path.
    """
    if not page_origin or page_origin == "null":
        return LOCAL_RELAY_URL
    parts = urlsplit(page_origin)
    if parts.hostname in LOCALHOST_NAMES and parts.port and parts.port != LOCAL_RELAY_PORT:
        return LOCAL_RELAY_URL
    return f"{page_origin.rstrip('/')}{RELAY_PATH}"


def resolve_url(url: str, page_origin: str) -> str:
    """Resolve a possibly relative URL against the page origin."""
    return urljoin(page_origin.rstrip("/") + "/", url)


def is_local_origin_relay(url: str | None, page_origin: str) -> bool:
    """Check whether url is the page origin's own /fred relay path."""
    if not url:
        return False
    target = urlsplit(resolve_url(url, page_origin))
    origin = urlsplit(page_origin)
    return (
        (target.scheme, target.netloc) == (origin.scheme, origin.netloc)
        and target.path == RELAY_PATH
    )


def build_fred_url(
    relay_url: str | None,
    api_key: str | None,
    series_id: str,
    page_origin: str,
    direct_url: str = FRED_DIRECT_URL,
) -> str:
    """Build the observations URL.

    Without a relay the FRED API is called directly and needs file_type=json.
    """
    target = resolve_url(relay_url, page_origin) if relay_url else direct_url
    url = httpx.URL(target).copy_set_param("series_id", series_id)
    if api_key:
        url = url.copy_set_param("api_key", api_key)
    if not relay_url:
        url = url.copy_set_param("file_type", "json")
    return str(url)


def _to_observation(item: dict[str, Any]) -> RawObservation:
    date = item.get("date")
    value = item.get("value")
    return RawObservation(
        date="" if date is None else str(date),
        value="" if value is None else str(value),
    )


class FredClient:
    """Fetches raw observations for one FRED series."""

    def __init__(
        self,
        page_origin: str = "http://localhost:8787",
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        client: httpx.AsyncClient | None = None,
        direct_url: str = FRED_DIRECT_URL,
    ):
        self.page_origin = page_origin
        self.direct_url = direct_url
        self.timeout_ms = timeout_ms
        self._client = client

    async def fetch_observations(
        self,
        relay_url: str | None,
        api_key: str | None,
        series_id: str,
        cancel_token: CancelToken | None = None,
    ) -> list[RawObservation]:
        """Fetch observations for series_id.

        Raises:
            AppError: MISSING_PROXY_OR_API_KEY, BAD_UPSTREAM_SHAPE, or a
                fetch error from fetch_json
        """
        if not relay_url and not api_key:
            raise AppError(
                status=400,
                code=ErrorCode.MISSING_PROXY_OR_API_KEY,
                message="Missing proxy URL or API key.",
            )

        url = build_fred_url(
            relay_url, api_key, series_id, self.page_origin, self.direct_url
        )
        logger.info(f"GET {relay_url or self.direct_url} series_id={series_id}")

        payload = await fetch_json(
            url,
            timeout_ms=self.timeout_ms,
            cancel_token=cancel_token,
            client=self._client,
        )
        observations = payload.get("observations") if isinstance(payload, dict) else None
        if not isinstance(observations, list):
            raise AppError(
                status=502,
                code=ErrorCode.BAD_UPSTREAM_SHAPE,
                message="Unexpected payload shape (missing observations).",
                details={"url": url},
            )

        result = [_to_observation(o) for o in observations if isinstance(o, dict)]
        logger.info(f"observations={len(result)}")
        return result
