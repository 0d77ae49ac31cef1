"""Relay and signal routes.

Relay endpoints (/fred, /btc) pass upstream JSON through unchanged and add
CORS headers; /fred injects the FRED API key. Signal endpoints run the
pipelines and return the card the dashboard should render.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from dashboard.config import Settings
from dashboard.presentation import SignalCard, mid_term_details, signal_card
from dashboard.services import MidTermSignalService, ShortTermSignalService
from signal_core.errors import Ok

logger = logging.getLogger(__name__)

router = APIRouter()

RELAY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Cache-Control": "no-store",
}


# Response models
class ShortTermResponse(BaseModel):
    """Short-term signal response model."""

    card: SignalCard
    sentiment: Optional[str] = None
    error: Optional[dict[str, Any]] = None


class MidTermResponse(BaseModel):
    """Mid-term signal response model."""

    card: SignalCard
    result: Optional[dict[str, Any]] = None
    details: Optional[dict[str, str]] = None
    error: Optional[dict[str, Any]] = None


def _json(status: int, body: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status, content=body, headers=RELAY_HEADERS)


def _passthrough(upstream: httpx.Response) -> Response:
    return Response(
        content=upstream.content,
        status_code=200,
        media_type="application/json; charset=utf-8",
        headers=RELAY_HEADERS,
    )


def observation_start(now: datetime, lookback_years: int) -> str:
    """First day of the current month, lookback_years back, as YYYY-MM-DD."""
    return f"{now.year - lookback_years:04d}-{now.month:02d}-01"


@router.get("/fred")
async def relay_fred(
    request: Request,
    series_id: Optional[str] = Query(None, description="FRED series id"),
    api_key: Optional[str] = Query(None, description="Overrides the configured key"),
):
    """Relay FRED series observations, injecting the API key."""
    settings: Settings = request.app.state.settings
    upstream: httpx.AsyncClient = request.app.state.upstream

    key = api_key or settings.fred_api_key
    if not key:
        return _json(400, {
            "error": "Missing api_key",
            "message": "Set FRED_API_KEY env var or pass api_key query param.",
        })

    params = {
        "series_id": series_id or settings.fred_series_id,
        "api_key": key,
        "file_type": "json",
        "sort_order": "asc",
        "observation_start": observation_start(
            datetime.now(timezone.utc), settings.fred_lookback_years
        ),
    }

    try:
        r = await upstream.get(settings.fred_base_url, params=params)
    except httpx.HTTPError as e:
        logger.error(f"FRED relay error: {e}")
        return _json(500, {"error": "Proxy error", "message": str(e)})

    if not r.is_success:
        logger.warning(f"FRED request failed with status {r.status_code}")
        return _json(r.status_code, {
            "error": "FRED request failed",
            "status": r.status_code,
            "body": r.text,
        })
    return _passthrough(r)


@router.get("/btc")
async def relay_btc(
    request: Request,
    timespan: str = Query("10years"),
    sampled: str = Query("false"),
):
    """Relay the blockchain.info daily market-price chart."""
    settings: Settings = request.app.state.settings
    upstream: httpx.AsyncClient = request.app.state.upstream

    params = {
        "timespan": timespan,
        "format": "json",
        "sampled": sampled,
        "cors": "true",
    }

    try:
        r = await upstream.get(settings.btc_chart_url, params=params)
    except httpx.HTTPError as e:
        logger.error(f"BTC relay error: {e}")
        return _json(500, {"error": "Proxy error", "message": str(e)})

    if not r.is_success:
        logger.warning(f"BTC request failed with status {r.status_code}")
        return _json(r.status_code, {
            "error": "BTC request failed",
            "status": r.status_code,
            "body": r.text,
        })
    return _passthrough(r)


@router.get("/api/signals/short-term", response_model=ShortTermResponse)
async def get_short_term_signal(request: Request):
    """Run the BTC MACD pipeline.

    Each request gets its own service so concurrent requests never
    supersede one another.
    """
    settings: Settings = request.app.state.settings
    service = ShortTermSignalService(client=request.app.state.btc_client)

    outcome = await service.run(timespan=settings.btc_timespan)
    card = signal_card(service.state)
    if isinstance(outcome, Ok):
        return ShortTermResponse(card=card, sentiment=outcome.value.value)
    return ShortTermResponse(card=card, error=outcome.error.to_dict())


@router.get("/api/signals/mid-term", response_model=MidTermResponse)
async def get_mid_term_signal(
    request: Request,
    series_id: Optional[str] = Query(None, description="FRED series id"),
):
    """Run the M2 YoY pipeline against FRED with the configured key.

    The key never leaves the server except towards settings.fred_base_url.
    """
    settings: Settings = request.app.state.settings
    service = MidTermSignalService(client=request.app.state.fred_client)

    outcome = await service.run(
        relay_url="",
        api_key=settings.fred_api_key,
        series_id=series_id or settings.fred_series_id,
    )
    card = signal_card(service.state)
    if isinstance(outcome, Ok):
        return MidTermResponse(
            card=card,
            result=outcome.value.model_dump(mode="json"),
            details=mid_term_details(outcome.value),
        )
    return MidTermResponse(card=card, error=outcome.error.to_dict())
