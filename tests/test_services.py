"""Tests for the short-term and mid-term signal services."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from dashboard.clients.fred import FredClient
from dashboard.clients.http import CancelToken
from dashboard.presentation import SignalState
from dashboard.services import MidTermSignalService, ShortTermSignalService
from signal_core.errors import AppError, Err, ErrorCode, Ok
from signal_core.models import RawPricePoint, Sentiment

ORIGIN = "https://dash.example.com"


def m2_payload() -> dict:
    """Two years of levels with rising YoY in the second half."""
    observations = [{"date": f"2023-{m:02d}-01", "value": "100"} for m in range(1, 13)]
    observations += [
        {"date": f"2024-{m:02d}-01", "value": str(109 + m)} for m in range(1, 7)
    ]
    return {"observations": observations}


def fred_client(handler) -> FredClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FredClient(page_origin=ORIGIN, client=http)


class BlockingChartClient:
    """Chart client whose first call waits until its token is cancelled."""

    def __init__(self, points: list[RawPricePoint]):
        self.points = points
        self.calls = 0
        self.started = asyncio.Event()

    async def get_market_price_daily(self, timespan, sampled, cancel_token):
        self.calls += 1
        if self.calls == 1:
            self.started.set()
            await cancel_token.wait()
            raise AppError(
                status=0,
                code=ErrorCode.HTTP_FETCH_FAILED,
                message="Network request failed (possible CORS or offline).",
                details={"raw": cancel_token.reason},
            )
        return self.points


@pytest.mark.asyncio
class TestShortTermSignalService:
    """Tests for ShortTermSignalService."""

    async def test_success_notifies_result(self):
        client = MagicMock()
        client.get_market_price_daily = AsyncMock(return_value=[])
        on_result = AsyncMock()
        on_error = AsyncMock()
        service = ShortTermSignalService(client=client, on_result=on_result, on_error=on_error)

        with patch(
            "dashboard.services.short_term.compute_short_term_sentiment",
            return_value=Sentiment.BEARISH,
        ):
            result = await service.run()

        assert isinstance(result, Ok)
        assert result.value == Sentiment.BEARISH
        assert service.state == SignalState.BEARISH
        assert not service.is_running
        on_result.assert_awaited_once_with(Sentiment.BEARISH)
        on_error.assert_not_awaited()

    async def test_loading_does_not_notify(self):
        client = MagicMock()
        client.get_market_price_daily = AsyncMock(return_value=[])
        on_result = AsyncMock()
        service = ShortTermSignalService(client=client, on_result=on_result)

        with patch(
            "dashboard.services.short_term.compute_short_term_sentiment",
            return_value=Sentiment.LOADING,
        ):
            result = await service.run()

        assert result.value == Sentiment.LOADING
        assert service.state == SignalState.LOADING
        on_result.assert_not_awaited()

    async def test_app_error_goes_to_error_path(self):
        error = AppError(status=502, code=ErrorCode.BAD_UPSTREAM_SHAPE, message="Upstream data shape unexpected.")
        client = MagicMock()
        client.get_market_price_daily = AsyncMock(side_effect=error)
        on_result = AsyncMock()
        on_error = AsyncMock()
        service = ShortTermSignalService(client=client, on_result=on_result, on_error=on_error)

        result = await service.run()

        assert isinstance(result, Err)
        assert result.error is error
        assert service.state == SignalState.ERROR
        on_error.assert_awaited_once_with(error)
        on_result.assert_not_awaited()

    async def test_unexpected_exception_is_wrapped(self):
        client = MagicMock()
        client.get_market_price_daily = AsyncMock(side_effect=RuntimeError("boom"))
        service = ShortTermSignalService(client=client)

        result = await service.run()

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.UNKNOWN_ERROR
        assert "boom" in result.error.details["raw"]

    async def test_callback_error_is_contained(self):
        client = MagicMock()
        client.get_market_price_daily = AsyncMock(return_value=[])
        on_result = AsyncMock(side_effect=ValueError("ui gone"))
        service = ShortTermSignalService(client=client, on_result=on_result)

        with patch(
            "dashboard.services.short_term.compute_short_term_sentiment",
            return_value=Sentiment.BULLISH,
        ):
            result = await service.run()

        assert isinstance(result, Ok)
        assert service.state == SignalState.BULLISH

    async def test_new_run_supersedes_in_flight_run(self):
        client = BlockingChartClient(points=[])
        on_result = AsyncMock()
        on_error = AsyncMock()
        service = ShortTermSignalService(client=client, on_result=on_result, on_error=on_error)

        with patch(
            "dashboard.services.short_term.compute_short_term_sentiment",
            return_value=Sentiment.BULLISH,
        ):
            first = asyncio.create_task(service.run())
            await client.started.wait()
            second = await service.run()
            first_result = await first

        assert isinstance(second, Ok)
        assert isinstance(first_result, Err)
        assert first_result.error.details["raw"] == "superseded"
        assert service.state == SignalState.BULLISH
        on_result.assert_awaited_once_with(Sentiment.BULLISH)
        on_error.assert_not_awaited()

    async def test_cancel_stops_run(self):
        client = BlockingChartClient(points=[])
        service = ShortTermSignalService(client=client)

        task = asyncio.create_task(service.run())
        await client.started.wait()
        assert service.is_running
        service.cancel()
        result = await task

        assert isinstance(result, Err)
        assert service.state == SignalState.ERROR
        assert not service.is_running

    async def test_caller_token_is_used(self):
        client = BlockingChartClient(points=[])
        service = ShortTermSignalService(client=client)
        token = CancelToken()

        task = asyncio.create_task(service.run(cancel_token=token))
        await client.started.wait()
        token.cancel("user abort")
        result = await task

        assert result.error.details["raw"] == "user abort"


@pytest.mark.asyncio
class TestMidTermSignalService:
    """Tests for MidTermSignalService and the relay fallback."""

    async def test_success_through_relay(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=m2_payload())

        on_result = AsyncMock()
        service = MidTermSignalService(client=fred_client(handler), on_result=on_result)

        result = await service.run(relay_url="/fred")

        assert isinstance(result, Ok)
        assert result.value.signal == Sentiment.BULLISH
        assert result.value.delta_value == pytest.approx(3.0)
        assert service.state == SignalState.BULLISH
        assert len(seen) == 1
        assert seen[0].url.host == "dash.example.com"
        on_result.assert_awaited_once_with(result.value)

    async def test_default_relay_from_page_origin(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=m2_payload())

        service = MidTermSignalService(client=fred_client(handler))

        await service.run()

        assert str(seen[0].url).startswith("https://dash.example.com/fred?")

    async def test_404_on_origin_relay_retries_once(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.host == "dash.example.com":
                return httpx.Response(404, text="Not found")
            return httpx.Response(200, json=m2_payload())

        service = MidTermSignalService(client=fred_client(handler))

        result = await service.run(relay_url="/fred", series_id="M2SL")

        assert isinstance(result, Ok)
        assert [r.url.host for r in seen] == ["dash.example.com", "localhost"]
        assert seen[1].url.port == 8787
        assert seen[1].url.path == "/fred"
        assert seen[1].url.params["series_id"] == "M2SL"

    async def test_fallback_404_is_reported(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(404, text="Not found")

        on_error = AsyncMock()
        service = MidTermSignalService(client=fred_client(handler), on_error=on_error)

        result = await service.run(relay_url="/fred")

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.HTTP_NOT_OK
        assert len(seen) == 2
        on_error.assert_awaited_once()

    async def test_404_on_other_relay_is_not_retried(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(404, text="Not found")

        service = MidTermSignalService(client=fred_client(handler))

        result = await service.run(relay_url="https://relay.example.org/fred")

        assert isinstance(result, Err)
        assert len(seen) == 1

    async def test_server_error_is_not_retried(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(500, text="boom")

        service = MidTermSignalService(client=fred_client(handler))

        result = await service.run(relay_url="/fred")

        assert isinstance(result, Err)
        assert result.error.status == 500
        assert len(seen) == 1

    async def test_direct_call_without_key_fails_fast(self):
        handler = MagicMock()
        service = MidTermSignalService(client=fred_client(handler))

        result = await service.run(relay_url="  ", api_key="")

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.MISSING_PROXY_OR_API_KEY
        handler.assert_not_called()
        assert service.state == SignalState.ERROR

    async def test_blank_series_defaults_to_m2sl(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=m2_payload())

        service = MidTermSignalService(client=fred_client(handler))

        result = await service.run(relay_url="/fred", series_id="  ")

        assert seen[0].url.params["series_id"] == "M2SL"
        assert result.value.meta == "series_id=M2SL | rule: latest > prior"

    async def test_unexpected_exception_is_wrapped(self):
        client = FredClient(page_origin=ORIGIN)
        client.fetch_observations = AsyncMock(side_effect=RuntimeError("boom"))
        service = MidTermSignalService(client=client)

        result = await service.run(relay_url="/fred")

        assert result.error.code == ErrorCode.MID_TERM_FAILED
        assert result.error.message == "Mid-term fetch failed."
