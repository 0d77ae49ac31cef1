"""Mid-term M2 YoY signal service.

Fetches FRED observations through the relay and computes the YoY momentum
signal. A 404 from the page origin's own /fred path is retried exactly
once against the local relay; nothing else is retried.
"""

import logging
from typing import Awaitable, Callable

from dashboard.clients.fred import (
    LOCAL_RELAY_URL,
    FredClient,
    default_relay_url,
    is_local_origin_relay,
)
from dashboard.clients.http import CancelToken
from dashboard.presentation import state_for
from dashboard.services.base import ErrorCallback, PipelineService
from signal_core.errors import AppError, ErrorCode, Result, safe_stringify
from signal_core.models import RawObservation, SignalResult
from signal_core.strategy import DEFAULT_SERIES_ID, compute_mid_term_signal

logger = logging.getLogger(__name__)


class MidTermSignalService(PipelineService[SignalResult]):
    """Runs the M2 YoY pipeline."""

    name = "M2-Logic"

    def __init__(
        self,
        client: FredClient | None = None,
        fallback_relay_url: str = LOCAL_RELAY_URL,
        on_result: Callable[[SignalResult], Awaitable[None]] | None = None,
        on_error: ErrorCallback | None = None,
    ):
        super().__init__(on_result=on_result, on_error=on_error)
        self.client = client or FredClient()
        self.fallback_relay_url = fallback_relay_url

    async def _fetch_with_fallback(
        self,
        relay_url: str,
        api_key: str,
        series_id: str,
        token: CancelToken,
    ) -> list[RawObservation]:
        try:
            return await self.client.fetch_observations(
                relay_url, api_key, series_id, cancel_token=token
            )
        except AppError as e:
            if not (e.is_not_found and is_local_origin_relay(relay_url, self.client.page_origin)):
                raise
            logger.info(f"[{self.name}] Proxy 404. Retrying with {self.fallback_relay_url}")
            return await self.client.fetch_observations(
                self.fallback_relay_url, api_key, series_id, cancel_token=token
            )

    async def run(
        self,
        relay_url: str | None = None,
        api_key: str = "",
        series_id: str = DEFAULT_SERIES_ID,
        cancel_token: CancelToken | None = None,
    ) -> Result[SignalResult]:
        """Compute the mid-term signal.

        Args:
            relay_url: Relay endpoint (absolute, or relative to the page origin).
                None picks the default relay for the page origin; an empty
                string calls FRED directly
            api_key: FRED key; may be empty when the relay injects it
            series_id: FRED series, M2SL when blank
            cancel_token: Cancels the in-flight request when fired

        Returns:
            Ok(SignalResult) or Err(AppError)
        """
        token = self._begin(cancel_token)
        if relay_url is None:
            relay_url = default_relay_url(self.client.page_origin)
        relay_url = relay_url.strip()
        api_key = (api_key or "").strip()
        series_id = (series_id or "").strip() or DEFAULT_SERIES_ID

        try:
            observations = await self._fetch_with_fallback(relay_url, api_key, series_id, token)
            result = compute_mid_term_signal(observations, series_id=series_id)
        except AppError as e:
            return await self._fail(token, e)
        except Exception as e:
            return await self._fail(
                token,
                AppError(
                    status=0,
                    code=ErrorCode.MID_TERM_FAILED,
                    message="Mid-term fetch failed.",
                    details={"raw": safe_stringify(str(e))},
                ),
            )

        logger.info(f"[{self.name}] Computed mid-term signal: {result.signal.value}")
        return await self._succeed(token, result, state_for(result.signal))
