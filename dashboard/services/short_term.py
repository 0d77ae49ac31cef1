"""Short-term BTC sentiment service.

Fetches daily prices, runs the monthly MACD pipeline and reports the
classification. Failures never escape run(): they come back as Err and
through the on_error callback.
"""

import logging
from typing import Awaitable, Callable

from dashboard.clients.btc import BlockchainChartClient
from dashboard.clients.http import CancelToken
from dashboard.presentation import state_for
from dashboard.services.base import ErrorCallback, PipelineService
from signal_core.errors import AppError, ErrorCode, Result, safe_stringify
from signal_core.models import Sentiment
from signal_core.strategy import compute_short_term_sentiment

logger = logging.getLogger(__name__)

DEFAULT_TIMESPAN = "10years"


class ShortTermSignalService(PipelineService[Sentiment]):
    """Runs the BTC MACD pipeline.

    Usage:
        service = ShortTermSignalService(on_result=show, on_error=show_error)
        result = await service.run()
    """

    name = "BTC-Logic"

    def __init__(
        self,
        client: BlockchainChartClient | None = None,
        on_result: Callable[[Sentiment], Awaitable[None]] | None = None,
        on_error: ErrorCallback | None = None,
    ):
        super().__init__(on_result=on_result, on_error=on_error)
        self.client = client or BlockchainChartClient()

    async def run(
        self,
        timespan: str = DEFAULT_TIMESPAN,
        cancel_token: CancelToken | None = None,
    ) -> Result[Sentiment]:
        """Compute the short-term sentiment.

        Returns:
            Ok(Sentiment) or Err(AppError). on_result fires only for
            bullish/bearish; loading leaves the card in its loading state.
        """
        token = self._begin(cancel_token)
        logger.info(f"[{self.name}] Starting short-term computation")

        try:
            points = await self.client.get_market_price_daily(
                timespan=timespan, sampled=False, cancel_token=token
            )
            sentiment = compute_short_term_sentiment(points)
        except AppError as e:
            return await self._fail(token, e)
        except Exception as e:
            return await self._fail(
                token,
                AppError(
                    status=0,
                    code=ErrorCode.UNKNOWN_ERROR,
                    message="Unexpected error",
                    details={"raw": safe_stringify(str(e))},
                ),
            )

        logger.info(f"[{self.name}] Final computed sentiment: {sentiment.value}")
        return await self._succeed(
            token,
            sentiment,
            state_for(sentiment),
            notify=sentiment != Sentiment.LOADING,
        )
