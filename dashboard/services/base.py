"""Shared run bookkeeping for the signal services.

Each service owns at most one in-flight invocation. Starting a new run
cancels the previous run's token (cancel-and-replace); the superseded run
settles on its error path without touching the service state or callbacks.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, TypeVar

from dashboard.clients.http import CancelToken
from dashboard.presentation import SignalState
from signal_core.errors import AppError, Err, Ok

T = TypeVar("T")

ErrorCallback = Callable[[AppError], Awaitable[None]]

logger = logging.getLogger(__name__)


class PipelineService(Generic[T]):
    """Base class holding the current token, the card state and callbacks."""

    name = "pipeline"

    def __init__(
        self,
        on_result: Callable[[T], Awaitable[None]] | None = None,
        on_error: ErrorCallback | None = None,
    ):
        self.state = SignalState.IDLE
        self._on_result = on_result
        self._on_error = on_error
        self._current: CancelToken | None = None

    @property
    def is_running(self) -> bool:
        return self._current is not None

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the in-flight run, if any."""
        if self._current is not None:
            self._current.cancel(reason)

    def _begin(self, cancel_token: CancelToken | None) -> CancelToken:
        if self._current is not None and not self._current.cancelled:
            logger.info(f"[{self.name}] Superseding in-flight run")
            self._current.cancel("superseded")
        token = cancel_token or CancelToken()
        self._current = token
        self.state = SignalState.LOADING
        return token

    def _release(self, token: CancelToken) -> bool:
        """Finish a run; True if it was still the current one."""
        if self._current is token:
            self._current = None
            return True
        return False

    async def _succeed(
        self, token: CancelToken, value: T, state: SignalState, notify: bool = True
    ) -> Ok[T]:
        if self._release(token):
            self.state = state
            if notify and self._on_result:
                try:
                    await self._on_result(value)
                except Exception as e:
                    logger.error(f"[{self.name}] Result callback error: {e}")
        return Ok(value)

    async def _fail(self, token: CancelToken, error: AppError) -> Err:
        logger.error(f"[{self.name}] Error during computation: {error!r}")
        if self._release(token):
            self.state = SignalState.ERROR
            if self._on_error:
                try:
                    await self._on_error(error)
                except Exception as e:
                    logger.error(f"[{self.name}] Error callback error: {e}")
        return Err(error)
