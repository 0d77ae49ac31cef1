"""Bounded-time JSON GET with explicit cancellation.

Every failure is normalized to an AppError:
- HTTP_NOT_OK: upstream answered with a non-2xx status
- HTTP_FETCH_FAILED: network error, invalid JSON, timeout or cancellation

No retries happen here.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any

import httpx

from signal_core.errors import AppError, ErrorCode, safe_stringify

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 12000


class CancelToken:
    """Cancellation token for one pipeline invocation.

    A token is cancelled explicitly with cancel(). linked() derives a
    child token that is cancelled by whichever comes first: the parent
    being cancelled, or an optional timeout elapsing.

    Usage:
        token = CancelToken()
        data = await fetch_json(url, cancel_token=token)
        # elsewhere: token.cancel()
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None
        self._children: list[CancelToken] = []
        self._parent: CancelToken | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel this token and every token linked to it."""
        if self.cancelled:
            return
        self._reason = reason
        self._event.set()
        self._stop_timer()
        for child in list(self._children):
            child.cancel(reason)

    async def wait(self) -> None:
        """Wait until the token is cancelled."""
        await self._event.wait()

    def linked(self, timeout_ms: int | None = None) -> CancelToken:
        """Create a child token cancelled on parent cancel or after timeout_ms.

        Must be called from within a running event loop when timeout_ms is set.
        """
        child = CancelToken()
        if self.cancelled:
            child.cancel(self._reason or "cancelled")
            return child

        child._parent = self
        self._children.append(child)
        if timeout_ms is not None:
            loop = asyncio.get_running_loop()
            child._timer = loop.call_later(
                timeout_ms / 1000, child.cancel, f"timeout after {timeout_ms} ms"
            )
        return child

    def close(self) -> None:
        """Release the timer and detach from the parent token."""
        self._stop_timer()
        if self._parent is not None:
            with suppress(ValueError):
                self._parent._children.remove(self)
            self._parent = None

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


def _fetch_failed(url: str, raw: Any) -> AppError:
    return AppError(
        status=0,
        code=ErrorCode.HTTP_FETCH_FAILED,
        message="Network request failed (possible CORS or offline).",
        details={"url": url, "raw": safe_stringify(raw)},
    )


async def fetch_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    cancel_token: CancelToken | None = None,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """GET a URL and decode its JSON body.

    The request is aborted as soon as the cancel token fires or
    timeout_ms elapses, whichever comes first.

    Args:
        url: Absolute URL to fetch
        params: Extra query parameters
        timeout_ms: Upper bound on the whole request
        cancel_token: Optional caller-owned cancellation token
        client: Optional shared client (a private one is created otherwise)

    Returns:
        Decoded JSON value

    Raises:
        AppError: HTTP_NOT_OK or HTTP_FETCH_FAILED
    """
    full_url = str(httpx.URL(url).copy_merge_params(params)) if params else url
    token = (cancel_token or CancelToken()).linked(timeout_ms)

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=None)

    request = asyncio.ensure_future(
        client.get(full_url, headers={"Accept": "application/json"})
    )
    cancelled = asyncio.ensure_future(token.wait())

    try:
        done, _ = await asyncio.wait(
            {request, cancelled}, return_when=asyncio.FIRST_COMPLETED
        )
        if request not in done:
            logger.warning(f"Request aborted ({token.reason}): {full_url}")
            raise _fetch_failed(full_url, token.reason)
        response = request.result()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise _fetch_failed(full_url, str(e)) from e
    finally:
        if not request.done():
            request.cancel()
            with suppress(asyncio.CancelledError, httpx.HTTPError):
                await request
        cancelled.cancel()
        token.close()
        if owns_client:
            await client.aclose()

    if not response.is_success:
        raise AppError(
            status=response.status_code,
            code=ErrorCode.HTTP_NOT_OK,
            message=f"HTTP {response.status_code} from data source",
            details={"url": full_url},
        )

    try:
        return response.json()
    except ValueError as e:
        raise _fetch_failed(full_url, str(e)) from e
