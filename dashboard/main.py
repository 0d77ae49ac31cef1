"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dashboard.api import router
from dashboard.api.routes import RELAY_HEADERS
from dashboard.clients import BlockchainChartClient, FredClient
from dashboard.config import Settings, get_settings

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings, upstream: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the relay application.

    Args:
        settings: Explicit configuration (nothing below reads the environment)
        upstream: Shared outbound client; created and closed by the app if omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_upstream = upstream is None
        client = upstream or httpx.AsyncClient(timeout=settings.request_timeout_ms / 1000)

        app.state.settings = settings
        app.state.upstream = client
        app.state.btc_client = BlockchainChartClient(
            base_url=settings.btc_chart_url,
            timeout_ms=settings.request_timeout_ms,
            client=client,
        )
        app.state.fred_client = FredClient(
            page_origin=settings.page_origin,
            timeout_ms=settings.request_timeout_ms,
            client=client,
            direct_url=settings.fred_base_url,
        )

        logger.info(f"Relay running on http://localhost:{settings.port} (endpoints: /fred, /btc)")
        if not settings.fred_api_key:
            logger.warning("FRED_API_KEY not set - /fred requires an api_key query param")

        yield

        logger.info("Shutting down...")
        if owns_upstream:
            await client.aclose()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="BTC / M2 Signal Relay",
        description="CORS relay and signal pipelines for the BTC / M2 dashboard",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        """Unknown paths answer like the relay: {"error": "Not found"}."""
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Not found"}, headers=RELAY_HEADERS)
        return await http_exception_handler(request, exc)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "BTC / M2 Signal Relay",
            "version": VERSION,
            "endpoints": ["/fred", "/btc", "/api/signals/short-term", "/api/signals/mid-term"],
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app(get_settings())


def main():
    """Run the relay."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "dashboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
