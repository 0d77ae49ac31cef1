"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Relay settings loaded from environment variables and .env.

    Only the relay reads these. Signal services receive api key, series id
    and relay URL as explicit parameters.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # FRED
    fred_api_key: str = ""
    fred_series_id: str = "M2SL"
    fred_base_url: str = "https://api.stlouisfed.org/fred/series/observations"
    fred_lookback_years: int = 6

    # Blockchain.info chart API
    btc_chart_url: str = "https://api.blockchain.info/charts/market-price"
    btc_timespan: str = "10years"

    # Outbound requests
    request_timeout_ms: int = 12000

    # Origin the dashboard page is served from (relative relay URLs resolve here)
    page_origin: str = "http://localhost:8787"

    # Server
    host: str = "0.0.0.0"
    port: int = 8787
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
