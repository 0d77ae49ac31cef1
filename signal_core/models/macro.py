"""M2 observation and mid-term signal models."""

from pydantic import BaseModel, ConfigDict

from signal_core.models.market import Sentiment

MISSING_VALUE_MARKERS = (".", "")


class RawObservation(BaseModel):
    """FRED-style observation record."""

    model_config = ConfigDict(frozen=True)

    date: str  # "YYYY-MM-DD"
    value: str

    @property
    def is_missing(self) -> bool:
        """A literal "." or an empty value denotes a missing reading."""
        return self.value.strip() in MISSING_VALUE_MARKERS


class SignalResult(BaseModel):
    """Outcome of the mid-term (M2 YoY) pipeline."""

    model_config = ConfigDict(frozen=True)

    signal: Sentiment  # Only BULLISH or BEARISH
    latest_month_key: str
    latest_yoy: float
    prior_month_key: str
    prior_yoy: float
    delta_value: float
    meta: str = ""
