"""Mapping of signal outcomes to dashboard card states."""

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict

from signal_core.models import Sentiment, SignalResult


class SignalState(str, Enum):
    """UI state of a signal card."""

    IDLE = "idle"
    LOADING = "loading"
    BULLISH = "bullish"
    BEARISH = "bearish"
    ERROR = "error"


class SignalCard(BaseModel):
    """What the dashboard renders for one signal."""

    model_config = ConfigDict(frozen=True)

    state: SignalState
    label: str
    css_class: str
    color: str


# (label, css class, status colour)
_CARD_STYLES: dict[SignalState, tuple[str, str, str]] = {
    SignalState.IDLE: ("IDLE", "state-loading", "var(--text-muted)"),
    SignalState.LOADING: ("CALCULATING...", "state-loading", "var(--text-muted)"),
    SignalState.BULLISH: ("BULLISH", "state-bullish", "var(--signal-bull)"),
    SignalState.BEARISH: ("BEARISH", "state-bearish", "var(--signal-bear)"),
    SignalState.ERROR: ("ERROR", "state-error", "#ffb000"),
}


def state_for(sentiment: Sentiment) -> SignalState:
    """Map a pipeline classification to a card state."""
    if sentiment == Sentiment.BULLISH:
        return SignalState.BULLISH
    if sentiment == Sentiment.BEARISH:
        return SignalState.BEARISH
    return SignalState.LOADING


def signal_card(state: SignalState) -> SignalCard:
    label, css_class, color = _CARD_STYLES[state]
    return SignalCard(state=state, label=label, css_class=css_class, color=color)


def format_pct(value: float | None) -> str:
    """Format a percentage as "1.23%", or "-" when not finite."""
    if value is None or not math.isfinite(value):
        return "-"
    return f"{value:.2f}%"


def format_delta(value: float) -> str:
    """Format a YoY delta in percentage points, e.g. "+0.25 pp"."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f} pp"


def mid_term_details(result: SignalResult) -> dict[str, str]:
    """Text fields shown under the mid-term card."""
    return {
        "latest": f"{format_pct(result.latest_yoy)} ({result.latest_month_key})",
        "prior": f"{format_pct(result.prior_yoy)} ({result.prior_month_key})",
        "delta": format_delta(result.delta_value),
        "meta": result.meta,
    }
