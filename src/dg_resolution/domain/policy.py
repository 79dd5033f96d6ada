"""Pure rules of the resolution pipeline.

Eligibility is re-evaluated from a fresh read at the top of every
iteration; there is no shared "in flight" state between sweeps.
"""

from src.dg_mirror.domain.models import Market
from src.dg_oracle.domain.models import Decision

# Stored evidence is capped well below what the oracle sees
LOG_SOURCE_TEXT_CHARS = 10_000


def is_due(market: Market | None, now: int) -> bool:
    return market is not None and market.is_open and market.resolution_timestamp <= now


def fetch_error_text(message: str) -> str:
    """Placeholder evidence forwarded to the oracle when the source is unreachable."""
    return f"[FETCH ERROR: {message}]"


def error_message_for(fetch_error: str | None, decision: Decision) -> str | None:
    parts: list[str] = []
    if fetch_error:
        parts.append(fetch_error)
    if not decision.is_actionable:
        parts.append(decision.reasoning)
    return "; ".join(parts) or None
