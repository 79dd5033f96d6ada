"""Time helpers.

The ledger stores every timestamp as unix seconds (i64), so the engine
compares deadlines and challenge windows in the same unit.
"""

import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(UTC)


def unix_now() -> int:
    """Current unix time in whole seconds, as the ledger clock reports it."""
    return int(time.time())


def unix_to_iso(ts: int) -> str | None:
    """0 means 'never' on the ledger; render it as None."""
    if ts <= 0:
        return None
    return datetime.fromtimestamp(ts, UTC).isoformat()
