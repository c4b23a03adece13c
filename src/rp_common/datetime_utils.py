"""UTC time utilities.

The ledger core never samples the clock; only the HTTP edge stamps
requests with the current unix timestamp.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def now_ts() -> int:
    """Current UTC time as integer unix seconds."""
    return int(utc_now().timestamp())


def ts_to_iso(ts: int | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()
