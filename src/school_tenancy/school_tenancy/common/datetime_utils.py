from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now(timezone.utc)


def backup_timestamp(now: datetime) -> str:
    return now.strftime("%Y%m%d_%H%M%S")
