# src/daily_tracker/core/clock.py

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def resolve_zone(name: str | None) -> ZoneInfo:
    """Resolve an IANA zone name, falling back to UTC on unknown names."""
    key = (name or "").strip() or "UTC"
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using UTC for the daily calendar.", key)
        return ZoneInfo("UTC")


def today(tz: ZoneInfo) -> date:
    return datetime.now(tz).date()


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a trailing Z (2024-01-01T08:30:00.000Z)."""
    utc = dt.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return format_timestamp(datetime.now(timezone.utc))


class SystemClock:
    """Wall clock anchored to one reference timezone for the whole deployment."""

    def __init__(self, tz_name: str | None = "UTC") -> None:
        self._tz = resolve_zone(tz_name)

    @property
    def tz_name(self) -> str:
        return self._tz.key

    def today(self) -> date:
        return today(self._tz)

    def now_iso(self) -> str:
        return now_iso()
