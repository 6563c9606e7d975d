"""Utility functions for time handling.

All timestamps should be UTC and timezone-aware. Persist UTC timestamps as
ISO-8601 strings with timezone offsets (e.g., "+00:00") via iso_now().
Calendar reasoning (today's date, "every day at 8 AM") happens in the
garden's configured timezone.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def iso_utc(dt: datetime) -> str:
    """Normalize an aware (or naive-as-UTC) datetime to a second-precision UTC string.

    Fixed precision keeps lexical and chronological order identical in SQLite.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds")


def epoch_ms(dt: datetime | None = None) -> int:
    """Milliseconds since the epoch for *dt* (default: now)."""
    return int((dt or utc_now()).timestamp() * 1000)


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the ZoneInfo for *name*, falling back to UTC when unknown."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using UTC", name)
        return timezone.utc


def local_today(tz: tzinfo) -> date:
    """Today's calendar date in *tz*."""
    return utc_now().astimezone(tz).date()


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: ISO string, epoch number (seconds or milliseconds) or datetime

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        seconds = value if value < 1e12 else value / 1000
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    else:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def coerce_date(value: Any) -> str | None:
    """Return *value* as a ``YYYY-MM-DD`` string, or None when it is not a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return date.fromisoformat(raw[:10]).isoformat()
        except ValueError:
            return None
    return None
