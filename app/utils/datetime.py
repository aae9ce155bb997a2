"""Timezone helpers.

Timestamps are produced in the zone named by ``APP_TIMEZONE`` and written
to the database as naive local values; everything above the repositories
works with aware datetimes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

logger = logging.getLogger(__name__)

FALLBACK_TIMEZONE = "America/Sao_Paulo"


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    name = get_settings().app_timezone.strip() or FALLBACK_TIMEZONE
    if name.upper() in {"UTC", "Z"}:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown APP_TIMEZONE %r, using %s", name, FALLBACK_TIMEZONE)
        return ZoneInfo(FALLBACK_TIMEZONE)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Current local time in the shape stored by ``DateTime`` columns."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Convert ``value`` to app local time and drop ``tzinfo``.

    Naive input is assumed to already be local and is returned unchanged.
    """

    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(get_app_timezone()).replace(tzinfo=None)


__all__ = [
    "FALLBACK_TIMEZONE",
    "ensure_app_naive_datetime",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
]
