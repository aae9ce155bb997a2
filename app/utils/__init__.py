"""Shared helpers that do not belong to a single layer."""

from .datetime import (
    ensure_app_naive_datetime,
    now_in_app_naive_datetime,
    now_in_app_timezone,
)

__all__ = [
    "ensure_app_naive_datetime",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
]
