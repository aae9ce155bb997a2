"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging

from app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once using ``LOG_LEVEL`` unless ``level`` is given."""

    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    logging.getLogger("app").setLevel(resolved)


__all__ = ["configure_logging"]
