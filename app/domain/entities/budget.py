"""Domain entity representing a family budget."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Budget:
    """Amount planned for a spending category of a family."""

    id: int | None
    family_id: int
    category: str
    value: int
    date: datetime
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["Budget"]
