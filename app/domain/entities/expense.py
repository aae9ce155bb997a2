"""Domain entity representing a family expense."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Expense:
    """Money spent by a family in a category."""

    id: int | None
    family_id: int
    category: str
    value: int
    date: datetime
    description: str | None = None
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["Expense"]
