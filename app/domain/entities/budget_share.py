"""Domain entities describing budgets shared between users."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .budget import Budget


@dataclass
class BudgetShare:
    """A single share action performed by ``shared_by``."""

    budget_id: int
    shared_by: int
    shared_by_name: str
    shared_with: list[int] = field(default_factory=list)
    message: str | None = None
    timestamp: datetime | None = None


@dataclass(frozen=True)
class SharedBudget:
    """A budget as seen by one of the users it was shared with."""

    budget: Budget
    shared_by: str
    timestamp: datetime | None
    message: str | None = None


__all__ = ["BudgetShare", "SharedBudget"]
