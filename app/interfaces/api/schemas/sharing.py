"""Schemas for budget sharing."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .budget import BudgetRead


class BudgetShareRequest(BaseModel):
    user_ids: list[int] = Field(..., min_length=1)
    message: str | None = Field(default=None, max_length=255)


class BudgetShareRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    budget_id: int
    shared_by: int
    shared_with: list[int]
    message: str | None = None
    timestamp: datetime | None = None


class SharedBudgetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    budget: BudgetRead
    shared_by: str
    timestamp: datetime | None = None
    message: str | None = None
