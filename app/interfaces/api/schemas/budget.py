"""Budget schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BudgetCreate(BaseModel):
    family_id: int = Field(..., ge=1)
    category: str = Field(..., min_length=1, max_length=80)
    value: int = Field(..., gt=0, description="Amount in cents")
    date: datetime


class BudgetUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str | None = Field(default=None, min_length=1, max_length=80)
    value: int | None = Field(default=None, gt=0)
    date: datetime | None = None


class BudgetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    family_id: int
    category: str
    value: int
    date: datetime
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
