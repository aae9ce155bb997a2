"""Family schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FamilyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class FamilyMemberAdd(BaseModel):
    user_id: int = Field(..., ge=1)


class FamilyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    admin_id: int
    member_ids: list[int]
    created_at: datetime | None = None
