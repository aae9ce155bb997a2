"""Domain entity representing a family group."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Family:
    """A group of users sharing budgets and expenses."""

    id: int | None
    name: str
    admin_id: int
    member_ids: tuple[int, ...] = field(default_factory=tuple)
    created_at: datetime | None = None

    def is_admin(self, user_id: int | None) -> bool:
        return user_id is not None and self.admin_id == user_id

    def has_member(self, user_id: int | None) -> bool:
        """Return ``True`` when ``user_id`` administers or belongs to the family."""

        if user_id is None:
            return False
        return self.is_admin(user_id) or user_id in self.member_ids


__all__ = ["Family"]
