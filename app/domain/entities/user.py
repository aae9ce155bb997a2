"""Domain entity representing an account holder."""

from dataclasses import dataclass
from datetime import datetime

from .role import ADMIN_ROLE_ALIAS, USER_ROLE_ALIAS, Role


@dataclass
class User:
    """A person who signs in, belongs to families and receives notifications.

    ``password`` always holds the passlib hash. Deleted accounts are kept
    with ``deleted`` set so that ``created_by`` references stay valid.
    """

    id: int | None
    role: Role
    name: str
    email: str
    password: str
    last_login: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
    is_active: bool
    deleted: bool = False
    deleted_by: int | None = None
    deleted_at: datetime | None = None

    def is_admin(self) -> bool:
        return self.role.matches(ADMIN_ROLE_ALIAS)


__all__ = ["ADMIN_ROLE_ALIAS", "USER_ROLE_ALIAS", "User"]
