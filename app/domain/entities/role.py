"""Roles a user account can hold."""

from dataclasses import dataclass

ADMIN_ROLE_ALIAS = "admin"
USER_ROLE_ALIAS = "user"

# alias -> display name, seeded on startup
DEFAULT_ROLES = {
    ADMIN_ROLE_ALIAS: "Administrator",
    USER_ROLE_ALIAS: "User",
}


@dataclass(frozen=True)
class Role:
    id: int
    name: str
    alias: str

    def matches(self, alias: str) -> bool:
        return self.alias.lower() == alias.lower()


__all__ = ["ADMIN_ROLE_ALIAS", "DEFAULT_ROLES", "USER_ROLE_ALIAS", "Role"]
