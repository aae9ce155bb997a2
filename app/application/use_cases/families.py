"""Use cases for families and their membership."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Family, User
from app.infrastructure.repositories import FamilyRepository, UserRepository


def family_cache_prefix(family_id: int) -> str:
    """Prefix shared by every cached query scoped to ``family_id``."""

    return f"family:{family_id}:"


def get_family(session: Session, family_id: int) -> Family:
    family = FamilyRepository(session).get(family_id)
    if family is None:
        raise LookupError("Family not found")
    return family


def ensure_family_access(session: Session, *, family_id: int, user: User) -> Family:
    """Return the family when ``user`` may act on it.

    System administrators always pass; everybody else must be the family
    administrator or one of its members.
    """

    family = get_family(session, family_id)
    if user.is_admin() or family.has_member(user.id):
        return family
    raise PermissionError("Access to this family is denied")


def ensure_family_admin(session: Session, *, family_id: int, user: User) -> Family:
    family = get_family(session, family_id)
    if user.is_admin() or family.is_admin(user.id):
        return family
    raise PermissionError("Only the family administrator can manage members")


def create_family(session: Session, *, name: str, admin: User) -> Family:
    """Create a family administered (and joined) by ``admin``."""

    if not name.strip():
        raise ValueError("Family name is required")
    return FamilyRepository(session).create(
        Family(id=None, name=name.strip(), admin_id=admin.id)
    )


def list_families(session: Session, *, user: User) -> Sequence[Family]:
    """Return every family for administrators, otherwise the user's families."""

    repository = FamilyRepository(session)
    if user.is_admin():
        return repository.list()
    return repository.list_for_user(user.id)


def add_family_member(
    session: Session, *, family_id: int, user_id: int, acting_user: User
) -> Family:
    ensure_family_admin(session, family_id=family_id, user=acting_user)
    if UserRepository(session).get(user_id) is None:
        raise LookupError("User not found")
    return FamilyRepository(session).add_member(family_id, user_id)


def remove_family_member(
    session: Session, *, family_id: int, user_id: int, acting_user: User
) -> Family:
    family = ensure_family_admin(session, family_id=family_id, user=acting_user)
    if family.is_admin(user_id):
        raise ValueError("The family administrator cannot be removed")
    if user_id not in family.member_ids:
        raise LookupError("User is not a member of this family")
    return FamilyRepository(session).remove_member(family_id, user_id)


__all__ = [
    "add_family_member",
    "create_family",
    "ensure_family_access",
    "ensure_family_admin",
    "family_cache_prefix",
    "get_family",
    "list_families",
    "remove_family_member",
]
