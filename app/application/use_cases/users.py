"""Use cases for user accounts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from enum import Enum, auto

from sqlalchemy.orm import Session

from app.domain.entities import USER_ROLE_ALIAS, Role, User
from app.infrastructure.repositories import RoleRepository, UserRepository
from app.infrastructure.security import get_password_hash, verify_password
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthenticationStatus(Enum):
    SUCCESS = auto()
    INVALID_CREDENTIALS = auto()
    INACTIVE = auto()


def authenticate_user(
    session: Session, email: str, password: str
) -> tuple[User | None, AuthenticationStatus]:
    """Check ``email``/``password``; the user is returned unless the credentials are wrong."""

    user = UserRepository(session).get_by_email(email)
    if user is None or not verify_password(password, user.password):
        return None, AuthenticationStatus.INVALID_CREDENTIALS
    if not user.is_active:
        return user, AuthenticationStatus.INACTIVE
    return user, AuthenticationStatus.SUCCESS


def _require_role(session: Session, alias: str) -> Role:
    role = RoleRepository(session).get_by_alias(alias)
    if role is None:
        raise ValueError(f"Role {alias!r} does not exist")
    return role


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    role_alias: str = USER_ROLE_ALIAS,
) -> User:
    """Register an account; emails are unique ignoring case."""

    if not name.strip():
        raise ValueError("Name is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")

    repository = UserRepository(session)
    normalized_email = email.strip().lower()
    if repository.get_by_email(normalized_email) is not None:
        raise ValueError("Email is already registered")

    user = repository.create(
        User(
            id=None,
            role=_require_role(session, role_alias),
            name=name.strip(),
            email=normalized_email,
            password=get_password_hash(password),
            last_login=None,
            created_at=now_in_app_timezone(),
            updated_at=None,
            is_active=True,
        )
    )
    logger.info("Created user %s with role %s", user.id, user.role.alias)
    return user


def get_user(session: Session, user_id: int, *, include_inactive: bool = False) -> User:
    user = UserRepository(session).get(user_id)
    if user is None:
        raise ValueError("User not found")
    if not (include_inactive or user.is_active):
        raise ValueError("User is inactive")
    return user


def list_users(session: Session, *, skip: int = 0, limit: int = 100) -> Sequence[User]:
    return UserRepository(session).list(skip=skip, limit=limit)


def update_user(
    session: Session,
    *,
    user_id: int,
    name: str | None = None,
    is_active: bool | None = None,
    role_alias: str | None = None,
) -> User:
    """Apply the given changes; ``None`` leaves a field untouched."""

    repository = UserRepository(session)
    user = repository.get(user_id)
    if user is None:
        raise ValueError("User not found")
    if name is not None and not name.strip():
        raise ValueError("Name is required")

    role = user.role
    if role_alias is not None and not role.matches(role_alias):
        role = _require_role(session, role_alias)

    return repository.update(
        replace(
            user,
            role=role,
            name=name.strip() if name is not None else user.name,
            is_active=user.is_active if is_active is None else is_active,
            updated_at=now_in_app_timezone(),
        )
    )


def delete_user(session: Session, user_id: int, *, deleted_by: int | None = None) -> None:
    """Soft delete ``user_id``; nobody can delete their own account."""

    repository = UserRepository(session)
    if repository.get(user_id) is None:
        raise ValueError("User not found")
    if deleted_by == user_id:
        raise ValueError("Administrators cannot delete their own account")
    repository.delete(user_id, deleted_by=deleted_by)


def record_login(session: Session, user_id: int) -> None:
    repository = UserRepository(session)
    user = repository.get(user_id)
    if user is not None:
        repository.update(replace(user, last_login=now_in_app_timezone()))


__all__ = [
    "AuthenticationStatus",
    "MIN_PASSWORD_LENGTH",
    "authenticate_user",
    "create_user",
    "delete_user",
    "get_user",
    "list_users",
    "record_login",
    "update_user",
]
