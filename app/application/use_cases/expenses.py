"""Use cases for family expenses."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import Expense, User
from app.infrastructure.cache import CacheService
from app.infrastructure.notifications import PresenceRegistry
from app.infrastructure.repositories import ExpenseRepository

from .families import ensure_family_access, family_cache_prefix


def _validate(category: str | None, value: int | None) -> None:
    if category is not None and not category.strip():
        raise ValueError("Category is required")
    if value is not None and value <= 0:
        raise ValueError("Value must be greater than zero")


def list_expenses(
    session: Session,
    *,
    family_id: int,
    current_user: User,
    cache: CacheService,
    category: str | None = None,
) -> Sequence[Expense]:
    ensure_family_access(session, family_id=family_id, user=current_user)
    key = f"{family_cache_prefix(family_id)}expenses:{category or '*'}"
    return cache.get_or_set(
        key,
        lambda: list(ExpenseRepository(session).list_for_family(family_id, category=category)),
    )


def get_expense(session: Session, expense_id: int, *, current_user: User) -> Expense:
    expense = ExpenseRepository(session).get(expense_id)
    if expense is None:
        raise LookupError("Expense not found")
    ensure_family_access(session, family_id=expense.family_id, user=current_user)
    return expense


def create_expense(
    session: Session,
    *,
    family_id: int,
    category: str,
    value: int,
    date: datetime,
    current_user: User,
    registry: PresenceRegistry,
    cache: CacheService,
    description: str | None = None,
) -> Expense:
    ensure_family_access(session, family_id=family_id, user=current_user)
    _validate(category, value)

    expense = ExpenseRepository(session).create(
        Expense(
            id=None,
            family_id=family_id,
            category=category.strip(),
            value=value,
            date=date,
            description=description,
            created_by=current_user.id,
        )
    )
    cache.invalidate_by_prefix(family_cache_prefix(family_id))
    registry.notify_expense_created(family_id, expense)
    return expense


def update_expense(
    session: Session,
    *,
    expense_id: int,
    current_user: User,
    registry: PresenceRegistry,
    cache: CacheService,
    category: str | None = None,
    value: int | None = None,
    date: datetime | None = None,
    description: str | None = None,
) -> Expense:
    repository = ExpenseRepository(session)
    expense = repository.get(expense_id)
    if expense is None:
        raise LookupError("Expense not found")
    ensure_family_access(session, family_id=expense.family_id, user=current_user)
    _validate(category, value)

    updated = repository.update(
        replace(
            expense,
            category=category.strip() if category is not None else expense.category,
            value=value if value is not None else expense.value,
            date=date if date is not None else expense.date,
            description=description if description is not None else expense.description,
        )
    )
    cache.invalidate_by_prefix(family_cache_prefix(updated.family_id))
    registry.notify_expense_updated(updated.family_id, updated)
    return updated


def delete_expense(
    session: Session,
    *,
    expense_id: int,
    current_user: User,
    registry: PresenceRegistry,
    cache: CacheService,
) -> None:
    repository = ExpenseRepository(session)
    expense = repository.get(expense_id)
    if expense is None:
        raise LookupError("Expense not found")
    ensure_family_access(session, family_id=expense.family_id, user=current_user)

    repository.delete(expense_id)
    cache.invalidate_by_prefix(family_cache_prefix(expense.family_id))
    registry.notify_expense_deleted(expense.family_id, expense_id)


__all__ = [
    "create_expense",
    "delete_expense",
    "get_expense",
    "list_expenses",
    "update_expense",
]
