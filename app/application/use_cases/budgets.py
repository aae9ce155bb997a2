"""Use cases for family budgets, including realtime fan-out and sharing."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import Budget, BudgetShare, SharedBudget, User
from app.infrastructure.cache import CacheService
from app.infrastructure.notifications import PresenceRegistry
from app.infrastructure.repositories import BudgetRepository, UserRepository
from app.infrastructure.sharing import BudgetSharingService

from .families import ensure_family_access, family_cache_prefix

logger = logging.getLogger(__name__)


def _validate(category: str | None, value: int | None) -> None:
    if category is not None and not category.strip():
        raise ValueError("Category is required")
    if value is not None and value <= 0:
        raise ValueError("Value must be greater than zero")


def list_budgets(
    session: Session, *, family_id: int, current_user: User, cache: CacheService
) -> Sequence[Budget]:
    """Return the budgets of ``family_id``, served from cache when possible."""

    ensure_family_access(session, family_id=family_id, user=current_user)
    return cache.get_or_set(
        f"{family_cache_prefix(family_id)}budgets",
        lambda: list(BudgetRepository(session).list_for_family(family_id)),
    )


def get_budget(
    session: Session,
    budget_id: int,
    *,
    current_user: User,
    sharing: BudgetSharingService | None = None,
) -> Budget:
    """Return a budget visible to ``current_user`` (family access or a share)."""

    budget = BudgetRepository(session).get(budget_id)
    if budget is None:
        raise LookupError("Budget not found")
    if sharing is not None and sharing.has_access_to_shared_budget(budget_id, current_user.id):
        return budget
    ensure_family_access(session, family_id=budget.family_id, user=current_user)
    return budget


def create_budget(
    session: Session,
    *,
    family_id: int,
    category: str,
    value: int,
    date: datetime,
    current_user: User,
    registry: PresenceRegistry,
    cache: CacheService,
) -> Budget:
    ensure_family_access(session, family_id=family_id, user=current_user)
    _validate(category, value)

    budget = BudgetRepository(session).create(
        Budget(
            id=None,
            family_id=family_id,
            category=category.strip(),
            value=value,
            date=date,
            created_by=current_user.id,
        )
    )
    cache.invalidate_by_prefix(family_cache_prefix(family_id))
    registry.notify_budget_created(family_id, budget)
    return budget


def update_budget(
    session: Session,
    *,
    budget_id: int,
    current_user: User,
    registry: PresenceRegistry,
    cache: CacheService,
    sharing: BudgetSharingService | None = None,
    category: str | None = None,
    value: int | None = None,
    date: datetime | None = None,
) -> Budget:
    repository = BudgetRepository(session)
    budget = repository.get(budget_id)
    if budget is None:
        raise LookupError("Budget not found")
    ensure_family_access(session, family_id=budget.family_id, user=current_user)
    _validate(category, value)

    updated = repository.update(
        replace(
            budget,
            category=category.strip() if category is not None else budget.category,
            value=value if value is not None else budget.value,
            date=date if date is not None else budget.date,
        )
    )
    cache.invalidate_by_prefix(family_cache_prefix(updated.family_id))
    if sharing is not None:
        sharing.refresh_budget(updated)
    registry.notify_budget_updated(updated.family_id, updated)
    return updated


def delete_budget(
    session: Session,
    *,
    budget_id: int,
    current_user: User,
    registry: PresenceRegistry,
    cache: CacheService,
    sharing: BudgetSharingService | None = None,
) -> None:
    repository = BudgetRepository(session)
    budget = repository.get(budget_id)
    if budget is None:
        raise LookupError("Budget not found")
    ensure_family_access(session, family_id=budget.family_id, user=current_user)

    repository.delete(budget_id)
    cache.invalidate_by_prefix(family_cache_prefix(budget.family_id))
    if sharing is not None:
        sharing.forget_budget(budget_id)
    registry.notify_budget_deleted(budget.family_id, budget_id)


def share_budget(
    session: Session,
    *,
    budget_id: int,
    user_ids: Iterable[int],
    current_user: User,
    sharing: BudgetSharingService,
    message: str | None = None,
) -> BudgetShare:
    """Share a family budget with other users and notify them."""

    budget = BudgetRepository(session).get(budget_id)
    if budget is None:
        raise LookupError("Budget not found")
    ensure_family_access(session, family_id=budget.family_id, user=current_user)

    requested = list(dict.fromkeys(user_ids))
    known = UserRepository(session).get_map_by_ids(requested)
    missing = [user_id for user_id in requested if user_id not in known]
    if missing:
        raise LookupError(f"Users not found: {', '.join(str(user_id) for user_id in missing)}")

    return sharing.share_budget(
        budget,
        shared_by=current_user.id,
        shared_by_name=current_user.name,
        shared_with=requested,
        message=message,
    )


def list_shared_budgets(
    *, current_user: User, sharing: BudgetSharingService
) -> list[SharedBudget]:
    return sharing.get_shared_budgets_for_user(current_user.id)


def unshare_budget(
    *, budget_id: int, user_id: int, current_user: User, sharing: BudgetSharingService
) -> None:
    if not sharing.remove_sharing(budget_id, current_user.id, user_id):
        raise LookupError("Share not found")


__all__ = [
    "create_budget",
    "delete_budget",
    "get_budget",
    "list_budgets",
    "list_shared_budgets",
    "share_budget",
    "unshare_budget",
    "update_budget",
]
