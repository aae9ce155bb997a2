"""In-memory bookkeeping of budgets shared between users."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from app.domain.entities import Budget, BudgetShare, SharedBudget
from app.infrastructure.notifications import PresenceRegistry
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


class BudgetSharingService:
    """Record share actions and notify the recipients in realtime.

    Shares live only in process memory, keyed by budget id; each share action
    keeps its own list of recipients so it can be revoked per user.
    """

    def __init__(self, registry: PresenceRegistry) -> None:
        self._registry = registry
        self._shares: dict[int, list[BudgetShare]] = {}
        self._budgets: dict[int, Budget] = {}
        self._lock = threading.Lock()

    def share_budget(
        self,
        budget: Budget,
        shared_by: int,
        shared_by_name: str,
        shared_with: Iterable[int],
        message: str | None = None,
    ) -> BudgetShare:
        """Share ``budget`` with ``shared_with`` and notify each recipient."""

        if budget.id is None:
            raise ValueError("Budget must be persisted before it can be shared")

        recipients: list[int] = []
        for user_id in shared_with:
            if user_id and user_id != shared_by and user_id not in recipients:
                recipients.append(user_id)
        if not recipients:
            raise ValueError("At least one recipient other than the owner is required")

        share = BudgetShare(
            budget_id=budget.id,
            shared_by=shared_by,
            shared_by_name=shared_by_name,
            shared_with=recipients,
            message=message,
            timestamp=now_in_app_timezone(),
        )
        with self._lock:
            self._shares.setdefault(budget.id, []).append(share)
            self._budgets[budget.id] = budget

        for user_id in recipients:
            try:
                self._registry.notify_budget_shared(user_id, budget, shared_by_name)
            except Exception:
                logger.exception(
                    "Failed to notify user %s about budget %s shared by %s",
                    user_id,
                    budget.id,
                    shared_by,
                )

        logger.info(
            "Budget %s shared by %s with %s users", budget.id, shared_by, len(recipients)
        )
        return share

    def get_shared_budgets_for_user(self, user_id: int) -> list[SharedBudget]:
        """Return the budgets shared with ``user_id``, newest share first."""

        with self._lock:
            shared = [
                SharedBudget(
                    budget=self._budgets[budget_id],
                    shared_by=share.shared_by_name,
                    timestamp=share.timestamp,
                    message=share.message,
                )
                for budget_id, shares in self._shares.items()
                for share in shares
                if user_id in share.shared_with
            ]
        return sorted(
            shared,
            key=lambda item: item.timestamp.timestamp() if item.timestamp else 0.0,
            reverse=True,
        )

    def has_access_to_shared_budget(self, budget_id: int, user_id: int) -> bool:
        with self._lock:
            return any(user_id in share.shared_with for share in self._shares.get(budget_id, ()))

    def remove_sharing(self, budget_id: int, shared_by: int, user_id: int) -> bool:
        """Revoke the share of ``budget_id`` made by ``shared_by`` for ``user_id``."""

        with self._lock:
            shares = self._shares.get(budget_id)
            if not shares:
                return False

            share = next(
                (
                    item
                    for item in shares
                    if item.shared_by == shared_by and user_id in item.shared_with
                ),
                None,
            )
            if share is None:
                return False

            share.shared_with = [recipient for recipient in share.shared_with if recipient != user_id]
            if not share.shared_with:
                shares.remove(share)
            if not shares:
                del self._shares[budget_id]
                self._budgets.pop(budget_id, None)

        logger.info("Sharing of budget %s removed for user %s", budget_id, user_id)
        return True

    def get_shared_with_users(self, budget_id: int, shared_by: int) -> list[int]:
        with self._lock:
            share = next(
                (item for item in self._shares.get(budget_id, ()) if item.shared_by == shared_by),
                None,
            )
            return list(share.shared_with) if share else []

    def forget_budget(self, budget_id: int) -> None:
        """Drop every share of a deleted budget."""

        with self._lock:
            self._shares.pop(budget_id, None)
            self._budgets.pop(budget_id, None)

    def refresh_budget(self, budget: Budget) -> None:
        """Keep the stored copy of a shared budget in sync after an update."""

        with self._lock:
            if budget.id in self._budgets:
                self._budgets[budget.id] = budget


__all__ = ["BudgetSharingService"]
