"""Persistence helpers for budget entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Budget
from app.infrastructure.models import BudgetModel
from app.utils import ensure_app_naive_datetime, now_in_app_naive_datetime


class BudgetRepository:
    """Provide CRUD operations for :class:`Budget` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_family(self, family_id: int) -> Sequence[Budget]:
        query = (
            self.session.query(BudgetModel)
            .filter(BudgetModel.family_id == family_id)
            .order_by(BudgetModel.date.desc(), BudgetModel.id.desc())
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, budget_id: int) -> Budget | None:
        model = self.session.get(BudgetModel, budget_id)
        return self._to_entity(model) if model else None

    def create(self, budget: Budget) -> Budget:
        model = BudgetModel()
        self._apply_entity_to_model(model, budget)
        model.created_by = budget.created_by
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, budget: Budget) -> Budget:
        if budget.id is None:
            raise ValueError("Budget id is required for updates")
        model = self.session.get(BudgetModel, budget.id)
        if model is None:
            msg = f"Budget with id {budget.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, budget)
        model.updated_at = now_in_app_naive_datetime()
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, budget_id: int) -> None:
        model = self.session.get(BudgetModel, budget_id)
        if model is None:
            msg = f"Budget with id {budget_id} not found"
            raise ValueError(msg)
        self.session.delete(model)
        self.session.commit()

    @staticmethod
    def _apply_entity_to_model(model: BudgetModel, budget: Budget) -> None:
        model.family_id = budget.family_id
        model.category = budget.category
        model.value = budget.value
        model.date = ensure_app_naive_datetime(budget.date)

    @staticmethod
    def _to_entity(model: BudgetModel) -> Budget:
        return Budget(
            id=model.id,
            family_id=model.family_id,
            category=model.category,
            value=model.value,
            date=model.date,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


__all__ = ["BudgetRepository"]
