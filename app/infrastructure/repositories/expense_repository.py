"""Persistence helpers for expense entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Expense
from app.infrastructure.models import ExpenseModel
from app.utils import ensure_app_naive_datetime, now_in_app_naive_datetime


class ExpenseRepository:
    """Provide CRUD operations for :class:`Expense` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_family(
        self, family_id: int, *, category: str | None = None
    ) -> Sequence[Expense]:
        query = self.session.query(ExpenseModel).filter(ExpenseModel.family_id == family_id)
        if category:
            query = query.filter(ExpenseModel.category == category)
        query = query.order_by(ExpenseModel.date.desc(), ExpenseModel.id.desc())
        return [self._to_entity(model) for model in query.all()]

    def get(self, expense_id: int) -> Expense | None:
        model = self.session.get(ExpenseModel, expense_id)
        return self._to_entity(model) if model else None

    def create(self, expense: Expense) -> Expense:
        model = ExpenseModel()
        self._apply_entity_to_model(model, expense)
        model.created_by = expense.created_by
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, expense: Expense) -> Expense:
        if expense.id is None:
            raise ValueError("Expense id is required for updates")
        model = self.session.get(ExpenseModel, expense.id)
        if model is None:
            msg = f"Expense with id {expense.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, expense)
        model.updated_at = now_in_app_naive_datetime()
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, expense_id: int) -> None:
        model = self.session.get(ExpenseModel, expense_id)
        if model is None:
            msg = f"Expense with id {expense_id} not found"
            raise ValueError(msg)
        self.session.delete(model)
        self.session.commit()

    @staticmethod
    def _apply_entity_to_model(model: ExpenseModel, expense: Expense) -> None:
        model.family_id = expense.family_id
        model.category = expense.category
        model.value = expense.value
        model.date = ensure_app_naive_datetime(expense.date)
        model.description = expense.description

    @staticmethod
    def _to_entity(model: ExpenseModel) -> Expense:
        return Expense(
            id=model.id,
            family_id=model.family_id,
            category=model.category,
            value=model.value,
            date=model.date,
            description=model.description,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


__all__ = ["ExpenseRepository"]
