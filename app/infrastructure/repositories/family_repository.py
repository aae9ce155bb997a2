"""Persistence layer for families and their membership."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.domain.entities import Family
from app.infrastructure.models import FamilyModel, UserModel, family_member_table


class FamilyRepository:
    """Provide CRUD operations for :class:`Family` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, family_id: int) -> Family | None:
        model = self.session.get(FamilyModel, family_id)
        return self._to_entity(model) if model else None

    def list_for_user(self, user_id: int) -> Sequence[Family]:
        member_family_ids = (
            self.session.query(family_member_table.c.family_id)
            .filter(family_member_table.c.user_id == user_id)
        )
        query = (
            self.session.query(FamilyModel)
            .filter(
                or_(
                    FamilyModel.admin_id == user_id,
                    FamilyModel.id.in_(member_family_ids),
                )
            )
            .order_by(FamilyModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def list(self) -> Sequence[Family]:
        query = self.session.query(FamilyModel).order_by(FamilyModel.id)
        return [self._to_entity(model) for model in query.all()]

    def create(self, family: Family) -> Family:
        model = FamilyModel(name=family.name, admin_id=family.admin_id)
        admin = self.session.get(UserModel, family.admin_id)
        if admin is not None:
            model.members.append(admin)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def add_member(self, family_id: int, user_id: int) -> Family:
        model = self._require_model(family_id)
        user = self.session.get(UserModel, user_id)
        if user is None or user.deleted:
            raise ValueError("User not found")
        if all(member.id != user_id for member in model.members):
            model.members.append(user)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def remove_member(self, family_id: int, user_id: int) -> Family:
        model = self._require_model(family_id)
        model.members = [member for member in model.members if member.id != user_id]
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def _require_model(self, family_id: int) -> FamilyModel:
        model = self.session.get(FamilyModel, family_id)
        if model is None:
            msg = f"Family with id {family_id} not found"
            raise ValueError(msg)
        return model

    @staticmethod
    def _to_entity(model: FamilyModel) -> Family:
        return Family(
            id=model.id,
            name=model.name,
            admin_id=model.admin_id,
            member_ids=tuple(sorted(member.id for member in model.members)),
            created_at=model.created_at,
        )


__all__ = ["FamilyRepository"]
