"""Persistence helpers for account roles."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.entities import Role
from app.infrastructure.models import RoleModel


class RoleRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_alias(self, alias: str) -> Role | None:
        """Look up a role by alias, ignoring case."""

        model = (
            self.session.query(RoleModel)
            .filter(func.lower(RoleModel.alias) == alias.strip().lower())
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def list(self) -> list[Role]:
        return [
            self._to_entity(model)
            for model in self.session.query(RoleModel).order_by(RoleModel.id).all()
        ]

    def ensure(self, roles: Mapping[str, str]) -> list[str]:
        """Insert the ``alias -> name`` pairs that are missing; return the new aliases."""

        existing = {role.alias for role in self.list()}
        created = [alias for alias in roles if alias not in existing]
        for alias in created:
            self.session.add(RoleModel(alias=alias, name=roles[alias]))
        if created:
            self.session.commit()
        return created

    @staticmethod
    def _to_entity(model: RoleModel) -> Role:
        return Role(id=model.id, name=model.name, alias=model.alias)


__all__ = ["RoleRepository"]
