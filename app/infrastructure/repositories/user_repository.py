"""Persistence helpers for user accounts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.domain.entities import Role, User
from app.infrastructure.models import UserModel
from app.utils import ensure_app_naive_datetime, now_in_app_naive_datetime


class UserRepository:
    """Map :class:`UserModel` rows to :class:`User` entities.

    Soft deleted accounts are invisible to every lookup.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _visible(self) -> Query:
        return self.session.query(UserModel).filter(UserModel.deleted.is_(False))

    def list(self, skip: int = 0, limit: int = 100) -> Sequence[User]:
        models = self._visible().order_by(UserModel.id).offset(skip).limit(limit).all()
        return [self._to_entity(model) for model in models]

    def get(self, user_id: int) -> User | None:
        model = self._visible().filter(UserModel.id == user_id).one_or_none()
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = (
            self._visible()
            .filter(func.lower(UserModel.email) == email.strip().lower())
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, user_ids: Iterable[int]) -> dict[int, User]:
        """Return the visible users among ``user_ids`` keyed by id."""

        wanted = {int(user_id) for user_id in user_ids}
        if not wanted:
            return {}
        models = self._visible().filter(UserModel.id.in_(wanted)).all()
        return {model.id: self._to_entity(model) for model in models}

    def create(self, user: User) -> User:
        model = UserModel()
        self._copy_to_model(user, model)
        if user.created_at is not None:
            model.created_at = ensure_app_naive_datetime(user.created_at)
        self.session.add(model)
        return self._commit(model)

    def update(self, user: User) -> User:
        model = self._require_model(user.id)
        self._copy_to_model(user, model)
        return self._commit(model)

    def delete(self, user_id: int, *, deleted_by: int | None = None) -> None:
        """Flag the account as deleted and deactivate it."""

        model = self._require_model(user_id)
        now = now_in_app_naive_datetime()
        model.deleted = True
        model.deleted_by = deleted_by
        model.deleted_at = now
        model.is_active = False
        model.updated_at = now
        self.session.commit()

    def _require_model(self, user_id: int | None) -> UserModel:
        model = self._visible().filter(UserModel.id == user_id).one_or_none()
        if model is None:
            raise ValueError(f"User with id {user_id} not found")
        return model

    def _commit(self, model: UserModel) -> User:
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _copy_to_model(user: User, model: UserModel) -> None:
        model.role_id = user.role.id
        model.name = user.name
        model.email = user.email
        model.password = user.password
        model.is_active = user.is_active
        model.last_login = ensure_app_naive_datetime(user.last_login)
        model.updated_at = ensure_app_naive_datetime(user.updated_at)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        role = model.role
        return User(
            id=model.id,
            role=Role(id=role.id, name=role.name, alias=role.alias),
            name=model.name,
            email=model.email,
            password=model.password,
            last_login=model.last_login,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_active=model.is_active,
            deleted=model.deleted,
            deleted_by=model.deleted_by,
            deleted_at=model.deleted_at,
        )


__all__ = ["UserRepository"]
