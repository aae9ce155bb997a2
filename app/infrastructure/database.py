"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


settings = get_settings()

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict[str, object]:
    """Return driver specific keyword arguments for ``create_engine``."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # FastAPI runs sync endpoints in a worker thread pool.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


database_url = settings.database_url
engine = create_engine(database_url, **_engine_options(database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database() -> None:
    """Ensure all ORM models have corresponding database tables and seed roles."""

    from app.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)
    _seed_roles()


def _seed_roles() -> None:
    from app.domain.entities import DEFAULT_ROLES
    from app.infrastructure.repositories import RoleRepository

    with SessionLocal() as session:
        created = RoleRepository(session).ensure(DEFAULT_ROLES)
    if created:
        logger.info("Seeded roles: %s", ", ".join(created))


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
