"""SQLAlchemy model for account roles."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class RoleModel(Base):
    __tablename__ = "role"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    alias = Column(String(30), nullable=False, unique=True, index=True)

    users = relationship("UserModel", back_populates="role")


__all__ = ["RoleModel"]
