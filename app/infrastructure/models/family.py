"""SQLAlchemy models for families and their members."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, func
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base

family_member_table = Table(
    "family_member",
    Base.metadata,
    Column("family_id", Integer, ForeignKey("family.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)


class FamilyModel(Base):
    """Database representation of a family group."""

    __tablename__ = "family"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    admin_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    members = relationship("UserModel", secondary=family_member_table, lazy="selectin")


__all__ = ["FamilyModel", "family_member_table"]
