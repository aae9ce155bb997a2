"""SQLAlchemy model for family expenses."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class ExpenseModel(Base):
    """Database representation of an expense."""

    __tablename__ = "expense"

    id = Column(Integer, primary_key=True, index=True)
    family_id = Column(
        Integer, ForeignKey("family.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category = Column(String(80), nullable=False)
    value = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("user.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime, nullable=True)


__all__ = ["ExpenseModel"]
