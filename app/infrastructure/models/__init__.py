"""ORM models used by the application infrastructure."""

from .budget import BudgetModel
from .expense import ExpenseModel
from .family import FamilyModel, family_member_table
from .role import RoleModel
from .user import UserModel

__all__ = [
    "BudgetModel",
    "ExpenseModel",
    "FamilyModel",
    "family_member_table",
    "RoleModel",
    "UserModel",
]
