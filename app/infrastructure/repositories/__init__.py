"""Repository implementations for infrastructure layer."""

from .budget_repository import BudgetRepository
from .expense_repository import ExpenseRepository
from .family_repository import FamilyRepository
from .role_repository import RoleRepository
from .user_repository import UserRepository

__all__ = [
    "BudgetRepository",
    "ExpenseRepository",
    "FamilyRepository",
    "RoleRepository",
    "UserRepository",
]
