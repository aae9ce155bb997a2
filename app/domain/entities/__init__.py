"""Domain entities exposed by the application."""

from .budget import Budget
from .budget_share import BudgetShare, SharedBudget
from .expense import Expense
from .family import Family
from .role import ADMIN_ROLE_ALIAS, DEFAULT_ROLES, USER_ROLE_ALIAS, Role
from .user import User

__all__ = [
    "ADMIN_ROLE_ALIAS",
    "DEFAULT_ROLES",
    "USER_ROLE_ALIAS",
    "Budget",
    "BudgetShare",
    "Expense",
    "Family",
    "Role",
    "SharedBudget",
    "User",
]
