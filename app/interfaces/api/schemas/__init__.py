from .auth import RegisterRequest, RegisterResponse, Token
from .budget import BudgetCreate, BudgetRead, BudgetUpdate
from .expense import ExpenseCreate, ExpenseRead, ExpenseUpdate
from .family import FamilyCreate, FamilyMemberAdd, FamilyRead
from .realtime import RealtimeStatsRead
from .sharing import BudgetShareRead, BudgetShareRequest, SharedBudgetRead
from .user import RoleRead, UserRead, UserSummaryRead, UserUpdate

__all__ = [
    "BudgetCreate",
    "BudgetRead",
    "BudgetShareRead",
    "BudgetShareRequest",
    "BudgetUpdate",
    "ExpenseCreate",
    "ExpenseRead",
    "ExpenseUpdate",
    "FamilyCreate",
    "FamilyMemberAdd",
    "FamilyRead",
    "RealtimeStatsRead",
    "RegisterRequest",
    "RegisterResponse",
    "RoleRead",
    "SharedBudgetRead",
    "Token",
    "UserRead",
    "UserSummaryRead",
    "UserUpdate",
]
