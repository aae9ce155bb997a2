"""Application use cases grouped by resource."""

from . import budgets, expenses, families, users

__all__ = ["budgets", "expenses", "families", "users"]
