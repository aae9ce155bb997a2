from fastapi import FastAPI

from .auth import router as auth_router
from .budgets import router as budgets_router
from .expenses import router as expenses_router
from .families import router as families_router
from .realtime import router as realtime_router
from .users import router as users_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(families_router)
    app.include_router(budgets_router)
    app.include_router(expenses_router)
    app.include_router(realtime_router)
