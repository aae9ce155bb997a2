"""Routes for family expenses."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.application.use_cases import expenses as expenses_uc
from app.domain.entities import User
from app.infrastructure.cache import CacheService
from app.infrastructure.database import get_db
from app.infrastructure.notifications import PresenceRegistry
from app.interfaces.api.dependencies import (
    get_cache,
    get_current_active_user,
    get_presence_registry,
)
from app.interfaces.api.errors import http_error_from
from app.interfaces.api.schemas import ExpenseCreate, ExpenseRead, ExpenseUpdate

router = APIRouter(prefix="/expenses", tags=["expenses"])

_DOMAIN_ERRORS = (LookupError, PermissionError, ValueError)


@router.get("/", response_model=list[ExpenseRead])
def list_expenses(
    family_id: int = Query(..., ge=1),
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    cache: CacheService = Depends(get_cache),
):
    try:
        expenses = expenses_uc.list_expenses(
            db,
            family_id=family_id,
            current_user=current_user,
            cache=cache,
            category=category,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return [ExpenseRead.model_validate(expense) for expense in expenses]


@router.post("/", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
    cache: CacheService = Depends(get_cache),
):
    try:
        expense = expenses_uc.create_expense(
            db,
            family_id=payload.family_id,
            category=payload.category,
            value=payload.value,
            date=payload.date,
            description=payload.description,
            current_user=current_user,
            registry=registry,
            cache=cache,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return ExpenseRead.model_validate(expense)


@router.get("/{expense_id}", response_model=ExpenseRead)
def read_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        expense = expenses_uc.get_expense(db, expense_id, current_user=current_user)
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return ExpenseRead.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
    cache: CacheService = Depends(get_cache),
):
    changes = payload.model_dump(exclude_unset=True)
    try:
        expense = expenses_uc.update_expense(
            db,
            expense_id=expense_id,
            current_user=current_user,
            registry=registry,
            cache=cache,
            category=changes.get("category"),
            value=changes.get("value"),
            date=changes.get("date"),
            description=changes.get("description"),
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return ExpenseRead.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
    cache: CacheService = Depends(get_cache),
):
    try:
        expenses_uc.delete_expense(
            db,
            expense_id=expense_id,
            current_user=current_user,
            registry=registry,
            cache=cache,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
