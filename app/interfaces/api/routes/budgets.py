"""Routes for family budgets and budget sharing."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.application.use_cases import budgets as budgets_uc
from app.domain.entities import User
from app.infrastructure.cache import CacheService
from app.infrastructure.database import get_db
from app.infrastructure.notifications import PresenceRegistry
from app.infrastructure.sharing import BudgetSharingService
from app.interfaces.api.dependencies import (
    get_cache,
    get_current_active_user,
    get_presence_registry,
    get_sharing_service,
)
from app.interfaces.api.errors import http_error_from
from app.interfaces.api.schemas import (
    BudgetCreate,
    BudgetRead,
    BudgetShareRead,
    BudgetShareRequest,
    BudgetUpdate,
    SharedBudgetRead,
)

router = APIRouter(prefix="/budgets", tags=["budgets"])

_DOMAIN_ERRORS = (LookupError, PermissionError, ValueError)


@router.get("/", response_model=list[BudgetRead])
def list_budgets(
    family_id: int = Query(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    cache: CacheService = Depends(get_cache),
):
    try:
        budgets = budgets_uc.list_budgets(
            db, family_id=family_id, current_user=current_user, cache=cache
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return [BudgetRead.model_validate(budget) for budget in budgets]


@router.post("/", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
def create_budget(
    payload: BudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
    cache: CacheService = Depends(get_cache),
):
    """Create a budget and notify the family room."""

    try:
        budget = budgets_uc.create_budget(
            db,
            family_id=payload.family_id,
            category=payload.category,
            value=payload.value,
            date=payload.date,
            current_user=current_user,
            registry=registry,
            cache=cache,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return BudgetRead.model_validate(budget)


@router.get("/shared", response_model=list[SharedBudgetRead])
def list_shared_budgets(
    current_user: User = Depends(get_current_active_user),
    sharing: BudgetSharingService = Depends(get_sharing_service),
):
    """Return the budgets other users shared with the caller."""

    shared = budgets_uc.list_shared_budgets(current_user=current_user, sharing=sharing)
    return [SharedBudgetRead.model_validate(item) for item in shared]


@router.get("/{budget_id}", response_model=BudgetRead)
def read_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    sharing: BudgetSharingService = Depends(get_sharing_service),
):
    try:
        budget = budgets_uc.get_budget(
            db, budget_id, current_user=current_user, sharing=sharing
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return BudgetRead.model_validate(budget)


@router.put("/{budget_id}", response_model=BudgetRead)
def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
    cache: CacheService = Depends(get_cache),
    sharing: BudgetSharingService = Depends(get_sharing_service),
):
    changes = payload.model_dump(exclude_unset=True)
    try:
        budget = budgets_uc.update_budget(
            db,
            budget_id=budget_id,
            current_user=current_user,
            registry=registry,
            cache=cache,
            sharing=sharing,
            category=changes.get("category"),
            value=changes.get("value"),
            date=changes.get("date"),
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return BudgetRead.model_validate(budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    registry: PresenceRegistry = Depends(get_presence_registry),
    cache: CacheService = Depends(get_cache),
    sharing: BudgetSharingService = Depends(get_sharing_service),
):
    try:
        budgets_uc.delete_budget(
            db,
            budget_id=budget_id,
            current_user=current_user,
            registry=registry,
            cache=cache,
            sharing=sharing,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{budget_id}/share", response_model=BudgetShareRead, status_code=status.HTTP_201_CREATED)
def share_budget(
    budget_id: int,
    payload: BudgetShareRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    sharing: BudgetSharingService = Depends(get_sharing_service),
):
    """Share a budget with other users; each recipient gets a notification."""

    try:
        share = budgets_uc.share_budget(
            db,
            budget_id=budget_id,
            user_ids=payload.user_ids,
            current_user=current_user,
            sharing=sharing,
            message=payload.message,
        )
    except _DOMAIN_ERRORS as exc:
        raise http_error_from(exc) from exc
    return BudgetShareRead.model_validate(share)


@router.delete("/{budget_id}/share/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def unshare_budget(
    budget_id: int,
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    sharing: BudgetSharingService = Depends(get_sharing_service),
):
    try:
        budgets_uc.unshare_budget(
            budget_id=budget_id, user_id=user_id, current_user=current_user, sharing=sharing
        )
    except LookupError as exc:
        raise http_error_from(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
