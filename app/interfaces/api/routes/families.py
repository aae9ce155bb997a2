"""Routes for families and their members."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.application.use_cases.families import (
    add_family_member,
    create_family,
    ensure_family_access,
    list_families,
    remove_family_member,
)
from app.domain.entities import User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import get_current_active_user
from app.interfaces.api.errors import http_error_from
from app.interfaces.api.schemas import FamilyCreate, FamilyMemberAdd, FamilyRead

router = APIRouter(prefix="/families", tags=["families"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=FamilyRead, status_code=status.HTTP_201_CREATED)
def create(
    payload: FamilyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Create a family administered by the caller."""

    try:
        family = create_family(db, name=payload.name, admin=current_user)
    except ValueError as exc:
        raise http_error_from(exc) from exc
    logger.info("Family %s created by user %s", family.id, current_user.id)
    return FamilyRead.model_validate(family)


@router.get("/", response_model=list[FamilyRead])
def list_for_current_user(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return [FamilyRead.model_validate(family) for family in list_families(db, user=current_user)]


@router.get("/{family_id}", response_model=FamilyRead)
def read(
    family_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        family = ensure_family_access(db, family_id=family_id, user=current_user)
    except (LookupError, PermissionError) as exc:
        raise http_error_from(exc) from exc
    return FamilyRead.model_validate(family)


@router.post("/{family_id}/members", response_model=FamilyRead)
def add_member(
    family_id: int,
    payload: FamilyMemberAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        family = add_family_member(
            db, family_id=family_id, user_id=payload.user_id, acting_user=current_user
        )
    except (LookupError, PermissionError, ValueError) as exc:
        raise http_error_from(exc) from exc
    logger.info("User %s added to family %s", payload.user_id, family_id)
    return FamilyRead.model_validate(family)


@router.delete("/{family_id}/members/{user_id}", response_model=FamilyRead)
def remove_member(
    family_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        family = remove_family_member(
            db, family_id=family_id, user_id=user_id, acting_user=current_user
        )
    except (LookupError, PermissionError, ValueError) as exc:
        raise http_error_from(exc) from exc
    logger.info("User %s removed from family %s", user_id, family_id)
    return FamilyRead.model_validate(family)
