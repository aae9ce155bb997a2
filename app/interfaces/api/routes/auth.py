"""Endpoints for account registration and token issuance."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.application.use_cases.users import (
    AuthenticationStatus,
    authenticate_user,
    create_user,
    record_login,
)
from app.config import get_settings
from app.domain.entities import User
from app.infrastructure.database import get_db
from app.infrastructure.security import create_access_token
from app.interfaces.api.schemas import RegisterRequest, RegisterResponse, Token, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _issue_token(user: User) -> str:
    settings = get_settings()
    return create_access_token(
        data={"sub": user.email, "uid": user.id, "role": user.role.alias},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create a regular account and sign it in."""

    try:
        user = create_user(
            db,
            name=payload.name,
            email=payload.email,
            password=payload.password,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info("User registered: %s", user.id)
    return RegisterResponse(
        user=UserRead.model_validate(user),
        access_token=_issue_token(user),
    )


# OAuth2PasswordRequestForm calls the email field ``username``.
@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Authenticate by email and password and return a JWT."""

    user, auth_status = authenticate_user(db, form_data.username, form_data.password)

    if auth_status is AuthenticationStatus.INVALID_CREDENTIALS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if auth_status is AuthenticationStatus.INACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    record_login(db, user.id)
    return {
        "access_token": _issue_token(user),
        "token_type": "bearer",
        "role": user.role.alias,
    }
