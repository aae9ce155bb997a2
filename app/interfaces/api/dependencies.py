"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.domain.entities import User
from app.infrastructure.cache import CacheService
from app.infrastructure.database import get_db
from app.infrastructure.notifications import PresenceRegistry
from app.infrastructure.repositories import UserRepository
from app.infrastructure.security import decode_access_token
from app.infrastructure.sharing import BudgetSharingService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the authenticated user for the provided token.

    The ``uid`` claim is preferred; tokens that only carry the email in
    ``sub`` are still accepted.
    """

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_error() from exc

    repository = UserRepository(db)
    user_id = payload.get("uid")
    email = payload.get("sub")
    if isinstance(user_id, int):
        user = repository.get(user_id)
    elif isinstance(email, str):
        user = repository.get_by_email(email)
    else:
        raise _credentials_error()

    if user is None:
        raise _credentials_error("User not found")
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token, db)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is active."""

    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    return current_user


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """Ensure the authenticated user has administrator privileges."""

    if not current_user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized",
        )
    return current_user


def get_presence_registry(request: Request) -> PresenceRegistry:
    return request.app.state.presence_registry


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache


def get_sharing_service(request: Request) -> BudgetSharingService:
    return request.app.state.sharing_service
