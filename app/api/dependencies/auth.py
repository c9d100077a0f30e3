"""Authentication dependencies: bearer token -> user -> caller context."""

from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_correlation_id
from app.core.security import decode_access_token
from app.db.models.user import User
from app.repositories.user import UserRepository
from app.schemas.auth import CallerContext
from app.services.auth_services import resolve_caller_context
from app.services.exceptions import AuthenticationError, PermissionDeniedError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> User:
    """Resolve the bearer token to an active user.

    Raises:
        AuthenticationError: Invalid or expired token, unknown or inactive user
    """
    user_id = decode_access_token(token)
    if user_id is None:
        raise AuthenticationError(message="Invalid or expired token", correlation_id=correlation_id)

    user = UserRepository(db=db, correlation_id=correlation_id).get_by_id(user_id)
    if not user:
        raise AuthenticationError(message=f"User {user_id} not found", correlation_id=correlation_id)
    if not user.is_active:
        raise AuthenticationError(message=f"User {user_id} is inactive", correlation_id=correlation_id)
    return user


def get_caller_context(request: Request, current_user: User = Depends(get_current_user)) -> CallerContext:
    caller = resolve_caller_context(current_user)
    request.state.user_id = caller.user_id
    request.state.vendor_id = caller.vendor_id
    return caller


def require_permission(permission: str) -> Callable[..., CallerContext]:
    """Dependency factory: the caller context, provided it holds ``permission``."""

    def _require_permission(
        caller: CallerContext = Depends(get_caller_context),
        correlation_id: Optional[str] = Depends(get_correlation_id)
    ) -> CallerContext:
        if not caller.has_permission(permission):
            raise PermissionDeniedError(permission, user_id=caller.user_id, correlation_id=correlation_id)
        return caller

    return _require_permission
