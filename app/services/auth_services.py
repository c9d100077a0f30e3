"""Authentication service: accounts, tokens and caller resolution.

Passwords are hashed with passlib/bcrypt and sessions are stateless JWT
access tokens, renewed with longer-lived refresh tokens. Each request
resolves its user once into an immutable ``CallerContext`` that the
dispatch services consult for permissions and vendor scoping.
"""

from typing import Optional, Any, Dict, FrozenSet
from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.base import BaseService
from app.services.exceptions import (
    AuthenticationError,
    UserNotFoundError,
    UserInactiveError,
    InvalidPasswordError,
    EmailAlreadyExistsError,
    ValidationError
)
from app.repositories.user import UserRepository
from app.db.models.user import User
from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token
)
from app.schemas.user import UserCreate, PasswordChange
from app.schemas.auth import UserLogin, AuthResult, RegistrationResult, Token, CallerContext


VENDOR_PERMISSIONS = frozenset({
    "view_assigned_jobs",
    "update_job_status",
    "upload_parts",
    "view_vendor_portal",
})

ALL_PERMISSIONS = VENDOR_PERMISSIONS | frozenset({
    "manage_all_jobs",
    "manage_vendors",
    "view_reports",
})

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "registered_user": VENDOR_PERMISSIONS,
    "dispatcher": frozenset({
        "manage_all_jobs",
        "view_assigned_jobs",
        "update_job_status",
        "view_reports",
    }),
    "admin": ALL_PERMISSIONS,
}


def resolve_caller_context(user: Any) -> CallerContext:
    """Build the per-request caller identity.

    Explicit per-user permissions replace the role defaults; an empty list
    means "use the role defaults". Unknown roles get no permissions.
    """
    role = getattr(user, "role", None) or "registered_user"
    explicit = getattr(user, "permissions", None) or []
    permissions = frozenset(explicit) if explicit else ROLE_PERMISSIONS.get(role, frozenset())
    return CallerContext(
        user_id=user.id,
        role=role,
        vendor_id=getattr(user, "vendor_id", None),
        permissions=permissions,
    )


class AuthService(BaseService):
    """Service class for handling user authentication operations."""

    def __init__(self, correlation_id: Optional[str] = None, **repositories):
        """Initialize authentication service.

        Args:
            correlation_id: Optional request correlation ID for logging
            **repositories: Repository instances (user_repo)
        """
        super().__init__(correlation_id)
        if repositories:
            self._set_repositories(**repositories)

        if not hasattr(self, 'user_repo'):
            raise ValidationError(
                field="user_repo",
                message="UserRepository is required for AuthService",
                correlation_id=correlation_id
            )

    def register_user(self, user_in: UserCreate, db: Session) -> RegistrationResult:
        """Create a vendor-portal account if the email is not already registered.

        Self-registered accounts always get the ``registered_user`` role and no
        vendor link; an administrator links them to a vendor afterwards.

        Args:
            user_in: User creation data containing email, name, and password
            db: Database session for transaction management

        Returns:
            RegistrationResult with success status and user id or error info
        """
        sanitized_email = user_in.email.lower().strip()
        self.log_operation(
            "register_user_attempt",
            email_domain=sanitized_email.split('@')[1] if '@' in sanitized_email else 'unknown'
        )

        try:
            def _register_operation() -> User:
                if self.user_repo.email_exists(sanitized_email):
                    raise EmailAlreadyExistsError(
                        email=sanitized_email,
                        correlation_id=self.correlation_id
                    )

                hashed_password = get_password_hash(user_in.password)
                new_user = self.user_repo.create_user(user_in, hashed_password)
                self.log_operation("register_user_success", user_id=new_user.id)
                return new_user

            user = self.run_in_transaction(db, _register_operation)
            return RegistrationResult(
                success=True,
                user_id=user.id,
                message="User registered successfully"
            )

        except EmailAlreadyExistsError as e:
            self.log_operation(
                "register_user_failed",
                error_code=e.error_code,
                reason="email_already_exists"
            )
            return RegistrationResult(
                success=False,
                error_code=e.error_code,
                message=e.message
            )

    def authenticate_user_and_create_token(self, login_data: UserLogin, db: Session) -> AuthResult:
        """Authenticate a user by email and password and issue tokens.

        Args:
            login_data: Validated login credentials from UserLogin schema
            db: Database session used to record the login time

        Returns:
            AuthResult with token on success or error details on failure
        """
        sanitized_email = login_data.email.lower().strip()
        self.log_operation(
            "authenticate_user_attempt",
            email_domain=sanitized_email.split('@')[1] if '@' in sanitized_email else 'unknown'
        )

        try:
            user = self.user_repo.get_by_email(sanitized_email)
            if not user:
                raise UserNotFoundError(
                    email=sanitized_email,
                    correlation_id=self.correlation_id
                )

            if not user.is_active:
                raise UserInactiveError(
                    user_id=user.id,
                    correlation_id=self.correlation_id
                )

            if not verify_password(login_data.password, user.hashed_password):
                raise InvalidPasswordError(correlation_id=self.correlation_id)

            user_id = user.id
            self.run_in_transaction(db, lambda: self.user_repo.touch_last_login(user_id))

            self.log_operation("authenticate_user_success", user_id=user_id)
            return AuthResult(success=True, token=self._issue_tokens(user))

        except (UserNotFoundError, UserInactiveError, InvalidPasswordError) as e:
            self.log_operation(
                "authenticate_user_failed",
                error_code=e.error_code,
                reason=e.error_code.lower()
            )
            return AuthResult(
                success=False,
                error_code=e.error_code,
                message=e.message
            )

    def refresh_tokens(self, refresh_token: str) -> AuthResult:
        """Exchange a valid refresh token for a new token pair.

        The account is looked up again so a user deactivated since login
        cannot keep refreshing.

        Args:
            refresh_token: Refresh token issued by a previous login or refresh

        Returns:
            AuthResult with the new tokens or error details on failure
        """
        self.log_operation("refresh_tokens_attempt")
        try:
            user_id = decode_refresh_token(refresh_token)
            if user_id is None:
                raise AuthenticationError(
                    message="Invalid or expired refresh token",
                    correlation_id=self.correlation_id
                )

            user = self.user_repo.get_by_id(user_id)
            if not user:
                raise AuthenticationError(
                    message=f"User {user_id} not found",
                    correlation_id=self.correlation_id
                )
            if not user.is_active:
                raise UserInactiveError(user_id=user.id, correlation_id=self.correlation_id)

            self.log_operation("refresh_tokens_success", user_id=user.id)
            return AuthResult(success=True, token=self._issue_tokens(user))

        except (AuthenticationError, UserInactiveError) as e:
            self.log_operation("refresh_tokens_failed", error_code=e.error_code)
            return AuthResult(
                success=False,
                error_code=e.error_code,
                message=e.message
            )

    def change_password(self, user_id: int, password_in: PasswordChange, db: Session) -> None:
        """Replace the caller's password after checking the current one.

        Raises:
            InvalidPasswordError: ``current_password`` does not match
            ValidationError: The new password equals the current one
        """
        self.log_operation("change_password_attempt", user_id=user_id)

        def _change_password() -> None:
            user = self.user_repo.get_by_id(user_id)
            if not user:
                raise AuthenticationError(
                    message=f"User {user_id} not found",
                    correlation_id=self.correlation_id
                )
            if not verify_password(password_in.current_password, user.hashed_password):
                raise InvalidPasswordError(correlation_id=self.correlation_id)
            if password_in.new_password == password_in.current_password:
                raise ValidationError(
                    field="new_password",
                    message="New password must differ from the current password",
                    correlation_id=self.correlation_id
                )
            self.user_repo.set_password(user_id, get_password_hash(password_in.new_password))

        self.run_in_transaction(db, _change_password)
        self.log_operation("change_password_success", user_id=user_id)

    def _issue_tokens(self, user: User) -> Token:
        claims = {"sub": str(user.id), "role": user.role}
        return Token(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token({"sub": str(user.id)}),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )
