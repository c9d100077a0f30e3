"""Authentication schemas with comprehensive validation."""

from pydantic import BaseModel, EmailStr, Field, validator
from typing import FrozenSet, Optional
import re


class Token(BaseModel):
    """JWT token response model."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None


class UserLogin(BaseModel):
    """User login request with validation."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password"
    )

    @validator('email')
    def validate_email_format(cls, v):
        """Normalize email beyond EmailStr."""
        email = str(v).lower().strip()

        if len(email) > 254:  # RFC 5321 limit
            raise ValueError("Email address too long")

        return email

    @validator('password')
    def validate_password_security(cls, v):
        """Validate password meets security requirements."""
        if len(v.strip()) != len(v):
            raise ValueError("Password cannot start or end with whitespace")

        # At least one letter and one number
        if not re.search(r'[A-Za-z]', v) or not re.search(r'\d', v):
            raise ValueError("Password must contain at least one letter and one number")

        return v


class CallerContext(BaseModel):
    """Identity of the caller, resolved once per request and never mutated.

    ``vendor_id`` is the vendor the caller acts for; it is ``None`` for
    staff accounts and for vendor users not yet linked to a vendor.
    """
    user_id: int
    role: str
    vendor_id: Optional[int] = None
    permissions: FrozenSet[str] = frozenset()

    class Config:
        frozen = True

    @property
    def is_vendor_scoped(self) -> bool:
        return self.role == "registered_user"

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


class AuthResult(BaseModel):
    """Authentication operation result."""
    success: bool
    token: Optional[Token] = None
    error_code: Optional[str] = None
    message: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "success": True,
                "token": {
                    "access_token": "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9...",
                    "token_type": "bearer"
                }
            }
        }


class RegistrationResult(BaseModel):
    """User registration operation result."""
    success: bool
    user_id: Optional[int] = None
    error_code: Optional[str] = None
    message: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    """Refresh token exchanged for a new token pair."""
    refresh_token: str = Field(..., min_length=1)
