from typing import Optional

from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password):
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: int = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_delta or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_refresh_token(data: dict, expires_delta: int = None):
    """Create a refresh token with longer expiration time (default 7 days)."""
    to_encode = data.copy()
    refresh_expire_minutes = expires_delta or 10080
    expire = datetime.now(timezone.utc) + timedelta(minutes=refresh_expire_minutes)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def _decode_subject(token: str, token_type: str) -> Optional[int]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

def decode_access_token(token: str) -> Optional[int]:
    """Return the user id carried by a valid access token, else None."""
    return _decode_subject(token, "access")

def decode_refresh_token(token: str) -> Optional[int]:
    """Return the user id carried by a valid refresh token, else None."""
    return _decode_subject(token, "refresh")
