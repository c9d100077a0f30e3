"""User repository for user-related database operations."""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session

from app.repositories.base import BaseRepository
from app.db.models.user import User
from app.schemas.user import UserCreate


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, User, correlation_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address.

        Args:
            email: User's email address

        Returns:
            User instance or None if not found
        """
        result = self.db.query(self.model).filter(
            self.model.email == email,
            self.model.is_deleted == False
        ).first()

        self._log_operation("get_by_email", email=email, found=result is not None)
        return result

    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """Check if email is already registered.

        Args:
            email: Email address to check
            exclude_id: Optional user ID to exclude from check (for updates)

        Returns:
            True if email exists, False otherwise
        """
        query = self.db.query(self.model.id).filter(
            self.model.email == email,
            self.model.is_deleted == False
        )

        if exclude_id:
            query = query.filter(self.model.id != exclude_id)

        result = query.first() is not None
        self._log_operation("email_exists", email=email, exists=result, exclude_id=exclude_id)
        return result

    def create_user(self, user_in: UserCreate, hashed_password: str) -> User:
        user_data = user_in.model_dump(exclude={"password"})
        user_data["email"] = user_data["email"].lower().strip()
        user_data["hashed_password"] = hashed_password
        return self.create(user_data)

    def link_vendor(self, user_id: int, vendor_id: Optional[int]) -> Optional[User]:
        """Attach a user to a vendor; ``None`` detaches."""
        return self.update(user_id, {"vendor_id": vendor_id})

    def touch_last_login(self, user_id: int) -> Optional[User]:
        return self.update(user_id, {"last_login": datetime.now(timezone.utc)})

    def set_password(self, user_id: int, hashed_password: str) -> Optional[User]:
        return self.update(user_id, {"hashed_password": hashed_password})

    def deactivate_for_vendor(self, vendor_id: int) -> int:
        """Deactivate every account linked to ``vendor_id``; returns how many changed."""
        count = (
            self.db.query(self.model)
            .filter(self.model.vendor_id == vendor_id, self.model.is_active == True)
            .update({"is_active": False}, synchronize_session="fetch")
        )
        self.db.flush()
        self._log_operation("deactivate_for_vendor", vendor_id=vendor_id, count=count)
        return count
