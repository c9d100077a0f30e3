# app/api/endpoints/user.py
from fastapi import Depends
from sqlalchemy.orm import Session
from app.api.router import create_router
from app.api.dependencies.auth import get_current_user, get_caller_context
from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_auth_service
from app.db.models.user import User
from app.schemas.auth import CallerContext
from app.schemas.user import UserProfile, PasswordChange
from app.services.auth_services import AuthService

router = create_router(name="user")

@router.get("/me", response_model=UserProfile)
def read_users_me(
  current_user: User = Depends(get_current_user),
  caller: CallerContext = Depends(get_caller_context)
):
  profile = UserProfile.model_validate(current_user)
  profile.effective_permissions = sorted(caller.permissions)
  return profile

@router.post("/me/password", status_code=204)
def change_password(
  password_in: PasswordChange,
  db: Session = Depends(get_db),
  caller: CallerContext = Depends(get_caller_context),
  auth_service: AuthService = Depends(get_auth_service)
) -> None:
  """Change the caller's password; the current password must be supplied."""
  auth_service.change_password(caller.user_id, password_in, db)
