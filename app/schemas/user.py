from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

class UserBase(BaseModel):
	email: EmailStr
	name: str = Field(..., min_length=1, max_length=100)

class UserCreate(UserBase):
	password: str = Field(..., min_length=8, max_length=128)

class UserRead(UserBase):
	id: int
	role: str
	vendor_id: Optional[int] = None
	permissions: List[str] = []
	is_active: bool = True

	class Config:
		from_attributes = True

class UserProfile(UserRead):
	"""The caller's account plus the permissions in effect for this request."""
	effective_permissions: List[str] = []

class PasswordChange(BaseModel):
	current_password: str = Field(..., min_length=1, max_length=128)
	new_password: str = Field(..., min_length=8, max_length=128)
