from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, validator


class VendorCreate(BaseModel):
	name: str = Field(..., min_length=1, max_length=120)
	phone_number: str = Field(..., min_length=3, max_length=32)
	email: EmailStr
	notes: Optional[str] = None

	@validator('name')
	def strip_name(cls, v):
		if not v.strip():
			raise ValueError("Name cannot be empty or only whitespace")
		return v.strip()

	@validator('email')
	def normalize_email(cls, v):
		return str(v).lower().strip()


class VendorUpdate(BaseModel):
	"""Partial update; ``is_active`` false stops the vendor from claiming jobs."""
	name: Optional[str] = Field(None, min_length=1, max_length=120)
	phone_number: Optional[str] = Field(None, min_length=3, max_length=32)
	email: Optional[EmailStr] = None
	notes: Optional[str] = None
	is_active: Optional[bool] = None

	@validator('name')
	def strip_name(cls, v):
		if v is None:
			return v
		if not v.strip():
			raise ValueError("Name cannot be empty or only whitespace")
		return v.strip()

	@validator('email')
	def normalize_email(cls, v):
		return str(v).lower().strip() if v is not None else v


class VendorStats(BaseModel):
	total_jobs: int = 0
	completed_jobs: int = 0
	average_rating: float = 0.0
	completion_rate: float = 0.0


class VendorRead(BaseModel):
	id: int
	name: str
	phone_number: str
	email: str
	is_active: bool
	notes: Optional[str] = None
	stats: VendorStats

	class Config:
		from_attributes = True


class VendorPage(BaseModel):
	items: List[VendorRead]
	page: int
	page_size: int
	total: int
	total_pages: int
