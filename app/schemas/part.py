from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, validator


class PhotoType(str, Enum):
	BEFORE = "before"
	DURING = "during"
	AFTER = "after"
	PART = "part"
	GENERAL = "general"


class PhotoRead(BaseModel):
	id: int
	assignment_id: int
	part_id: Optional[int] = None
	filename: str
	original_name: Optional[str] = None
	url: str
	mime_type: Optional[str] = None
	size: Optional[int] = None
	description: Optional[str] = None
	photo_type: PhotoType
	uploaded_by: Optional[int] = None
	created_at: Optional[datetime] = None

	class Config:
		from_attributes = True


class PartCreate(BaseModel):
	part_number: str = Field(..., min_length=1, max_length=64)
	part_name: str = Field(..., min_length=1, max_length=200)
	quantity: int = Field(..., ge=1)
	unit_cost: float = Field(..., ge=0)
	notes: Optional[str] = Field(None, max_length=1000)

	@validator('part_number', 'part_name')
	def not_blank(cls, v):
		if not v.strip():
			raise ValueError("Value cannot be empty or only whitespace")
		return v.strip()


class PartRead(BaseModel):
	id: int
	assignment_id: int
	part_number: str
	part_name: str
	quantity: int
	unit_cost: float
	line_total: float
	notes: Optional[str] = None
	added_by: Optional[int] = None
	created_at: Optional[datetime] = None
	photos: List[PhotoRead] = []

	class Config:
		from_attributes = True


class RemovePhotosInput(BaseModel):
	photo_ids: List[int] = Field(..., min_length=1)


class DeleteResult(BaseModel):
	success: bool = True
	deleted_id: int
	message: Optional[str] = None
