from __future__ import annotations

from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, validator


class JobStatus(str, Enum):
	AVAILABLE = "available"
	ASSIGNED = "assigned"
	IN_PROGRESS = "in_progress"
	COMPLETED = "completed"
	CANCELLED = "cancelled"
	ON_HOLD = "on_hold"


class JobPriority(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"
	URGENT = "urgent"


# Statuses a dispatcher may set by hand; the rest come from claims and assignment updates
MANUAL_JOB_STATUSES = {JobStatus.AVAILABLE, JobStatus.ON_HOLD, JobStatus.CANCELLED}


class JobBase(BaseModel):
	customer_name: str = Field(..., min_length=1, max_length=100)
	customer_last_name: str = Field(..., min_length=1, max_length=100)
	customer_address: str = Field(..., min_length=1)
	customer_city: str = Field(..., min_length=1)
	customer_state: str = Field(..., min_length=1)
	customer_zip: str = Field(..., min_length=1, max_length=16)
	customer_phone: str = Field(..., min_length=3, max_length=32)
	customer_email: Optional[EmailStr] = None

	appliance_type: str = Field(..., min_length=1)
	appliance_brand: Optional[str] = None
	model_number: Optional[str] = None
	serial_number: Optional[str] = None
	service_description: str = Field(..., min_length=1, max_length=1000)

	scheduled_date: datetime
	scheduled_time_window: str = Field(..., min_length=1)
	priority: JobPriority = JobPriority.MEDIUM

	notes: Optional[str] = None
	is_under_warranty: bool = False
	warranty_number: Optional[str] = None
	warranty_expiry: Optional[datetime] = None


class JobCreate(JobBase):
	so_number: str = Field(..., min_length=1, max_length=64)
	internal_notes: Optional[str] = None

	@validator('so_number')
	def normalize_so_number(cls, v):
		v = v.strip().upper()
		if not v:
			raise ValueError("Service order number cannot be empty")
		return v


class JobUpdate(BaseModel):
	"""Partial update; only fields sent by the client are applied."""
	customer_name: Optional[str] = Field(None, min_length=1, max_length=100)
	customer_last_name: Optional[str] = Field(None, min_length=1, max_length=100)
	customer_address: Optional[str] = None
	customer_city: Optional[str] = None
	customer_state: Optional[str] = None
	customer_zip: Optional[str] = None
	customer_phone: Optional[str] = None
	customer_email: Optional[EmailStr] = None
	appliance_type: Optional[str] = None
	appliance_brand: Optional[str] = None
	model_number: Optional[str] = None
	serial_number: Optional[str] = None
	service_description: Optional[str] = Field(None, max_length=1000)
	scheduled_date: Optional[datetime] = None
	scheduled_time_window: Optional[str] = None
	priority: Optional[JobPriority] = None
	status: Optional[JobStatus] = None
	notes: Optional[str] = None
	internal_notes: Optional[str] = None
	is_under_warranty: Optional[bool] = None
	warranty_number: Optional[str] = None
	warranty_expiry: Optional[datetime] = None

	@validator('status')
	def only_manual_statuses(cls, v):
		if v is not None and v not in MANUAL_JOB_STATUSES:
			raise ValueError("status can only be set to available, on_hold or cancelled")
		return v


class AvailableJobRead(JobBase):
	"""Job as shown on the vendor job board; internal fields are left out."""
	id: int
	so_number: str
	status: JobStatus
	created_at: Optional[datetime] = None

	class Config:
		from_attributes = True


class JobRead(AvailableJobRead):
	internal_notes: Optional[str] = None
	created_by: Optional[int] = None
	updated_at: Optional[datetime] = None


class JobSummary(BaseModel):
	"""Compact job view embedded in assignment responses."""
	id: int
	so_number: str
	customer_name: str
	customer_last_name: str
	customer_address: str
	customer_city: str
	customer_state: str
	customer_zip: str
	customer_phone: str
	appliance_type: str
	appliance_brand: Optional[str] = None
	service_description: str
	scheduled_date: datetime
	scheduled_time_window: str
	priority: JobPriority
	status: JobStatus

	class Config:
		from_attributes = True


class JobPage(BaseModel):
	items: List[AvailableJobRead]
	page: int
	page_size: int
	total: int
	total_pages: int


class AvailableJobsInput(BaseModel):
	"""Filters for the available-job listing."""
	city: Optional[str] = Field(None, max_length=100)
	appliance_type: Optional[str] = Field(None, max_length=100)
	page: int = Field(1, ge=1)
	page_size: int = Field(20, ge=1, le=100)

	@validator('city', 'appliance_type')
	def blank_to_none(cls, v):
		if v is None:
			return None
		v = v.strip()
		return v or None


class JobListInput(BaseModel):
	"""Filters for the dispatcher's listing of every job."""
	status: Optional[JobStatus] = None
	page: int = Field(1, ge=1)
	page_size: int = Field(20, ge=1, le=100)


class JobListPage(BaseModel):
	items: List[JobRead]
	page: int
	page_size: int
	total: int
	total_pages: int
