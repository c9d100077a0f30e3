from __future__ import annotations

from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, validator

from app.schemas.job import JobSummary
from app.schemas.part import PartRead, PhotoRead


class AssignmentStatus(str, Enum):
	ASSIGNED = "assigned"
	ARRIVED = "arrived"
	IN_PROGRESS = "in_progress"
	WAITING_ON_PARTS = "waiting_on_parts"
	COMPLETED = "completed"
	RESCHEDULED = "rescheduled"
	CANCELLED = "cancelled"


class AssignmentUpdate(BaseModel):
	"""Status change and/or field updates sent by the vendor."""
	status: Optional[AssignmentStatus] = None
	actual_arrival: Optional[datetime] = None
	work_started: Optional[datetime] = None
	completed_at: Optional[datetime] = None
	notes: Optional[str] = Field(None, max_length=2000)
	vendor_notes: Optional[str] = Field(None, max_length=2000)
	completion_notes: Optional[str] = Field(None, max_length=2000)
	customer_signature: Optional[str] = None
	labor_hours: Optional[float] = Field(None, ge=0)
	total_labor_cost: Optional[float] = Field(None, ge=0)


class RescheduleInput(BaseModel):
	new_date: datetime
	new_time_window: Optional[str] = Field(None, max_length=64)
	reason: str = Field(..., min_length=1, max_length=500)
	vendor_notes: Optional[str] = Field(None, max_length=2000)

	@validator('reason')
	def reason_not_blank(cls, v):
		if not v.strip():
			raise ValueError("Reason cannot be empty or only whitespace")
		return v.strip()


class RescheduleInfo(BaseModel):
	original_date: Optional[datetime] = None
	new_date: Optional[datetime] = None
	reason: Optional[str] = None
	requested_at: Optional[datetime] = None


class InvoiceRead(BaseModel):
	invoice_number: str
	generated_at: Optional[datetime] = None
	total_cost: float
	pdf_url: Optional[str] = None


class AssignmentRead(BaseModel):
	id: int
	job_id: int
	vendor_id: int
	status: AssignmentStatus
	assigned_at: Optional[datetime] = None
	scheduled_arrival: Optional[datetime] = None
	actual_arrival: Optional[datetime] = None
	work_started: Optional[datetime] = None
	completed_at: Optional[datetime] = None
	notes: Optional[str] = None
	vendor_notes: Optional[str] = None
	completion_notes: Optional[str] = None
	labor_hours: float = 0.0
	total_parts_cost: float = 0.0
	total_labor_cost: float = 0.0
	total_cost: float = 0.0
	reschedule_info: Optional[RescheduleInfo] = None
	invoice: Optional[InvoiceRead] = None

	class Config:
		from_attributes = True


class AssignmentListItem(AssignmentRead):
	job: Optional[JobSummary] = None


class AssignmentDetail(AssignmentRead):
	customer_signature: Optional[str] = None
	job: JobSummary
	parts: List[PartRead] = []
	photos: List[PhotoRead] = []


class ClaimInput(BaseModel):
	vendor_notes: Optional[str] = Field(None, max_length=2000)


class ClaimRead(BaseModel):
	job_id: int
	assignment: AssignmentRead


class BulkClaimInput(BaseModel):
	job_ids: List[int] = Field(..., min_length=1, max_length=50)
	vendor_notes: Optional[str] = Field(None, max_length=2000)


class ClaimConfirmation(BaseModel):
	job_id: int
	assignment_id: int


class ClaimFailure(BaseModel):
	job_id: int
	error_code: str
	reason: str


class BulkClaimResult(BaseModel):
	"""Per-job outcome of a bulk claim; one failure never undoes another success."""
	confirmed: List[ClaimConfirmation] = []
	failed: List[ClaimFailure] = []
