"""Job catalog: job records, the available-job board and job status mirroring."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Dict, Any, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.services.base import BaseService
from app.services.exceptions import (
	JobNotFoundError,
	DuplicateServiceOrderError,
	JobStatusConflictError,
)
from app.repositories.job import JobRepository
from app.db.models.job import Job
from app.db.models.assignment import Assignment
from app.schemas.auth import CallerContext
from app.schemas.job import (
	JobCreate,
	JobUpdate,
	JobStatus,
	JobPriority,
	JobRead,
	JobPage,
	JobListPage,
	JobListInput,
	AvailableJobRead,
	AvailableJobsInput,
)


# Assignment status -> job status; statuses not listed leave the job untouched
MIRRORED_STATUSES: Dict[str, str] = {
	"completed": JobStatus.COMPLETED.value,
	"in_progress": JobStatus.IN_PROGRESS.value,
	"arrived": JobStatus.IN_PROGRESS.value,
	"cancelled": JobStatus.AVAILABLE.value,
}

# Optional columns a partial update may clear with an explicit null
_NULLABLE_JOB_FIELDS = {
	"customer_email",
	"appliance_brand",
	"model_number",
	"serial_number",
	"notes",
	"internal_notes",
	"warranty_number",
	"warranty_expiry",
}


class JobService(BaseService):
	def __init__(self, job_repo: JobRepository, file_service=None, correlation_id: Optional[str] = None):
		super().__init__(correlation_id)
		self._set_repositories(job_repo=job_repo)
		self.file_service = file_service

	def create_job(self, job_in: JobCreate, caller: CallerContext, db: Session) -> Job:
		self.log_operation("create_job_attempt", so_number=job_in.so_number, user_id=caller.user_id)

		def _create_job() -> Job:
			if self.job_repo.get_by_so_number(job_in.so_number):
				raise DuplicateServiceOrderError(job_in.so_number, correlation_id=self.correlation_id)
			data = job_in.model_dump()
			data["priority"] = job_in.priority.value
			data["status"] = JobStatus.AVAILABLE.value
			data["created_by"] = caller.user_id
			try:
				return self.job_repo.create(data)
			except IntegrityError:
				# Lost a race with a concurrent create of the same service order
				raise DuplicateServiceOrderError(job_in.so_number, correlation_id=self.correlation_id)

		job = self.run_in_transaction(db, _create_job)
		self.log_operation("create_job_success", job_id=job.id, so_number=job.so_number)
		return job

	def get_job(self, job_id: int) -> Job:
		job = self.job_repo.get_by_id(job_id)
		if not job:
			raise JobNotFoundError(job_id, correlation_id=self.correlation_id)
		return job

	def get_by_so_number(self, so_number: str) -> Job:
		normalized = so_number.strip().upper()
		job = self.job_repo.get_by_so_number(normalized)
		if not job:
			raise JobNotFoundError(normalized, correlation_id=self.correlation_id)
		return job

	def read_for(self, job: Job, caller: CallerContext) -> AvailableJobRead:
		"""Serialize a job for the caller; vendor users never see internal fields."""
		schema = AvailableJobRead if caller.is_vendor_scoped else JobRead
		return schema.model_validate(job)

	def list_jobs(self, filters: JobListInput) -> JobListPage:
		status = filters.status.value if filters.status else None
		items, total = self.job_repo.list_all(
			status=status,
			skip=(filters.page - 1) * filters.page_size,
			limit=filters.page_size,
		)
		return JobListPage(
			items=[JobRead.model_validate(job) for job in items],
			page=filters.page,
			page_size=filters.page_size,
			total=total,
			total_pages=math.ceil(total / filters.page_size) if total else 0,
		)

	def list_available(self, filters: AvailableJobsInput) -> JobPage:
		skip = (filters.page - 1) * filters.page_size
		items, total = self.job_repo.list_available(
			city=filters.city,
			appliance_type=filters.appliance_type,
			skip=skip,
			limit=filters.page_size,
		)
		return JobPage(
			items=[AvailableJobRead.model_validate(job) for job in items],
			page=filters.page,
			page_size=filters.page_size,
			total=total,
			total_pages=math.ceil(total / filters.page_size) if total else 0,
		)

	def update_job(self, job_id: int, job_in: JobUpdate, db: Session) -> Job:
		"""Apply a partial update.

		A manual status (available, on_hold or cancelled) is only accepted
		while no assignment holds the job.
		"""
		def _update_job() -> Job:
			job = self.get_job(job_id)
			data = job_in.model_dump(exclude_unset=True)
			status = data.pop("status", None)
			if status is not None:
				status = JobStatus(status).value
				if status != job.status and self.job_repo.has_active_assignment(job_id):
					raise JobStatusConflictError(job_id, status, correlation_id=self.correlation_id)
				data["status"] = status
			if data.get("priority") is not None:
				data["priority"] = JobPriority(data["priority"]).value
			# Non-nullable columns keep their value when the client sends null
			data = {k: v for k, v in data.items() if v is not None or k in _NULLABLE_JOB_FIELDS}
			return self.job_repo.update_fields(job_id, data)

		job = self.run_in_transaction(db, _update_job)
		self.log_operation("update_job", job_id=job_id)
		return job

	def delete_job(self, job_id: int, db: Session) -> None:
		"""Hard delete; assignments, parts and photos go with the job."""
		object_keys: List[str] = []

		def _delete_job() -> None:
			job = self.get_job(job_id)
			for assignment in job.assignments:
				object_keys.extend(photo.url for photo in assignment.photos)
			self.job_repo.delete(job_id, soft_delete=False)

		self.run_in_transaction(db, _delete_job)
		self.log_operation("delete_job", job_id=job_id, removed_photos=len(object_keys))
		if object_keys and self.file_service is not None:
			self.file_service.purge_objects(object_keys)

	def mark_assigned(self, job_id: int) -> bool:
		"""Compare-and-set ``available -> assigned``; runs in the caller's transaction."""
		return self.job_repo.mark_assigned(job_id)

	def mirror_from_assignment(self, assignment: Assignment) -> Optional[Job]:
		"""Reflect an assignment's status onto its job; runs in the caller's transaction."""
		target = MIRRORED_STATUSES.get(assignment.status)
		if target is None:
			return None
		job = self.job_repo.get_by_id(assignment.job_id)
		if job is None or job.status == target:
			return job
		previous = job.status
		job = self.job_repo.set_status(assignment.job_id, target)
		self.log_operation(
			"mirror_from_assignment",
			job_id=assignment.job_id,
			assignment_id=assignment.id,
			assignment_status=assignment.status,
			previous_status=previous,
			job_status=target
		)
		return job

	def propagate_schedule(self, job_id: int, scheduled_date: datetime, time_window: Optional[str] = None) -> Optional[Job]:
		fields: Dict[str, Any] = {"scheduled_date": scheduled_date}
		if time_window:
			fields["scheduled_time_window"] = time_window
		return self.job_repo.update_fields(job_id, fields)
