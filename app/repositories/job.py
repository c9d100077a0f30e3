"""Job repository for job-related database operations."""

from typing import Optional, Dict, Any, List, Tuple
from sqlalchemy import update, case
from sqlalchemy.orm import Session

from app.repositories.base import BaseRepository, contains_pattern
from app.db.models.job import Job
from app.db.models.assignment import Assignment


# Higher rank sorts first
PRIORITY_RANK = {"urgent": 4, "high": 3, "medium": 2, "low": 1}


class JobRepository(BaseRepository[Job]):
	"""Repository for Job entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Job, correlation_id)

	def get_by_so_number(self, so_number: str) -> Optional[Job]:
		result = self.db.query(self.model).filter(
			self.model.so_number == so_number,
			self.model.is_deleted == False
		).first()
		self._log_operation("get_by_so_number", so_number=so_number, found=result is not None)
		return result

	def list_available(
		self,
		city: Optional[str] = None,
		appliance_type: Optional[str] = None,
		skip: int = 0,
		limit: int = 20,
	) -> Tuple[List[Job], int]:
		"""Jobs open for claiming, soonest first and most urgent first within a date.

		Returns:
			Tuple of the requested page and the total number of matches
		"""
		priority_rank = case(PRIORITY_RANK, value=self.model.priority, else_=0)
		query = self.db.query(self.model).filter(
			self.model.status == "available",
			self.model.is_deleted == False
		)
		if city:
			query = query.filter(self.model.customer_city.ilike(contains_pattern(city), escape="\\"))
		if appliance_type:
			query = query.filter(self.model.appliance_type.ilike(contains_pattern(appliance_type), escape="\\"))

		total = query.count()
		items = (
			query.order_by(self.model.scheduled_date.asc(), priority_rank.desc(), self.model.id.asc())
			.offset(skip)
			.limit(limit)
			.all()
		)
		self._log_operation("list_available", city=city, appliance_type=appliance_type, count=len(items), total=total)
		return items, total

	def list_all(self, status: Optional[str] = None, skip: int = 0, limit: int = 20) -> Tuple[List[Job], int]:
		"""Every job, newest first, optionally restricted to one status."""
		query = self.db.query(self.model).filter(self.model.is_deleted == False)
		if status:
			query = query.filter(self.model.status == status)
		total = query.count()
		items = (
			query.order_by(self.model.created_at.desc(), self.model.id.desc())
			.offset(skip)
			.limit(limit)
			.all()
		)
		self._log_operation("list_all", status=status, count=len(items), total=total)
		return items, total

	def mark_assigned(self, job_id: int) -> bool:
		"""Conditionally flip an available job to assigned.

		A single ``UPDATE ... WHERE status = 'available'``; the matched row
		count decides which of several concurrent callers wins.

		Returns:
			True if this call performed the transition, False otherwise
		"""
		stmt = (
			update(Job)
			.where(Job.id == job_id, Job.status == "available", Job.is_deleted == False)
			.values(status="assigned")
			.execution_options(synchronize_session=False)
		)
		result = self.db.execute(stmt)
		won = result.rowcount == 1
		self._expire_cached(job_id)
		self._log_operation("mark_assigned", job_id=job_id, won=won)
		return won

	def set_status(self, job_id: int, status: str) -> Optional[Job]:
		return self.update_fields(job_id, {"status": status})

	def update_fields(self, job_id: int, fields: Dict[str, Any]) -> Optional[Job]:
		"""Update arbitrary job fields and return the job."""
		job = self.get_by_id(job_id)
		if not job:
			return None
		for k, v in fields.items():
			if hasattr(job, k):
				setattr(job, k, v)
		self.db.flush()
		self.db.refresh(job)
		self._log_operation("update_fields", job_id=job_id, fields=list(fields.keys()))
		return job

	def has_active_assignment(self, job_id: int) -> bool:
		"""True while any non-cancelled assignment exists for the job."""
		result = self.db.query(Assignment.id).filter(
			Assignment.job_id == job_id,
			Assignment.status != "cancelled",
			Assignment.is_deleted == False
		).first() is not None
		self._log_operation("has_active_assignment", job_id=job_id, active=result)
		return result
