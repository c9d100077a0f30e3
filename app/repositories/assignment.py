"""Assignment repository for assignment-related database operations."""

from datetime import datetime
from typing import Optional, List
from sqlalchemy.orm import Session, selectinload, joinedload

from app.repositories.base import BaseRepository
from app.db.models.assignment import Assignment
from app.db.models.part import Part


class AssignmentRepository(BaseRepository[Assignment]):
	"""Repository for Assignment entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Assignment, correlation_id)

	def get_detail(self, assignment_id: int) -> Optional[Assignment]:
		"""Load an assignment together with its job, parts and photos."""
		result = (
			self.db.query(self.model)
			.options(
				joinedload(self.model.job),
				selectinload(self.model.parts).selectinload(Part.photos),
				selectinload(self.model.photos),
			)
			.filter(self.model.id == assignment_id, self.model.is_deleted == False)
			.first()
		)
		self._log_operation("get_detail", assignment_id=assignment_id, found=result is not None)
		return result

	def get_active_for_vendor(self, job_id: int, vendor_id: int) -> Optional[Assignment]:
		result = self.db.query(self.model).filter(
			self.model.job_id == job_id,
			self.model.vendor_id == vendor_id,
			self.model.status != "cancelled",
			self.model.is_deleted == False
		).first()
		self._log_operation("get_active_for_vendor", job_id=job_id, vendor_id=vendor_id, found=result is not None)
		return result

	def list_filtered(
		self,
		vendor_id: Optional[int] = None,
		status: Optional[str] = None,
		date_from: Optional[datetime] = None,
		date_to: Optional[datetime] = None,
		skip: int = 0,
		limit: int = 100,
	) -> List[Assignment]:
		"""List assignments ordered by scheduled arrival.

		Args:
			vendor_id: Restrict to one vendor's assignments
			status: Exact status match
			date_from: Inclusive lower bound on ``scheduled_arrival``
			date_to: Inclusive upper bound on ``scheduled_arrival``
		"""
		query = self.db.query(self.model).options(joinedload(self.model.job)).filter(self.model.is_deleted == False)
		if vendor_id is not None:
			query = query.filter(self.model.vendor_id == vendor_id)
		if status:
			query = query.filter(self.model.status == status)
		if date_from is not None:
			query = query.filter(self.model.scheduled_arrival >= date_from)
		if date_to is not None:
			query = query.filter(self.model.scheduled_arrival <= date_to)

		results = (
			query.order_by(self.model.scheduled_arrival.asc(), self.model.id.asc())
			.offset(skip)
			.limit(limit)
			.all()
		)
		self._log_operation("list_filtered", vendor_id=vendor_id, status=status, count=len(results))
		return results
