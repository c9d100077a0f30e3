"""Vendor repository for vendor-related database operations."""

from typing import Optional, List, Tuple
from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.repositories.base import BaseRepository, contains_pattern
from app.db.models.vendor import Vendor


class VendorRepository(BaseRepository[Vendor]):
	"""Repository for Vendor entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Vendor, correlation_id)

	def get_by_email(self, email: str) -> Optional[Vendor]:
		result = self.db.query(self.model).filter(
			self.model.email == email,
			self.model.is_deleted == False
		).first()
		self._log_operation("get_by_email", email=email, found=result is not None)
		return result

	def list_vendors(
		self,
		search: Optional[str] = None,
		is_active: Optional[bool] = None,
		skip: int = 0,
		limit: int = 20,
	) -> Tuple[List[Vendor], int]:
		"""Vendors, newest first; ``search`` matches name or email."""
		query = self.db.query(self.model).filter(self.model.is_deleted == False)
		if search:
			pattern = contains_pattern(search)
			query = query.filter(or_(
				self.model.name.ilike(pattern, escape="\\"),
				self.model.email.ilike(pattern, escape="\\"),
			))
		if is_active is not None:
			query = query.filter(self.model.is_active == is_active)
		total = query.count()
		items = (
			query.order_by(self.model.created_at.desc(), self.model.id.desc())
			.offset(skip)
			.limit(limit)
			.all()
		)
		self._log_operation("list_vendors", search=search, is_active=is_active, count=len(items), total=total)
		return items, total

	def increment_total_jobs(self, vendor_id: int) -> None:
		"""Bump ``total_jobs`` in place; concurrent claims never lose an increment."""
		self._increment(vendor_id, Vendor.total_jobs)

	def increment_completed_jobs(self, vendor_id: int) -> None:
		self._increment(vendor_id, Vendor.completed_jobs)

	def _increment(self, vendor_id: int, column) -> None:
		stmt = (
			update(Vendor)
			.where(Vendor.id == vendor_id)
			.values({column: column + 1})
			.execution_options(synchronize_session=False)
		)
		result = self.db.execute(stmt)
		self._expire_cached(vendor_id)
		self._log_operation("increment", vendor_id=vendor_id, column=column.key, matched=result.rowcount)
