"""Part repository for part line-item database operations."""

from decimal import Decimal
from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.repositories.base import BaseRepository
from app.db.models.part import Part


class PartRepository(BaseRepository[Part]):
	"""Repository for Part entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Part, correlation_id)

	def list_for_assignment(self, assignment_id: int) -> List[Part]:
		results = (
			self.db.query(self.model)
			.options(selectinload(self.model.photos))
			.filter(self.model.assignment_id == assignment_id, self.model.is_deleted == False)
			.order_by(self.model.created_at.asc(), self.model.id.asc())
			.all()
		)
		self._log_operation("list_for_assignment", assignment_id=assignment_id, count=len(results))
		return results

	def sum_line_totals(self, assignment_id: int) -> Decimal:
		"""Sum of ``line_total`` over the assignment's live parts (0 when none)."""
		total = self.db.query(func.sum(self.model.line_total)).filter(
			self.model.assignment_id == assignment_id,
			self.model.is_deleted == False
		).scalar()
		self._log_operation("sum_line_totals", assignment_id=assignment_id, total=str(total))
		return Decimal(str(total)) if total is not None else Decimal("0")
