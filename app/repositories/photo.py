"""Photo repository for assignment and part photo records."""

from typing import Optional, List
from sqlalchemy.orm import Session

from app.repositories.base import BaseRepository
from app.db.models.photo import Photo


class PhotoRepository(BaseRepository[Photo]):
	"""Repository for Photo entity operations."""

	def __init__(self, db: Session, correlation_id: Optional[str] = None):
		super().__init__(db, Photo, correlation_id)

	def get_for_assignment(self, photo_id: int, assignment_id: int) -> Optional[Photo]:
		result = self.db.query(self.model).filter(
			self.model.id == photo_id,
			self.model.assignment_id == assignment_id,
			self.model.is_deleted == False
		).first()
		self._log_operation("get_for_assignment", photo_id=photo_id, assignment_id=assignment_id, found=result is not None)
		return result

	def list_for_part(self, part_id: int, photo_ids: Optional[List[int]] = None) -> List[Photo]:
		query = self.db.query(self.model).filter(
			self.model.part_id == part_id,
			self.model.is_deleted == False
		)
		if photo_ids is not None:
			query = query.filter(self.model.id.in_(photo_ids))
		results = query.order_by(self.model.id.asc()).all()
		self._log_operation("list_for_part", part_id=part_id, count=len(results))
		return results
