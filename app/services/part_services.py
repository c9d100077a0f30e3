"""Part registry: part line-items and photos of an assignment."""

from __future__ import annotations

from typing import Optional, List

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.base import BaseService
from app.services.access import ensure_vendor_access
from app.services.exceptions import (
	AssignmentNotFoundError,
	PartNotFoundError,
	PhotoNotFoundError,
	ValidationError,
)
from app.services.file_services import FileService
from app.services.ledger_services import LedgerService, to_money
from app.repositories.assignment import AssignmentRepository
from app.repositories.part import PartRepository
from app.repositories.photo import PhotoRepository
from app.db.models.assignment import Assignment
from app.db.models.part import Part
from app.db.models.photo import Photo
from app.schemas.auth import CallerContext
from app.schemas.file import FileUploadInput, StoredObject
from app.schemas.part import PartCreate, PhotoType


class PartService(BaseService):
	"""Part and photo mutations.

	Every part mutation recomputes the assignment's cost totals inside the
	same transaction. Photo mutations never touch cost totals.
	"""

	def __init__(
		self,
		part_repo: PartRepository,
		photo_repo: PhotoRepository,
		assignment_repo: AssignmentRepository,
		ledger: LedgerService,
		file_service: FileService,
		correlation_id: Optional[str] = None
	):
		super().__init__(correlation_id)
		self._set_repositories(part_repo=part_repo, photo_repo=photo_repo, assignment_repo=assignment_repo)
		self.ledger = ledger
		self.file_service = file_service

	# ------------------------------------------------------------------
	# Parts
	# ------------------------------------------------------------------

	def add_part(self, assignment_id: int, part_in: PartCreate, caller: CallerContext, db: Session) -> Part:
		def _add_part() -> Part:
			assignment = self._get_assignment(assignment_id, caller)
			unit_cost = to_money(part_in.unit_cost)
			part = self.part_repo.create({
				"assignment_id": assignment.id,
				"part_number": part_in.part_number,
				"part_name": part_in.part_name,
				"quantity": part_in.quantity,
				"unit_cost": unit_cost,
				"line_total": to_money(unit_cost * part_in.quantity),
				"notes": part_in.notes,
				"added_by": caller.user_id,
			})
			self.ledger.recompute(assignment)
			return part

		part = self.run_in_transaction(db, _add_part)
		self.log_operation("add_part", assignment_id=assignment_id, part_id=part.id, line_total=str(part.line_total))
		return part

	def list_parts(self, assignment_id: int, caller: CallerContext) -> List[Part]:
		self._get_assignment(assignment_id, caller)
		return self.part_repo.list_for_assignment(assignment_id)

	def delete_part(self, part_id: int, caller: CallerContext, db: Session) -> Assignment:
		"""Delete a part with its photos and return the re-totalled assignment."""
		object_keys: List[str] = []

		def _delete_part() -> Assignment:
			part = self._get_part(part_id, caller)
			assignment = self.assignment_repo.get_by_id(part.assignment_id)
			object_keys.extend(photo.url for photo in part.photos)
			self.part_repo.delete(part_id, soft_delete=False)
			self.ledger.recompute(assignment)
			return assignment

		assignment = self.run_in_transaction(db, _delete_part)
		self.log_operation("delete_part", part_id=part_id, assignment_id=assignment.id, removed_photos=len(object_keys))
		if object_keys:
			self.file_service.purge_objects(object_keys)
		return assignment

	# ------------------------------------------------------------------
	# Photos
	# ------------------------------------------------------------------

	def attach_part_photos(
		self,
		part_id: int,
		files: List[UploadFile],
		caller: CallerContext,
		db: Session,
		description: Optional[str] = None
	) -> List[Photo]:
		part = self._get_part(part_id, caller)
		assignment_id = part.assignment_id
		folder = f"assignments/{assignment_id}/parts/{part_id}"

		def _recheck() -> None:
			self._get_part(part_id, caller)

		return self._store_photos(
			files,
			folder,
			assignment_id=assignment_id,
			part_id=part_id,
			photo_type=PhotoType.PART,
			description=description,
			caller=caller,
			db=db,
			recheck=_recheck,
		)

	def remove_part_photos(self, part_id: int, photo_ids: List[int], caller: CallerContext, db: Session) -> List[int]:
		"""Delete the listed photos of a part.

		Raises:
			PhotoNotFoundError: An id does not belong to this part; nothing is deleted
		"""
		object_keys: List[str] = []

		def _remove_part_photos() -> List[int]:
			self._get_part(part_id, caller)
			photos = self.photo_repo.list_for_part(part_id, photo_ids)
			found = {photo.id for photo in photos}
			missing = [pid for pid in photo_ids if pid not in found]
			if missing:
				raise PhotoNotFoundError(missing[0], correlation_id=self.correlation_id)
			for photo in photos:
				object_keys.append(photo.url)
				self.photo_repo.delete(photo.id, soft_delete=False)
			return sorted(found)

		removed = self.run_in_transaction(db, _remove_part_photos)
		self.log_operation("remove_part_photos", part_id=part_id, removed=removed)
		self.file_service.purge_objects(object_keys)
		return removed

	def attach_assignment_photos(
		self,
		assignment_id: int,
		files: List[UploadFile],
		caller: CallerContext,
		db: Session,
		photo_type: PhotoType = PhotoType.GENERAL,
		description: Optional[str] = None
	) -> List[Photo]:
		self._get_assignment(assignment_id, caller)
		folder = f"assignments/{assignment_id}/{photo_type.value}"

		def _recheck() -> None:
			self._get_assignment(assignment_id, caller)

		return self._store_photos(
			files,
			folder,
			assignment_id=assignment_id,
			part_id=None,
			photo_type=photo_type,
			description=description,
			caller=caller,
			db=db,
			recheck=_recheck,
		)

	def remove_assignment_photo(self, assignment_id: int, photo_id: int, caller: CallerContext, db: Session) -> int:
		object_keys: List[str] = []

		def _remove_assignment_photo() -> int:
			self._get_assignment(assignment_id, caller)
			photo = self.photo_repo.get_for_assignment(photo_id, assignment_id)
			if not photo:
				raise PhotoNotFoundError(photo_id, correlation_id=self.correlation_id)
			object_keys.append(photo.url)
			self.photo_repo.delete(photo.id, soft_delete=False)
			return photo_id

		removed = self.run_in_transaction(db, _remove_assignment_photo)
		self.log_operation("remove_assignment_photo", assignment_id=assignment_id, photo_id=photo_id)
		self.file_service.purge_objects(object_keys)
		return removed

	# ------------------------------------------------------------------
	# Helpers
	# ------------------------------------------------------------------

	def _store_photos(
		self,
		files: List[UploadFile],
		folder: str,
		*,
		assignment_id: int,
		part_id: Optional[int],
		photo_type: PhotoType,
		description: Optional[str],
		caller: CallerContext,
		db: Session,
		recheck,
	) -> List[Photo]:
		"""Upload first, then record the keys; uploaded objects are purged if recording fails."""
		files = [f for f in files if f is not None]
		if not files:
			raise ValidationError(field="files", message="At least one photo is required", correlation_id=self.correlation_id)
		if len(files) > settings.MAX_PHOTOS_PER_UPLOAD:
			raise ValidationError(
				field="files",
				message=f"At most {settings.MAX_PHOTOS_PER_UPLOAD} photos per upload",
				correlation_id=self.correlation_id
			)

		upload_input = FileUploadInput(folder=folder, max_size_mb=settings.MAX_PHOTO_SIZE_MB)
		stored: List[StoredObject] = self.file_service.upload_images(files, upload_input)

		def _record_photos() -> List[Photo]:
			recheck()
			return [
				self.photo_repo.create({
					"assignment_id": assignment_id,
					"part_id": part_id,
					"filename": obj.filename,
					"original_name": obj.original_name,
					"url": obj.key,
					"mime_type": obj.mime_type,
					"size": obj.size,
					"description": description,
					"photo_type": photo_type.value,
					"uploaded_by": caller.user_id,
				})
				for obj in stored
			]

		try:
			photos = self.run_in_transaction(db, _record_photos)
		except Exception:
			self.file_service.purge_objects([obj.key for obj in stored])
			raise
		self.log_operation("store_photos", assignment_id=assignment_id, part_id=part_id, count=len(photos))
		return photos

	def _get_assignment(self, assignment_id: int, caller: CallerContext) -> Assignment:
		assignment = self.assignment_repo.get_by_id(assignment_id)
		if not assignment:
			raise AssignmentNotFoundError(assignment_id, correlation_id=self.correlation_id)
		ensure_vendor_access(caller, assignment.vendor_id, self.correlation_id)
		return assignment

	def _get_part(self, part_id: int, caller: CallerContext) -> Part:
		part = self.part_repo.get_by_id(part_id)
		if not part:
			raise PartNotFoundError(part_id, correlation_id=self.correlation_id)
		self._get_assignment(part.assignment_id, caller)
		return part
