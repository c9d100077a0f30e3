from typing import List, Optional

from fastapi import Body, Depends, File, Form, UploadFile
from app.api.router import create_router, STORAGE_ERROR_RESPONSES
from sqlalchemy.orm import Session
from app.api.dependencies.auth import require_permission
from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_part_service
from app.services.part_services import PartService
from app.schemas.auth import CallerContext
from app.schemas.assignment import AssignmentRead
from app.schemas.part import PhotoRead, RemovePhotosInput

router = create_router(name="part", default_responses=STORAGE_ERROR_RESPONSES)


@router.delete("/{part_id}", response_model=AssignmentRead)
def delete_part(
	part_id: int,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("upload_parts")),
	part_service: PartService = Depends(get_part_service),
):
	"""Delete a part and its photos; returns the assignment with updated totals."""
	return part_service.delete_part(part_id, caller, db)


@router.post("/{part_id}/photos", status_code=201, response_model=List[PhotoRead])
def upload_part_photos(
	part_id: int,
	files: List[UploadFile] = File(...),
	description: Optional[str] = Form(None),
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("upload_parts")),
	part_service: PartService = Depends(get_part_service),
):
	return part_service.attach_part_photos(part_id, files, caller, db, description=description)


@router.delete("/{part_id}/photos")
def delete_part_photos(
	part_id: int,
	remove_in: RemovePhotosInput = Body(...),
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("upload_parts")),
	part_service: PartService = Depends(get_part_service),
):
	"""Delete the listed photos of a part; all ids must belong to it."""
	removed = part_service.remove_part_photos(part_id, remove_in.photo_ids, caller, db)
	return {"success": True, "removed_photo_ids": removed}
