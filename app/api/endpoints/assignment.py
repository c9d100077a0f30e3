from datetime import datetime
from typing import List, Optional

from fastapi import Depends, File, Form, Query, UploadFile
from app.api.router import create_router, STORAGE_ERROR_RESPONSES
from sqlalchemy.orm import Session
from app.api.dependencies.auth import require_permission
from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_assignment_service, get_part_service
from app.services.assignment_services import AssignmentService
from app.services.part_services import PartService
from app.schemas.auth import CallerContext
from app.schemas.assignment import (
	AssignmentStatus,
	AssignmentUpdate,
	AssignmentRead,
	AssignmentListItem,
	AssignmentDetail,
	RescheduleInput,
)
from app.schemas.part import PartCreate, PartRead, PhotoRead, PhotoType, DeleteResult

router = create_router(name="assignment", default_responses=STORAGE_ERROR_RESPONSES)


@router.get("", response_model=List[AssignmentListItem])
def list_assignments(
	status: Optional[AssignmentStatus] = None,
	date_from: Optional[datetime] = None,
	date_to: Optional[datetime] = None,
	skip: int = Query(0, ge=0),
	limit: int = Query(100, ge=1, le=500),
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	assignment_service: AssignmentService = Depends(get_assignment_service),
):
	"""Assignments ordered by scheduled arrival; vendors only see their own."""
	return assignment_service.list_assignments(
		caller,
		status=status,
		date_from=date_from,
		date_to=date_to,
		skip=skip,
		limit=limit,
	)


@router.get("/{assignment_id}", response_model=AssignmentDetail)
def get_assignment(
	assignment_id: int,
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	assignment_service: AssignmentService = Depends(get_assignment_service),
):
	return assignment_service.get_assignment(assignment_id, caller)


@router.patch("/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
	assignment_id: int,
	update_in: AssignmentUpdate,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("update_job_status")),
	assignment_service: AssignmentService = Depends(get_assignment_service),
):
	"""Move the assignment along its lifecycle and record work details."""
	return assignment_service.update_status(assignment_id, update_in, caller, db)


@router.api_route("/{assignment_id}/schedule", methods=["PUT", "POST"], response_model=AssignmentRead)
def reschedule_assignment(
	assignment_id: int,
	reschedule_in: RescheduleInput,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("update_job_status")),
	assignment_service: AssignmentService = Depends(get_assignment_service),
):
	"""Move the visit to a new date; the job's schedule follows."""
	return assignment_service.reschedule(assignment_id, reschedule_in, caller, db)


@router.get("/{assignment_id}/parts", response_model=List[PartRead])
def list_parts(
	assignment_id: int,
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	part_service: PartService = Depends(get_part_service),
):
	return part_service.list_parts(assignment_id, caller)


@router.post("/{assignment_id}/parts", status_code=201, response_model=PartRead)
def add_part(
	assignment_id: int,
	part_in: PartCreate,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("upload_parts")),
	part_service: PartService = Depends(get_part_service),
):
	"""Record a part used on the visit; the assignment totals are recomputed."""
	return part_service.add_part(assignment_id, part_in, caller, db)


@router.post("/{assignment_id}/photos", status_code=201, response_model=List[PhotoRead])
def upload_assignment_photos(
	assignment_id: int,
	files: List[UploadFile] = File(...),
	photo_type: PhotoType = Form(PhotoType.GENERAL),
	description: Optional[str] = Form(None),
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("upload_parts")),
	part_service: PartService = Depends(get_part_service),
):
	return part_service.attach_assignment_photos(
		assignment_id,
		files,
		caller,
		db,
		photo_type=photo_type,
		description=description,
	)


@router.delete("/{assignment_id}/photos/{photo_id}", response_model=DeleteResult)
def delete_assignment_photo(
	assignment_id: int,
	photo_id: int,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("upload_parts")),
	part_service: PartService = Depends(get_part_service),
):
	removed = part_service.remove_assignment_photo(assignment_id, photo_id, caller, db)
	return DeleteResult(deleted_id=removed, message="Photo deleted")
