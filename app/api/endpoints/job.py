from typing import Optional

from fastapi import Depends, Path, Query
from app.api.router import create_router
from sqlalchemy.orm import Session
from app.api.dependencies.auth import require_permission
from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_job_service, get_claim_service
from app.services.job_services import JobService
from app.services.claim_services import ClaimService
from app.schemas.auth import CallerContext
from app.schemas.job import JobCreate, JobUpdate, JobRead, JobStatus, JobPage, JobListPage, JobListInput, AvailableJobsInput
from app.schemas.assignment import AssignmentRead, ClaimInput, ClaimRead, BulkClaimInput, BulkClaimResult
from app.schemas.part import DeleteResult


router = create_router(name="job")


@router.post("", status_code=201, response_model=JobRead)
def create_job(
	job_in: JobCreate,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_all_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	"""Publish a new service order on the job board."""
	return job_service.create_job(job_in, caller, db)


@router.get("", response_model=JobListPage)
def list_jobs(
	status: Optional[JobStatus] = Query(None),
	page: int = Query(1, ge=1),
	page_size: int = Query(20, ge=1, le=100),
	caller: CallerContext = Depends(require_permission("manage_all_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	"""Every job regardless of status, newest first, for dispatchers."""
	filters = JobListInput(status=status, page=page, page_size=page_size)
	return job_service.list_jobs(filters)


@router.get("/available", response_model=JobPage)
def list_available_jobs(
	city: Optional[str] = Query(None, max_length=100),
	appliance_type: Optional[str] = Query(None, max_length=100),
	page: int = Query(1, ge=1),
	page_size: int = Query(20, ge=1, le=100),
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	"""Claimable jobs, earliest scheduled date first, most urgent first within a date."""
	filters = AvailableJobsInput(city=city, appliance_type=appliance_type, page=page, page_size=page_size)
	return job_service.list_available(filters)


@router.post("/confirm", response_model=BulkClaimResult)
def confirm_jobs(
	claim_in: BulkClaimInput,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	claim_service: ClaimService = Depends(get_claim_service),
):
	"""Claim several jobs at once; each job succeeds or fails on its own."""
	return claim_service.bulk_claim(claim_in.job_ids, caller, db, vendor_notes=claim_in.vendor_notes)


# Vendor users get the job-board view; staff also see internal notes
JOB_DETAIL_RESPONSES = {200: {"model": JobRead, "description": "Job; internal fields are omitted for vendor users"}}


@router.get("/so/{so_number}", response_model=None, responses=JOB_DETAIL_RESPONSES)
def get_job_by_so_number(
	so_number: str = Path(..., min_length=1, max_length=64),
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	"""Look a job up by its service order number."""
	return job_service.read_for(job_service.get_by_so_number(so_number), caller)


@router.get("/{job_id}", response_model=None, responses=JOB_DETAIL_RESPONSES)
def get_job(
	job_id: int,
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	return job_service.read_for(job_service.get_job(job_id), caller)


@router.put("/{job_id}", response_model=JobRead)
def update_job(
	job_id: int,
	job_in: JobUpdate,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_all_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	return job_service.update_job(job_id, job_in, db)


@router.delete("/{job_id}", response_model=DeleteResult)
def delete_job(
	job_id: int,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_all_jobs")),
	job_service: JobService = Depends(get_job_service),
):
	"""Delete a job together with its assignments, parts and photos."""
	job_service.delete_job(job_id, db)
	return DeleteResult(deleted_id=job_id, message="Job deleted")


@router.post("/{job_id}/claims", status_code=201, response_model=ClaimRead)
def claim_job(
	job_id: int,
	claim_in: Optional[ClaimInput] = None,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("view_assigned_jobs")),
	claim_service: ClaimService = Depends(get_claim_service),
):
	"""Claim an available job for the caller's vendor.

	A client whose claim request times out should re-read the job before
	retrying: the claim may already have been recorded.
	"""
	vendor_notes = claim_in.vendor_notes if claim_in else None
	assignment = claim_service.claim(job_id, caller, db, vendor_notes=vendor_notes)
	return ClaimRead(job_id=job_id, assignment=AssignmentRead.model_validate(assignment))
