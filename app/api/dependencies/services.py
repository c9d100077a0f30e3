"""Service dependency providers for FastAPI dependency injection."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import Optional

from app.api.dependencies.database import get_db
from app.services.auth_services import AuthService
from app.services.file_services import FileService
from app.services.ledger_services import LedgerService
from app.services.job_services import JobService
from app.services.assignment_services import AssignmentService
from app.services.claim_services import ClaimService
from app.services.part_services import PartService
from app.services.vendor_services import VendorService
from app.repositories.user import UserRepository
from app.repositories.vendor import VendorRepository
from app.repositories.job import JobRepository
from app.repositories.assignment import AssignmentRepository
from app.repositories.part import PartRepository
from app.repositories.photo import PhotoRepository


def get_correlation_id(request: Request) -> Optional[str]:
	"""Extract or generate correlation ID for logging and tracing."""
	from app.core.observability import generate_correlation_id
	cid = getattr(request.state, "correlation_id", None)
	if not cid:
		cid = generate_correlation_id(request.headers.get("X-Correlation-ID"))
		setattr(request.state, "correlation_id", cid)
	return cid


# Repository Dependencies
def get_user_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> UserRepository:
    """Provide UserRepository instance."""
    return UserRepository(db=db, correlation_id=correlation_id)


def get_vendor_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> VendorRepository:
    """Provide VendorRepository instance."""
    return VendorRepository(db=db, correlation_id=correlation_id)


def get_job_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> JobRepository:
    """Provide JobRepository instance."""
    return JobRepository(db=db, correlation_id=correlation_id)


def get_assignment_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> AssignmentRepository:
    """Provide AssignmentRepository instance."""
    return AssignmentRepository(db=db, correlation_id=correlation_id)


def get_part_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> PartRepository:
    """Provide PartRepository instance."""
    return PartRepository(db=db, correlation_id=correlation_id)


def get_photo_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> PhotoRepository:
    """Provide PhotoRepository instance."""
    return PhotoRepository(db=db, correlation_id=correlation_id)


# Service Dependencies
def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> AuthService:
    """Provide AuthService instance with user repository and correlation ID.

    Args:
        user_repo: User repository from dependency injection
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured AuthService instance
    """
    return AuthService(correlation_id=correlation_id, user_repo=user_repo)


def get_file_service(
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> FileService:
    """Provide FileService instance with correlation ID.

    FileService needs no repositories; it talks to MinIO directly. Tests
    override this provider to swap in an in-memory storage client.

    Args:
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured FileService instance
    """
    return FileService(correlation_id=correlation_id)


def get_ledger_service(
    part_repo: PartRepository = Depends(get_part_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> LedgerService:
    """Provide LedgerService instance."""
    return LedgerService(part_repo=part_repo, correlation_id=correlation_id)


def get_job_service(
    job_repo: JobRepository = Depends(get_job_repository),
    file_service: FileService = Depends(get_file_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> JobService:
    """Provide JobService instance with required repository."""
    return JobService(job_repo=job_repo, file_service=file_service, correlation_id=correlation_id)


def get_assignment_service(
    assignment_repo: AssignmentRepository = Depends(get_assignment_repository),
    vendor_repo: VendorRepository = Depends(get_vendor_repository),
    job_service: JobService = Depends(get_job_service),
    ledger: LedgerService = Depends(get_ledger_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> AssignmentService:
    """Provide AssignmentService instance.

    Args:
        assignment_repo: Assignment repository from dependency injection
        vendor_repo: Vendor repository for completion counters
        job_service: Job service used for status mirroring
        ledger: Ledger service used when labor cost changes
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured AssignmentService instance
    """
    return AssignmentService(
        assignment_repo=assignment_repo,
        vendor_repo=vendor_repo,
        job_service=job_service,
        ledger=ledger,
        correlation_id=correlation_id
    )


def get_claim_service(
    job_service: JobService = Depends(get_job_service),
    assignment_service: AssignmentService = Depends(get_assignment_service),
    assignment_repo: AssignmentRepository = Depends(get_assignment_repository),
    vendor_repo: VendorRepository = Depends(get_vendor_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> ClaimService:
    """Provide ClaimService instance."""
    return ClaimService(
        job_service=job_service,
        assignment_service=assignment_service,
        assignment_repo=assignment_repo,
        vendor_repo=vendor_repo,
        correlation_id=correlation_id
    )


def get_part_service(
    part_repo: PartRepository = Depends(get_part_repository),
    photo_repo: PhotoRepository = Depends(get_photo_repository),
    assignment_repo: AssignmentRepository = Depends(get_assignment_repository),
    ledger: LedgerService = Depends(get_ledger_service),
    file_service: FileService = Depends(get_file_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> PartService:
    """Provide PartService instance with required repositories."""
    return PartService(
        part_repo=part_repo,
        photo_repo=photo_repo,
        assignment_repo=assignment_repo,
        ledger=ledger,
        file_service=file_service,
        correlation_id=correlation_id
    )


def get_vendor_service(
    vendor_repo: VendorRepository = Depends(get_vendor_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> VendorService:
    """Provide VendorService instance."""
    return VendorService(vendor_repo=vendor_repo, user_repo=user_repo, correlation_id=correlation_id)
