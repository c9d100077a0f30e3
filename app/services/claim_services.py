"""Claim coordinator: race-safe hand-over of an available job to a vendor."""

from __future__ import annotations

from typing import Optional, List

from sqlalchemy.orm import Session

from app.services.base import BaseService
from app.services.access import require_vendor_id
from app.services.exceptions import (
	ServiceError,
	VendorNotFoundError,
	VendorInactiveError,
	DuplicateClaimError,
	JobUnavailableError,
)
from app.services.job_services import JobService
from app.services.assignment_services import AssignmentService
from app.repositories.assignment import AssignmentRepository
from app.repositories.vendor import VendorRepository
from app.db.models.assignment import Assignment
from app.db.models.vendor import Vendor
from app.schemas.auth import CallerContext
from app.schemas.assignment import BulkClaimResult, ClaimConfirmation, ClaimFailure


class ClaimService(BaseService):
	"""Turns an available job into exactly one assignment.

	The job row is flipped with a conditional update; whichever claim matches
	the row creates the assignment, every other concurrent claim gets
	``JobUnavailableError``. Flip, insert and vendor counter share one
	transaction, so a failure part-way leaves the job available.
	"""

	def __init__(
		self,
		job_service: JobService,
		assignment_service: AssignmentService,
		assignment_repo: AssignmentRepository,
		vendor_repo: VendorRepository,
		correlation_id: Optional[str] = None
	):
		super().__init__(correlation_id)
		self._set_repositories(assignment_repo=assignment_repo, vendor_repo=vendor_repo)
		self.job_service = job_service
		self.assignment_service = assignment_service

	def claim(self, job_id: int, caller: CallerContext, db: Session, vendor_notes: Optional[str] = None) -> Assignment:
		"""Claim one job for the caller's vendor.

		Raises:
			VendorProfileRequiredError: Caller acts for no vendor
			VendorNotFoundError: Caller's vendor does not exist
			VendorInactiveError: Caller's vendor is deactivated
			JobNotFoundError: Unknown job
			DuplicateClaimError: Vendor already holds an active assignment for the job
			JobUnavailableError: Job is not available (or another claim won)
		"""
		vendor = self._resolve_vendor(caller)
		return self._claim_for_vendor(job_id, vendor.id, db, vendor_notes)

	def bulk_claim(self, job_ids: List[int], caller: CallerContext, db: Session, vendor_notes: Optional[str] = None) -> BulkClaimResult:
		"""Claim several jobs, each in its own transaction.

		Vendor problems fail the whole request up-front; per-job failures are
		reported in ``failed`` and never undo the confirmed claims.
		"""
		vendor = self._resolve_vendor(caller)
		vendor_id = vendor.id
		result = BulkClaimResult()
		for job_id in job_ids:
			try:
				assignment = self._claim_for_vendor(job_id, vendor_id, db, vendor_notes)
			except ServiceError as e:
				result.failed.append(ClaimFailure(job_id=job_id, error_code=e.error_code, reason=e.user_message))
				continue
			result.confirmed.append(ClaimConfirmation(job_id=job_id, assignment_id=assignment.id))

		self.log_operation(
			"bulk_claim",
			vendor_id=vendor_id,
			requested=len(job_ids),
			confirmed=len(result.confirmed),
			failed=len(result.failed)
		)
		return result

	def _claim_for_vendor(self, job_id: int, vendor_id: int, db: Session, vendor_notes: Optional[str]) -> Assignment:
		self.log_operation("claim_attempt", job_id=job_id, vendor_id=vendor_id)

		def _claim() -> Assignment:
			job = self.job_service.get_job(job_id)
			existing = self.assignment_repo.get_active_for_vendor(job_id, vendor_id)
			if existing:
				raise DuplicateClaimError(job_id, vendor_id, existing.id, correlation_id=self.correlation_id)
			if not self.job_service.mark_assigned(job_id):
				raise JobUnavailableError(job_id, correlation_id=self.correlation_id)
			assignment = self.assignment_service.create_for_claim(job, vendor_id, vendor_notes)
			self.vendor_repo.increment_total_jobs(vendor_id)
			return assignment

		try:
			assignment = self.run_in_transaction(db, _claim)
		except ServiceError as e:
			self.log_operation("claim_failed", job_id=job_id, vendor_id=vendor_id, error_code=e.error_code)
			raise
		self.log_operation("claim_success", job_id=job_id, vendor_id=vendor_id, assignment_id=assignment.id)
		return assignment

	def _resolve_vendor(self, caller: CallerContext) -> Vendor:
		vendor_id = require_vendor_id(caller, self.correlation_id)
		vendor = self.vendor_repo.get_by_id(vendor_id)
		if not vendor:
			raise VendorNotFoundError(vendor_id, correlation_id=self.correlation_id)
		if not vendor.is_active:
			raise VendorInactiveError(vendor_id, correlation_id=self.correlation_id)
		return vendor
