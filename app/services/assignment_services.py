"""Assignment lifecycle: status transitions, timestamps, invoicing and rescheduling."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Dict, FrozenSet, List

from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.base import BaseService
from app.services.access import ensure_vendor_access, require_vendor_id
from app.services.exceptions import AssignmentNotFoundError, InvalidTransitionError
from app.services.job_services import JobService
from app.services.ledger_services import LedgerService
from app.repositories.assignment import AssignmentRepository
from app.repositories.vendor import VendorRepository
from app.db.models.assignment import Assignment
from app.db.models.job import Job
from app.schemas.auth import CallerContext
from app.schemas.assignment import AssignmentStatus, AssignmentUpdate, RescheduleInput


ASSIGNED = AssignmentStatus.ASSIGNED.value
ARRIVED = AssignmentStatus.ARRIVED.value
IN_PROGRESS = AssignmentStatus.IN_PROGRESS.value
WAITING_ON_PARTS = AssignmentStatus.WAITING_ON_PARTS.value
COMPLETED = AssignmentStatus.COMPLETED.value
RESCHEDULED = AssignmentStatus.RESCHEDULED.value
CANCELLED = AssignmentStatus.CANCELLED.value

# completed and cancelled are terminal
TRANSITIONS: Dict[str, FrozenSet[str]] = {
	ASSIGNED: frozenset({ARRIVED, CANCELLED, RESCHEDULED}),
	ARRIVED: frozenset({IN_PROGRESS, WAITING_ON_PARTS, CANCELLED}),
	IN_PROGRESS: frozenset({WAITING_ON_PARTS, COMPLETED, CANCELLED}),
	WAITING_ON_PARTS: frozenset({IN_PROGRESS, COMPLETED, CANCELLED}),
	RESCHEDULED: frozenset({ASSIGNED}),
	COMPLETED: frozenset(),
	CANCELLED: frozenset(),
}

_TEXT_FIELDS = ("notes", "vendor_notes", "completion_notes", "customer_signature")


def invoice_number_for(assignment_id: int, issued_at: datetime) -> str:
	"""``INV-<year>-<last six digits of the zero-padded id>``."""
	return f"INV-{issued_at.year}-{str(assignment_id).zfill(6)[-6:]}"


class AssignmentService(BaseService):
	"""Owns assignment state; every status persist is mirrored onto the job."""

	def __init__(
		self,
		assignment_repo: AssignmentRepository,
		vendor_repo: VendorRepository,
		job_service: JobService,
		ledger: LedgerService,
		enforce_transitions: Optional[bool] = None,
		correlation_id: Optional[str] = None
	):
		super().__init__(correlation_id)
		self._set_repositories(assignment_repo=assignment_repo, vendor_repo=vendor_repo)
		self.job_service = job_service
		self.ledger = ledger
		self.enforce_transitions = settings.ENFORCE_STATUS_TRANSITIONS if enforce_transitions is None else enforce_transitions

	# ------------------------------------------------------------------
	# Reads
	# ------------------------------------------------------------------

	def get_assignment(self, assignment_id: int, caller: CallerContext) -> Assignment:
		"""Assignment with its job summary, parts and photos."""
		assignment = self.assignment_repo.get_detail(assignment_id)
		if not assignment:
			raise AssignmentNotFoundError(assignment_id, correlation_id=self.correlation_id)
		ensure_vendor_access(caller, assignment.vendor_id, self.correlation_id)
		return assignment

	def list_assignments(
		self,
		caller: CallerContext,
		status: Optional[AssignmentStatus] = None,
		date_from: Optional[datetime] = None,
		date_to: Optional[datetime] = None,
		skip: int = 0,
		limit: int = 100,
	) -> List[Assignment]:
		vendor_id = None
		if caller.is_vendor_scoped:
			vendor_id = require_vendor_id(caller, self.correlation_id)
		return self.assignment_repo.list_filtered(
			vendor_id=vendor_id,
			status=status.value if status else None,
			date_from=date_from,
			date_to=date_to,
			skip=skip,
			limit=limit,
		)

	# ------------------------------------------------------------------
	# Writes
	# ------------------------------------------------------------------

	def create_for_claim(self, job: Job, vendor_id: int, vendor_notes: Optional[str] = None) -> Assignment:
		"""Insert the single assignment of a won claim; runs in the claim's transaction."""
		assignment = self.assignment_repo.create({
			"job_id": job.id,
			"vendor_id": vendor_id,
			"status": ASSIGNED,
			"assigned_at": datetime.now(timezone.utc),
			"scheduled_arrival": job.scheduled_date,
			"vendor_notes": vendor_notes,
		})
		self.log_operation("create_for_claim", assignment_id=assignment.id, job_id=job.id, vendor_id=vendor_id)
		return assignment

	def update_status(self, assignment_id: int, update: AssignmentUpdate, caller: CallerContext, db: Session) -> Assignment:
		"""Apply a status change and accompanying fields in one transaction.

		Raises:
			AssignmentNotFoundError: Unknown assignment
			AccessDeniedError: Vendor-scoped caller on another vendor's assignment
			InvalidTransitionError: Target status not reachable from the current one
		"""
		data = update.model_dump(exclude_unset=True)
		requested = data.pop("status", None)
		requested = AssignmentStatus(requested).value if requested is not None else None
		self.log_operation("update_status_attempt", assignment_id=assignment_id, requested_status=requested, user_id=caller.user_id)

		def _update_status() -> Assignment:
			assignment = self._get_for_caller(assignment_id, caller)
			now = datetime.now(timezone.utc)
			previous = assignment.status
			entering = requested is not None and requested != previous

			if entering:
				self._check_transition(assignment, requested)
				assignment.status = requested

			for field in ("actual_arrival", "work_started", "completed_at"):
				if data.get(field) is not None:
					setattr(assignment, field, data[field])
			for field in _TEXT_FIELDS:
				if field in data:
					setattr(assignment, field, data[field])
			if data.get("labor_hours") is not None:
				assignment.labor_hours = data["labor_hours"]

			if entering:
				self._stamp_entry(assignment, requested, now, data)

			if data.get("total_labor_cost") is not None:
				self.ledger.set_labor_cost(assignment, data["total_labor_cost"])

			self.assignment_repo.db.flush()
			if entering:
				self.job_service.mirror_from_assignment(assignment)
			return assignment

		assignment = self.run_in_transaction(db, _update_status)
		self.log_operation(
			"update_status_success",
			assignment_id=assignment_id,
			status=assignment.status,
			job_id=assignment.job_id
		)
		return assignment

	def reschedule(self, assignment_id: int, reschedule_in: RescheduleInput, caller: CallerContext, db: Session) -> Assignment:
		"""Move the visit to a new date and record why.

		The previous ``scheduled_arrival`` is kept as the original date; the job
		takes the new date (and time window when given).
		"""
		def _reschedule() -> Assignment:
			assignment = self._get_for_caller(assignment_id, caller)
			self._check_transition(assignment, RESCHEDULED)
			now = datetime.now(timezone.utc)

			assignment.reschedule_original_date = assignment.scheduled_arrival
			assignment.reschedule_new_date = reschedule_in.new_date
			assignment.reschedule_reason = reschedule_in.reason
			assignment.reschedule_requested_at = now
			assignment.scheduled_arrival = reschedule_in.new_date
			assignment.status = RESCHEDULED
			if reschedule_in.vendor_notes is not None:
				assignment.vendor_notes = reschedule_in.vendor_notes

			self.assignment_repo.db.flush()
			self.job_service.propagate_schedule(assignment.job_id, reschedule_in.new_date, reschedule_in.new_time_window)
			self.job_service.mirror_from_assignment(assignment)
			return assignment

		assignment = self.run_in_transaction(db, _reschedule)
		self.log_operation("reschedule", assignment_id=assignment_id, job_id=assignment.job_id)
		return assignment

	# ------------------------------------------------------------------
	# Helpers
	# ------------------------------------------------------------------

	def allowed_transitions(self, current: str) -> FrozenSet[str]:
		return TRANSITIONS.get(current, frozenset())

	def _check_transition(self, assignment: Assignment, requested: str) -> None:
		if not self.enforce_transitions or requested == assignment.status:
			return
		allowed = self.allowed_transitions(assignment.status)
		if requested not in allowed:
			raise InvalidTransitionError(
				assignment_id=assignment.id,
				current_status=assignment.status,
				requested_status=requested,
				allowed=sorted(allowed),
				correlation_id=self.correlation_id
			)

	def _stamp_entry(self, assignment: Assignment, status: str, now: datetime, data: dict) -> None:
		if status == ARRIVED and assignment.actual_arrival is None:
			assignment.actual_arrival = now
		elif status == IN_PROGRESS and assignment.work_started is None:
			assignment.work_started = now
		elif status == COMPLETED:
			assignment.completed_at = data.get("completed_at") or now
			self.vendor_repo.increment_completed_jobs(assignment.vendor_id)
			if not assignment.invoice_number:
				assignment.invoice_number = invoice_number_for(assignment.id, now)
				assignment.invoice_generated_at = now
				self.log_operation("invoice_generated", assignment_id=assignment.id, invoice_number=assignment.invoice_number)

	def _get_for_caller(self, assignment_id: int, caller: CallerContext) -> Assignment:
		assignment = self.assignment_repo.get_by_id(assignment_id)
		if not assignment:
			raise AssignmentNotFoundError(assignment_id, correlation_id=self.correlation_id)
		ensure_vendor_access(caller, assignment.vendor_id, self.correlation_id)
		return assignment
