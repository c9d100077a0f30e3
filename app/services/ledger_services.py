"""Cost ledger: keeps an assignment's cost totals consistent with its parts and labor."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from app.services.base import BaseService
from app.repositories.part import PartRepository
from app.db.models.assignment import Assignment


CENT = Decimal("0.01")


def to_money(value: Union[Decimal, float, int, None]) -> Decimal:
	"""Exact two-place amount; floats go through ``str`` so 0.1 stays 0.10."""
	if value is None:
		return Decimal("0.00")
	if not isinstance(value, Decimal):
		value = Decimal(str(value))
	return value.quantize(CENT, rounding=ROUND_HALF_UP)


class LedgerService(BaseService):
	"""Recomputes ``total_parts_cost`` and ``total_cost`` of an assignment.

	Never commits: callers run it inside the transaction of the mutation
	that changed the parts or the labor cost, so totals and line-items are
	persisted together. Amounts are ``Decimal`` cents, so ``total_cost``
	is exactly the sum of the two stored parts.
	"""

	def __init__(self, part_repo: PartRepository, correlation_id: Optional[str] = None):
		super().__init__(correlation_id)
		self._set_repositories(part_repo=part_repo)

	def recompute(self, assignment: Assignment) -> Assignment:
		parts_total = to_money(self.part_repo.sum_line_totals(assignment.id))
		labor_total = to_money(assignment.total_labor_cost)
		assignment.total_parts_cost = parts_total
		assignment.total_labor_cost = labor_total
		assignment.total_cost = parts_total + labor_total
		self.part_repo.db.flush()
		self.log_operation(
			"recompute",
			assignment_id=assignment.id,
			total_parts_cost=str(parts_total),
			total_labor_cost=str(labor_total),
			total_cost=str(assignment.total_cost)
		)
		return assignment

	def set_labor_cost(self, assignment: Assignment, total_labor_cost: Union[Decimal, float]) -> Assignment:
		assignment.total_labor_cost = to_money(total_labor_cost)
		return self.recompute(assignment)
