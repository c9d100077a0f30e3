"""Vendor scoping rules shared by the assignment and part services."""

from typing import Optional

from app.schemas.auth import CallerContext
from app.services.exceptions import AccessDeniedError, VendorProfileRequiredError


def ensure_vendor_access(caller: CallerContext, vendor_id: int, correlation_id: Optional[str] = None) -> None:
	"""Fail closed unless the caller may act on records owned by ``vendor_id``.

	Staff roles see every vendor. A vendor-scoped caller must carry a vendor
	reference equal to ``vendor_id``.

	Raises:
		AccessDeniedError: Vendor-scoped caller with a missing or different vendor
	"""
	if not caller.is_vendor_scoped:
		return
	if caller.vendor_id is None or caller.vendor_id != vendor_id:
		raise AccessDeniedError(
			message=f"User {caller.user_id} may not access records of vendor {vendor_id}",
			correlation_id=correlation_id,
			details={"user_id": caller.user_id, "caller_vendor_id": caller.vendor_id, "vendor_id": vendor_id},
			user_message="You can only access your own assignments."
		)


def require_vendor_id(caller: CallerContext, correlation_id: Optional[str] = None) -> int:
	"""Return the vendor the caller acts for.

	Raises:
		VendorProfileRequiredError: Caller is not linked to a vendor
	"""
	if caller.vendor_id is None:
		raise VendorProfileRequiredError(user_id=caller.user_id, correlation_id=correlation_id)
	return caller.vendor_id
