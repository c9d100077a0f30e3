"""Vendor administration: vendor records, activation and the user accounts acting for them."""

import math
from typing import Optional

from sqlalchemy.orm import Session

from app.services.base import BaseService
from app.services.access import require_vendor_id
from app.services.exceptions import VendorNotFoundError, ResourceNotFoundError, ConflictError
from app.repositories.vendor import VendorRepository
from app.repositories.user import UserRepository
from app.db.models.vendor import Vendor
from app.db.models.user import User
from app.schemas.auth import CallerContext
from app.schemas.vendor import VendorCreate, VendorUpdate, VendorRead, VendorPage


class VendorService(BaseService):
	def __init__(self, vendor_repo: VendorRepository, user_repo: UserRepository, correlation_id: Optional[str] = None):
		super().__init__(correlation_id)
		self._set_repositories(vendor_repo=vendor_repo, user_repo=user_repo)

	def create_vendor(self, vendor_in: VendorCreate, db: Session) -> Vendor:
		def _create_vendor() -> Vendor:
			if self.vendor_repo.get_by_email(vendor_in.email):
				raise self._email_conflict(vendor_in.email)
			return self.vendor_repo.create(vendor_in)

		vendor = self.run_in_transaction(db, _create_vendor)
		self.log_operation("create_vendor", vendor_id=vendor.id)
		return vendor

	def get_vendor(self, vendor_id: int) -> Vendor:
		vendor = self.vendor_repo.get_by_id(vendor_id)
		if not vendor:
			raise VendorNotFoundError(vendor_id, correlation_id=self.correlation_id)
		return vendor

	def get_own_vendor(self, caller: CallerContext) -> Vendor:
		return self.get_vendor(require_vendor_id(caller, self.correlation_id))

	def link_user(self, vendor_id: int, user_id: int, db: Session) -> User:
		"""Make ``user_id`` act for ``vendor_id``."""
		def _link_user() -> User:
			self.get_vendor(vendor_id)
			user = self.user_repo.link_vendor(user_id, vendor_id)
			if not user:
				raise ResourceNotFoundError("User", user_id, correlation_id=self.correlation_id)
			return user

		user = self.run_in_transaction(db, _link_user)
		self.log_operation("link_user", vendor_id=vendor_id, user_id=user_id)
		return user

	def list_vendors(
		self,
		search: Optional[str] = None,
		is_active: Optional[bool] = None,
		page: int = 1,
		page_size: int = 20,
	) -> VendorPage:
		search = search.strip() if search else None
		items, total = self.vendor_repo.list_vendors(
			search=search or None,
			is_active=is_active,
			skip=(page - 1) * page_size,
			limit=page_size,
		)
		return VendorPage(
			items=[VendorRead.model_validate(vendor) for vendor in items],
			page=page,
			page_size=page_size,
			total=total,
			total_pages=math.ceil(total / page_size) if total else 0,
		)

	def update_vendor(self, vendor_id: int, vendor_in: VendorUpdate, db: Session) -> Vendor:
		def _update_vendor() -> Vendor:
			self.get_vendor(vendor_id)
			# Required columns keep their value when the client sends null
			data = {
				k: v for k, v in vendor_in.model_dump(exclude_unset=True).items()
				if v is not None or k == "notes"
			}
			email = data.get("email")
			if email:
				existing = self.vendor_repo.get_by_email(email)
				if existing and existing.id != vendor_id:
					raise self._email_conflict(email)
			return self.vendor_repo.update(vendor_id, data)

		vendor = self.run_in_transaction(db, _update_vendor)
		self.log_operation("update_vendor", vendor_id=vendor_id, fields=sorted(vendor_in.model_dump(exclude_unset=True)))
		return vendor

	def deactivate_vendor(self, vendor_id: int, db: Session) -> Vendor:
		"""Stop a vendor from claiming jobs and lock out its user accounts.

		Existing assignments are left as they are. Reactivating the vendor
		through an update does not reactivate the accounts.
		"""
		def _deactivate_vendor() -> Vendor:
			self.get_vendor(vendor_id)
			vendor = self.vendor_repo.update(vendor_id, {"is_active": False})
			count = self.user_repo.deactivate_for_vendor(vendor_id)
			self.log_operation("deactivate_vendor", vendor_id=vendor_id, deactivated_users=count)
			return vendor

		return self.run_in_transaction(db, _deactivate_vendor)

	def _email_conflict(self, email: str) -> ConflictError:
		return ConflictError(
			message=f"Vendor with email {email} already exists",
			error_code="VENDOR_EMAIL_EXISTS",
			correlation_id=self.correlation_id,
			details={"email": email},
			user_message="A vendor with this email address already exists."
		)
