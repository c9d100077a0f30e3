from typing import Optional

from fastapi import Depends, Query
from app.api.router import create_router
from sqlalchemy.orm import Session
from app.api.dependencies.database import get_db
from app.api.dependencies.auth import require_permission
from app.api.dependencies.services import get_vendor_service
from app.services.vendor_services import VendorService
from app.schemas.auth import CallerContext
from app.schemas.user import UserRead
from app.schemas.vendor import VendorCreate, VendorUpdate, VendorRead, VendorPage

router = create_router(name="vendor")


@router.post("", status_code=201, response_model=VendorRead)
def create_vendor(
	vendor_in: VendorCreate,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_vendors")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	"""Register a service vendor."""
	return vendor_service.create_vendor(vendor_in, db)


@router.get("", response_model=VendorPage)
def list_vendors(
	search: Optional[str] = Query(None, max_length=100),
	is_active: Optional[bool] = Query(None),
	page: int = Query(1, ge=1),
	page_size: int = Query(20, ge=1, le=100),
	caller: CallerContext = Depends(require_permission("manage_vendors")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	"""Vendors newest first; ``search`` matches name or email."""
	return vendor_service.list_vendors(search=search, is_active=is_active, page=page, page_size=page_size)


@router.get("/me", response_model=VendorRead)
def get_my_vendor(
	caller: CallerContext = Depends(require_permission("view_vendor_portal")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	"""Vendor profile and job statistics of the caller's own vendor."""
	return vendor_service.get_own_vendor(caller)


@router.get("/{vendor_id}", response_model=VendorRead)
def get_vendor(
	vendor_id: int,
	caller: CallerContext = Depends(require_permission("manage_vendors")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	return vendor_service.get_vendor(vendor_id)


@router.put("/{vendor_id}", response_model=VendorRead)
def update_vendor(
	vendor_id: int,
	vendor_in: VendorUpdate,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_vendors")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	return vendor_service.update_vendor(vendor_id, vendor_in, db)


@router.delete("/{vendor_id}", response_model=VendorRead)
def deactivate_vendor(
	vendor_id: int,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_vendors")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	"""Deactivate a vendor and its user accounts; the record is kept."""
	return vendor_service.deactivate_vendor(vendor_id, db)


@router.post("/{vendor_id}/users/{user_id}", response_model=UserRead)
def link_vendor_user(
	vendor_id: int,
	user_id: int,
	db: Session = Depends(get_db),
	caller: CallerContext = Depends(require_permission("manage_vendors")),
	vendor_service: VendorService = Depends(get_vendor_service)
):
	"""Let a user account act for a vendor."""
	return vendor_service.link_user(vendor_id, user_id, db)
