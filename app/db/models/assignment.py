from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Float, Numeric, DateTime, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import AuditMixin, Base


class Assignment(Base, AuditMixin):
	__tablename__ = "assignments"
	__table_args__ = (
		Index("ix_assignments_vendor_status", "vendor_id", "status"),
	)

	id = Column(Integer, primary_key=True, index=True)
	job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
	vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True)
	status = Column(String(32), nullable=False, default="assigned")

	assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
	scheduled_arrival = Column(DateTime(timezone=True), nullable=True)
	actual_arrival = Column(DateTime(timezone=True), nullable=True)
	work_started = Column(DateTime(timezone=True), nullable=True)
	completed_at = Column(DateTime(timezone=True), nullable=True)

	notes = Column(Text, nullable=True)
	vendor_notes = Column(Text, nullable=True)
	completion_notes = Column(Text, nullable=True)
	customer_signature = Column(Text, nullable=True)  # base64 encoded

	labor_hours = Column(Float, nullable=False, default=0.0)
	# Money is exact to the cent; total_cost == total_parts_cost + total_labor_cost
	total_parts_cost = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
	total_labor_cost = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
	total_cost = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

	reschedule_original_date = Column(DateTime(timezone=True), nullable=True)
	reschedule_new_date = Column(DateTime(timezone=True), nullable=True)
	reschedule_reason = Column(Text, nullable=True)
	reschedule_requested_at = Column(DateTime(timezone=True), nullable=True)

	invoice_number = Column(String(32), unique=True, nullable=True)
	invoice_generated_at = Column(DateTime(timezone=True), nullable=True)
	invoice_pdf_url = Column(String, nullable=True)

	job = relationship("Job", back_populates="assignments")
	vendor = relationship("Vendor", back_populates="assignments")
	parts = relationship("Part", back_populates="assignment", cascade="all, delete-orphan")
	photos = relationship("Photo", back_populates="assignment", cascade="all, delete-orphan")

	@property
	def reschedule_info(self) -> dict | None:
		if self.reschedule_requested_at is None:
			return None
		return {
			"original_date": self.reschedule_original_date,
			"new_date": self.reschedule_new_date,
			"reason": self.reschedule_reason,
			"requested_at": self.reschedule_requested_at,
		}

	@property
	def invoice(self) -> dict | None:
		if not self.invoice_number:
			return None
		return {
			"invoice_number": self.invoice_number,
			"generated_at": self.invoice_generated_at,
			"total_cost": self.total_cost,
			"pdf_url": self.invoice_pdf_url or f"/invoices/{self.invoice_number}.pdf",
		}
