from sqlalchemy import Column, ForeignKey, Integer, String, Text, Boolean, DateTime, Index
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base


class Job(Base, AuditMixin):
	__tablename__ = "jobs"
	__table_args__ = (
		Index("ix_jobs_status_scheduled_date", "status", "scheduled_date"),
		Index("ix_jobs_city_state", "customer_city", "customer_state"),
	)

	id = Column(Integer, primary_key=True, index=True)
	so_number = Column(String, unique=True, index=True, nullable=False)

	customer_name = Column(String, nullable=False)
	customer_last_name = Column(String, nullable=False)
	customer_address = Column(String, nullable=False)
	customer_city = Column(String, nullable=False)
	customer_state = Column(String, nullable=False)
	customer_zip = Column(String, nullable=False)
	customer_phone = Column(String, nullable=False)
	customer_email = Column(String, nullable=True)

	appliance_type = Column(String, nullable=False, index=True)
	appliance_brand = Column(String, nullable=True)
	model_number = Column(String, nullable=True)
	serial_number = Column(String, nullable=True)
	service_description = Column(Text, nullable=False)

	scheduled_date = Column(DateTime(timezone=True), nullable=False)
	scheduled_time_window = Column(String, nullable=False)
	priority = Column(String(16), nullable=False, default="medium")  # low, medium, high, urgent
	status = Column(String(16), nullable=False, default="available", index=True)  # available, assigned, in_progress, completed, cancelled, on_hold

	notes = Column(Text, nullable=True)
	internal_notes = Column(Text, nullable=True)

	is_under_warranty = Column(Boolean, nullable=False, default=False)
	warranty_number = Column(String, nullable=True)
	warranty_expiry = Column(DateTime(timezone=True), nullable=True)

	created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

	assignments = relationship("Assignment", back_populates="job", cascade="all, delete-orphan")
