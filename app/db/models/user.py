from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base

class User(Base, AuditMixin):
	__tablename__ = "users"

	id = Column(Integer, primary_key=True, index=True)
	email = Column(String, unique=True, index=True, nullable=False)
	name = Column(String, nullable=False)
	hashed_password = Column(String, nullable=False)
	role = Column(String(32), nullable=False, default="registered_user")  # admin, dispatcher, registered_user
	vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True)
	permissions = Column(JSON, nullable=False, default=list)  # empty list means role defaults
	is_active = Column(Boolean, default=True)
	last_login = Column(DateTime(timezone=True), nullable=True)

	vendor = relationship("Vendor", back_populates="users")
