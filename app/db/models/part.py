from sqlalchemy import Column, ForeignKey, Integer, String, Text, Numeric
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base

class Part(Base, AuditMixin):
	__tablename__ = "parts"

	id = Column(Integer, primary_key=True, index=True)
	assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
	part_number = Column(String, nullable=False)
	part_name = Column(String, nullable=False)
	quantity = Column(Integer, nullable=False)
	unit_cost = Column(Numeric(12, 2), nullable=False)
	line_total = Column(Numeric(12, 2), nullable=False)  # snapshot of quantity * unit_cost at creation
	notes = Column(Text, nullable=True)
	added_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

	assignment = relationship("Assignment", back_populates="parts")
	photos = relationship("Photo", back_populates="part", cascade="all, delete-orphan")
