from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base

class Photo(Base, AuditMixin):
	__tablename__ = "photos"

	id = Column(Integer, primary_key=True, index=True)
	assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
	part_id = Column(Integer, ForeignKey("parts.id", ondelete="CASCADE"), nullable=True, index=True)
	filename = Column(String, nullable=False)
	original_name = Column(String, nullable=True)
	url = Column(String, nullable=False)  # object storage key
	mime_type = Column(String, nullable=True)
	size = Column(Integer, nullable=True)
	description = Column(Text, nullable=True)
	photo_type = Column(String(16), nullable=False, default="general")  # before, during, after, part, general
	uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

	assignment = relationship("Assignment", back_populates="photos")
	part = relationship("Part", back_populates="photos")
