from sqlalchemy import Column, Integer, String, Boolean, Float, Text
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base

class Vendor(Base, AuditMixin):
	__tablename__ = "vendors"

	id = Column(Integer, primary_key=True, index=True)
	name = Column(String, nullable=False)
	phone_number = Column(String, nullable=False)
	email = Column(String, unique=True, index=True, nullable=False)
	is_active = Column(Boolean, default=True, nullable=False)
	notes = Column(Text, nullable=True)

	# Aggregate stats, only ever incremented in place by lifecycle events
	total_jobs = Column(Integer, nullable=False, default=0)
	completed_jobs = Column(Integer, nullable=False, default=0)
	average_rating = Column(Float, nullable=False, default=0.0)

	users = relationship("User", back_populates="vendor")
	assignments = relationship("Assignment", back_populates="vendor")

	@property
	def completion_rate(self) -> float:
		if not self.total_jobs:
			return 0.0
		return round(self.completed_jobs / self.total_jobs * 100, 2)

	@property
	def stats(self) -> dict:
		return {
			"total_jobs": self.total_jobs or 0,
			"completed_jobs": self.completed_jobs or 0,
			"average_rating": self.average_rating or 0.0,
			"completion_rate": self.completion_rate,
		}
