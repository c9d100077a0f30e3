from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.sql import func

from app.db.base_class import Base


class RequestLog(Base):
	"""One row per inbound API request or outbound storage call.

	Rows of a single request share its ``correlation_id``. Inbound rows carry
	the caller and, for vendor-portal traffic, the vendor acted for, plus the
	service error code when the request failed.
	"""
	__tablename__ = "request_logs"
	__table_args__ = (
		Index("ix_request_logs_direction_created_at", "direction", "created_at"),
	)

	id = Column(Integer, primary_key=True, index=True)
	created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
	correlation_id = Column(String(64), nullable=False, index=True)
	direction = Column(String(16), nullable=False, default="inbound")  # inbound, outbound

	# Inbound HTTP
	connection_type = Column(String(16), nullable=True)
	method = Column(String(16), nullable=True)
	path_template = Column(String(512), nullable=True, index=True)
	raw_path = Column(String(512), nullable=True)
	route_name = Column(String(128), nullable=True)
	client_ip = Column(String(64), nullable=True)
	user_agent = Column(String(256), nullable=True)
	auth_type = Column(String(16), nullable=True)
	user_id = Column(Integer, nullable=True, index=True)
	vendor_id = Column(Integer, nullable=True, index=True)

	# Outbound object storage
	provider = Column(String(64), nullable=True, index=True)
	target = Column(String(256), nullable=True, index=True)

	status_code = Column(Integer, nullable=True, index=True)
	duration_ms = Column(Integer, nullable=False)
	error_code = Column(String(64), nullable=True, index=True)
