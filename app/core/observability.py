from __future__ import annotations

import logging
import time
import uuid
from random import random
from typing import Callable, Optional, Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.background import BackgroundTask

from app.core.config import settings
from app.db.session import SessionLocal
from app.repositories.request_log import RequestLogRepository

logger = logging.getLogger(__name__)


def generate_correlation_id(existing: Optional[str]) -> str:
	if existing and existing.strip():
		return existing.strip()[:64]
	return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Middleware to log inbound HTTP requests with correlation IDs.

	The row is written in a background task after the response is sent. The
	caller's user and vendor ids and the service error code, when the
	request produced one, are read from ``request.state``.
	"""

	async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
		correlation_id = generate_correlation_id(request.headers.get("X-Correlation-ID"))
		setattr(request.state, "correlation_id", correlation_id)

		if not settings.ENABLE_REQUEST_LOGGING:
			response = await call_next(request)
			response.headers["X-Correlation-ID"] = correlation_id
			return response

		sampled_out = settings.LOG_SAMPLE_RATE < 1.0 and random() > settings.LOG_SAMPLE_RATE

		start_ns = time.monotonic_ns()
		response = await call_next(request)
		duration_ms = int((time.monotonic_ns() - start_ns) / 1_000_000)

		response.headers["X-Correlation-ID"] = correlation_id
		if not sampled_out:
			payload = _build_inbound_payload(request, correlation_id, response.status_code, duration_ms)
			response.background = BackgroundTask(_insert_inbound, payload)
		return response


def _build_inbound_payload(request: Request, correlation_id: str, status_code: int, duration_ms: int) -> dict:
	# Route template and name are unavailable for 404s
	route = request.scope.get("route")
	path_template = getattr(route, "path", None)
	endpoint = request.scope.get("endpoint")
	route_name = getattr(endpoint, "__name__", None)

	xff = request.headers.get("x-forwarded-for")
	client_ip = (xff.split(",")[0].strip() if xff else (request.client.host if request.client else None))

	auth_header = (request.headers.get("authorization") or "").lower()
	auth_type = "bearer" if auth_header.startswith("bearer ") else ("basic" if auth_header.startswith("basic ") else "none")

	return {
		"correlation_id": correlation_id,
		"connection_type": "http",
		"method": request.method,
		"raw_path": request.url.path,
		"path_template": path_template or request.url.path,
		"route_name": route_name,
		"status_code": status_code,
		"duration_ms": duration_ms,
		"client_ip": client_ip,
		"user_agent": (request.headers.get("user-agent") or "")[:256],
		"auth_type": auth_type,
		"user_id": getattr(request.state, "user_id", None),
		"vendor_id": getattr(request.state, "vendor_id", None),
		"error_code": getattr(request.state, "error_code", None),
	}


def _insert_inbound(payload: dict) -> None:
	db = SessionLocal()
	try:
		RequestLogRepository(db).insert_inbound(payload)
	except Exception as e:
		# Telemetry never fails the request
		db.rollback()
		logger.warning(
			"Failed to record inbound request",
			extra={"correlation_id": payload.get("correlation_id"), "error": str(e)}
		)
	finally:
		db.close()


def _insert_outbound(payload: dict) -> None:
	db = SessionLocal()
	try:
		RequestLogRepository(db).insert_outbound(payload)
	except Exception as e:
		db.rollback()
		logger.warning(
			"Failed to record outbound call",
			extra={"correlation_id": payload.get("correlation_id"), "error": str(e)}
		)
	finally:
		db.close()


def log_outbound_call(provider: str, target: str, operation: str, correlation_id: Optional[str], call: Callable[[], Any]) -> Any:
	"""Execute an outbound call and record its duration.

	Args:
		provider: External provider name (e.g., minio)
		target: Target entity (e.g., object key)
		operation: Operation name (e.g., put_object)
		correlation_id: Correlation ID for linkage
		call: Callable that performs the operation

	Returns:
		Result of `call()`
	"""
	if not settings.ENABLE_OUTBOUND_LOGGING:
		return call()

	start_ns = time.monotonic_ns()
	error_code: Optional[str] = None
	try:
		return call()
	except Exception as e:
		error_code = type(e).__name__
		raise
	finally:
		duration_ms = int((time.monotonic_ns() - start_ns) / 1_000_000)
		_insert_outbound({
			"correlation_id": correlation_id or str(uuid.uuid4()),
			"connection_type": "sdk",
			"provider": provider,
			"target": f"{operation}:{target}",
			"duration_ms": duration_ms,
			"error_code": error_code,
		})
