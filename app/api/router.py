from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from fastapi import APIRouter, Depends


# Error body rendered by the ServiceError handler in main.py
SERVICE_ERROR_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "error_code": {"type": "string"},
        "message": {"type": "string"},
        "severity": {"type": "string"},
        "category": {"type": "string"},
        "http_status": {"type": "integer"},
        "correlation_id": {"type": "string"},
        "details": {"type": "object"},
    },
}


def _error(description: str) -> Dict[str, Any]:
    return {
        "description": description,
        "content": {"application/json": {"schema": SERVICE_ERROR_SCHEMA}},
    }


DEFAULT_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: _error("Bad Request (invalid upload or input)"),
    401: _error("Missing, invalid or expired bearer token"),
    403: _error("Missing permission or another vendor's record"),
    404: _error("Not Found"),
    409: _error("Conflict (job already claimed, duplicate claim or service order)"),
    500: _error("Internal Server Error"),
}

# Routers that touch object storage also document upstream failures
STORAGE_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    **DEFAULT_ERROR_RESPONSES,
    502: _error("Object storage unavailable"),
}


def create_router(
    *,
    name: Optional[str] = None,
    dependencies: Optional[Sequence[Depends]] = None,
    default_responses: Optional[Dict[int, Dict[str, Any]]] = None,
) -> APIRouter:
    """Create an APIRouter that documents the dispatch API's error bodies.

    Args:
        name: Logical router name, kept on the router for introspection.
        dependencies: Dependencies applied to every route of the router.
        default_responses: Replaces ``DEFAULT_ERROR_RESPONSES``.

    Returns:
        Configured APIRouter instance.
    """
    router = APIRouter(
        dependencies=list(dependencies) if dependencies else None,
        responses=(default_responses or DEFAULT_ERROR_RESPONSES),
    )
    if name:
        setattr(router, "name", name)
    return router
