# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.endpoints import auth, user, vendor, job, assignment, part
from app.core.config import settings
from app.core.observability import RequestLoggingMiddleware
# Import all models to ensure relationships are properly resolved
from app.db import base  # This imports all models
from app.services.exceptions import (
    ServiceError,
    AuthError,
    BusinessError,
    DatabaseError,
    create_error_response,
)

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("dispatch")

app = FastAPI(title="Field Service Dispatch API")
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    request.state.error_code = exc.error_code
    if exc.correlation_id is None:
        exc.correlation_id = getattr(request.state, "correlation_id", None)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.http_status.value,
        content=create_error_response(exc, include_details=isinstance(exc, BusinessError)),
        headers=headers,
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    correlation_id = getattr(request.state, "correlation_id", None)
    logger.error(
        "Unhandled database error",
        extra={"correlation_id": correlation_id, "error": type(exc).__name__}
    )
    error = DatabaseError(operation=request.url.path, reason=type(exc).__name__, correlation_id=correlation_id)
    request.state.error_code = error.error_code
    return JSONResponse(status_code=error.http_status.value, content=create_error_response(error))


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(user.router, prefix="/users", tags=["users"])
app.include_router(vendor.router, prefix="/vendors", tags=["vendors"])
app.include_router(job.router, prefix="/jobs", tags=["jobs"])
app.include_router(assignment.router, prefix="/assignments", tags=["assignments"])
app.include_router(part.router, prefix="/parts", tags=["parts"])


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}
