"""Domain-specific exceptions for service layer operations.

This module provides a structured exception hierarchy for the dispatch
services, enabling consistent error handling, logging, and client response
generation.

Architecture:
- ServiceError: Base exception with correlation ID and context support
- Category Base Classes: AuthError, AccessDeniedError, BusinessError, ConflictError, InfrastructureError
- Specific Exceptions: Concrete exceptions for job, claim, assignment, part and photo scenarios
- Error Context: Rich metadata and user-friendly message support

Every exception maps to a single HTTP status; the API layer renders
``to_dict()`` with that status.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union
from http import HTTPStatus


class ErrorSeverity(Enum):
    """Error severity levels for logging and monitoring."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    EXTERNAL_SERVICE = "external_service"
    INFRASTRUCTURE = "infrastructure"
    SYSTEM = "system"


class ServiceError(Exception):
    """Base exception for all service layer errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        correlation_id: Request correlation ID for tracing
        details: Additional error context (sanitized for logging)
        user_message: User-friendly message for client display
        severity: Error severity level for logging/monitoring
        category: Error category for classification
        http_status: HTTP status code for API responses
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SERVICE_ERROR",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.correlation_id = correlation_id
        self.details = details or {}
        self.user_message = user_message or message
        self.severity = severity
        self.category = category
        self.http_status = http_status

    def to_dict(self, include_sensitive: bool = False) -> Dict[str, Any]:
        """Convert exception to dictionary for logging or client response.

        Args:
            include_sensitive: Whether to include sensitive details

        Returns:
            Dictionary representation of the error
        """
        result = {
            "error_code": self.error_code,
            "message": self.user_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "http_status": self.http_status.value
        }

        if self.correlation_id:
            result["correlation_id"] = self.correlation_id

        if include_sensitive and self.details:
            result["details"] = self.details
            result["internal_message"] = self.message

        return result

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


# =============================================================================
# AUTHENTICATION ERRORS
# =============================================================================

class AuthError(ServiceError):
    """Base class for authentication errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.AUTHENTICATION,
        http_status: HTTPStatus = HTTPStatus.UNAUTHORIZED
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message,
            severity=severity,
            category=category,
            http_status=http_status
        )


class AuthenticationError(AuthError):
    """Authentication failed (missing, invalid or expired credentials)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="AUTH_FAILED",
            correlation_id=correlation_id,
            details=details,
            user_message="Authentication failed. Please check your credentials."
        )


class UserNotFoundError(AuthError):
    """User not found during authentication."""

    def __init__(
        self,
        email: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message="User not found",
            error_code="USER_NOT_FOUND",
            correlation_id=correlation_id,
            details={"email": email},
            user_message="User account not found. Please check your email address.",
            category=ErrorCategory.RESOURCE_NOT_FOUND,
            http_status=HTTPStatus.NOT_FOUND
        )


class UserInactiveError(AuthError):
    """User account is inactive."""

    def __init__(
        self,
        user_id: int,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message="User account is inactive",
            error_code="USER_INACTIVE",
            correlation_id=correlation_id,
            details={"user_id": user_id},
            user_message="Your account is inactive. Please contact support."
        )


class InvalidPasswordError(AuthError):
    """Invalid password provided."""

    def __init__(
        self,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message="Invalid password",
            error_code="INVALID_PASSWORD",
            correlation_id=correlation_id,
            user_message="Invalid password. Please try again.",
            severity=ErrorSeverity.LOW
        )


class EmailAlreadyExistsError(AuthError):
    """Email address is already registered."""

    def __init__(
        self,
        email: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message="Email address already registered",
            error_code="EMAIL_EXISTS",
            correlation_id=correlation_id,
            details={"email": email},
            user_message="This email address is already registered. Please use a different email or try logging in.",
            category=ErrorCategory.CONFLICT,
            http_status=HTTPStatus.CONFLICT
        )


# =============================================================================
# AUTHORIZATION ERRORS
# =============================================================================

class AccessDeniedError(ServiceError):
    """Caller is authenticated but may not touch this resource."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: str = "FORBIDDEN",
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message or "You don't have permission to access this resource.",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.AUTHORIZATION,
            http_status=HTTPStatus.FORBIDDEN
        )


class PermissionDeniedError(AccessDeniedError):
    """Caller lacks a named permission."""

    def __init__(
        self,
        permission: str,
        user_id: Optional[int] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"Missing permission: {permission}",
            error_code="PERMISSION_DENIED",
            correlation_id=correlation_id,
            details={"permission": permission, "user_id": user_id},
            user_message=f"You need the '{permission}' permission to perform this action."
        )


class VendorProfileRequiredError(AccessDeniedError):
    """Caller acts for no vendor."""

    def __init__(
        self,
        user_id: int,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message="Caller has no vendor profile",
            error_code="VENDOR_PROFILE_REQUIRED",
            correlation_id=correlation_id,
            details={"user_id": user_id},
            user_message="Your account is not linked to a vendor profile."
        )


class VendorInactiveError(AccessDeniedError):
    """Vendor exists but is deactivated."""

    def __init__(
        self,
        vendor_id: int,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"Vendor {vendor_id} is inactive",
            error_code="VENDOR_INACTIVE",
            correlation_id=correlation_id,
            details={"vendor_id": vendor_id},
            user_message="Your vendor account is inactive. Please contact dispatch."
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(ServiceError):
    """Input validation failed."""

    def __init__(
        self,
        field: str,
        message: str,
        correlation_id: Optional[str] = None,
        validation_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field": field, "validation_message": message}
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=f"Validation failed for {field}: {message}",
            error_code="VALIDATION_ERROR",
            correlation_id=correlation_id,
            details=details,
            user_message=f"Invalid {field}: {message}",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            http_status=HTTPStatus.BAD_REQUEST
        )


# =============================================================================
# BUSINESS DOMAIN ERRORS
# =============================================================================

class BusinessError(ServiceError):
    """Base class for business domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.BUSINESS_RULE,
        http_status: HTTPStatus = HTTPStatus.BAD_REQUEST
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message,
            severity=severity,
            category=category,
            http_status=http_status
        )


class ResourceNotFoundError(BusinessError):
    """Base class for resource not found errors."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[int, str],
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"{resource_type} {resource_id} not found",
            error_code=f"{resource_type.upper()}_NOT_FOUND",
            correlation_id=correlation_id,
            details={"resource_type": resource_type, "resource_id": resource_id},
            user_message=f"{resource_type} not found.",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.RESOURCE_NOT_FOUND,
            http_status=HTTPStatus.NOT_FOUND
        )


class JobNotFoundError(ResourceNotFoundError):
    def __init__(self, job_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Job", resource_id=job_id, correlation_id=correlation_id)


class AssignmentNotFoundError(ResourceNotFoundError):
    def __init__(self, assignment_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Assignment", resource_id=assignment_id, correlation_id=correlation_id)


class PartNotFoundError(ResourceNotFoundError):
    def __init__(self, part_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Part", resource_id=part_id, correlation_id=correlation_id)


class PhotoNotFoundError(ResourceNotFoundError):
    def __init__(self, photo_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Photo", resource_id=photo_id, correlation_id=correlation_id)


class VendorNotFoundError(ResourceNotFoundError):
    def __init__(self, vendor_id: int, correlation_id: Optional[str] = None):
        super().__init__(resource_type="Vendor", resource_id=vendor_id, correlation_id=correlation_id)


class ConflictError(BusinessError):
    """Base class for requests that clash with the current state of a resource."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.CONFLICT,
            http_status=HTTPStatus.CONFLICT
        )


class JobUnavailableError(ConflictError):
    """The job was no longer available when the claim tried to take it."""

    def __init__(self, job_id: int, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Job {job_id} is no longer available",
            error_code="JOB_UNAVAILABLE",
            correlation_id=correlation_id,
            details={"job_id": job_id},
            user_message="This job is no longer available. It may have been claimed by another vendor."
        )


class DuplicateClaimError(ConflictError):
    """The vendor already holds an active assignment for the job."""

    def __init__(self, job_id: int, vendor_id: int, assignment_id: Optional[int] = None, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Vendor {vendor_id} already holds assignment {assignment_id} for job {job_id}",
            error_code="DUPLICATE_CLAIM",
            correlation_id=correlation_id,
            details={"job_id": job_id, "vendor_id": vendor_id, "assignment_id": assignment_id},
            user_message="You have already claimed this job."
        )


class DuplicateServiceOrderError(ConflictError):
    def __init__(self, so_number: str, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Service order {so_number} already exists",
            error_code="SO_NUMBER_EXISTS",
            correlation_id=correlation_id,
            details={"so_number": so_number},
            user_message=f"A job with service order number {so_number} already exists."
        )


class JobStatusConflictError(ConflictError):
    """Manual job status change attempted while an assignment is active."""

    def __init__(self, job_id: int, requested_status: str, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Job {job_id} has an active assignment; cannot set status to {requested_status}",
            error_code="JOB_STATUS_CONFLICT",
            correlation_id=correlation_id,
            details={"job_id": job_id, "requested_status": requested_status},
            user_message="This job has an active assignment. Cancel the assignment before changing the job status."
        )


class InvalidTransitionError(BusinessError):
    """Requested assignment status is not reachable from the current one."""

    def __init__(
        self,
        assignment_id: int,
        current_status: str,
        requested_status: str,
        allowed: Optional[List[str]] = None,
        correlation_id: Optional[str] = None
    ):
        allowed = allowed or []
        super().__init__(
            message=f"Assignment {assignment_id} cannot move from {current_status} to {requested_status}",
            error_code="INVALID_TRANSITION",
            correlation_id=correlation_id,
            details={
                "assignment_id": assignment_id,
                "current_status": current_status,
                "requested_status": requested_status,
                "allowed": allowed,
            },
            user_message=(
                f"Cannot change status from '{current_status}' to '{requested_status}'. "
                f"Allowed: {', '.join(allowed) if allowed else 'none'}."
            ),
            severity=ErrorSeverity.LOW,
            http_status=HTTPStatus.UNPROCESSABLE_ENTITY
        )


# =============================================================================
# INFRASTRUCTURE ERRORS
# =============================================================================

class InfrastructureError(ServiceError):
    """Base class for infrastructure-related errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        correlation_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        http_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            correlation_id=correlation_id,
            details=details,
            user_message=user_message or "A system error occurred. Please try again later.",
            severity=severity,
            category=category,
            http_status=http_status
        )


class DatabaseError(InfrastructureError):
    """Wraps an unexpected SQLAlchemy failure."""

    def __init__(self, operation: str, reason: str, correlation_id: Optional[str] = None):
        super().__init__(
            message=f"Database {operation} failed: {reason}",
            error_code="INTERNAL_ERROR",
            correlation_id=correlation_id,
            details={"operation": operation, "reason": reason},
            severity=ErrorSeverity.CRITICAL
        )


class FileError(InfrastructureError):
    """File-related errors."""
    pass


class FileUploadError(FileError):
    """File upload failed."""

    def __init__(
        self,
        filename: str,
        reason: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"File upload failed for '{filename}': {reason}",
            error_code="FILE_UPLOAD_FAILED",
            correlation_id=correlation_id,
            details={"filename": filename, "reason": reason},
            user_message="File upload failed. Please try again with a different file.",
            category=ErrorCategory.VALIDATION,
            http_status=HTTPStatus.BAD_REQUEST,
            severity=ErrorSeverity.LOW
        )


class FileStorageError(FileError):
    """Object storage unreachable or refused the operation."""

    def __init__(
        self,
        operation: str,
        reason: str,
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"File storage {operation} failed: {reason}",
            error_code="FILE_STORAGE_ERROR",
            correlation_id=correlation_id,
            details={"operation": operation, "reason": reason},
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.EXTERNAL_SERVICE,
            http_status=HTTPStatus.BAD_GATEWAY
        )


class InvalidFileTypeError(FileError):
    """Upload is not an image we can read."""

    def __init__(
        self,
        filename: str,
        file_type: str,
        allowed_types: List[str],
        correlation_id: Optional[str] = None
    ):
        super().__init__(
            message=f"Invalid file type '{file_type}' for '{filename}'. Allowed types: {allowed_types}",
            error_code="INVALID_FILE_TYPE",
            correlation_id=correlation_id,
            details={"filename": filename, "file_type": file_type, "allowed_types": allowed_types},
            user_message=f"Invalid file type. Please upload a file with one of these types: {', '.join(allowed_types)}",
            category=ErrorCategory.VALIDATION,
            http_status=HTTPStatus.BAD_REQUEST,
            severity=ErrorSeverity.LOW
        )


class FileSizeLimitError(FileError):
    """File size exceeds limit."""

    def __init__(
        self,
        filename: str,
        file_size: int,
        max_size: int,
        correlation_id: Optional[str] = None
    ):
        max_size_mb = max_size / (1024 * 1024)
        file_size_mb = file_size / (1024 * 1024)

        super().__init__(
            message=f"File '{filename}' size {file_size} bytes exceeds limit of {max_size} bytes",
            error_code="FILE_SIZE_LIMIT_EXCEEDED",
            correlation_id=correlation_id,
            details={"filename": filename, "file_size": file_size, "max_size": max_size},
            user_message=f"File size ({file_size_mb:.1f}MB) exceeds the maximum allowed size of {max_size_mb:.1f}MB.",
            category=ErrorCategory.VALIDATION,
            http_status=HTTPStatus.BAD_REQUEST,
            severity=ErrorSeverity.LOW
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def create_error_response(
    error: ServiceError,
    include_details: bool = False
) -> Dict[str, Any]:
    """Create standardized error response dictionary."""
    return error.to_dict(include_sensitive=include_details)
