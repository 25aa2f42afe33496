"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for the service, with
automatic logging and correlation ID tracking. Cluster and serialization
failures raised while mirroring credentials into the GitOps ConfigMap are
typed here so callers can tell a stale resource version from a broken API
server or a malformed credential list.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    CONSTRAINT_VIOLATION = "2004"
    SERIALIZATION_FAILED = "2005"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    CONFLICT = "3002"
    RETRIES_EXHAUSTED = "3006"

    # Cluster errors (5xxx)
    CLUSTER_ERROR = "5005"


class BaseError(Exception):
    """Base exception that carries an error code and context and logs itself."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Imported here to avoid a circular import at module load time
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(
                f"Error {self.error_code.value}: {self.message}", extra=log_data, exc_info=self.cause
            )
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code.value}: {self.message}", extra=log_data)

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Repository layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize repository error with database context."""
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize service error with operation context."""
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class InfraError(BaseError):
    """Failures talking to the cluster API or other infrastructure."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CLUSTER_ERROR,
        status_code: int = 502,
        cause: Optional[Exception] = None,
        **context,
    ):
        super().__init__(message, error_code, status_code, cause, **context)


class ClusterResourceNotFoundError(InfraError):
    """A secret or ConfigMap does not exist in the cluster."""

    def __init__(self, kind: str, namespace: str, name: str, **kwargs):
        super().__init__(
            f"{kind} not found: {namespace}/{name}",
            error_code=ErrorCode.NOT_FOUND,
            status_code=404,
            kind=kind,
            namespace=namespace,
            name=name,
            **kwargs,
        )


class ResourceVersionConflictError(InfraError):
    """A write carried a stale resource version and was rejected."""

    def __init__(self, kind: str, namespace: str, name: str, **kwargs):
        super().__init__(
            f"{kind} {namespace}/{name} was modified concurrently",
            error_code=ErrorCode.CONFLICT,
            status_code=409,
            kind=kind,
            namespace=namespace,
            name=name,
            **kwargs,
        )


class ClusterResourceExistsError(InfraError):
    """A create was rejected because the resource already exists."""

    def __init__(self, kind: str, namespace: str, name: str, **kwargs):
        super().__init__(
            f"{kind} already exists: {namespace}/{name}",
            error_code=ErrorCode.DUPLICATE,
            status_code=409,
            kind=kind,
            namespace=namespace,
            name=name,
            **kwargs,
        )


class SerializationError(BaseError):
    """The embedded repository credential text could not be decoded."""

    def __init__(self, message: str = "Malformed repository credentials", **kwargs):
        super().__init__(
            message=message, error_code=ErrorCode.SERIALIZATION_FAILED, status_code=422, **kwargs
        )


class ConflictExhaustedError(BaseError):
    """Every write attempt lost the race against a concurrent writer."""

    def __init__(self, message: str = "Resource version conflict retries exhausted", **kwargs):
        super().__init__(
            message=message, error_code=ErrorCode.RETRIES_EXHAUSTED, status_code=409, **kwargs
        )


class GitOpsConfigNotFoundError(BaseError):
    """Raised when a requested GitOps config record is not found."""

    def __init__(self, message: str = "GitOps config not found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


# Factory functions for common error patterns
def duplicate(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """
    Factory for duplicate resource errors.

    Args:
        resource_type: Type of resource (e.g., 'GitOpsConfig')
        cause: Original exception if any
        **identifiers: Resource identifiers

    Returns:
        Configured RepositoryError instance with 409 status
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"Duplicate {resource_type}"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return RepositoryError(
        message,
        error_code=ErrorCode.DUPLICATE,
        status_code=409,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def validation_failed(
    field: str, value: Any, reason: str, cause: Optional[Exception] = None
) -> ValidationError:
    """
    Factory for validation errors.

    Args:
        field: Field that failed validation
        value: The invalid value
        reason: Why validation failed
        cause: Original exception if any

    Returns:
        Configured ValidationError instance
    """
    return ValidationError(
        f"Validation failed for {field}: {reason}",
        field=field,
        error_code=ErrorCode.VALIDATION_FAILED,
        cause=cause,
        value=str(value),
        reason=reason,
    )


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
