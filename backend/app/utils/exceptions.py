"""Custom exceptions and error handling utilities."""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError, OperationalError


class AppException(Exception):
    """Base exception for application errors.

    Every error carries a machine-readable ``kind`` so callers can decide
    whether to retry, re-authenticate or show a quota countdown.
    """
    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_detail(self) -> Dict[str, Any]:
        """Structured error body returned to API clients."""
        return {"kind": self.kind, "message": self.message, **self.extra}


class NotFoundError(AppException):
    """Raised when a resource is not found (or is owned by someone else)."""
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgumentError(AppException):
    """Raised when input is malformed or inconsistent."""
    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AppException):
    """Raised when a write is based on a stale revision."""
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class QuotaExceededError(AppException):
    """Raised when the daily generation quota is used up."""
    kind = "quota_exceeded"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, reset_date: datetime, max_credits: int):
        super().__init__(
            f"Daily limit of {max_credits} AI generations reached",
            resetDate=reset_date.isoformat(),
            remaining=0,
        )
        self.reset_date = reset_date


class TransientStorageError(AppException):
    """Raised when the durable store times out or drops the connection."""
    kind = "transient_storage_failure"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class UpstreamServiceError(AppException):
    """Raised when an external collaborator fails."""
    kind = "upstream_failure"
    status_code = status.HTTP_502_BAD_GATEWAY


class EditGenerationError(UpstreamServiceError):
    """Raised when the AI edit generator fails or answers with garbage."""
    kind = "edit_generation_failed"


class ImageSearchError(UpstreamServiceError):
    """Raised when the image provider rejects or fails a search."""
    kind = "image_search_failed"


class HistoryBoundary(AppException):
    """Undo/redo reached the end of the history; not a real failure."""
    status_code = status.HTTP_409_CONFLICT


class AtGenesis(HistoryBoundary):
    """Raised by undo when the cursor is on the first version."""
    kind = "at_genesis"

    def __init__(self, message: str = "Already at the first version"):
        super().__init__(message)


class AtHead(HistoryBoundary):
    """Raised by redo when the cursor is on the latest version."""
    kind = "at_head"

    def __init__(self, message: str = "Already at the latest version"):
        super().__init__(message)


def handle_database_error(error: Exception, operation: str) -> AppException:
    """
    Convert database errors to application exceptions.

    Args:
        error: The database error
        operation: Description of the operation that failed

    Returns:
        TransientStorageError for connection/timeout failures, AppException otherwise
    """
    if isinstance(error, OperationalError) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return TransientStorageError(f"Storage unavailable during {operation}, please retry")

    error_message = str(error).lower()
    if "timeout" in error_message or "canceling statement" in error_message:
        return TransientStorageError(f"Storage timed out during {operation}, please retry")

    return AppException(f"Database error during {operation}")


def _http_error(status_code: int, kind: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"kind": kind, "message": message})


def authentication_error(message: str = "Authentication required") -> HTTPException:
    """
    Create a standardized 401 authentication error.

    Args:
        message: Authentication error message

    Returns:
        HTTPException with 401 status
    """
    return _http_error(status.HTTP_401_UNAUTHORIZED, "unauthenticated", message)


def forbidden_error(message: str = "Access denied") -> HTTPException:
    """
    Create a standardized 403 forbidden error.

    Args:
        message: Forbidden error message

    Returns:
        HTTPException with 403 status
    """
    return _http_error(status.HTTP_403_FORBIDDEN, "forbidden", message)


def service_unavailable_error(message: str) -> HTTPException:
    """Create a standardized 503 error for unconfigured collaborators."""
    return _http_error(status.HTTP_503_SERVICE_UNAVAILABLE, "service_unavailable", message)


def not_found_error(resource: str, identifier: Optional[str] = None) -> NotFoundError:
    """
    Create a standardized not-found error.

    Args:
        resource: Name of the resource (e.g., "Project")
        identifier: Optional identifier that was not found

    Returns:
        NotFoundError
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return NotFoundError(message)


def validation_error(message: str) -> InvalidArgumentError:
    """Create a standardized invalid-argument error."""
    return InvalidArgumentError(message)
