"""
Error taxonomy for the planner.

Validation errors are raised before any write. The API layer turns every
PlannerError into a {"code", "message"} JSON body with the error's status.
"""
from typing import Any, Optional


class PlannerError(Exception):
    """Base exception for planner errors."""
    code = "PLANNER_ERROR"
    status_code = 400

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(PlannerError):
    """Client-side validation failed (missing field, bad range)."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code)
        self.field = field


class DateRangeError(ValidationError):
    """Trip date range is inverted or too long."""
    code = "INVALID_DATE_RANGE"


class OverlapConflictError(ValidationError):
    """Candidate range overlaps an existing trip or activity."""
    code = "OVERLAP_CONFLICT"
    status_code = 409

    def __init__(self, message: str, conflict: Any = None):
        super().__init__(message)
        self.conflict = conflict


class NotFoundError(PlannerError):
    code = "NOT_FOUND"
    status_code = 404


class PermissionDeniedError(PlannerError):
    code = "PERMISSION_DENIED"
    status_code = 403


class ConfirmationError(PlannerError):
    """Deletion confirmation token missing, expired or not issued to this user."""
    code = "CONFIRMATION_INVALID"


class ExternalServiceError(PlannerError):
    """Image search, geocoding or AI provider failed."""
    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502


class ServiceUnavailableError(ExternalServiceError):
    """External feature is not configured (missing API key)."""
    code = "SERVICE_UNAVAILABLE"
    status_code = 503
