"""
Venue Admin — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the admin API's failure modes.
How:   Each exception carries a client-safe message, an optional `key`
       naming the offending field, and a context dict that is logged but
       never returned. Global handlers in main.py map each class to its
       HTTP status and the `{status, error, message, key}` body.
Who:   Raised by services, auth dependencies and routes.

Exception Hierarchy:
    VenueAdminError (base)
    ├── PermissionDeniedError   → 403 Forbidden
    ├── ValidationError         → 406 Not Acceptable (names the field)
    ├── NotFoundError           → 404 Not Found
    ├── ConflictError           → 409 Conflict (duplicate natural key)
    ├── FileStorageError        → 500 Internal Server Error
    ├── ReportGenerationError   → 500 Internal Server Error
    └── DatabaseError           → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class VenueAdminError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        key:      Request field the error refers to, if any
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.key = key
        self.context = context or {}
        super().__init__(self.message)


class PermissionDeniedError(VenueAdminError):
    """
    Raised when the requester may not perform the action.

    When:    Missing menu permission, blacklisted token, city or venue
             outside the requester's assignment.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "permission_denied"

    def __init__(
        self,
        message: str = "Permission denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(VenueAdminError):
    """
    Raised when client input fails a shape check or a business rule.

    When:    Schema violations, inactive or deleted references, mismatched
             city/venue/ground relationships, slot still in use, bad tokens.
    HTTP:    406 Not Acceptable

    Example response:
        {
            "status": "fail",
            "error": "validation_error",
            "message": "Venue does not exist or is disabled",
            "key": "venue"
        }
    """

    status_code = 406
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, key=field, context=ctx)
        self.field = field


class NotFoundError(VenueAdminError):
    """
    Raised when a requested record does not exist or lies outside the
    requester's scope.

    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(VenueAdminError):
    """
    Raised when a live record already holds the natural key being written.

    When:    Role name+city+venue, venue name+city, slot ground+label,
             expense month+year.
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Record already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(VenueAdminError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ReportGenerationError(VenueAdminError):
    """
    Raised when the expense report PDF cannot be rendered or sent.

    HTTP:    500 Internal Server Error
    """

    error_code = "download_failed"

    def __init__(
        self,
        message: str = "Could not download the file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(VenueAdminError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The SQL error
        is logged server-side only.
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
