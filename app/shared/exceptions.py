# app/shared/exceptions.py
"""
Domain errors raised by services, stores and auth dependencies.
Each maps to one HTTP status in app/shared/error_handlers.py.
"""


class ClinicError(Exception):
    """Base class for all client-visible domain errors."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
        self.message = message


class ValidationError(ClinicError):
    """Missing or malformed required fields, or an invalid state change."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(ClinicError):
    """Missing, invalid or expired token, or a deactivated account."""

    status_code = 401
    code = "AUTHENTICATION_REQUIRED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthorizationError(ClinicError):
    """Valid identity whose role is below the required one."""

    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class NotFoundError(ClinicError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ClinicError):
    """Slot already held by a non-cancelled appointment."""

    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str = "This time slot is already booked"):
        super().__init__(message)


class StaleRecordError(ConflictError):
    """The record's status changed between reading it and writing it."""

    code = "STALE_RECORD"

    def __init__(self, message: str = "Appointment was changed by another request; reload and try again"):
        super().__init__(message)


class InternalError(ClinicError):
    """Store failure. Details are logged, never returned to the caller."""

    status_code = 500
    code = "INTERNAL_ERROR"
