"""
SERVICE ERRORS
==============

Every failure raised by the services derives from PardnaError.
status_code is what the JSON routes answer with.
"""


class PardnaError(Exception):
    """Base exception for pardna operations"""
    status_code = 500


class ValidationError(PardnaError):
    """Raised when input is invalid"""
    status_code = 400


class PastStartDateError(ValidationError):
    """Raised when a financially impacting change targets a plan that has already started"""
    status_code = 422

    def __init__(self, message=None):
        super().__init__(
            message or
            "You cannot make financially impacting changes to a pardna once the start date has passed."
        )


class AuthorizationError(PardnaError):
    """Raised when the caller is not allowed to act on a plan"""
    status_code = 403


class NotFoundError(PardnaError):
    """Raised when a plan, participant, payment or user does not exist"""
    status_code = 404


class ConflictError(PardnaError):
    """Raised when a plan was changed by someone else since it was read"""
    status_code = 409


class PersistenceError(PardnaError):
    """Raised when the database transaction fails"""
    status_code = 500


class LedgerGenerationError(PardnaError):
    """Raised when the calendar has no boundary for a period"""
    status_code = 500
