# core/exceptions.py
"""
Domain exceptions for SchoolHub.

Every exception carries a human readable ``message``, optional structured
``details`` and the HTTP ``status_code`` the API layer should answer with.
"""

import logging

logger = logging.getLogger(__name__)


class SchoolHubException(Exception):
    """Base exception for school records and accounts"""

    status_code = 400
    default_message = "An error occurred while processing the request"

    def __init__(self, message=None, details=None, user=None):
        self.message = message or self.default_message
        self.details = details
        self.user = user
        super().__init__(self.message)

        logger.info(
            f"{self.__class__.__name__}: {self.message} - "
            f"User: {getattr(user, 'username', 'Anonymous')}, "
            f"Details: {details}"
        )


class DataValidationError(SchoolHubException):
    """Raised when submitted data fails validation"""

    default_message = "Data validation failed"

    def __init__(self, message=None, validation_errors=None, **kwargs):
        self.validation_errors = validation_errors or {}
        kwargs.setdefault('details', self.validation_errors or None)
        super().__init__(message, **kwargs)


class DuplicateRecordError(SchoolHubException):
    """Raised when a record would duplicate an existing one"""

    default_message = "Record already exists"


class PermissionDeniedError(SchoolHubException):
    """Raised when user lacks required privileges"""

    status_code = 403
    default_message = "Permission denied"

    def __init__(self, message=None, required_privilege=None, **kwargs):
        self.required_privilege = required_privilege
        super().__init__(message, **kwargs)

        logger.warning(
            f"PermissionDeniedError: {self.message} - "
            f"Required: {required_privilege}"
        )


class RecordNotFoundError(SchoolHubException):
    status_code = 404
    default_message = "Record not found"


class AccountLockedError(SchoolHubException):
    """Raised when an administratively locked account tries to sign in"""

    status_code = 423
    default_message = "Account is locked"


class AccessNumberConflict(SchoolHubException):
    """Raised when an access number is already held by a student on the roll"""

    status_code = 409
    default_message = "Access number already exists"


class MessagingNotAllowed(SchoolHubException):
    status_code = 403
    default_message = "You are not allowed to send this message"


class GradingSystemException(SchoolHubException):
    """Raised when marks or grade bands are inconsistent"""

    default_message = "Grading failed"


class DocumentRenderError(SchoolHubException):
    status_code = 500
    default_message = "Document could not be generated"

    def __init__(self, message=None, **kwargs):
        super().__init__(message, **kwargs)
        logger.error(f"DocumentRenderError: {self.message}")
