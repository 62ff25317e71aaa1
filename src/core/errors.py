"""Domain error taxonomy raised by services and mapped at the API boundary.

Services never build HTTP responses. They raise one of these exceptions and
``core.exceptions.custom_exception_handler`` turns it into the envelope.
"""

from enum import Enum
from typing import Any


class DomainError(Exception):
    """Base class for errors that carry an HTTP status and a stable code."""

    status_code = 500
    code = "ERROR"
    default_message = "Unexpected error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_errors(self) -> list[Any]:
        """Return the list placed under ``errors`` in the response envelope."""
        return [self.message]


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found."


class AccessDeniedError(DomainError):
    """Raised when a principal (or no principal) may not touch a resource.

    The boundary reports 401 for anonymous callers and 403 otherwise.
    """

    status_code = 403
    code = "ACCESS_DENIED"
    default_message = "You do not have permission to perform this action on this resource."


class AuthenticationError(DomainError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"
    default_message = "Authentication failed."


class LoginRejectionReason(str, Enum):
    """Why a login attempt was refused."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    DISABLED = "DISABLED"


_LOGIN_MESSAGES = {
    LoginRejectionReason.INVALID_CREDENTIALS: "Invalid credentials",
    LoginRejectionReason.PENDING_APPROVAL: "Account pending admin approval",
    LoginRejectionReason.DISABLED: "Account disabled",
}


class LoginRejectedError(AuthenticationError):
    """Login failure carrying the specific reason for the boundary mapping."""

    def __init__(self, reason: LoginRejectionReason):
        self.reason = reason
        super().__init__(_LOGIN_MESSAGES[reason])
        self.code = reason.value
        if reason is not LoginRejectionReason.INVALID_CREDENTIALS:
            self.status_code = 403


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists."


class ValidationFailedError(DomainError):
    """Field-level constraint violations, keyed by field name."""

    status_code = 400
    code = "VALIDATION_FAILED"
    default_message = "Validation failed."

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(self.default_message)

    def to_errors(self) -> list[Any]:
        return [
            {"field": field, "message": message}
            for field, message in self.field_errors.items()
        ]


class IllegalStateError(DomainError):
    status_code = 409
    code = "ILLEGAL_STATE"
    default_message = "Operation not allowed in the current state."


class PayloadTooLargeError(DomainError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"
    default_message = "Uploaded file is too large."


class UpstreamError(DomainError):
    """A collaborator (media host, storage) failed; fatal for the request."""

    status_code = 502
    code = "UPSTREAM_FAILURE"
    default_message = "Upstream service failure."


__all__ = [
    "DomainError",
    "NotFoundError",
    "AccessDeniedError",
    "AuthenticationError",
    "LoginRejectionReason",
    "LoginRejectedError",
    "ConflictError",
    "ValidationFailedError",
    "IllegalStateError",
    "PayloadTooLargeError",
    "UpstreamError",
]
