"""Typed admission failures.

Every failure carries a stable machine-readable ``code``, a human-readable
``message`` and the HTTP status the API layer answers with. None of these are
retried: they describe business state, not transient faults.
"""

from enum import StrEnum

from django.utils.translation import gettext as _


class ErrorCode(StrEnum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    SOLD_OUT = "SOLD_OUT"
    NOT_AVAILABLE = "NOT_AVAILABLE"
    INVALID_INVITE = "INVALID_INVITE"
    INVITE_EXHAUSTED = "INVITE_EXHAUSTED"
    INVITE_NOT_YET_VALID = "INVITE_NOT_YET_VALID"
    INVITE_EXPIRED = "INVITE_EXPIRED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    RATE_LIMITED = "RATE_LIMITED"
    CANCELLATION_DEADLINE_PASSED = "CANCELLATION_DEADLINE_PASSED"
    EDIT_DEADLINE_PASSED = "EDIT_DEADLINE_PASSED"
    INTERNAL = "INTERNAL"


class AdmissionError(Exception):
    """Base class for every domain failure raised by the registration services."""

    code: ErrorCode = ErrorCode.INTERNAL
    status_code: int = 500
    default_message: str = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or _(self.default_message)
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationFailed(AdmissionError):
    """Malformed input or form-schema violations, keyed by field id."""

    code = ErrorCode.VALIDATION
    status_code = 400
    default_message = "Form validation failed."

    def __init__(self, message: str | None = None, errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class NotFound(AdmissionError):
    code = ErrorCode.NOT_FOUND
    status_code = 404
    default_message = "Not found."


class SoldOut(AdmissionError):
    code = ErrorCode.SOLD_OUT
    status_code = 409
    default_message = "This ticket is sold out."


class NotAvailable(AdmissionError):
    code = ErrorCode.NOT_AVAILABLE
    status_code = 409
    default_message = "This ticket is not on sale."


class InvalidInvite(AdmissionError):
    code = ErrorCode.INVALID_INVITE
    status_code = 400
    default_message = "Invalid invitation code."


class InviteExhausted(AdmissionError):
    code = ErrorCode.INVITE_EXHAUSTED
    status_code = 409
    default_message = "This invitation code has reached its usage limit."


class InviteNotYetValid(AdmissionError):
    code = ErrorCode.INVITE_NOT_YET_VALID
    status_code = 400
    default_message = "This invitation code is not valid yet."


class InviteExpired(AdmissionError):
    code = ErrorCode.INVITE_EXPIRED
    status_code = 400
    default_message = "This invitation code has expired."


class AlreadyRegistered(AdmissionError):
    code = ErrorCode.ALREADY_REGISTERED
    status_code = 409
    default_message = "You are already registered for this event."


class InvalidToken(AdmissionError):
    code = ErrorCode.INVALID_TOKEN
    status_code = 400
    default_message = "Invalid or already used link."


class TokenExpired(AdmissionError):
    code = ErrorCode.TOKEN_EXPIRED
    status_code = 410
    default_message = "This link has expired. Please request a new one."


class RateLimited(AdmissionError):
    code = ErrorCode.RATE_LIMITED
    status_code = 429
    default_message = "Too many requests. Please try again later."


class CancellationDeadlinePassed(AdmissionError):
    code = ErrorCode.CANCELLATION_DEADLINE_PASSED
    status_code = 409
    default_message = "The cancellation deadline for this event has passed."


class EditDeadlinePassed(AdmissionError):
    code = ErrorCode.EDIT_DEADLINE_PASSED
    status_code = 409
    default_message = "This registration can no longer be edited."


class InternalError(AdmissionError):
    code = ErrorCode.INTERNAL
    status_code = 500
    default_message = "Internal Server Error."
