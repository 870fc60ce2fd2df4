"""Exception handlers for the API."""

import traceback
import typing as t

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from django.utils.translation import gettext as _
from ninja.errors import ValidationError as SchemaValidationError
from ninja.responses import Response

from registrations.exceptions import AdmissionError, ErrorCode, ValidationFailed

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception("INTERNAL_SERVER_ERROR", method=request.method, path=request.path, exc_info=True)
    data: dict[str, t.Any] = {"code": ErrorCode.INTERNAL.value, "message": _("Internal Server Error.")}
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_admission_error(request: HttpRequest, exc: AdmissionError | t.Type[AdmissionError]) -> Response:
    """Answer a domain failure with its stable code and HTTP status."""
    assert isinstance(exc, AdmissionError)
    if exc.status_code >= 500:
        logger.error("admission_error", code=exc.code.value, path=request.path, exc_info=True)
    else:
        logger.info("admission_refused", code=exc.code.value, path=request.path)
    data: dict[str, t.Any] = {"code": exc.code.value, "message": exc.message}
    if isinstance(exc, ValidationFailed) and exc.errors:
        data["errors"] = exc.errors
    return Response(status=exc.status_code, data=data)


def handle_schema_validation_error(
    request: HttpRequest, exc: SchemaValidationError | t.Type[SchemaValidationError]
) -> Response:
    """Handle a malformed request body or query string."""
    assert isinstance(exc, SchemaValidationError)
    errors: dict[str, list[str]] = {}
    for error in exc.errors:
        # loc is ("body", "payload", "field", ...); keep the part that names the field.
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "payload")]
        errors.setdefault(".".join(loc) or "__all__", []).append(str(error.get("msg", "")))
    return Response(
        status=400,
        data={"code": ErrorCode.VALIDATION.value, "message": _("Invalid request."), "errors": errors},
    )


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    assert isinstance(exc, ValidationError)
    logger.error("VALIDATION_ERROR", exc_info=True, stack_info=True)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}
    return Response(
        status=400,
        data={"code": ErrorCode.VALIDATION.value, "message": _("Invalid data."), "errors": error_dict},
    )
