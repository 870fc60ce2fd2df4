from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.errors import ValidationError as SchemaValidationError
from ninja_extra import NinjaExtraAPI

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from registrations.controllers.invitation_codes import InvitationCodeController
from registrations.controllers.referrals import ReferralController
from registrations.controllers.registrations import RegistrationController
from registrations.exceptions import AdmissionError

from .exception_handlers import (
    handle_admission_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_schema_validation_error,
)

api = NinjaExtraAPI(
    title="Gatehouse API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Gatehouse API {settings.VERSION}",
    app_name=f"gatehouse-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    RegistrationController,
    InvitationCodeController,
    ReferralController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    SchemaValidationError: handle_schema_validation_error,
    AdmissionError: handle_admission_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
