import logging
import typing as t

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils import translation
from ninja_jwt.authentication import JWTAuth

logger = logging.getLogger(__name__)


class I18nJWTAuth(JWTAuth):
    """JWT authentication that activates the caller's preferred language.

    The identity provider issues the bearer token; this class only validates it
    and resolves the user. If the user object carries a ``language`` attribute
    it is activated for the rest of the request.
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and activate user's language preference."""
        user = super().authenticate(request, token)

        if user and (user_language := getattr(user, "language", None)):
            translation.activate(user_language)
            request.LANGUAGE_CODE = user_language

        return user


class OptionalAuth(I18nJWTAuth):
    """Optional JWT authentication.

    - If a bearer token is present: authenticates the user.
    - If no token: sets request.user to AnonymousUser and continues.

    Self-service edit/cancel endpoints use this, since the raw edit token is the
    credential there.
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides I18nJWTAuth __call__ to provide optional auth."""
        headers = request.headers
        auth_value = headers.get(self.header)
        if not auth_value:
            request.user = AnonymousUser()
            return request.user
        parts = auth_value.split(" ")

        if parts[0].lower() != self.openapi_scheme:
            if settings.DEBUG:
                logger.error(f"Unexpected auth - '{auth_value}'")
            return None
        token = " ".join(parts[1:])
        return self.authenticate(request, token)
