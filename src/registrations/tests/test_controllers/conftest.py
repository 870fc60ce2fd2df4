from collections.abc import Callable

import pytest
from django.contrib.auth.models import AbstractUser
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken


def _client_for(user: AbstractUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def user_client(user: AbstractUser) -> Client:
    """API client for the attendee."""
    return _client_for(user)


@pytest.fixture
def emailless_client(user_factory: Callable[..., AbstractUser]) -> Client:
    """API client for an account without an email address."""
    return _client_for(user_factory(username="ghost", email=""))
