"""Project-wide fixtures."""

import secrets
import string
import typing as t

import faker
import pytest
from django.contrib.auth.models import AbstractUser
from django.core.cache import cache


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Clear the cache before each test so throttle counters start from zero."""
    cache.clear()


class UserFactory:
    """Factory for creating users for testing."""

    fake = faker.Faker()

    def __init__(self, user_model: t.Type[AbstractUser]) -> None:
        self.user_model = user_model

    def create_user(self, **kwargs: t.Any) -> AbstractUser:
        username = kwargs.pop("username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)))
        email = kwargs.pop("email", f"{username}@example.com")
        password = kwargs.pop("password", "password")
        return self.user_model.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=kwargs.pop("first_name", self.fake.first_name()),
            last_name=kwargs.pop("last_name", self.fake.last_name()),
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> AbstractUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory(django_user_model: t.Type[AbstractUser]) -> UserFactory:
    return UserFactory(django_user_model)


@pytest.fixture
def user(user_factory: UserFactory) -> AbstractUser:
    return user_factory(username="attendee", email="attendee@example.com")
