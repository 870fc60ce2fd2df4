from datetime import timedelta

import pytest
from django.utils import timezone

from registrations.models import Event, Registration, Ticket


@pytest.fixture
def event() -> Event:
    start = timezone.now() + timedelta(days=14)
    return Event.objects.create(name="Data Summit", slug="data-summit", start=start, end=start + timedelta(hours=9))


@pytest.fixture
def registration(event: Event) -> Registration:
    ticket = Ticket.objects.create(event=event, name="Standard", quantity=100)
    return Registration.objects.create(event=event, ticket=ticket, email="grace@example.com", check_in_code="GRACE001")
