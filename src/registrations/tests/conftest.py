import typing as t
from collections.abc import Callable
from datetime import timedelta

import pytest
from django.db.models import F
from django.utils import timezone

from registrations.models import Event, FormField, InvitationCode, Registration, Ticket
from registrations.service.admission import AdmissionService
from registrations.service.cancellation import CancellationService
from registrations.service.check_in_codes import random_code
from registrations.service.edit_tokens import EditTokenService, generate_token, hash_token
from registrations.stores.django_store import DjangoRegistrationStore


class RecordingNotifier:
    """Notifier double that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.confirmations: list[tuple[Registration, str]] = []
        self.edit_links: list[tuple[str, str]] = []
        self.cancellations: list[Registration] = []

    def send_confirmation(self, registration: Registration, event: Event, qr_code_url: str) -> None:
        self.confirmations.append((registration, qr_code_url))

    def send_edit_link(self, email: str, raw_token: str, event: Event) -> None:
        self.edit_links.append((email, raw_token))

    def send_cancellation(self, registration: Registration, event: Event) -> None:
        self.cancellations.append(registration)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def event() -> Event:
    now = timezone.now()
    return Event.objects.create(
        name="Community Conference",
        slug="community-conference",
        start=now + timedelta(days=30),
        end=now + timedelta(days=31),
    )


@pytest.fixture
def other_event() -> Event:
    now = timezone.now()
    return Event.objects.create(
        name="Autumn Meetup",
        slug="autumn-meetup",
        start=now + timedelta(days=60),
        end=now + timedelta(days=60, hours=4),
    )


@pytest.fixture
def ticket(event: Event) -> Ticket:
    return Ticket.objects.create(event=event, name="General Admission", quantity=10)


@pytest.fixture
def gated_ticket(event: Event) -> Ticket:
    return Ticket.objects.create(event=event, name="Speaker", quantity=5, require_invite_code=True)


@pytest.fixture
def invitation(gated_ticket: Ticket) -> InvitationCode:
    return InvitationCode.objects.create(ticket=gated_ticket, code="SPEAKER2026", usage_limit=1)


@pytest.fixture
def name_field(event: Event) -> FormField:
    return FormField.objects.create(
        event=event,
        type=FormField.FieldType.TEXT,
        name={"en": "Name", "zh-Hant": "姓名"},
        description="Name",
        required=True,
        order=0,
    )


@pytest.fixture
def form_data(name_field: FormField) -> dict[str, t.Any]:
    return {str(name_field.id): "Ada Lovelace"}


@pytest.fixture
def admission_service(notifier: RecordingNotifier) -> AdmissionService:
    return AdmissionService(notifier=notifier)


@pytest.fixture
def edit_token_service(notifier: RecordingNotifier) -> EditTokenService:
    return EditTokenService(notifier=notifier)


@pytest.fixture
def cancellation_service(notifier: RecordingNotifier, edit_token_service: EditTokenService) -> CancellationService:
    return CancellationService(tokens=edit_token_service, notifier=notifier)


@pytest.fixture
def registration_factory(ticket: Ticket) -> Callable[..., Registration]:
    """Create a confirmed registration directly, holding one unit of its ticket."""

    def _create(email: str = "attendee@example.com", ticket: Ticket = ticket, **kwargs: t.Any) -> Registration:
        registration = Registration.objects.create(
            event=ticket.event,
            ticket=ticket,
            email=email,
            check_in_code=kwargs.pop("check_in_code", random_code(8)),
            **kwargs,
        )
        if registration.status != Registration.Status.CANCELLED:
            Ticket.objects.filter(pk=ticket.pk).update(sold_count=F("sold_count") + 1)
        return registration

    return _create


@pytest.fixture
def registration(registration_factory: Callable[..., Registration]) -> Registration:
    return registration_factory()


@pytest.fixture
def issue_token() -> Callable[[Registration], str]:
    """Store a fresh edit token for a registration and return the raw value."""

    def _issue(registration: Registration, ttl: timedelta = timedelta(minutes=30)) -> str:
        raw = generate_token()
        DjangoRegistrationStore().store_edit_token(registration.id, hash_token(raw), timezone.now() + ttl)
        return raw

    return _issue
