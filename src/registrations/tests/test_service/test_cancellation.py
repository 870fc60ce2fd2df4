import typing as t
from collections.abc import Callable
from datetime import timedelta

import pytest
from django.utils import timezone

from registrations.exceptions import CancellationDeadlinePassed, InvalidToken, TokenExpired
from registrations.models import Registration, Ticket
from registrations.service.admission import AdmissionService
from registrations.service.cancellation import CancellationService

from ..conftest import RecordingNotifier

pytestmark = pytest.mark.django_db


def move_event(registration: Registration, days: float) -> None:
    event = registration.event
    event.start = timezone.now() + timedelta(days=days)
    event.end = event.start + timedelta(hours=8)
    event.save()


def test_cancel_releases_unit(
    cancellation_service: CancellationService,
    notifier: RecordingNotifier,
    registration: Registration,
    ticket: Ticket,
    issue_token: Callable[..., str],
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    move_event(registration, days=10)
    raw = issue_token(registration)

    with django_capture_on_commit_callbacks(execute=True):
        cancelled = cancellation_service.cancel(raw, reason="  Schedule conflict ")

    assert cancelled.status == Registration.Status.CANCELLED
    assert cancelled.cancellation_reason == "Schedule conflict"
    assert cancelled.cancelled_at is not None
    assert cancelled.edit_token_hash is None
    ticket.refresh_from_db()
    assert ticket.sold_count == 0
    assert notifier.cancellations == [cancelled]


def test_cancel_inside_blackout_changes_nothing(
    cancellation_service: CancellationService,
    notifier: RecordingNotifier,
    registration: Registration,
    ticket: Ticket,
    issue_token: Callable[..., str],
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    move_event(registration, days=2)
    raw = issue_token(registration)

    with django_capture_on_commit_callbacks(execute=True), pytest.raises(CancellationDeadlinePassed):
        cancellation_service.cancel(raw)

    registration.refresh_from_db()
    ticket.refresh_from_db()
    assert registration.status == Registration.Status.CONFIRMED
    assert ticket.sold_count == 1
    assert registration.edit_token_hash is not None
    assert notifier.cancellations == []


def test_token_cannot_be_reused(
    cancellation_service: CancellationService,
    registration: Registration,
    ticket: Ticket,
    issue_token: Callable[..., str],
) -> None:
    raw = issue_token(registration)
    cancellation_service.cancel(raw)

    with pytest.raises(InvalidToken):
        cancellation_service.cancel(raw)

    ticket.refresh_from_db()
    assert ticket.sold_count == 0


def test_expired_token(
    cancellation_service: CancellationService,
    registration: Registration,
    issue_token: Callable[..., str],
) -> None:
    raw = issue_token(registration, ttl=timedelta(seconds=-1))
    with pytest.raises(TokenExpired):
        cancellation_service.cancel(raw)


def test_non_confirmed_registration(
    cancellation_service: CancellationService,
    registration_factory: Callable[..., Registration],
    issue_token: Callable[..., str],
) -> None:
    pending = registration_factory(email="pending@example.com", status=Registration.Status.PENDING)
    raw = issue_token(pending)
    with pytest.raises(InvalidToken):
        cancellation_service.cancel(raw)


def test_release_never_goes_negative(
    cancellation_service: CancellationService,
    registration: Registration,
    ticket: Ticket,
    issue_token: Callable[..., str],
) -> None:
    Ticket.objects.filter(pk=ticket.pk).update(sold_count=0)
    raw = issue_token(registration)

    cancellation_service.cancel(raw)

    ticket.refresh_from_db()
    assert ticket.sold_count == 0


def test_email_can_register_again_after_cancelling(
    cancellation_service: CancellationService,
    admission_service: AdmissionService,
    registration: Registration,
    ticket: Ticket,
    issue_token: Callable[..., str],
) -> None:
    cancellation_service.cancel(issue_token(registration))

    admission_service.admit(
        event_id=ticket.event_id,
        ticket_id=ticket.id,
        email=registration.email,
        form_data={},
        agreed_to_terms=True,
    )

    assert Registration.objects.live().filter(email=registration.email).count() == 1
    ticket.refresh_from_db()
    assert ticket.sold_count == 1
