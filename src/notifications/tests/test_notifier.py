from unittest.mock import patch

import pytest
from django.conf import settings
from django.template import TemplateDoesNotExist

from notifications.service.notifier import CeleryNotifier, edit_link
from notifications.tasks import send_email
from registrations.models import Event, Registration

pytestmark = pytest.mark.django_db


def test_edit_link() -> None:
    assert edit_link("abc123") == f"{settings.FRONTEND_BASE_URL}/edit/abc123"


def test_send_confirmation(registration: Registration, event: Event) -> None:
    qr_url = "https://api.example.com/api/registrations/GRACE001/qr"
    with patch.object(send_email, "delay") as mock_delay:
        CeleryNotifier().send_confirmation(registration, event, qr_url)

    kwargs = mock_delay.call_args.kwargs
    assert kwargs["to"] == "grace@example.com"
    assert kwargs["subject"] == "[Data Summit] Registration confirmation"
    assert "GRACE001" in kwargs["body"]
    assert str(registration.id) in kwargs["body"]
    assert f'src="{qr_url}"' in kwargs["html_body"]


def test_send_edit_link(event: Event) -> None:
    with patch.object(send_email, "delay") as mock_delay:
        CeleryNotifier().send_edit_link("grace@example.com", "rawtoken", event)

    kwargs = mock_delay.call_args.kwargs
    assert kwargs["to"] == "grace@example.com"
    assert edit_link("rawtoken") in kwargs["body"]
    assert f"{settings.EDIT_TOKEN_TTL_MINUTES} minutes" in kwargs["body"]


def test_send_cancellation_includes_reason(registration: Registration, event: Event) -> None:
    registration.cancellation_reason = "Travel got cancelled"
    with patch.object(send_email, "delay") as mock_delay:
        CeleryNotifier().send_cancellation(registration, event)

    kwargs = mock_delay.call_args.kwargs
    assert kwargs["subject"] == "[Data Summit] Registration cancelled"
    assert "Travel got cancelled" in kwargs["body"]


def test_render_failure_is_swallowed(event: Event) -> None:
    with (
        patch("notifications.service.notifier.render_to_string", side_effect=TemplateDoesNotExist("edit_link.txt")),
        patch.object(send_email, "delay") as mock_delay,
    ):
        CeleryNotifier().send_edit_link("grace@example.com", "rawtoken", event)

    mock_delay.assert_not_called()


def test_enqueue_failure_is_swallowed(event: Event) -> None:
    with patch.object(send_email, "delay", side_effect=ConnectionError("broker down")):
        CeleryNotifier().send_edit_link("grace@example.com", "rawtoken", event)
