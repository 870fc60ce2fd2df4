"""Outgoing registration notices.

Every notice is a best-effort side effect fired after the database commit. A
failure to render or enqueue is logged and swallowed: the registration state
it describes is already durable.
"""

import typing as t

import structlog
from django.conf import settings
from django.template.loader import render_to_string
from django.utils.translation import gettext as _

from notifications.tasks import send_email

if t.TYPE_CHECKING:
    from registrations.models import Event, Registration

logger = structlog.get_logger(__name__)


class Notifier(t.Protocol):
    def send_confirmation(self, registration: "Registration", event: "Event", qr_code_url: str) -> None: ...

    def send_edit_link(self, email: str, raw_token: str, event: "Event") -> None: ...

    def send_cancellation(self, registration: "Registration", event: "Event") -> None: ...


def edit_link(raw_token: str) -> str:
    return f"{settings.FRONTEND_BASE_URL}/edit/{raw_token}"


class CeleryNotifier:
    """Renders the mail in-process and hands it to the ``send_email`` task."""

    def _dispatch(self, kind: str, *, to: str, subject: str, context: dict[str, t.Any]) -> None:
        try:
            body = render_to_string(f"notifications/email/{kind}.txt", context)
            html_body = render_to_string(f"notifications/email/{kind}.html", context)
            send_email.delay(to=to, subject=subject, body=body, html_body=html_body)
        except Exception:
            logger.exception("notification_dispatch_failed", kind=kind)
            return
        logger.info("notification_dispatched", kind=kind)

    def send_confirmation(self, registration: "Registration", event: "Event", qr_code_url: str) -> None:
        self._dispatch(
            "registration_confirmation",
            to=registration.email,
            subject=_("[%(event)s] Registration confirmation") % {"event": event.name},
            context={
                "event": event,
                "registration": registration,
                "qr_code_url": qr_code_url,
                "referral_code": registration.check_in_code,
            },
        )

    def send_edit_link(self, email: str, raw_token: str, event: "Event") -> None:
        self._dispatch(
            "edit_link",
            to=email,
            subject=_("[%(event)s] Edit your registration") % {"event": event.name},
            context={
                "event": event,
                "edit_url": edit_link(raw_token),
                "ttl_minutes": settings.EDIT_TOKEN_TTL_MINUTES,
            },
        )

    def send_cancellation(self, registration: "Registration", event: "Event") -> None:
        self._dispatch(
            "registration_cancelled",
            to=registration.email,
            subject=_("[%(event)s] Registration cancelled") % {"event": event.name},
            context={"event": event, "registration": registration},
        )
