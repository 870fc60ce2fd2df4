"""Admission: turn a submission into a confirmed registration, or a typed refusal.

All checks that only read state run first. The writes (ticket unit,
invitation use, registration and its field values) then happen in a single
transaction, each guarded by a conditional update or a database constraint,
so concurrent admissions can never oversell a ticket or overuse a code.
"""

import typing as t
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from notifications.service.notifier import CeleryNotifier, Notifier
from registrations.exceptions import (
    AdmissionError,
    AlreadyRegistered,
    InvalidInvite,
    NotAvailable,
    NotFound,
    ValidationFailed,
)
from registrations.models import Event, InvitationCode, Ticket
from registrations.stores.django_store import DjangoCatalogStore, DjangoRegistrationStore
from registrations.stores.interfaces import CatalogStore, RegistrationStore
from registrations.utils import qr_code_url, referral_link

from .check_in_codes import generate_check_in_code
from .form_validation import validate_form_data, visible_values
from .gatekeeper import GateKeeper
from .inventory import InventoryLedger
from .referrals import ReferralResolver

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AdmissionResult:
    registration_id: UUID
    check_in_code: str
    qr_code_url: str
    referral_link: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AdmissionService:
    def __init__(
        self,
        catalog: CatalogStore | None = None,
        store: RegistrationStore | None = None,
        inventory: InventoryLedger | None = None,
        gatekeeper: GateKeeper | None = None,
        referrals: ReferralResolver | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.catalog = catalog or DjangoCatalogStore()
        self.store = store or DjangoRegistrationStore()
        self.inventory = inventory or InventoryLedger()
        self.gatekeeper = gatekeeper or GateKeeper(catalog=self.catalog)
        self.referrals = referrals or ReferralResolver(store=self.store)
        self.notifier = notifier or CeleryNotifier()

    def _load_ticket(self, event_id: UUID, ticket_id: UUID, now: datetime) -> tuple[Event, Ticket]:
        event = self.catalog.get_event(event_id)
        if event is None:
            raise NotFound(_("Event not found."))
        ticket = self.catalog.get_ticket(ticket_id)
        if ticket is None or ticket.event_id != event.id:
            raise NotFound(_("Ticket not found."))
        if not ticket.is_on_sale(now):
            raise NotAvailable()
        return event, ticket

    def _check_invitation(self, ticket: Ticket, invite_code: str | None, now: datetime) -> InvitationCode | None:
        code = (invite_code or "").strip()
        if ticket.require_invite_code:
            if not code:
                raise InvalidInvite(_("This ticket requires an invitation code."))
            return self.gatekeeper.redeem(code, ticket.id, now=now)
        if not code:
            return None
        try:
            return self.gatekeeper.redeem(code, ticket.id, now=now)
        except AdmissionError as e:
            logger.info("invitation_code_ignored", ticket_id=str(ticket.id), reason=e.code.value)
            return None

    def validate(self, ticket_id: UUID, form_data: dict[str, t.Any]) -> dict[str, list[str]]:
        """Dry-run the form schema for a ticket. Writes nothing.

        Raises:
            NotFound: The ticket does not exist or cannot be admitted against.
        """
        ticket = self.catalog.get_ticket(ticket_id)
        if ticket is None:
            raise NotFound(_("Ticket not found."))
        fields = self.catalog.get_field_schemas(ticket.event_id, ticket.id)
        return validate_form_data(form_data, fields, str(ticket.id))

    def admit(
        self,
        *,
        event_id: UUID,
        ticket_id: UUID,
        email: str,
        form_data: dict[str, t.Any],
        agreed_to_terms: bool,
        invite_code: str | None = None,
        referral_code: str | None = None,
    ) -> AdmissionResult:
        """Admit one registrant to a ticket.

        Args:
            event_id: The event being registered for.
            ticket_id: The chosen ticket of that event.
            email: The registrant's email address.
            form_data: Submitted field values keyed by field id.
            agreed_to_terms: Whether the registrant accepted the terms.
            invite_code: Invitation code, mandatory for gated tickets.
            referral_code: Check-in code of the registrant who referred this one.

        Returns:
            The new registration's id, check-in code, QR code URL and referral link.

        Raises:
            AdmissionError: A subclass describing exactly why admission was refused.
                Nothing is written when it is raised.
        """
        now = timezone.now()
        email = normalize_email(email)
        event, ticket = self._load_ticket(event_id, ticket_id, now)

        if not agreed_to_terms:
            raise ValidationFailed(
                _("You must agree to the terms."),
                errors={"agreed_to_terms": [_("You must agree to the terms.")]},
            )

        invitation = self._check_invitation(ticket, invite_code, now)

        referred_by_id = self.referrals.resolve(referral_code, event.id)
        if referred_by_id is None and referral_code and settings.ADMISSION_STRICT_REFERRALS:
            raise ValidationFailed(
                _("Invalid referral code."), errors={"referral_code": [_("Invalid referral code.")]}
            )

        if self.store.has_live_registration(event.id, email):
            raise AlreadyRegistered()

        fields = self.catalog.get_field_schemas(event.id, ticket.id)
        if errors := validate_form_data(form_data, fields, str(ticket.id), now=now):
            raise ValidationFailed(errors=errors)
        values = visible_values(form_data, fields, str(ticket.id), now=now)

        check_in_code = generate_check_in_code(self.store)
        qr_url = qr_code_url(check_in_code)

        with transaction.atomic():
            self.inventory.reserve(ticket.id)
            if invitation is not None:
                self.gatekeeper.consume(invitation)
            registration = self.store.create_registration(
                event=event,
                ticket=ticket,
                email=email,
                check_in_code=check_in_code,
                values=values,
                referred_by_id=referred_by_id,
                invitation=invitation,
            )
            transaction.on_commit(lambda: self.notifier.send_confirmation(registration, event, qr_url))

        logger.info(
            "registration_admitted",
            registration_id=str(registration.id),
            event_id=str(event.id),
            ticket_id=str(ticket.id),
            invited=invitation is not None,
            referred=referred_by_id is not None,
        )
        return AdmissionResult(
            registration_id=registration.id,
            check_in_code=check_in_code,
            qr_code_url=qr_url,
            referral_link=referral_link(event, check_in_code),
        )
