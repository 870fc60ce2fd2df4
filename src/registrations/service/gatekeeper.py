"""Invitation-code gating for restricted tickets."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from django.utils import timezone
from django.utils.translation import gettext as _

from registrations.exceptions import (
    AdmissionError,
    InvalidInvite,
    InviteExhausted,
    InviteExpired,
    InviteNotYetValid,
)
from registrations.models import InvitationCode
from registrations.stores.django_store import DjangoCatalogStore, DjangoInvitationStore
from registrations.stores.interfaces import CatalogStore, InvitationStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InvitePreview:
    valid: bool
    message: str
    code: str | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    remaining_uses: int | None = None


class GateKeeper:
    def __init__(self, store: InvitationStore | None = None, catalog: CatalogStore | None = None) -> None:
        self.store = store or DjangoInvitationStore()
        self.catalog = catalog or DjangoCatalogStore()

    def redeem(self, code: str, ticket_id: UUID, now: datetime | None = None) -> InvitationCode:
        """Validate an invitation code for a ticket without consuming it.

        Raises:
            InvalidInvite: Unknown, inactive or bound to another ticket.
            InviteNotYetValid: Before ``valid_from``.
            InviteExpired: After ``valid_until``.
            InviteExhausted: ``used_count`` reached ``usage_limit``.
        """
        now = now or timezone.now()
        invitation = self.store.find_invitation(code.strip(), ticket_id) if code else None
        if invitation is None or not invitation.is_active:
            raise InvalidInvite()
        if invitation.valid_from and now < invitation.valid_from:
            raise InviteNotYetValid()
        if invitation.valid_until and now > invitation.valid_until:
            raise InviteExpired()
        if invitation.is_exhausted:
            raise InviteExhausted()
        return invitation

    def consume(self, invitation: InvitationCode) -> None:
        """Take one use of the code. Must run inside the admission transaction.

        Raises:
            InviteExhausted: Another admission took the last use first.
        """
        if not self.store.consume_invitation(invitation.id):
            logger.info("invitation_code_exhausted", invitation_id=str(invitation.id))
            raise InviteExhausted()

    def preview(self, code: str, ticket_id: UUID, now: datetime | None = None) -> InvitePreview:
        """Report whether a code would currently be accepted for a ticket. Consumes nothing."""
        if self.catalog.get_ticket(ticket_id) is None:
            return InvitePreview(valid=False, message=_("Ticket not found or closed."))
        try:
            invitation = self.redeem(code, ticket_id, now=now)
        except AdmissionError as e:
            return InvitePreview(valid=False, message=e.message)
        remaining = None
        if invitation.usage_limit is not None:
            remaining = invitation.usage_limit - invitation.used_count
        return InvitePreview(
            valid=True,
            message=_("Invitation code is valid."),
            code=invitation.code,
            valid_from=invitation.valid_from,
            valid_until=invitation.valid_until,
            remaining_uses=remaining,
        )
