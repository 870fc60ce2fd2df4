from datetime import timedelta

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from notifications.service.notifier import CeleryNotifier, Notifier
from registrations.exceptions import CancellationDeadlinePassed, InvalidToken
from registrations.models import Registration
from registrations.stores.django_store import DjangoRegistrationStore
from registrations.stores.interfaces import RegistrationStore

from .edit_tokens import EditTokenService
from .inventory import InventoryLedger

logger = structlog.get_logger(__name__)


class CancellationService:
    def __init__(
        self,
        tokens: EditTokenService | None = None,
        store: RegistrationStore | None = None,
        inventory: InventoryLedger | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.store = store or DjangoRegistrationStore()
        self.tokens = tokens or EditTokenService(store=self.store)
        self.inventory = inventory or InventoryLedger()
        self.notifier = notifier or CeleryNotifier()

    def cancel(self, raw_token: str, reason: str | None = None) -> Registration:
        """Cancel a confirmed registration and return its ticket unit.

        Refused within ``CANCELLATION_BLACKOUT_DAYS`` of the event start, in
        which case the token stays valid.

        Raises:
            InvalidToken: Unknown or already used token, or the registration is not confirmed.
            TokenExpired: The token is past its expiry.
            CancellationDeadlinePassed: The event starts too soon.
        """

        def _apply(registration: Registration) -> Registration:
            now = timezone.now()
            if not registration.is_confirmed:
                raise InvalidToken()
            if registration.event.start - now < timedelta(days=settings.CANCELLATION_BLACKOUT_DAYS):
                raise CancellationDeadlinePassed()
            if not self.store.mark_cancelled(registration.id, (reason or "").strip(), now):
                raise InvalidToken()
            self.inventory.release(registration.ticket_id)
            registration.refresh_from_db()
            transaction.on_commit(lambda: self.notifier.send_cancellation(registration, registration.event))
            return registration

        registration = self.tokens.consume_token(raw_token, _apply)
        logger.info(
            "registration_cancelled",
            registration_id=str(registration.id),
            event_id=str(registration.event_id),
            ticket_id=str(registration.ticket_id),
        )
        return registration
