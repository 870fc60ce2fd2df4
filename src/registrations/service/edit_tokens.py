"""Single-use, time-boxed tokens that authorize editing or cancelling a registration.

Only the SHA-256 hash of a token is stored. The raw value exists in the
outgoing mail and nowhere else.
"""

import hashlib
import secrets
import typing as t
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from notifications.service.notifier import CeleryNotifier, Notifier
from registrations.exceptions import (
    EditDeadlinePassed,
    InvalidToken,
    NotFound,
    RateLimited,
    TokenExpired,
    ValidationFailed,
)
from registrations.models import Registration
from registrations.stores.django_store import DjangoCatalogStore, DjangoRegistrationStore
from registrations.stores.interfaces import CatalogStore, RegistrationStore

from .form_schema import FieldSchema
from .form_validation import validate_form_data, visible_values

logger = structlog.get_logger(__name__)

T = t.TypeVar("T")


def generate_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)


def hash_token(raw: str) -> str:
    return hashlib.sha256(raw.encode()).hexdigest()


@dataclass(frozen=True)
class EditContext:
    registration: Registration
    fields: list[FieldSchema]
    form_data: dict[str, t.Any]


class EditTokenService:
    def __init__(
        self,
        store: RegistrationStore | None = None,
        catalog: CatalogStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.store = store or DjangoRegistrationStore()
        self.catalog = catalog or DjangoCatalogStore()
        self.notifier = notifier or CeleryNotifier()

    def request_edit(
        self,
        *,
        email: str,
        event_id: UUID | None = None,
        order_number: str | None = None,
        check_in_code: str | None = None,
    ) -> None:
        """Issue a fresh token for a live registration and mail it to the registrant.

        A new token replaces any previous one.

        Args:
            email: The registrant's email address.
            event_id: Narrow the lookup to one event.
            order_number: Narrow the lookup to one registration id.
            check_in_code: Narrow the lookup to one check-in code.

        Raises:
            NotFound: No live registration matches.
            RateLimited: Too many tokens were issued for it within the rolling window.
        """
        registration_id = None
        if order_number:
            try:
                registration_id = UUID(order_number)
            except ValueError as e:
                raise NotFound(_("No matching registration found.")) from e

        registration = self.store.find_live_registration(
            email.strip(), event_id=event_id, registration_id=registration_id, check_in_code=check_in_code
        )
        if registration is None:
            raise NotFound(_("No matching registration found."))

        now = timezone.now()
        with transaction.atomic():
            locked = self.store.lock(registration.id)
            since = now - timedelta(minutes=settings.EDIT_TOKEN_REQUEST_WINDOW_MINUTES)
            if self.store.count_token_requests(locked.id, since) >= settings.EDIT_TOKEN_REQUEST_LIMIT:
                logger.warning("edit_token_rate_limited", registration_id=str(locked.id))
                raise RateLimited()
            raw = generate_token()
            expiry = now + timedelta(minutes=settings.EDIT_TOKEN_TTL_MINUTES)
            self.store.store_edit_token(locked.id, hash_token(raw), expiry)
            transaction.on_commit(lambda: self.notifier.send_edit_link(locked.email, raw, locked.event))

        logger.info("edit_token_issued", registration_id=str(locked.id), expires_at=expiry.isoformat())

    def verify_token(self, raw: str, now: datetime | None = None) -> Registration:
        """Resolve a raw token to its registration without consuming it.

        Raises:
            InvalidToken: Unknown or already used.
            TokenExpired: Past its expiry.
        """
        if not raw:
            raise InvalidToken()
        registration = self.store.get_by_token_hash(hash_token(raw))
        if registration is None:
            raise InvalidToken()
        if registration.edit_token_expiry is None or registration.edit_token_expiry <= (now or timezone.now()):
            raise TokenExpired()
        return registration

    def consume_token(self, raw: str, mutation: Callable[[Registration], T]) -> T:
        """Clear the token and apply ``mutation`` in one transaction.

        The clear is a conditional update on the still-present, unexpired hash,
        so of two concurrent consumers exactly one proceeds. If ``mutation``
        raises, the clear is rolled back and the token stays usable.

        Raises:
            InvalidToken: Unknown, already used, or consumed concurrently.
            TokenExpired: Past its expiry.
        """
        now = timezone.now()
        registration = self.verify_token(raw, now=now)
        with transaction.atomic():
            if not self.store.clear_edit_token(hash_token(raw), now):
                logger.info("edit_token_consume_lost", registration_id=str(registration.id))
                raise InvalidToken()
            result = mutation(self.store.lock(registration.id))
        logger.info("edit_token_consumed", registration_id=str(registration.id))
        return result

    def get_edit_context(self, raw: str) -> EditContext:
        """Registration, its field schema and current values for the edit form."""
        registration = self.verify_token(raw)
        return EditContext(
            registration=registration,
            fields=self.catalog.get_field_schemas(registration.event_id, registration.ticket_id),
            form_data=self.store.get_values(registration),
        )

    def edit_with_token(self, raw: str, form_data: dict[str, t.Any]) -> Registration:
        """Replace the registration's field values, consuming the token.

        Raises:
            EditDeadlinePassed: Not confirmed, the event started, or the edit deadline passed.
            ValidationFailed: The new values violate the form schema.
        """

        def _apply(registration: Registration) -> Registration:
            now = timezone.now()
            if not registration.can_edit(now):
                raise EditDeadlinePassed()
            fields = self.catalog.get_field_schemas(registration.event_id, registration.ticket_id)
            ticket_id = str(registration.ticket_id)
            if errors := validate_form_data(form_data, fields, ticket_id, now=now):
                raise ValidationFailed(errors=errors)
            self.store.replace_values(registration, visible_values(form_data, fields, ticket_id, now=now))
            return registration

        registration = self.consume_token(raw, _apply)
        logger.info("registration_edited", registration_id=str(registration.id))
        return registration
