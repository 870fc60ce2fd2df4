"""Django ORM implementation of the registration stores."""

import typing as t
from datetime import datetime
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Q

from registrations.exceptions import AlreadyRegistered
from registrations.models import (
    EditTokenRequest,
    Event,
    FormField,
    InvitationCode,
    Registration,
    RegistrationData,
    Ticket,
)
from registrations.service.form_schema import FieldSchema, load_field_schemas
from registrations.stores.interfaces import CatalogStore, InventoryStore, InvitationStore, RegistrationStore

logger = structlog.get_logger(__name__)


class DjangoCatalogStore(CatalogStore):
    def get_event(self, event_id: UUID) -> Event | None:
        return Event.objects.active().filter(pk=event_id).first()

    def get_ticket(self, ticket_id: UUID) -> Ticket | None:
        return Ticket.objects.purchasable().select_related("event").filter(pk=ticket_id).first()

    def get_field_schemas(self, event_id: UUID, ticket_id: UUID) -> list[FieldSchema]:
        fields = FormField.objects.filter(event_id=event_id).filter(Q(ticket__isnull=True) | Q(ticket_id=ticket_id))
        return load_field_schemas(fields.order_by("order", "created_at"))


class DjangoInventoryStore(InventoryStore):
    def reserve_unit(self, ticket_id: UUID) -> bool:
        updated = Ticket.objects.filter(pk=ticket_id, sold_count__lt=F("quantity")).update(
            sold_count=F("sold_count") + 1
        )
        return updated == 1

    def release_unit(self, ticket_id: UUID) -> bool:
        updated = Ticket.objects.filter(pk=ticket_id, sold_count__gt=0).update(sold_count=F("sold_count") - 1)
        return updated == 1


class DjangoInvitationStore(InvitationStore):
    def find_invitation(self, code: str, ticket_id: UUID) -> InvitationCode | None:
        return InvitationCode.objects.filter(code=code, ticket_id=ticket_id).first()

    def consume_invitation(self, invitation_id: UUID) -> bool:
        updated = (
            InvitationCode.objects.filter(pk=invitation_id)
            .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
            .update(used_count=F("used_count") + 1)
        )
        return updated == 1


class DjangoRegistrationStore(RegistrationStore):
    def has_live_registration(self, event_id: UUID, email: str) -> bool:
        return Registration.objects.live().filter(event_id=event_id, email__iexact=email).exists()

    def check_in_code_exists(self, code: str) -> bool:
        return Registration.objects.filter(check_in_code=code).exists()

    def create_registration(
        self,
        *,
        event: Event,
        ticket: Ticket,
        email: str,
        check_in_code: str,
        values: dict[str, t.Any],
        referred_by_id: UUID | None = None,
        invitation: InvitationCode | None = None,
    ) -> Registration:
        try:
            with transaction.atomic():
                registration = Registration.objects.create(
                    event=event,
                    ticket=ticket,
                    email=email,
                    check_in_code=check_in_code,
                    referred_by_id=referred_by_id,
                    invitation_code=invitation,
                    status=Registration.Status.CONFIRMED,
                )
                RegistrationData.objects.bulk_create(
                    RegistrationData(registration=registration, field_id=UUID(field_id), value=value)
                    for field_id, value in values.items()
                )
        except (IntegrityError, DjangoValidationError) as e:
            # The partial unique index may fire at insert time or during full_clean.
            if self.has_live_registration(event.id, email):
                logger.info("registration_duplicate_rejected", event_id=str(event.id))
                raise AlreadyRegistered() from e
            raise
        return registration

    def find_confirmed_by_code(self, code: str, event_id: UUID) -> Registration | None:
        return Registration.objects.confirmed().filter(check_in_code=code, event_id=event_id).first()

    def count_referrals(self, registration_id: UUID) -> int:
        return Registration.objects.filter(referred_by_id=registration_id).count()

    def find_live_registration(
        self,
        email: str,
        *,
        event_id: UUID | None = None,
        registration_id: UUID | None = None,
        check_in_code: str | None = None,
    ) -> Registration | None:
        qs = Registration.objects.live().select_related("event", "ticket").filter(email__iexact=email)
        if event_id:
            qs = qs.filter(event_id=event_id)
        if registration_id:
            qs = qs.filter(pk=registration_id)
        if check_in_code:
            qs = qs.filter(check_in_code=check_in_code)
        return qs.order_by("-created_at").first()

    def list_for_email(self, email: str) -> list[Registration]:
        return list(
            Registration.objects.select_related("event", "ticket").filter(email__iexact=email).order_by("-created_at")
        )

    def get_by_check_in_code(self, code: str) -> Registration | None:
        return Registration.objects.select_related("event").filter(check_in_code=code).first()

    def lock(self, registration_id: UUID) -> Registration:
        return (
            Registration.objects.select_for_update(of=("self",))
            .select_related("event", "ticket")
            .get(pk=registration_id)
        )

    def count_token_requests(self, registration_id: UUID, since: datetime) -> int:
        return EditTokenRequest.objects.filter(registration_id=registration_id, created_at__gte=since).count()

    def store_edit_token(self, registration_id: UUID, token_hash: str, expiry: datetime) -> None:
        Registration.objects.filter(pk=registration_id).update(edit_token_hash=token_hash, edit_token_expiry=expiry)
        EditTokenRequest.objects.create(registration_id=registration_id)

    def get_by_token_hash(self, token_hash: str) -> Registration | None:
        return Registration.objects.select_related("event", "ticket").filter(edit_token_hash=token_hash).first()

    def clear_edit_token(self, token_hash: str, now: datetime) -> bool:
        updated = Registration.objects.filter(edit_token_hash=token_hash, edit_token_expiry__gt=now).update(
            edit_token_hash=None, edit_token_expiry=None
        )
        return updated == 1

    def get_values(self, registration: Registration) -> dict[str, t.Any]:
        return {
            str(field_id): value
            for field_id, value in RegistrationData.objects.filter(registration=registration).values_list(
                "field_id", "value"
            )
        }

    def replace_values(self, registration: Registration, values: dict[str, t.Any]) -> None:
        field_ids = [UUID(field_id) for field_id in values]
        RegistrationData.objects.filter(registration=registration).exclude(field_id__in=field_ids).delete()
        for field_id, value in values.items():
            RegistrationData.objects.update_or_create(
                registration=registration, field_id=UUID(field_id), defaults={"value": value}
            )

    def mark_cancelled(self, registration_id: UUID, reason: str, now: datetime) -> bool:
        updated = Registration.objects.filter(pk=registration_id, status=Registration.Status.CONFIRMED).update(
            status=Registration.Status.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason,
            updated_at=now,
        )
        return updated == 1

    def clear_expired_tokens(self, now: datetime) -> int:
        return Registration.objects.filter(edit_token_expiry__lte=now).update(
            edit_token_hash=None, edit_token_expiry=None
        )

    def prune_token_requests(self, before: datetime) -> int:
        deleted, _ = EditTokenRequest.objects.filter(created_at__lt=before).delete()
        return deleted
