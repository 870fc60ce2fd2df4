import typing as t
from datetime import datetime

from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel

from .event import Event
from .form_field import FormField
from .invitation import InvitationCode
from .ticket import Ticket


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def live(self) -> t.Self:
        """Registrations that still hold a ticket unit."""
        return self.exclude(status=Registration.Status.CANCELLED)

    def confirmed(self) -> t.Self:
        return self.filter(status=Registration.Status.CONFIRMED)


class Registration(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "pending"
        CONFIRMED = "confirmed"
        CANCELLED = "cancelled"

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="registrations")
    ticket = models.ForeignKey(Ticket, on_delete=models.PROTECT, related_name="registrations")
    email = models.EmailField(db_index=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.CONFIRMED, db_index=True)
    check_in_code = models.CharField(max_length=32, unique=True, editable=False)
    referred_by = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="referrals", editable=False
    )
    invitation_code = models.ForeignKey(
        InvitationCode, on_delete=models.SET_NULL, null=True, blank=True, related_name="registrations"
    )
    edit_token_hash = models.CharField(max_length=64, null=True, blank=True, unique=True, editable=False)
    edit_token_expiry = models.DateTimeField(null=True, blank=True, editable=False)
    cancellation_reason = models.TextField(blank=True, default="")
    cancelled_at = models.DateTimeField(null=True, blank=True)

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "email"],
                condition=~Q(status="cancelled"),
                name="unique_live_registration_per_email",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.email} @ {self.event_id} ({self.status})"

    @property
    def is_confirmed(self) -> bool:
        return self.status == self.Status.CONFIRMED

    def can_edit(self, now: datetime | None = None) -> bool:
        """Confirmed, event not started, and before the edit deadline."""
        now = now or timezone.now()
        if not self.is_confirmed or self.event.has_started(now):
            return False
        if self.event.edit_deadline:
            return now < self.event.edit_deadline
        return not self.ticket.sale_end or now < self.ticket.sale_end

    def can_cancel(self, now: datetime | None = None) -> bool:
        return self.is_confirmed and not self.event.has_started(now)


class RegistrationData(models.Model):
    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="data")
    field = models.ForeignKey(FormField, on_delete=models.PROTECT, related_name="+")
    value = models.JSONField(null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["registration", "field"], name="unique_registration_field_value"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.registration_id}:{self.field_id}"


class EditTokenRequest(models.Model):
    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="edit_token_requests")
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
