import typing as t
from datetime import datetime

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel

from .event import Event


class TicketQuerySet(models.QuerySet["Ticket"]):
    def purchasable(self) -> t.Self:
        """Tickets that can be admitted against (sale window is checked separately)."""
        return self.filter(is_active=True, hidden=False, event__is_active=True)


class Ticket(TimeStampedModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    quantity = models.PositiveIntegerField(help_text="Total number of admissions available.")
    sold_count = models.PositiveIntegerField(default=0, editable=False)
    sale_start = models.DateTimeField(null=True, blank=True)
    sale_end = models.DateTimeField(null=True, blank=True)
    require_invite_code = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    hidden = models.BooleanField(default=False)

    objects = TicketQuerySet.as_manager()

    class Meta:
        ordering = ["event", "name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(sold_count__lte=F("quantity")),
                name="ticket_sold_count_within_quantity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event.name} - {self.name}"

    @property
    def remaining(self) -> int:
        return max(self.quantity - self.sold_count, 0)

    def is_on_sale(self, now: datetime | None = None) -> bool:
        """Whether now falls inside the (optionally open-ended) sale window."""
        now = now or timezone.now()
        if self.sale_start and now < self.sale_start:
            return False
        if self.sale_end and now > self.sale_end:
            return False
        return True
