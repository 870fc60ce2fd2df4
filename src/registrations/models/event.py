import typing as t
from datetime import datetime

from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel


class EventQuerySet(models.QuerySet["Event"]):
    def active(self) -> t.Self:
        """Events that accept admissions."""
        return self.filter(is_active=True)


class Event(TimeStampedModel):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField()
    is_active = models.BooleanField(default=True, db_index=True)
    edit_deadline = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Registrations cannot be edited after this moment. Falls back to the ticket sale end.",
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["start"]

    def __str__(self) -> str:
        return self.name

    def has_started(self, now: datetime | None = None) -> bool:
        """Whether the event start lies in the past."""
        return (now or timezone.now()) >= self.start
