from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel

from .event import Event
from .ticket import Ticket

CHOICE_TYPES = ("select", "radio", "checkbox")
class FormField(TimeStampedModel):
    class FieldType(models.TextChoices):
        TEXT = "text"
        TEXTAREA = "textarea"
        SELECT = "select"
        RADIO = "radio"
        CHECKBOX = "checkbox"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="form_fields")
    ticket = models.ForeignKey(
        Ticket,
        on_delete=models.CASCADE,
        related_name="form_fields",
        null=True,
        blank=True,
        help_text="Restrict the field to one ticket. Empty means the field applies to every ticket of the event.",
    )
    type = models.CharField(max_length=16, choices=FieldType.choices)
    name = models.JSONField(default=dict, blank=True, help_text='Localized label, e.g. {"en": "Name"}.')
    description = models.CharField(max_length=255, blank=True, default="")
    required = models.BooleanField(default=False)
    validater = models.CharField(max_length=512, blank=True, default="", help_text="Regular expression.")
    values = models.JSONField(null=True, blank=True, help_text="Options for select, radio and checkbox fields.")
    filters = models.JSONField(null=True, blank=True, help_text="Conditional display rule.")
    enable_other = models.BooleanField(default=False, help_text="Radio fields accept a free-text answer.")
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "created_at"]

    def __str__(self) -> str:
        return self.description or str(self.id)

    def clean(self) -> None:
        """Reject filter and option JSON that the form schema loader cannot read."""
        from registrations.service.form_schema import OptionList, parse_filter

        errors: dict[str, str] = {}
        try:
            parse_filter(self.filters)
        except (ValueError, AttributeError, TypeError):
            errors["filters"] = _("The conditional display rule is malformed.")
        if self.type in CHOICE_TYPES:
            try:
                OptionList.parse(self.values)
            except (ValueError, TypeError):
                errors["values"] = _("The options must be a JSON list.")
        if errors:
            raise ValidationError(errors)
