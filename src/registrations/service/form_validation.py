"""Required and per-type validation of submitted form data."""

import re
import typing as t
from collections.abc import Mapping, Sequence
from datetime import datetime

import structlog
from django.utils import timezone
from django.utils.translation import gettext as _

from .form_filters import is_filled, should_display
from .form_schema import FieldSchema

logger = structlog.get_logger(__name__)


def _matches(pattern: str, value: str, field: FieldSchema) -> bool:
    try:
        return re.search(pattern, value) is not None
    except re.error:
        logger.warning("form_field_invalid_pattern", field_id=field.id)
        return True


def _validate_text(field: FieldSchema, value: t.Any) -> list[str]:
    if not isinstance(value, str):
        return [_("%(label)s must be text.") % {"label": field.label}]
    if field.validater and not _matches(field.validater, value, field):
        return [_("%(label)s has an invalid format.") % {"label": field.label}]
    return []


def _validate_choice(field: FieldSchema, value: t.Any) -> list[str]:
    options = field.options
    if options is None or not options.values:
        return []
    if _is_member(value, options.values):
        return []
    if field.type == "radio" and field.enable_other:
        if not isinstance(value, str):
            return [_("%(label)s must be text.") % {"label": field.label}]
        if field.validater and not _matches(field.validater, value, field):
            return [_("%(label)s has an invalid format.") % {"label": field.label}]
        return []
    return [
        _("%(label)s has an invalid option. Valid options: %(options)s")
        % {"label": field.label, "options": ", ".join(str(v) for v in options.values)}
    ]


def _validate_checkbox(field: FieldSchema, value: t.Any) -> list[str]:
    if not isinstance(value, list):
        return [_("%(label)s must be a list.") % {"label": field.label}]
    options = field.options
    if options is None or not options.values:
        return []
    invalid = [item for item in value if not _is_member(item, options.values)]
    if invalid:
        return [
            _("%(label)s has invalid options: %(invalid)s")
            % {"label": field.label, "invalid": ", ".join(str(v) for v in invalid)}
        ]
    return []


def _is_member(value: t.Any, allowed: tuple[t.Any, ...]) -> bool:
    # bool is an int subclass; keep True from matching an option value of 1.
    return any(type(value) is type(option) and value == option for option in allowed)


_VALIDATORS: dict[str, t.Callable[[FieldSchema, t.Any], list[str]]] = {
    "text": _validate_text,
    "textarea": _validate_text,
    "select": _validate_choice,
    "radio": _validate_choice,
    "checkbox": _validate_checkbox,
}


def validate_form_data(
    form_data: Mapping[str, t.Any],
    fields: Sequence[FieldSchema],
    ticket_id: str,
    now: datetime | None = None,
) -> dict[str, list[str]]:
    """Validate a submission against a ticket's field schema.

    Fields hidden by their filter are skipped entirely, so a hidden required
    field never produces an error. A missing required value short-circuits the
    remaining checks for that field.

    Args:
        form_data: Submitted values keyed by field id.
        fields: The ticket's field schema in declaration order.
        ticket_id: The chosen ticket, used by ticket conditions.
        now: Evaluation time for time conditions.

    Returns:
        A mapping of field id to error messages. Empty when the data is valid.
    """
    now = now or timezone.now()
    errors: dict[str, list[str]] = {}
    for field in fields:
        if not should_display(field, ticket_id, form_data, fields, now=now):
            continue
        value = form_data.get(field.id)
        if not is_filled(value):
            if field.required:
                errors[field.id] = [_("%(label)s is required.") % {"label": field.label}]
            continue
        if field_errors := _VALIDATORS[field.type](field, value):
            errors[field.id] = field_errors
    return errors


def visible_values(
    form_data: Mapping[str, t.Any],
    fields: Sequence[FieldSchema],
    ticket_id: str,
    now: datetime | None = None,
) -> dict[str, t.Any]:
    """Keep only the submitted values that belong to displayed, known fields."""
    now = now or timezone.now()
    return {
        field.id: form_data[field.id]
        for field in fields
        if field.id in form_data and should_display(field, ticket_id, form_data, fields, now=now)
    }
