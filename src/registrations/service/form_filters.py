"""Conditional field visibility.

``should_display`` is a pure function of its arguments: it reads the complete
submitted snapshot, so a filter may reference any other field regardless of
declaration order, and evaluating fields in a different order never changes
the outcome.
"""

import typing as t
from collections.abc import Mapping, Sequence
from datetime import datetime

from django.utils import timezone

from .form_schema import FieldCondition, FieldSchema, TicketCondition, TimeCondition, UnknownCondition


def is_filled(value: t.Any) -> bool:
    """A value counts as filled unless it is absent, None, an empty string or an empty list."""
    if value is None or value == "":
        return False
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return False
    return True


def _stringify(value: t.Any) -> str:
    # Mirrors how the browser stringifies values for "equals" comparisons.
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else _stringify(v) for v in value)
    return str(value)


def _evaluate_condition(
    condition: TicketCondition | FieldCondition | TimeCondition | UnknownCondition,
    ticket_id: str,
    form_data: Mapping[str, t.Any],
    field_ids: frozenset[str],
    now: datetime,
) -> bool:
    match condition:
        case TicketCondition():
            return condition.ticket_id is None or condition.ticket_id == ticket_id
        case FieldCondition():
            if not condition.field_id or condition.field_id not in field_ids:
                return True
            value = form_data.get(condition.field_id)
            match condition.operator:
                case "filled":
                    return is_filled(value)
                case "notFilled":
                    return not is_filled(value)
                case _:
                    return _stringify(value) == _stringify(condition.value)
        case TimeCondition():
            if condition.start_time and now < condition.start_time:
                return False
            if condition.end_time and now > condition.end_time:
                return False
            return True
        case _:
            return True


def should_display(
    field: FieldSchema,
    ticket_id: str,
    form_data: Mapping[str, t.Any],
    all_fields: Sequence[FieldSchema],
    now: datetime | None = None,
) -> bool:
    """Decide whether ``field`` is shown (and therefore validated) for this submission.

    Args:
        field: The field whose filter is evaluated.
        ticket_id: The ticket chosen by the registrant.
        form_data: The complete submitted snapshot, keyed by field id.
        all_fields: Every field of the schema, used to resolve field references.
        now: Evaluation time for time conditions. Defaults to the current time.

    Returns:
        True when the field is displayed.
    """
    filters = field.filters
    if filters is None or not filters.enabled:
        return True

    now = now or timezone.now()
    field_ids = frozenset(f.id for f in all_fields)
    results = [
        _evaluate_condition(condition, str(ticket_id), form_data, field_ids, now) for condition in filters.conditions
    ]
    met = all(results) if filters.operator == "and" else any(results)
    return met if filters.action == "display" else not met
