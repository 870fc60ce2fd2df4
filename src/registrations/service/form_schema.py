"""Typed form-field schema, parsed once from the admin-owned JSON columns.

``FormField.filters`` and ``FormField.values`` are free-form JSON edited in the
admin. They are turned into the models below when a ticket's schema is loaded,
so validation never re-parses JSON per call.
"""

import typing as t
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

import orjson
import structlog
from django.utils import timezone
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from registrations.models import FormField

logger = structlog.get_logger(__name__)

FieldType = t.Literal["text", "textarea", "select", "radio", "checkbox"]


class _Condition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TicketCondition(_Condition):
    type: t.Literal["ticket"]
    ticket_id: str | None = Field(default=None, validation_alias=AliasChoices("ticket_id", "ticketId"))

    @field_validator("ticket_id", mode="before")
    @classmethod
    def _stringify(cls, value: t.Any) -> t.Any:
        return str(value) if isinstance(value, UUID) else value


class FieldCondition(_Condition):
    type: t.Literal["field"]
    field_id: str | None = Field(default=None, validation_alias=AliasChoices("field_id", "fieldId"))
    operator: t.Literal["filled", "notFilled", "equals"] = "equals"
    value: t.Any = None


class TimeCondition(_Condition):
    type: t.Literal["time"]
    start_time: datetime | None = Field(default=None, validation_alias=AliasChoices("start_time", "startTime"))
    end_time: datetime | None = Field(default=None, validation_alias=AliasChoices("end_time", "endTime"))

    @field_validator("start_time", "end_time")
    @classmethod
    def _make_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and timezone.is_naive(value):
            return timezone.make_aware(value)
        return value


class UnknownCondition(_Condition):
    """Placeholder for a condition the admin stored in a shape we cannot read. Always satisfied."""

    type: t.Literal["unknown"] = "unknown"


Condition = t.Annotated[TicketCondition | FieldCondition | TimeCondition, Field(discriminator="type")]

_CONDITION_ADAPTER: TypeAdapter[TicketCondition | FieldCondition | TimeCondition] = TypeAdapter(Condition)


class FieldFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    action: t.Literal["display", "hide"] = "display"
    operator: t.Literal["and", "or"] = "and"
    conditions: tuple[TicketCondition | FieldCondition | TimeCondition | UnknownCondition, ...] = ()


class OptionList(BaseModel):
    """Allowed option values of a select, radio or checkbox field.

    ``values`` holds what a submission may contain; ``labels`` keeps the raw
    entries for display.
    """

    model_config = ConfigDict(frozen=True)

    values: tuple[t.Any, ...] = ()
    labels: tuple[t.Any, ...] = ()

    def __contains__(self, item: object) -> bool:
        return item in self.values

    @classmethod
    def parse(cls, raw: t.Any) -> "OptionList":
        """Normalize the stored option list.

        A plain entry is its own value. An object with a ``value`` key
        contributes that value; an object without one is a localized label
        and every translation counts as a valid value.
        """
        if raw is None:
            return cls()
        if isinstance(raw, str):
            raw = orjson.loads(raw) if raw.strip() else []
        if not isinstance(raw, list):
            raise ValueError("Field options must be a list.")
        values: list[t.Any] = []
        for option in raw:
            if isinstance(option, dict):
                if option.get("value") is not None:
                    values.append(option["value"])
                else:
                    values.extend(option.values())
            else:
                values.append(option)
        return cls(values=tuple(values), labels=tuple(raw))


class FieldSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: FieldType
    name: dict[str, str] | str = ""
    description: str = ""
    required: bool = False
    validater: str | None = None
    options: OptionList | None = None
    filters: FieldFilter | None = None
    enable_other: bool = False
    order: int = 0
    ticket_id: str | None = None

    @property
    def label(self) -> str:
        """Best human-readable label for error messages."""
        if self.description:
            return self.description
        if isinstance(self.name, dict):
            return next(iter(self.name.values()), self.id)
        return self.name or self.id


def parse_filter(raw: t.Any) -> FieldFilter | None:
    """Parse a stored filter bag. Malformed conditions become ``UnknownCondition``."""
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = orjson.loads(raw) if raw.strip() else None
        if raw is None:
            return None
    conditions: list[TicketCondition | FieldCondition | TimeCondition | UnknownCondition] = []
    for condition in raw.get("conditions") or []:
        try:
            conditions.append(_CONDITION_ADAPTER.validate_python(condition))
        except ValidationError:
            logger.warning("form_filter_condition_unreadable", condition=condition)
            conditions.append(UnknownCondition())
    return FieldFilter.model_validate({**raw, "conditions": conditions})


def field_schema_from_model(field: FormField) -> FieldSchema:
    """Build the typed schema for one stored field.

    Filter or option JSON that cannot be read is logged and dropped, leaving an
    always-displayed field without an option list.
    """
    try:
        options = None
        if field.type in (FormField.FieldType.SELECT, FormField.FieldType.RADIO, FormField.FieldType.CHECKBOX):
            options = OptionList.parse(field.values)
        filters = parse_filter(field.filters)
    except (ValidationError, ValueError, AttributeError, TypeError):
        logger.warning("form_field_schema_unreadable", field_id=str(field.id), event_id=str(field.event_id))
        options, filters = None, None
    return FieldSchema(
        id=str(field.id),
        type=t.cast(FieldType, field.type),
        name=field.name or "",
        description=field.description,
        required=field.required,
        validater=field.validater or None,
        options=options,
        filters=filters,
        enable_other=field.enable_other,
        order=field.order,
        ticket_id=str(field.ticket_id) if field.ticket_id else None,
    )


def load_field_schemas(fields: Iterable[FormField]) -> list[FieldSchema]:
    """Parse stored fields into schemas, keeping their declaration order."""
    return [field_schema_from_model(field) for field in fields]
