import typing as t
from datetime import datetime
from uuid import UUID

from ninja import Schema
from pydantic import EmailStr, Field, StringConstraints

from common.schema import OneToSixtyFourString, StrippedString
from registrations.models import Registration
from registrations.service.form_schema import FieldFilter, FieldSchema
from registrations.service.referrals import ReferralResolver


class AdmissionSchema(Schema):
    event_id: UUID
    ticket_id: UUID
    invite_code: StrippedString | None = None
    referral_code: StrippedString | None = None
    form_data: dict[str, t.Any] = Field(default_factory=dict)
    agreed_to_terms: bool = False


class AdmissionResponseSchema(Schema):
    registration_id: UUID
    check_in_code: str
    qr_code_url: str
    referral_link: str


class FormValidationSchema(Schema):
    ticket_id: UUID
    form_data: dict[str, t.Any] = Field(default_factory=dict)


class FormValidationResponseSchema(Schema):
    is_valid: bool
    errors: dict[str, list[str]]


class EditRequestSchema(Schema):
    """Identify a registration to mail an edit link for.

    ``email`` may be omitted by authenticated callers. ``order_number`` holds
    either the registration number or the check-in code, as told by
    ``identify_field``.
    """

    email: EmailStr | None = None
    order_number: StrippedString | None = None
    identify_field: t.Literal["order_number", "check_in_code"] = "order_number"
    event_id: UUID | None = None


class TokenVerificationSchema(Schema):
    is_valid: bool
    registration_id: UUID


class RegistrationSchema(Schema):
    id: UUID
    event_id: UUID
    ticket_id: UUID
    email: str
    status: Registration.Status
    check_in_code: str
    created_at: datetime
    updated_at: datetime


class MyRegistrationSchema(RegistrationSchema):
    event_name: str
    event_start: datetime
    ticket_name: str
    can_edit: bool
    can_cancel: bool
    referral_count: int

    @staticmethod
    def resolve_event_name(obj: Registration) -> str:
        return obj.event.name

    @staticmethod
    def resolve_event_start(obj: Registration) -> datetime:
        return obj.event.start

    @staticmethod
    def resolve_ticket_name(obj: Registration) -> str:
        return obj.ticket.name

    @staticmethod
    def resolve_can_edit(obj: Registration) -> bool:
        return obj.can_edit()

    @staticmethod
    def resolve_can_cancel(obj: Registration) -> bool:
        return obj.can_cancel()

    @staticmethod
    def resolve_referral_count(obj: Registration) -> int:
        return ReferralResolver().count_referrals(obj.id)


class FormFieldSchema(Schema):
    id: str
    type: str
    name: dict[str, str] | str
    description: str
    required: bool
    validater: str | None = None
    options: list[t.Any] | None = None
    filters: FieldFilter | None = None
    enable_other: bool
    order: int
    ticket_id: str | None = None

    @classmethod
    def from_field(cls, field: FieldSchema) -> "FormFieldSchema":
        return cls(
            id=field.id,
            type=field.type,
            name=field.name,
            description=field.description,
            required=field.required,
            validater=field.validater,
            options=list(field.options.labels) if field.options is not None else None,
            filters=field.filters,
            enable_other=field.enable_other,
            order=field.order,
            ticket_id=field.ticket_id,
        )


class EditContextSchema(Schema):
    registration: RegistrationSchema
    form_fields: list[FormFieldSchema]
    current_form_data: dict[str, t.Any]


class EditSubmissionSchema(Schema):
    form_data: dict[str, t.Any]


class CancellationSchema(Schema):
    reason: t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)] | None = None
    confirmed: bool = False


class InvitationVerifySchema(Schema):
    code: OneToSixtyFourString
    ticket_id: UUID


class InvitationVerifyResponseSchema(Schema):
    valid: bool
    message: str
    code: str | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    remaining_uses: int | None = None


class ReferralValidateSchema(Schema):
    code: OneToSixtyFourString
    event_id: UUID


class ReferralValidateResponseSchema(Schema):
    is_valid: bool


class ReferralInfoSchema(Schema):
    referral_code: str
    referral_link: str
    referral_count: int
