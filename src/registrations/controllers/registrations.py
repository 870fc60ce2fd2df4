import typing as t
from uuid import UUID

from django.http import HttpResponse
from django.utils.translation import gettext as _
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse, ResponseMessage
from common.throttling import EditRequestThrottle, RegistrationThrottle
from registrations import schema
from registrations.exceptions import NotFound, ValidationFailed
from registrations.models import Registration
from registrations.service.admission import AdmissionResult, AdmissionService
from registrations.service.cancellation import CancellationService
from registrations.service.edit_tokens import EditTokenService
from registrations.service.referrals import ReferralResolver
from registrations.stores.django_store import DjangoRegistrationStore
from registrations.utils import referral_link, render_qr_png

ERRORS: dict[int, type[ErrorResponse]] = {
    400: ErrorResponse,
    404: ErrorResponse,
    409: ErrorResponse,
    410: ErrorResponse,
    429: ErrorResponse,
}


@api_controller("/registrations", auth=OptionalAuth(), tags=["Registrations"])
class RegistrationController(UserAwareController):
    @route.post(
        "/",
        url_name="admit",
        auth=I18nJWTAuth(),
        response={201: schema.AdmissionResponseSchema, **ERRORS},
        throttle=RegistrationThrottle(),
    )
    def admit(self, payload: schema.AdmissionSchema) -> tuple[int, AdmissionResult]:
        """Register the authenticated user for a ticket.

        Capacity, invitation-code usage and the one-registration-per-email rule
        are enforced atomically: a refused admission leaves nothing behind.
        """
        email = self.maybe_email()
        if not email:
            raise ValidationFailed(_("Your account has no email address."))
        result = AdmissionService().admit(
            event_id=payload.event_id,
            ticket_id=payload.ticket_id,
            email=email,
            form_data=payload.form_data,
            agreed_to_terms=payload.agreed_to_terms,
            invite_code=payload.invite_code,
            referral_code=payload.referral_code,
        )
        return 201, result

    @route.post(
        "/validate",
        url_name="validate_form",
        response={200: schema.FormValidationResponseSchema, 404: ErrorResponse},
    )
    def validate_form(self, payload: schema.FormValidationSchema) -> schema.FormValidationResponseSchema:
        """Check form data against a ticket's field schema without registering."""
        errors = AdmissionService().validate(payload.ticket_id, payload.form_data)
        return schema.FormValidationResponseSchema(is_valid=not errors, errors=errors)

    @route.post(
        "/request-edit",
        url_name="request_edit",
        response={200: ResponseMessage, **ERRORS},
        throttle=EditRequestThrottle(),
    )
    def request_edit(self, payload: schema.EditRequestSchema) -> ResponseMessage:
        """Mail a single-use edit link to the registrant."""
        email = payload.email or self.maybe_email()
        if not email:
            raise ValidationFailed(errors={"email": [_("Email is required.")]})
        by_check_in_code = payload.identify_field == "check_in_code"
        EditTokenService().request_edit(
            email=email,
            event_id=payload.event_id,
            order_number=None if by_check_in_code else payload.order_number,
            check_in_code=payload.order_number if by_check_in_code else None,
        )
        return ResponseMessage(message=_("The edit link has been sent to your email address."))

    @route.get("/verify-edit", url_name="verify_edit", response={200: schema.TokenVerificationSchema, **ERRORS})
    def verify_edit(self, token: str) -> schema.TokenVerificationSchema:
        """Check an edit link without using it up."""
        registration = EditTokenService().verify_token(token)
        return schema.TokenVerificationSchema(is_valid=True, registration_id=registration.id)

    @route.get("/edit/{token}", url_name="get_edit_context", response={200: schema.EditContextSchema, **ERRORS})
    def get_edit_context(self, token: str) -> schema.EditContextSchema:
        """The registration, its form fields and current answers."""
        context = EditTokenService().get_edit_context(token)
        return schema.EditContextSchema(
            registration=schema.RegistrationSchema.model_validate(context.registration),
            form_fields=[schema.FormFieldSchema.from_field(field) for field in context.fields],
            current_form_data=context.form_data,
        )

    @route.put("/edit/{token}", url_name="edit_registration", response={200: ResponseMessage, **ERRORS})
    def edit_registration(self, token: str, payload: schema.EditSubmissionSchema) -> ResponseMessage:
        """Replace the form answers. The link cannot be used again afterwards."""
        EditTokenService().edit_with_token(token, payload.form_data)
        return ResponseMessage(message=_("Your registration has been updated."))

    @route.post("/cancel/{token}", url_name="cancel_registration", response={200: ResponseMessage, **ERRORS})
    def cancel_registration(self, token: str, payload: schema.CancellationSchema) -> ResponseMessage:
        """Cancel the registration and free its ticket."""
        if not payload.confirmed:
            raise ValidationFailed(errors={"confirmed": [_("Please confirm the cancellation.")]})
        CancellationService().cancel(token, reason=payload.reason)
        return ResponseMessage(message=_("Your registration has been cancelled."))

    @route.get("/mine", url_name="my_registrations", auth=I18nJWTAuth(), response=list[schema.MyRegistrationSchema])
    def my_registrations(self) -> list[Registration]:
        """Every registration made with the caller's email, newest first."""
        email = self.maybe_email()
        if not email:
            return []
        return DjangoRegistrationStore().list_for_email(email)

    @route.get(
        "/{uuid:registration_id}/referral",
        url_name="registration_referral",
        auth=I18nJWTAuth(),
        response={200: schema.ReferralInfoSchema, 404: ErrorResponse},
    )
    def referral(self, registration_id: UUID) -> schema.ReferralInfoSchema:
        """The caller's referral link and how many registrations it brought in."""
        email = self.maybe_email()
        registration = (
            DjangoRegistrationStore().find_live_registration(email, registration_id=registration_id) if email else None
        )
        if registration is None:
            raise NotFound(_("Registration not found."))
        return schema.ReferralInfoSchema(
            referral_code=registration.check_in_code,
            referral_link=referral_link(registration.event, registration.check_in_code),
            referral_count=ReferralResolver().count_referrals(registration.id),
        )

    @route.get("/{check_in_code}/qr", url_name="registration_qr_code", auth=None)
    def qr_code(self, check_in_code: str) -> t.Any:
        """PNG QR code encoding the check-in code."""
        if DjangoRegistrationStore().get_by_check_in_code(check_in_code) is None:
            raise NotFound(_("Registration not found."))
        return HttpResponse(render_qr_png(check_in_code), content_type="image/png")
