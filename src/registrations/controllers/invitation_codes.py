from ninja_extra import api_controller, route

from common.authentication import OptionalAuth
from common.controllers import UserAwareController
from common.throttling import CodeLookupThrottle
from registrations import schema
from registrations.service.gatekeeper import GateKeeper, InvitePreview


@api_controller("/invitation-codes", auth=OptionalAuth(), tags=["Invitation Codes"], throttle=CodeLookupThrottle())
class InvitationCodeController(UserAwareController):
    @route.post("/verify", url_name="verify_invitation_code", response=schema.InvitationVerifyResponseSchema)
    def verify(self, payload: schema.InvitationVerifySchema) -> InvitePreview:
        """Tell whether an invitation code would currently be accepted for a ticket.

        Nothing is consumed; the code is only used up when the admission commits.
        """
        return GateKeeper().preview(payload.code, payload.ticket_id)
