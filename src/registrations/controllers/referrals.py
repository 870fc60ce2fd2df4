from ninja_extra import api_controller, route

from common.authentication import OptionalAuth
from common.controllers import UserAwareController
from common.throttling import CodeLookupThrottle
from registrations import schema
from registrations.service.referrals import ReferralResolver


@api_controller("/referrals", auth=OptionalAuth(), tags=["Referrals"], throttle=CodeLookupThrottle())
class ReferralController(UserAwareController):
    @route.post("/validate", url_name="validate_referral_code", response=schema.ReferralValidateResponseSchema)
    def validate(self, payload: schema.ReferralValidateSchema) -> schema.ReferralValidateResponseSchema:
        """Check that a referral code belongs to a confirmed registration of the event."""
        referrer_id = ReferralResolver().resolve(payload.code, payload.event_id)
        return schema.ReferralValidateResponseSchema(is_valid=referrer_id is not None)
