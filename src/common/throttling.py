from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class UserDefaultThrottle(UserRateThrottle):
    rate = "100/min"


class RegistrationThrottle(UserRateThrottle):
    rate = "20/min"


class EditRequestThrottle(AnonRateThrottle):
    rate = "10/min"


class CodeLookupThrottle(AnonRateThrottle):
    rate = "30/min"
