from decouple import config

# Edit/cancel self-service tokens
EDIT_TOKEN_TTL_MINUTES = config("EDIT_TOKEN_TTL_MINUTES", default=30, cast=int)
EDIT_TOKEN_REQUEST_LIMIT = config("EDIT_TOKEN_REQUEST_LIMIT", default=3, cast=int)
EDIT_TOKEN_REQUEST_WINDOW_MINUTES = config("EDIT_TOKEN_REQUEST_WINDOW_MINUTES", default=60, cast=int)

# No cancellations this many days before the event starts
CANCELLATION_BLACKOUT_DAYS = config("CANCELLATION_BLACKOUT_DAYS", default=3, cast=int)

# Check-in (and referral) codes
CHECK_IN_CODE_LENGTH = config("CHECK_IN_CODE_LENGTH", default=8, cast=int)
CHECK_IN_CODE_MAX_ATTEMPTS = config("CHECK_IN_CODE_MAX_ATTEMPTS", default=20, cast=int)

# When True an unresolvable referral code fails the admission instead of being dropped
ADMISSION_STRICT_REFERRALS = config("ADMISSION_STRICT_REFERRALS", default=False, cast=bool)
