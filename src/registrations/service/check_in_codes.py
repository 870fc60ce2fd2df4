import secrets
import string

import structlog
from django.conf import settings

from registrations.exceptions import InternalError
from registrations.stores.interfaces import RegistrationStore

logger = structlog.get_logger(__name__)

ALPHABET = string.ascii_uppercase + string.digits


def random_code(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_check_in_code(store: RegistrationStore) -> str:
    """Return a check-in code not used by any registration.

    The code doubles as the registrant's referral code.

    Raises:
        InternalError: No free code was found within ``CHECK_IN_CODE_MAX_ATTEMPTS`` tries.
    """
    for _ in range(settings.CHECK_IN_CODE_MAX_ATTEMPTS):
        code = random_code(settings.CHECK_IN_CODE_LENGTH)
        if not store.check_in_code_exists(code):
            return code
    logger.error("check_in_code_space_exhausted", attempts=settings.CHECK_IN_CODE_MAX_ATTEMPTS)
    raise InternalError()
