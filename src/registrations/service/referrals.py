"""Referral resolution.

A registrant's check-in code is also their referral code. A referral only
counts when the referrer is confirmed for the same event.
"""

from uuid import UUID

import structlog

from registrations.stores.django_store import DjangoRegistrationStore
from registrations.stores.interfaces import RegistrationStore

logger = structlog.get_logger(__name__)


class ReferralResolver:
    def __init__(self, store: RegistrationStore | None = None) -> None:
        self.store = store or DjangoRegistrationStore()

    def resolve(self, code: str | None, event_id: UUID) -> UUID | None:
        """Return the referring registration id, or None when the code does not resolve."""
        if not code or not code.strip():
            return None
        referrer = self.store.find_confirmed_by_code(code.strip(), event_id)
        if referrer is None:
            logger.info("referral_code_unresolved", event_id=str(event_id))
            return None
        return referrer.id

    def count_referrals(self, registration_id: UUID) -> int:
        return self.store.count_referrals(registration_id)
