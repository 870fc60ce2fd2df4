"""Store interfaces (repository pattern).

Services depend on these abstractions, never on the ORM directly, so every
store can be swapped in tests. Counter mutations are single conditional
statements that report whether they took effect.
"""

import typing as t
from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from registrations.models import Event, InvitationCode, Registration, Ticket
from registrations.service.form_schema import FieldSchema


class CatalogStore(ABC):
    """Read-only access to events, tickets and their form fields."""

    @abstractmethod
    def get_event(self, event_id: UUID) -> Event | None:
        """Return an active event, or None."""
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: UUID) -> Ticket | None:
        """Return a purchasable ticket with its event, or None."""
        ...

    @abstractmethod
    def get_field_schemas(self, event_id: UUID, ticket_id: UUID) -> list[FieldSchema]:
        """Return event-wide fields plus the fields bound to the ticket, in declaration order."""
        ...


class InventoryStore(ABC):
    """Ticket capacity counters."""

    @abstractmethod
    def reserve_unit(self, ticket_id: UUID) -> bool:
        """Increment sold_count only while it is below quantity."""
        ...

    @abstractmethod
    def release_unit(self, ticket_id: UUID) -> bool:
        """Decrement sold_count only while it is above zero."""
        ...


class InvitationStore(ABC):
    @abstractmethod
    def find_invitation(self, code: str, ticket_id: UUID) -> InvitationCode | None:
        """Return the invitation code bound to the ticket, or None."""
        ...

    @abstractmethod
    def consume_invitation(self, invitation_id: UUID) -> bool:
        """Increment used_count only while it is below the usage limit."""
        ...


class RegistrationStore(ABC):
    """Registrations, their field values and edit-token bookkeeping."""

    @abstractmethod
    def has_live_registration(self, event_id: UUID, email: str) -> bool: ...

    @abstractmethod
    def check_in_code_exists(self, code: str) -> bool: ...

    @abstractmethod
    def create_registration(
        self,
        *,
        event: Event,
        ticket: Ticket,
        email: str,
        check_in_code: str,
        values: dict[str, t.Any],
        referred_by_id: UUID | None = None,
        invitation: InvitationCode | None = None,
    ) -> Registration:
        """Insert the registration and one data row per value.

        Raises:
            AlreadyRegistered: A live registration for (event, email) already exists.
        """
        ...

    @abstractmethod
    def find_confirmed_by_code(self, code: str, event_id: UUID) -> Registration | None: ...

    @abstractmethod
    def count_referrals(self, registration_id: UUID) -> int: ...

    @abstractmethod
    def find_live_registration(
        self,
        email: str,
        *,
        event_id: UUID | None = None,
        registration_id: UUID | None = None,
        check_in_code: str | None = None,
    ) -> Registration | None:
        """Return the most recent non-cancelled registration matching every given criterion."""
        ...

    @abstractmethod
    def list_for_email(self, email: str) -> list[Registration]: ...

    @abstractmethod
    def get_by_check_in_code(self, code: str) -> Registration | None: ...

    @abstractmethod
    def lock(self, registration_id: UUID) -> Registration:
        """Re-read the registration holding a row lock until the transaction ends."""
        ...

    @abstractmethod
    def count_token_requests(self, registration_id: UUID, since: datetime) -> int: ...

    @abstractmethod
    def store_edit_token(self, registration_id: UUID, token_hash: str, expiry: datetime) -> None:
        """Persist the token hash and record the issuance for rate limiting."""
        ...

    @abstractmethod
    def get_by_token_hash(self, token_hash: str) -> Registration | None: ...

    @abstractmethod
    def clear_edit_token(self, token_hash: str, now: datetime) -> bool:
        """Null the token fields only while the hash is present and unexpired."""
        ...

    @abstractmethod
    def get_values(self, registration: Registration) -> dict[str, t.Any]:
        """Return the stored field values keyed by field id."""
        ...

    @abstractmethod
    def replace_values(self, registration: Registration, values: dict[str, t.Any]) -> None:
        """Make ``values`` the registration's complete set of answers, dropping any others."""
        ...

    @abstractmethod
    def mark_cancelled(self, registration_id: UUID, reason: str, now: datetime) -> bool:
        """Flip a confirmed registration to cancelled. False when it was not confirmed."""
        ...

    @abstractmethod
    def clear_expired_tokens(self, now: datetime) -> int: ...

    @abstractmethod
    def prune_token_requests(self, before: datetime) -> int: ...
