"""Inventory ledger: the only writer of ``Ticket.sold_count``."""

from uuid import UUID

import structlog

from registrations.exceptions import SoldOut
from registrations.stores.django_store import DjangoInventoryStore
from registrations.stores.interfaces import InventoryStore

logger = structlog.get_logger(__name__)


class InventoryLedger:
    def __init__(self, store: InventoryStore | None = None) -> None:
        self.store = store or DjangoInventoryStore()

    def reserve(self, ticket_id: UUID) -> None:
        """Take one unit of capacity.

        Must run inside the caller's transaction so a later failure returns the unit.

        Raises:
            SoldOut: No capacity was left at the moment of the update.
        """
        if not self.store.reserve_unit(ticket_id):
            logger.info("ticket_sold_out", ticket_id=str(ticket_id))
            raise SoldOut()

    def release(self, ticket_id: UUID) -> bool:
        """Give one unit back. Returns False (and logs) if the counter was already zero."""
        released = self.store.release_unit(ticket_id)
        if not released:
            logger.warning("ticket_release_underflow", ticket_id=str(ticket_id))
        return released
