import pytest

from registrations.exceptions import SoldOut
from registrations.models import Ticket
from registrations.service.inventory import InventoryLedger

pytestmark = pytest.mark.django_db


def test_reserve_until_sold_out(ticket: Ticket) -> None:
    ticket.quantity = 2
    ticket.save()
    ledger = InventoryLedger()

    ledger.reserve(ticket.id)
    ledger.reserve(ticket.id)
    with pytest.raises(SoldOut):
        ledger.reserve(ticket.id)

    ticket.refresh_from_db()
    assert ticket.sold_count == 2
    assert ticket.remaining == 0


def test_release_returns_a_unit(ticket: Ticket) -> None:
    ledger = InventoryLedger()
    ledger.reserve(ticket.id)

    assert ledger.release(ticket.id) is True

    ticket.refresh_from_db()
    assert ticket.sold_count == 0


def test_release_never_goes_below_zero(ticket: Ticket) -> None:
    assert InventoryLedger().release(ticket.id) is False

    ticket.refresh_from_db()
    assert ticket.sold_count == 0


def test_zero_capacity_ticket_is_sold_out(ticket: Ticket) -> None:
    ticket.quantity = 0
    ticket.save()

    with pytest.raises(SoldOut):
        InventoryLedger().reserve(ticket.id)
