from datetime import timedelta

import pytest
from django.utils import timezone

from registrations.exceptions import InvalidInvite, InviteExhausted, InviteExpired, InviteNotYetValid
from registrations.models import InvitationCode, Ticket
from registrations.service.gatekeeper import GateKeeper

pytestmark = pytest.mark.django_db


class TestRedeem:
    def test_valid_code(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        assert GateKeeper().redeem("SPEAKER2026", gated_ticket.id) == invitation

    def test_surrounding_whitespace_is_ignored(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        assert GateKeeper().redeem("  SPEAKER2026 ", gated_ticket.id) == invitation

    def test_unknown_code(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        with pytest.raises(InvalidInvite):
            GateKeeper().redeem("NOPE", gated_ticket.id)

    def test_code_is_case_sensitive(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        with pytest.raises(InvalidInvite):
            GateKeeper().redeem("speaker2026", gated_ticket.id)

    def test_inactive_code(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        invitation.is_active = False
        invitation.save()
        with pytest.raises(InvalidInvite):
            GateKeeper().redeem("SPEAKER2026", gated_ticket.id)

    def test_code_bound_to_another_ticket(self, invitation: InvitationCode, ticket: Ticket) -> None:
        with pytest.raises(InvalidInvite):
            GateKeeper().redeem("SPEAKER2026", ticket.id)

    def test_not_yet_valid(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        invitation.valid_from = timezone.now() + timedelta(days=1)
        invitation.save()
        with pytest.raises(InviteNotYetValid):
            GateKeeper().redeem("SPEAKER2026", gated_ticket.id)

    def test_expired(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        invitation.valid_until = timezone.now() - timedelta(minutes=1)
        invitation.save()
        with pytest.raises(InviteExpired):
            GateKeeper().redeem("SPEAKER2026", gated_ticket.id)

    def test_exhausted(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        InvitationCode.objects.filter(pk=invitation.pk).update(used_count=1)
        with pytest.raises(InviteExhausted):
            GateKeeper().redeem("SPEAKER2026", gated_ticket.id)

    def test_unlimited_code_is_never_exhausted(self, gated_ticket: Ticket) -> None:
        InvitationCode.objects.create(ticket=gated_ticket, code="OPEN", used_count=0)
        InvitationCode.objects.filter(code="OPEN").update(used_count=10_000)
        assert GateKeeper().redeem("OPEN", gated_ticket.id).used_count == 10_000


class TestConsume:
    def test_consume_increments_used_count(self, invitation: InvitationCode) -> None:
        GateKeeper().consume(invitation)
        invitation.refresh_from_db()
        assert invitation.used_count == 1

    def test_consume_is_guarded_by_the_usage_limit(self, invitation: InvitationCode) -> None:
        gatekeeper = GateKeeper()
        gatekeeper.consume(invitation)
        with pytest.raises(InviteExhausted):
            gatekeeper.consume(invitation)
        invitation.refresh_from_db()
        assert invitation.used_count == 1


class TestPreview:
    def test_valid_code(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        preview = GateKeeper().preview("SPEAKER2026", gated_ticket.id)
        assert preview.valid is True
        assert preview.code == "SPEAKER2026"
        assert preview.remaining_uses == 1

    def test_preview_consumes_nothing(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        GateKeeper().preview("SPEAKER2026", gated_ticket.id)
        invitation.refresh_from_db()
        assert invitation.used_count == 0

    def test_invalid_code(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        preview = GateKeeper().preview("NOPE", gated_ticket.id)
        assert preview.valid is False
        assert preview.message == InvalidInvite().message

    def test_unknown_ticket(self, invitation: InvitationCode, gated_ticket: Ticket) -> None:
        gated_ticket.is_active = False
        gated_ticket.save()
        preview = GateKeeper().preview("SPEAKER2026", gated_ticket.id)
        assert preview.valid is False
