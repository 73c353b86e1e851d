"""
Tests for the dispute sub-protocol.
"""

from decimal import Decimal

import pytest

from domain.models.match import DisputeStatus, MatchStatus
from domain.models.wallet import WalletPurpose
from services import error_codes
from services.errors import AuthorizationError, PreconditionError, ValidationError
from services.settlement_service import ALREADY_SETTLED, NOT_ELIGIBLE
from tests.conftest import DISPUTE_WINDOW, balance, make_user, platform_balance

REASON = "Opponent disconnected on purpose"
RESOLUTION = "Replay shows player2 won the final round"


class TestRaiseDispute:
    def test_raise_on_completed_match(self, container, clock, approved_match, player2):
        clock.advance(DISPUTE_WINDOW - 1)
        match = container.dispute_service.raise_dispute(
            player2, approved_match.match_id, REASON, evidence="https://example.test/replay"
        )

        assert match.status == MatchStatus.DISPUTED
        assert match.dispute_status == DisputeStatus.OPEN
        assert match.dispute.reason == REASON
        assert match.dispute.raised_by_id == player2
        assert match.dispute.evidence == "https://example.test/replay"
        assert [m.match_id for m in container.dispute_service.get_open_disputes()] == [match.match_id]

    def test_raise_on_pending_approval(self, container, live_match, player1, player2):
        container.match_service.report_winner(player1, live_match.match_id, player1)
        match = container.dispute_service.raise_dispute(player2, live_match.match_id, REASON)
        assert match.status == MatchStatus.DISPUTED

    def test_window_closed(self, container, clock, approved_match, player2):
        clock.advance(DISPUTE_WINDOW)
        with pytest.raises(PreconditionError) as exc_info:
            container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        assert exc_info.value.code == error_codes.DISPUTE_WINDOW_CLOSED

    def test_only_participants(self, container, approved_match):
        outsider = make_user(container, "outsider")
        with pytest.raises(AuthorizationError):
            container.dispute_service.raise_dispute(outsider, approved_match.match_id, REASON)

    def test_only_one_dispute(self, container, approved_match, player1, player2):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        with pytest.raises(PreconditionError):
            container.dispute_service.raise_dispute(player1, approved_match.match_id, REASON)

    def test_live_match_cannot_be_disputed(self, container, live_match, player1):
        with pytest.raises(PreconditionError):
            container.dispute_service.raise_dispute(player1, live_match.match_id, REASON)

    @pytest.mark.parametrize("reason", ["", "   ", "too short"])
    def test_reason_length(self, container, approved_match, player2, reason):
        with pytest.raises(ValidationError):
            container.dispute_service.raise_dispute(player2, approved_match.match_id, reason)

    def test_dispute_after_resolution_rejected(self, container, approved_match, player1, player2, admin):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        container.dispute_service.resolve_dispute(admin, approved_match.match_id, player2, RESOLUTION)
        with pytest.raises(PreconditionError):
            container.dispute_service.raise_dispute(player1, approved_match.match_id, REASON)


class TestDisputeFreezesSettlement:
    def test_scheduler_skips_disputed_match(self, container, clock, approved_match, player1, player2):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        clock.advance(DISPUTE_WINDOW * 3)

        assert container.settlement_scheduler.find_eligible() == []
        outcome = container.settlement_service.settle(approved_match.match_id)
        assert outcome.reason == NOT_ELIGIBLE
        for player in (player1, player2):
            assert balance(container, player, WalletPurpose.ESCROW) == Decimal("50.00")


class TestResolveDispute:
    def test_scenario_b(self, container, clock, approved_match, player1, player2, admin):
        """Dispute inside the window, admin resolves for player2, no double payout."""
        clock.advance(60)
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)

        clock.advance(DISPUTE_WINDOW)
        assert container.settlement_scheduler.run_sweep().settled == []

        settlement = container.dispute_service.resolve_dispute(
            admin, approved_match.match_id, player2, RESOLUTION
        )
        assert settlement.via_dispute is True
        assert settlement.winner_id == player2
        assert settlement.winner_payout == Decimal("90.00")

        # A lingering scheduler tick around the same time must not pay again
        clock.advance(DISPUTE_WINDOW)
        assert container.settlement_scheduler.run_sweep().settled == []
        assert container.settlement_service.settle(approved_match.match_id).reason == ALREADY_SETTLED

        assert balance(container, player2, WalletPurpose.PERSONAL) == Decimal("140.00")
        assert balance(container, player1, WalletPurpose.PERSONAL) == Decimal("50.00")
        assert balance(container, player1, WalletPurpose.ESCROW) == Decimal("0.00")
        assert balance(container, player2, WalletPurpose.ESCROW) == Decimal("0.00")
        assert platform_balance(container) == Decimal("10.00")

        match = container.match_service.get_match(approved_match.match_id)
        assert match.status == MatchStatus.COMPLETED
        assert match.dispute_status == DisputeStatus.RESOLVED
        assert match.dispute.resolved_by_id == admin
        assert match.dispute.resolution == RESOLUTION
        assert match.winner_id == player2
        assert match.settlement_executed_at is not None
        assert container.dispute_service.get_open_disputes() == []

    def test_resolving_twice_fails(self, container, approved_match, player2, admin):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        container.dispute_service.resolve_dispute(admin, approved_match.match_id, player2, RESOLUTION)
        with pytest.raises(PreconditionError):
            container.dispute_service.resolve_dispute(admin, approved_match.match_id, player2, RESOLUTION)
        assert balance(container, player2, WalletPurpose.PERSONAL) == Decimal("140.00")

    def test_resolve_pending_approval_dispute(self, container, live_match, player1, player2, admin):
        container.match_service.report_winner(player1, live_match.match_id, player1)
        container.dispute_service.raise_dispute(player2, live_match.match_id, REASON)
        settlement = container.dispute_service.resolve_dispute(
            admin, live_match.match_id, player1, RESOLUTION
        )
        assert settlement.winner_id == player1
        assert balance(container, player1, WalletPurpose.PERSONAL) == Decimal("140.00")

    def test_requires_admin(self, container, approved_match, player1, player2):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        with pytest.raises(AuthorizationError):
            container.dispute_service.resolve_dispute(player1, approved_match.match_id, player1, RESOLUTION)

    def test_invalid_winner(self, container, approved_match, player2, admin):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        with pytest.raises(ValidationError):
            container.dispute_service.resolve_dispute(admin, approved_match.match_id, admin, RESOLUTION)
        assert container.match_service.get_match(approved_match.match_id).status == MatchStatus.DISPUTED

    def test_resolution_required(self, container, approved_match, player2, admin):
        container.dispute_service.raise_dispute(player2, approved_match.match_id, REASON)
        with pytest.raises(ValidationError):
            container.dispute_service.resolve_dispute(admin, approved_match.match_id, player2, "ok")

    def test_not_disputed(self, container, approved_match, player1, admin):
        with pytest.raises(PreconditionError):
            container.dispute_service.resolve_dispute(admin, approved_match.match_id, player1, RESOLUTION)
