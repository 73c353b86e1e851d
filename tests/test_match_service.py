"""
Tests for the match state machine: create, join, cancel, report, approve, reject.
"""

from decimal import Decimal

import pytest

from domain.models.match import MatchStatus
from domain.models.wallet import TransactionKind, WalletPurpose
from services import error_codes
from services.errors import (
    AuthorizationError,
    InsufficientFundsError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from tests.conftest import balance, make_user


class TestCreateMatch:
    def test_create_escrows_stake(self, container, player1):
        match = container.match_service.create_match(player1, "chess", "50.00")

        assert match.status == MatchStatus.WAITING
        assert match.bet_amount == Decimal("50.00")
        assert match.player1_id == player1
        assert match.player2_id is None
        assert balance(container, player1, WalletPurpose.PERSONAL) == Decimal("50.00")
        assert balance(container, player1, WalletPurpose.ESCROW) == Decimal("50.00")

        txs = container.wallet_repo.get_transactions_by_match(match.match_id)
        assert len(txs) == 2
        assert all(t.kind == TransactionKind.ESCROW for t in txs)

    def test_create_with_insufficient_funds(self, container, player1):
        with pytest.raises(InsufficientFundsError):
            container.match_service.create_match(player1, "chess", "100.01")
        assert container.match_service.get_matches() == []
        assert balance(container, player1, WalletPurpose.PERSONAL) == Decimal("100.00")

    @pytest.mark.parametrize("amount", ["0", "-5", "1.234", "abc", "10000.01"])
    def test_create_with_invalid_amount(self, container, player1, amount):
        with pytest.raises(ValidationError):
            container.match_service.create_match(player1, "chess", amount)

    def test_create_requires_game(self, container, player1):
        with pytest.raises(ValidationError):
            container.match_service.create_match(player1, "   ", "5.00")

    def test_unknown_user(self, container):
        with pytest.raises(NotFoundError) as exc_info:
            container.match_service.create_match("ghost", "chess", "5.00")
        assert exc_info.value.code == error_codes.USER_NOT_FOUND

    def test_suspended_user_cannot_act(self, container, player1):
        container.user_repo.set_suspended(player1, True)
        with pytest.raises(AuthorizationError) as exc_info:
            container.match_service.create_match(player1, "chess", "5.00")
        assert exc_info.value.code == error_codes.USER_SUSPENDED


class TestJoinMatch:
    def test_join_takes_match_live(self, container, player1, player2):
        match = container.match_service.create_match(player1, "chess", "50.00")
        joined = container.match_service.join_match(player2, match.match_id)

        assert joined.status == MatchStatus.LIVE
        assert joined.player2_id == player2
        assert balance(container, player2, WalletPurpose.PERSONAL) == Decimal("50.00")
        assert balance(container, player2, WalletPurpose.ESCROW) == Decimal("50.00")

    def test_creator_cannot_join_own_match(self, container, player1):
        match = container.match_service.create_match(player1, "chess", "50.00")
        with pytest.raises(PreconditionError) as exc_info:
            container.match_service.join_match(player1, match.match_id)
        assert exc_info.value.code == error_codes.MATCH_NOT_AVAILABLE

    def test_cannot_join_live_match(self, container, live_match):
        third = make_user(container, "third", personal="100.00")
        with pytest.raises(PreconditionError):
            container.match_service.join_match(third, live_match.match_id)
        assert balance(container, third, WalletPurpose.PERSONAL) == Decimal("100.00")

    def test_join_without_funds_leaves_match_waiting(self, container, player1):
        poor = make_user(container, "poor", personal="10.00")
        match = container.match_service.create_match(player1, "chess", "50.00")

        with pytest.raises(InsufficientFundsError):
            container.match_service.join_match(poor, match.match_id)

        reloaded = container.match_service.get_match(match.match_id)
        assert reloaded.status == MatchStatus.WAITING
        assert reloaded.player2_id is None
        assert balance(container, poor, WalletPurpose.PERSONAL) == Decimal("10.00")
        assert balance(container, poor, WalletPurpose.ESCROW) == Decimal("0.00")

    def test_join_unknown_match(self, container, player2):
        with pytest.raises(NotFoundError) as exc_info:
            container.match_service.join_match(player2, "missing")
        assert exc_info.value.code == error_codes.MATCH_NOT_FOUND


class TestCancelMatch:
    def test_cancel_refunds_creator(self, container, player1):
        match = container.match_service.create_match(player1, "chess", "50.00")
        cancelled = container.match_service.cancel_match(player1, match.match_id)

        assert cancelled.status == MatchStatus.CANCELLED
        assert balance(container, player1, WalletPurpose.PERSONAL) == Decimal("100.00")
        assert balance(container, player1, WalletPurpose.ESCROW) == Decimal("0.00")
        kinds = [t.kind for t in container.wallet_repo.get_transactions_by_match(match.match_id)]
        assert kinds.count(TransactionKind.REFUND) == 2

    def test_only_creator_can_cancel(self, container, player1, player2):
        match = container.match_service.create_match(player1, "chess", "50.00")
        with pytest.raises(AuthorizationError):
            container.match_service.cancel_match(player2, match.match_id)

    def test_cannot_cancel_live_match(self, container, live_match, player1):
        with pytest.raises(PreconditionError):
            container.match_service.cancel_match(player1, live_match.match_id)

    def test_cannot_cancel_twice(self, container, player1):
        match = container.match_service.create_match(player1, "chess", "50.00")
        container.match_service.cancel_match(player1, match.match_id)
        with pytest.raises(PreconditionError):
            container.match_service.cancel_match(player1, match.match_id)
        assert balance(container, player1, WalletPurpose.PERSONAL) == Decimal("100.00")


class TestReportAndApprove:
    def test_report_winner(self, container, live_match, player2):
        match = container.match_service.report_winner(player2, live_match.match_id, player2)
        assert match.status == MatchStatus.PENDING_APPROVAL
        assert match.reported_winner_id == player2
        assert match.winner_id is None

    def test_report_by_non_participant(self, container, live_match, player1):
        outsider = make_user(container, "outsider")
        with pytest.raises(AuthorizationError) as exc_info:
            container.match_service.report_winner(outsider, live_match.match_id, player1)
        assert exc_info.value.code == error_codes.NOT_A_PARTICIPANT

    def test_report_invalid_winner(self, container, live_match, player1):
        with pytest.raises(ValidationError) as exc_info:
            container.match_service.report_winner(player1, live_match.match_id, "someone-else")
        assert exc_info.value.code == error_codes.INVALID_WINNER

    def test_report_requires_live(self, container, player1):
        match = container.match_service.create_match(player1, "chess", "50.00")
        with pytest.raises(PreconditionError):
            container.match_service.report_winner(player1, match.match_id, player1)

    def test_approve_starts_window_without_moving_funds(
        self, container, clock, live_match, player1, player2, admin
    ):
        container.match_service.report_winner(player1, live_match.match_id, player1)
        clock.advance(42)
        match = container.match_service.admin_approve_match(admin, live_match.match_id, player1)

        assert match.status == MatchStatus.COMPLETED
        assert match.winner_id == player1
        assert match.approved_at == clock.now
        assert match.settlement_executed_at is None
        assert balance(container, player1, WalletPurpose.ESCROW) == Decimal("50.00")
        assert balance(container, player2, WalletPurpose.ESCROW) == Decimal("50.00")

    def test_admin_may_override_reported_winner(self, container, live_match, player1, player2, admin):
        container.match_service.report_winner(player1, live_match.match_id, player1)
        match = container.match_service.admin_approve_match(admin, live_match.match_id, player2)
        assert match.winner_id == player2

    def test_approve_requires_admin(self, container, live_match, player1):
        container.match_service.report_winner(player1, live_match.match_id, player1)
        with pytest.raises(AuthorizationError) as exc_info:
            container.match_service.admin_approve_match(player1, live_match.match_id, player1)
        assert exc_info.value.code == error_codes.ADMIN_REQUIRED

    def test_approve_requires_pending_approval(self, container, live_match, player1, admin):
        with pytest.raises(PreconditionError):
            container.match_service.admin_approve_match(admin, live_match.match_id, player1)

    def test_admin_reject_refunds_both(self, container, live_match, player1, player2, admin):
        container.match_service.report_winner(player1, live_match.match_id, player1)
        match = container.match_service.admin_reject_match(admin, live_match.match_id)

        assert match.status == MatchStatus.CANCELLED
        for player in (player1, player2):
            assert balance(container, player, WalletPurpose.PERSONAL) == Decimal("100.00")
            assert balance(container, player, WalletPurpose.ESCROW) == Decimal("0.00")

    def test_admin_reject_requires_pending_approval(self, container, live_match, admin):
        with pytest.raises(PreconditionError):
            container.match_service.admin_reject_match(admin, live_match.match_id)


class TestMatchReads:
    def test_listing(self, container, clock, player1, player2, admin):
        first = container.match_service.create_match(player1, "chess", "10.00")
        clock.advance(1)
        second = container.match_service.create_match(player2, "go", "10.00")
        container.match_service.join_match(player1, second.match_id)
        container.match_service.report_winner(player1, second.match_id, player1)

        assert [m.match_id for m in container.match_service.get_matches()] == [
            second.match_id,
            first.match_id,
        ]
        assert len(container.match_service.get_matches_by_user(player1)) == 2
        assert len(container.match_service.get_matches_by_user(player2)) == 1
        assert [m.match_id for m in container.match_service.get_pending_approval()] == [second.match_id]
        assert container.match_service.get_match("missing") is None
