"""
Operation boundary for the escrow core.

The only surface collaborators (HTTP handlers, payment webhooks, admin
tooling) call. Every operation returns a ``Result``: expected failures
come back as ``Result.fail(message, code)`` and never as exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from domain.models.match import Match
from domain.models.settlement import Settlement, SettlementOutcome
from domain.models.spectator_bet import SpectatorBet
from domain.models.user import User
from domain.models.wallet import TransactionKind, Wallet
from services.dispute_service import DisputeService
from services.errors import EscrowError
from services.match_service import MatchService
from services.result import Result
from services.settlement_service import SettlementService
from services.spectator_bet_service import SpectatorBetService
from services.wallet_service import WalletService

logger = logging.getLogger("escrow.operations")

T = TypeVar("T")


class EscrowOperations:
    """Facade over the escrow services mapping errors to ``Result`` values."""

    def __init__(
        self,
        wallet_service: WalletService,
        match_service: MatchService,
        settlement_service: SettlementService,
        spectator_bet_service: SpectatorBetService,
        dispute_service: DisputeService,
    ):
        self.wallet_service = wallet_service
        self.match_service = match_service
        self.settlement_service = settlement_service
        self.spectator_bet_service = spectator_bet_service
        self.dispute_service = dispute_service

    def _run(self, operation: str, fn: Callable[..., T], *args, **kwargs) -> Result[T]:
        try:
            return Result.ok(fn(*args, **kwargs))
        except EscrowError as e:
            logger.warning(f"{operation} rejected ({e.code}): {e}")
            return Result.from_error(e)

    # --- Wallets ---

    def register_user(self, user_id: str, display_name: str, admin_level: int = 0) -> Result[User]:
        return self._run(
            "register_user", self.wallet_service.register_user, user_id, display_name, admin_level
        )

    def deposit_to_wallet(
        self,
        user_id: str,
        wallet_type: str,
        amount,
        kind: TransactionKind = TransactionKind.DEPOSIT,
    ) -> Result[Wallet]:
        return self._run(
            "deposit_to_wallet", self.wallet_service.deposit_to_wallet, user_id, wallet_type, amount, kind
        )

    def withdraw_from_wallet(self, user_id: str, amount) -> Result[Wallet]:
        return self._run("withdraw_from_wallet", self.wallet_service.withdraw_from_wallet, user_id, amount)

    def get_wallets(self, user_id: str) -> Result[list[Wallet]]:
        return self._run("get_wallets", self.wallet_service.get_wallets, user_id)

    def get_transactions(self, user_id: str, limit: int | None = None) -> Result[list]:
        return self._run("get_transactions", self.wallet_service.get_transactions, user_id, limit)

    # --- Match lifecycle ---

    def create_match(self, user_id: str, game: str, bet_amount) -> Result[Match]:
        return self._run("create_match", self.match_service.create_match, user_id, game, bet_amount)

    def join_match(self, user_id: str, match_id: str) -> Result[Match]:
        return self._run("join_match", self.match_service.join_match, user_id, match_id)

    def propose_amount(self, user_id: str, match_id: str, amount) -> Result[Match]:
        return self._run("propose_amount", self.match_service.propose_amount, user_id, match_id, amount)

    def accept_proposal(self, user_id: str, match_id: str) -> Result[Match]:
        return self._run("accept_proposal", self.match_service.accept_proposal, user_id, match_id)

    def reject_proposal(self, user_id: str, match_id: str) -> Result[Match]:
        return self._run("reject_proposal", self.match_service.reject_proposal, user_id, match_id)

    def cancel_match(self, user_id: str, match_id: str) -> Result[Match]:
        return self._run("cancel_match", self.match_service.cancel_match, user_id, match_id)

    def report_winner(self, user_id: str, match_id: str, winner_id: str) -> Result[Match]:
        return self._run("report_winner", self.match_service.report_winner, user_id, match_id, winner_id)

    def admin_approve_match(self, admin_id: str, match_id: str, winner_id: str) -> Result[Match]:
        return self._run(
            "admin_approve_match", self.match_service.admin_approve_match, admin_id, match_id, winner_id
        )

    def admin_reject_match(self, admin_id: str, match_id: str) -> Result[Match]:
        return self._run("admin_reject_match", self.match_service.admin_reject_match, admin_id, match_id)

    def get_match(self, match_id: str) -> Result[Match | None]:
        return self._run("get_match", self.match_service.get_match, match_id)

    def get_matches(self) -> Result[list[Match]]:
        return self._run("get_matches", self.match_service.get_matches)

    def get_matches_by_user(self, user_id: str) -> Result[list[Match]]:
        return self._run("get_matches_by_user", self.match_service.get_matches_by_user, user_id)

    def get_pending_approval(self) -> Result[list[Match]]:
        return self._run("get_pending_approval", self.match_service.get_pending_approval)

    # --- Disputes ---

    def raise_dispute(
        self, user_id: str, match_id: str, reason: str, evidence: str | None = None
    ) -> Result[Match]:
        return self._run(
            "raise_dispute", self.dispute_service.raise_dispute, user_id, match_id, reason, evidence
        )

    def resolve_dispute(
        self, admin_id: str, match_id: str, winner_id: str, resolution: str
    ) -> Result[Settlement]:
        return self._run(
            "resolve_dispute",
            self.dispute_service.resolve_dispute,
            admin_id,
            match_id,
            winner_id,
            resolution,
        )

    def get_open_disputes(self) -> Result[list[Match]]:
        return self._run("get_open_disputes", self.dispute_service.get_open_disputes)

    # --- Spectator bets ---

    def place_spectator_bet(
        self, user_id: str, match_id: str, predicted_winner_id: str, amount
    ) -> Result[SpectatorBet]:
        return self._run(
            "place_spectator_bet",
            self.spectator_bet_service.place_bet,
            user_id,
            match_id,
            predicted_winner_id,
            amount,
        )

    def get_spectator_bets_by_match(self, match_id: str) -> Result[list[SpectatorBet]]:
        return self._run(
            "get_spectator_bets_by_match", self.spectator_bet_service.get_bets_by_match, match_id
        )

    def get_spectator_bets_by_user(self, user_id: str) -> Result[list[SpectatorBet]]:
        return self._run(
            "get_spectator_bets_by_user", self.spectator_bet_service.get_bets_by_user, user_id
        )

    # --- Settlement (scheduler-facing) ---

    def get_matches_ready_for_settlement(self) -> Result[list[Match]]:
        return self._run(
            "get_matches_ready_for_settlement",
            self.settlement_service.get_matches_ready_for_settlement,
        )

    def settle(self, match_id: str) -> Result[SettlementOutcome]:
        return self._run("settle", self.settlement_service.settle, match_id)
