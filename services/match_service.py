"""
Match orchestration: the wager lifecycle from creation to admin review.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from decimal import Decimal

from domain.models.match import Match, MatchStatus
from domain.models.wallet import WalletPurpose
from repositories.interfaces import IMatchRepository, IUserRepository, IWalletRepository
from services.balance_validation import parse_amount, validate_can_spend
from services.errors import ValidationError
from services.permissions import require_active_user, require_admin
from utils.money import to_cents

logger = logging.getLogger("escrow.services.match")

MAX_GAME_NAME_LENGTH = 100


class MatchService:
    """
    Handles the match state machine.

    Validates input and the acting user, then delegates to one atomic
    repository transition which re-checks state under the write lock.
    """

    def __init__(
        self,
        match_repo: IMatchRepository,
        user_repo: IUserRepository,
        wallet_repo: IWalletRepository,
        *,
        max_bet_amount: Decimal | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        Initialize MatchService with required repository dependencies.

        Args:
            match_repo: Repository for match state and escrow transitions
            user_repo: Repository for acting-user lookups
            wallet_repo: Repository used for friendly balance pre-checks
            max_bet_amount: Cap on a single stake (defaults to config.MAX_BET_AMOUNT)
            clock: Returns the current unix time; replaced in tests
        """
        self.match_repo = match_repo
        self.user_repo = user_repo
        self.wallet_repo = wallet_repo
        self.max_bet_amount = max_bet_amount
        self._clock = clock or (lambda: int(time.time()))

    def create_match(self, user_id: str, game: str, bet_amount) -> Match:
        game = (game or "").strip()
        if not game:
            raise ValidationError("Game is required")
        if len(game) > MAX_GAME_NAME_LENGTH:
            raise ValidationError(f"Game name must be at most {MAX_GAME_NAME_LENGTH} characters")
        amount = parse_amount(bet_amount, self.max_bet_amount)
        require_active_user(self.user_repo, user_id)

        validate_can_spend(self.wallet_repo, user_id, WalletPurpose.PERSONAL, amount)
        match = self.match_repo.create_match_atomic(user_id, game, to_cents(amount), self._clock())
        logger.info(f"Match {match.match_id} created by {user_id}: {game} for {amount}")
        return match

    def join_match(self, user_id: str, match_id: str) -> Match:
        require_active_user(self.user_repo, user_id)
        match = self.match_repo.join_match_atomic(match_id, user_id, self._clock())
        logger.info(f"Match {match_id} joined by {user_id}, now live")
        return match

    def propose_amount(self, user_id: str, match_id: str, amount) -> Match:
        value = parse_amount(amount, self.max_bet_amount)
        require_active_user(self.user_repo, user_id)
        match = self.match_repo.propose_amount_atomic(match_id, user_id, to_cents(value))
        logger.info(f"Match {match_id}: {user_id} proposed a stake of {value}")
        return match

    def accept_proposal(self, user_id: str, match_id: str) -> Match:
        require_active_user(self.user_repo, user_id)
        match = self.match_repo.accept_proposal_atomic(match_id, user_id, self._clock())
        logger.info(
            f"Match {match_id}: proposal accepted, stake now {match.bet_amount}, "
            f"{match.player2_id} joined"
        )
        return match

    def reject_proposal(self, user_id: str, match_id: str) -> Match:
        require_active_user(self.user_repo, user_id)
        match = self.match_repo.reject_proposal_atomic(match_id, user_id)
        logger.info(f"Match {match_id}: proposal rejected by creator")
        return match

    def cancel_match(self, user_id: str, match_id: str) -> Match:
        require_active_user(self.user_repo, user_id)
        match = self.match_repo.cancel_match_atomic(match_id, user_id, self._clock())
        logger.info(f"Match {match_id} cancelled by creator, {match.bet_amount} refunded")
        return match

    def report_winner(self, user_id: str, match_id: str, winner_id: str) -> Match:
        require_active_user(self.user_repo, user_id)
        match = self.match_repo.report_winner_atomic(match_id, user_id, winner_id)
        logger.info(f"Match {match_id}: {user_id} reported {winner_id} as winner")
        return match

    def admin_approve_match(self, admin_id: str, match_id: str, winner_id: str) -> Match:
        require_admin(self.user_repo, admin_id)
        match = self.match_repo.approve_match_atomic(match_id, winner_id, self._clock())
        logger.info(
            f"Match {match_id} approved by {admin_id}, winner {winner_id}; dispute window open"
        )
        return match

    def admin_reject_match(self, admin_id: str, match_id: str) -> Match:
        require_admin(self.user_repo, admin_id)
        match, voided = self.match_repo.reject_match_atomic(match_id, self._clock())
        logger.info(
            f"Match {match_id} rejected by {admin_id}: both stakes refunded, "
            f"{voided} spectator bet(s) voided"
        )
        return match

    # --- Reads ---

    def get_match(self, match_id: str) -> Match | None:
        return self.match_repo.get_match(match_id)

    def get_matches(self, status: MatchStatus | None = None) -> list[Match]:
        return self.match_repo.get_matches(status)

    def get_matches_by_user(self, user_id: str) -> list[Match]:
        return self.match_repo.get_matches_by_user(user_id)

    def get_pending_approval(self) -> list[Match]:
        return self.match_repo.get_matches(MatchStatus.PENDING_APPROVAL)

    def get_open_disputes(self) -> list[Match]:
        return self.match_repo.get_open_disputes()
