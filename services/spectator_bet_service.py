"""
Spectator betting on live matches at fixed odds.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from decimal import Decimal

from domain.models.spectator_bet import SpectatorBet
from domain.models.wallet import WalletPurpose
from repositories.interfaces import ISpectatorBetRepository, IUserRepository, IWalletRepository
from services import error_codes
from services.balance_validation import parse_amount, validate_can_spend
from services.errors import PreconditionError
from services.permissions import require_active_user
from utils.money import to_cents

logger = logging.getLogger("escrow.services.spectator_bets")


class SpectatorBetService:
    """
    Places spectator bets; resolution happens inside match settlement.

    The odds multiplier is read once here and frozen onto each bet.
    """

    def __init__(
        self,
        spectator_bet_repo: ISpectatorBetRepository,
        user_repo: IUserRepository,
        wallet_repo: IWalletRepository,
        odds_multiplier: Decimal,
        *,
        enabled: bool = True,
        max_bet_amount: Decimal | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.spectator_bet_repo = spectator_bet_repo
        self.user_repo = user_repo
        self.wallet_repo = wallet_repo
        self.odds_multiplier = odds_multiplier
        self.enabled = enabled
        self.max_bet_amount = max_bet_amount
        self._clock = clock or (lambda: int(time.time()))

    def place_bet(self, user_id: str, match_id: str, predicted_winner_id: str, amount) -> SpectatorBet:
        """
        Stake from the spectator wallet on one of a live match's players.

        Args:
            user_id: Bettor; must not be a participant in the match
            match_id: A live match
            predicted_winner_id: One of the match's two players
            amount: Positive stake with at most two decimal places

        Returns:
            The pending bet
        """
        if not self.enabled:
            raise PreconditionError("Spectator betting is disabled", code=error_codes.BETTING_DISABLED)
        value = parse_amount(amount, self.max_bet_amount)
        require_active_user(self.user_repo, user_id)
        validate_can_spend(self.wallet_repo, user_id, WalletPurpose.SPECTATOR, value)

        bet = self.spectator_bet_repo.place_bet_atomic(
            match_id, user_id, predicted_winner_id, to_cents(value), self.odds_multiplier, self._clock()
        )
        logger.info(
            f"Spectator {user_id} bet {value} on {predicted_winner_id} in match {match_id} "
            f"at {self.odds_multiplier}x"
        )
        return bet

    def get_bets_by_match(self, match_id: str) -> list[SpectatorBet]:
        return self.spectator_bet_repo.get_bets_by_match(match_id)

    def get_bets_by_user(self, user_id: str) -> list[SpectatorBet]:
        return self.spectator_bet_repo.get_bets_by_user(user_id)

    def get_pool_totals(self, match_id: str) -> dict:
        return self.spectator_bet_repo.get_pool_totals(match_id)
