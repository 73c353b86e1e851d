"""
Spectator bet domain model.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class BetStatus(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    VOIDED = "voided"  # match rejected, stake refunded


@dataclass
class SpectatorBet:
    """A side wager by a non-participant on which player wins a live match."""

    bet_id: str
    match_id: str
    user_id: str
    predicted_winner_id: str
    amount: Decimal
    odds_multiplier: Decimal  # frozen at placement
    status: BetStatus = BetStatus.PENDING
    payout: Decimal | None = None
    created_at: int | None = None
