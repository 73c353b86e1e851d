"""
Domain models - pure data structures representing business entities.
"""

from domain.models.match import Dispute, DisputeStatus, Match, MatchStatus, Proposal
from domain.models.settlement import Settlement, SettlementOutcome, SpectatorBetOutcome
from domain.models.spectator_bet import BetStatus, SpectatorBet
from domain.models.user import User
from domain.models.wallet import Direction, Transaction, TransactionKind, Wallet, WalletPurpose

__all__ = [
    "Match",
    "MatchStatus",
    "Proposal",
    "Dispute",
    "DisputeStatus",
    "Settlement",
    "SettlementOutcome",
    "SpectatorBetOutcome",
    "SpectatorBet",
    "BetStatus",
    "User",
    "Wallet",
    "WalletPurpose",
    "Transaction",
    "TransactionKind",
    "Direction",
]
