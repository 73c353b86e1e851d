"""
Repository layer for data access abstraction.
"""

from repositories.base_repository import BaseRepository
from repositories.interfaces import (
    IMatchRepository,
    ISpectatorBetRepository,
    IUserRepository,
    IWalletRepository,
)
from repositories.ledger_repository import LedgerRepository
from repositories.match_repository import MatchRepository
from repositories.spectator_bet_repository import SpectatorBetRepository
from repositories.user_repository import UserRepository
from repositories.wallet_repository import WalletRepository

__all__ = [
    "BaseRepository",
    "LedgerRepository",
    "UserRepository",
    "WalletRepository",
    "MatchRepository",
    "SpectatorBetRepository",
    "IUserRepository",
    "IWalletRepository",
    "IMatchRepository",
    "ISpectatorBetRepository",
]
