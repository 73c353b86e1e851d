"""
Abstract repository interfaces for data access.

These interfaces define the contracts implemented by concrete repositories.
Amounts crossing these interfaces are integer cents; timestamps are unix seconds.
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class IUserRepository(ABC):
    @abstractmethod
    def add(self, user_id: str, display_name: str, now: int, admin_level: int = 0): ...

    @abstractmethod
    def get_by_id(self, user_id: str): ...

    @abstractmethod
    def exists(self, user_id: str) -> bool: ...

    @abstractmethod
    def set_admin_level(self, user_id: str, admin_level: int) -> None: ...

    @abstractmethod
    def set_suspended(self, user_id: str, suspended: bool) -> None: ...


class IWalletRepository(ABC):
    @abstractmethod
    def get_wallet(self, wallet_id: str): ...

    @abstractmethod
    def get_wallet_for(self, owner_id: str, purpose): ...

    @abstractmethod
    def get_wallets_by_owner(self, owner_id: str) -> list: ...

    @abstractmethod
    def get_platform_wallet(self, now: int): ...

    @abstractmethod
    def deposit(self, owner_id: str, purpose, amount_cents: int, kind, description: str, now: int): ...

    @abstractmethod
    def withdraw(self, owner_id: str, purpose, amount_cents: int, description: str, now: int): ...

    @abstractmethod
    def transfer(
        self, from_wallet_id: str, to_wallet_id: str, amount_cents: int, kind, description: str, now: int
    ): ...

    @abstractmethod
    def get_transactions_by_owner(self, owner_id: str, limit: int | None = None) -> list: ...

    @abstractmethod
    def get_transactions_by_wallet(self, wallet_id: str) -> list: ...

    @abstractmethod
    def get_transactions_by_match(self, match_id: str) -> list: ...

    @abstractmethod
    def get_ledger_balance(self, wallet_id: str): ...


class IMatchRepository(ABC):
    @abstractmethod
    def create_match_atomic(self, player1_id: str, game: str, bet_cents: int, now: int): ...

    @abstractmethod
    def join_match_atomic(self, match_id: str, player2_id: str, now: int): ...

    @abstractmethod
    def propose_amount_atomic(self, match_id: str, user_id: str, amount_cents: int): ...

    @abstractmethod
    def accept_proposal_atomic(self, match_id: str, creator_id: str, now: int): ...

    @abstractmethod
    def reject_proposal_atomic(self, match_id: str, creator_id: str): ...

    @abstractmethod
    def cancel_match_atomic(self, match_id: str, creator_id: str, now: int): ...

    @abstractmethod
    def report_winner_atomic(self, match_id: str, reporter_id: str, winner_id: str): ...

    @abstractmethod
    def approve_match_atomic(self, match_id: str, winner_id: str, now: int): ...

    @abstractmethod
    def reject_match_atomic(self, match_id: str, now: int): ...

    @abstractmethod
    def raise_dispute_atomic(
        self,
        match_id: str,
        user_id: str,
        reason: str,
        evidence: str | None,
        now: int,
        window_seconds: int,
    ): ...

    @abstractmethod
    def settle_match_atomic(self, match_id: str, now: int, window_seconds: int, payout_service): ...

    @abstractmethod
    def resolve_dispute_atomic(
        self,
        match_id: str,
        admin_id: str,
        winner_id: str,
        resolution: str,
        now: int,
        payout_service,
    ): ...

    @abstractmethod
    def get_match(self, match_id: str): ...

    @abstractmethod
    def get_matches(self, status=None) -> list: ...

    @abstractmethod
    def get_matches_by_user(self, user_id: str) -> list: ...

    @abstractmethod
    def get_open_disputes(self) -> list: ...

    @abstractmethod
    def get_ready_for_settlement(self, now: int, window_seconds: int, limit: int | None = None) -> list: ...


class ISpectatorBetRepository(ABC):
    @abstractmethod
    def place_bet_atomic(
        self,
        match_id: str,
        user_id: str,
        predicted_winner_id: str,
        amount_cents: int,
        odds_multiplier: Decimal,
        now: int,
    ): ...

    @abstractmethod
    def resolve_bets_in_transaction(self, cursor, match_id: str, winner_id: str, game: str, now: int) -> list: ...

    @abstractmethod
    def void_bets_in_transaction(self, cursor, match_id: str, game: str, now: int) -> list: ...

    @abstractmethod
    def get_bet(self, bet_id: str): ...

    @abstractmethod
    def get_bets_by_match(self, match_id: str) -> list: ...

    @abstractmethod
    def get_bets_by_user(self, user_id: str) -> list: ...

    @abstractmethod
    def get_pool_totals(self, match_id: str) -> dict: ...
