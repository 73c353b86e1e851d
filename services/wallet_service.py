"""
Wallet ledger service: registration, deposits, withdrawals, transfers and audits.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from domain.models.user import ADMIN_LEVEL_NONE, ADMIN_LEVEL_SUPER, User
from domain.models.wallet import (
    DEPOSITABLE_PURPOSES,
    Transaction,
    TransactionKind,
    Wallet,
    WalletPurpose,
)
from repositories.user_repository import UserRepository
from repositories.wallet_repository import WalletRepository
from services import error_codes
from services.balance_validation import parse_amount
from services.errors import NotFoundError, ValidationError
from services.permissions import require_active_user
from utils.money import to_cents

logger = logging.getLogger("escrow.services.wallet")

EXTERNAL_DEPOSIT_KINDS = (TransactionKind.DEPOSIT, TransactionKind.CRYPTO_DEPOSIT)


@dataclass(frozen=True)
class WalletAudit:
    """Stored balance compared against the balance implied by the ledger."""

    wallet_id: str
    balance: Decimal
    ledger_balance: Decimal

    @property
    def consistent(self) -> bool:
        return self.balance == self.ledger_balance


def _parse_purpose(wallet_type) -> WalletPurpose:
    if isinstance(wallet_type, WalletPurpose):
        return wallet_type
    try:
        return WalletPurpose(str(wallet_type).lower())
    except ValueError:
        raise ValidationError(
            f"Unknown wallet type: {wallet_type!r}", code=error_codes.INVALID_WALLET_TYPE
        ) from None


class WalletService:
    """Owns every externally initiated balance change."""

    def __init__(
        self,
        wallet_repo: WalletRepository,
        user_repo: UserRepository,
        max_amount: Decimal | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.wallet_repo = wallet_repo
        self.user_repo = user_repo
        self.max_amount = max_amount
        self._clock = clock or (lambda: int(time.time()))

    def register_user(self, user_id: str, display_name: str, admin_level: int = ADMIN_LEVEL_NONE) -> User:
        """Create a user mirror row plus its personal, escrow and spectator wallets."""
        if not user_id or not str(user_id).strip():
            raise ValidationError("User id is required")
        if not ADMIN_LEVEL_NONE <= admin_level <= ADMIN_LEVEL_SUPER:
            raise ValidationError(f"Invalid admin level: {admin_level}")
        user = self.user_repo.add(user_id, display_name or user_id, self._clock(), admin_level)
        logger.info(f"Registered user {user_id} with wallets")
        return user

    def deposit_to_wallet(
        self,
        user_id: str,
        wallet_type,
        amount,
        kind: TransactionKind = TransactionKind.DEPOSIT,
        description: str | None = None,
    ) -> Wallet:
        """
        Credit funds from an external source into a personal or spectator wallet.

        Args:
            user_id: Wallet owner
            wallet_type: "personal" or "spectator"
            amount: Positive amount with at most two decimal places
            kind: ``deposit`` or ``crypto_deposit``
            description: Ledger description; defaults from the wallet type

        Returns:
            The wallet after the deposit
        """
        purpose = _parse_purpose(wallet_type)
        if purpose not in DEPOSITABLE_PURPOSES:
            raise ValidationError(
                "Deposits may only target the personal or spectator wallet",
                code=error_codes.INVALID_WALLET_TYPE,
            )
        if kind not in EXTERNAL_DEPOSIT_KINDS:
            raise ValidationError(f"Invalid deposit kind: {kind}")
        value = parse_amount(amount, self.max_amount)
        require_active_user(self.user_repo, user_id)

        wallet = self.wallet_repo.deposit(
            user_id,
            purpose,
            to_cents(value),
            kind,
            description or f"Deposit to {purpose.value} wallet",
            self._clock(),
        )
        logger.info(f"Deposited {value} to {purpose.value} wallet of {user_id}")
        return wallet

    def withdraw_from_wallet(self, user_id: str, amount, description: str | None = None) -> Wallet:
        """Debit the personal wallet for an external payout."""
        value = parse_amount(amount, self.max_amount)
        require_active_user(self.user_repo, user_id)
        wallet = self.wallet_repo.withdraw(
            user_id,
            WalletPurpose.PERSONAL,
            to_cents(value),
            description or "Withdrawal",
            self._clock(),
        )
        logger.info(f"Withdrew {value} from personal wallet of {user_id}")
        return wallet

    def transfer(
        self,
        from_wallet_id: str,
        to_wallet_id: str,
        amount,
        kind: TransactionKind,
        description: str,
    ) -> tuple[Wallet, Wallet]:
        value = parse_amount(amount, self.max_amount)
        result = self.wallet_repo.transfer(
            from_wallet_id, to_wallet_id, to_cents(value), kind, description, self._clock()
        )
        logger.info(f"Transferred {value} from {from_wallet_id} to {to_wallet_id} ({kind.value})")
        return result

    def get_wallets(self, user_id: str) -> list[Wallet]:
        return self.wallet_repo.get_wallets_by_owner(user_id)

    def get_wallet(self, user_id: str, wallet_type) -> Wallet:
        purpose = _parse_purpose(wallet_type)
        wallet = self.wallet_repo.get_wallet_for(user_id, purpose)
        if wallet is None:
            raise NotFoundError(
                f"No {purpose.value} wallet for {user_id}", code=error_codes.WALLET_NOT_FOUND
            )
        return wallet

    def get_transactions(self, user_id: str, limit: int | None = None) -> list[Transaction]:
        """Newest first."""
        return self.wallet_repo.get_transactions_by_owner(user_id, limit)

    def get_platform_wallet(self) -> Wallet:
        return self.wallet_repo.get_platform_wallet(self._clock())

    def audit_wallet(self, wallet_id: str) -> WalletAudit:
        """Recompute a wallet's balance from its transaction history."""
        wallet = self.wallet_repo.get_wallet(wallet_id)
        if wallet is None:
            raise NotFoundError(f"Wallet {wallet_id} not found", code=error_codes.WALLET_NOT_FOUND)
        audit = WalletAudit(
            wallet_id=wallet_id,
            balance=wallet.balance,
            ledger_balance=self.wallet_repo.get_ledger_balance(wallet_id),
        )
        if not audit.consistent:
            logger.error(
                f"Wallet {wallet_id} balance {audit.balance} does not match ledger {audit.ledger_balance}"
            )
        return audit
