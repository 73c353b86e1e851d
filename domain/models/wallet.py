"""
Wallet and ledger transaction domain models.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class WalletPurpose(str, Enum):
    """What a wallet holds. One wallet per (owner, purpose)."""

    PERSONAL = "personal"
    ESCROW = "escrow"
    SPECTATOR = "spectator"
    PLATFORM = "platform"  # single shared fee wallet


USER_WALLET_PURPOSES = (WalletPurpose.PERSONAL, WalletPurpose.ESCROW, WalletPurpose.SPECTATOR)

# Purposes an external funding source may deposit into
DEPOSITABLE_PURPOSES = (WalletPurpose.PERSONAL, WalletPurpose.SPECTATOR)


class TransactionKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    BET = "bet"
    WINNINGS = "winnings"
    ESCROW = "escrow"
    REFUND = "refund"
    PLATFORM_FEE = "platform_fee"
    CRYPTO_DEPOSIT = "crypto_deposit"


class Direction(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


@dataclass
class Wallet:
    wallet_id: str
    owner_id: str
    purpose: WalletPurpose
    balance: Decimal


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger entry.

    ``amount`` is always positive; ``direction`` says which way the wallet
    balance moved.
    """

    transaction_id: str
    owner_id: str
    wallet_id: str
    kind: TransactionKind
    direction: Direction
    amount: Decimal
    description: str
    match_id: str | None
    created_at: int

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.direction == Direction.CREDIT else -self.amount
