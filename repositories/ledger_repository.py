"""
Cursor-level wallet ledger primitives shared by every repository that moves money.

All helpers here run inside a caller-owned transaction (normally opened with
``atomic_transaction()``), so a transition that touches several wallets plus
its own table commits or rolls back as one unit. Every balance change writes
exactly one ``wallet_transactions`` row.
"""

from __future__ import annotations

import sqlite3
import uuid

import config
from domain.models.wallet import Direction, Transaction, TransactionKind, Wallet, WalletPurpose
from repositories.base_repository import BaseRepository
from services.errors import InsufficientFundsError, NotFoundError, ValidationError
from utils.money import from_cents


class LedgerRepository(BaseRepository):
    """Base for repositories whose writes include wallet balance changes."""

    def __init__(self, db_path: str, platform_owner_id: str | None = None):
        super().__init__(db_path)
        self.platform_owner_id = platform_owner_id or config.PLATFORM_OWNER_ID

    # --- Row mapping ---

    @staticmethod
    def _row_to_wallet(row: sqlite3.Row) -> Wallet:
        return Wallet(
            wallet_id=row["wallet_id"],
            owner_id=row["owner_id"],
            purpose=WalletPurpose(row["purpose"]),
            balance=from_cents(row["balance_cents"]),
        )

    @staticmethod
    def _row_to_transaction(row: sqlite3.Row) -> Transaction:
        return Transaction(
            transaction_id=row["transaction_id"],
            owner_id=row["owner_id"],
            wallet_id=row["wallet_id"],
            kind=TransactionKind(row["kind"]),
            direction=Direction(row["direction"]),
            amount=from_cents(row["amount_cents"]),
            description=row["description"],
            match_id=row["match_id"],
            created_at=row["created_at"],
        )

    # --- Wallet lookup / creation ---

    def _create_wallet(self, cursor, owner_id: str, purpose: WalletPurpose, now: int) -> str:
        wallet_id = str(uuid.uuid4())
        cursor.execute(
            """
            INSERT INTO wallets (wallet_id, owner_id, purpose, balance_cents, created_at)
            VALUES (?, ?, ?, 0, ?)
            """,
            (wallet_id, owner_id, purpose.value, now),
        )
        return wallet_id

    def _get_wallet_row(self, cursor, owner_id: str, purpose: WalletPurpose) -> sqlite3.Row:
        if purpose == WalletPurpose.PLATFORM:
            cursor.execute("SELECT * FROM wallets WHERE purpose = 'platform'")
        else:
            cursor.execute(
                "SELECT * FROM wallets WHERE owner_id = ? AND purpose = ?",
                (owner_id, purpose.value),
            )
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError(f"No {purpose.value} wallet for {owner_id}")
        return row

    def _ensure_platform_wallet(self, cursor, now: int) -> sqlite3.Row:
        """Fetch the single platform wallet, creating it on first use."""
        cursor.execute("SELECT * FROM wallets WHERE purpose = 'platform'")
        row = cursor.fetchone()
        if row is not None:
            return row
        self._create_wallet(cursor, self.platform_owner_id, WalletPurpose.PLATFORM, now)
        cursor.execute("SELECT * FROM wallets WHERE purpose = 'platform'")
        return cursor.fetchone()

    # --- Balance changes ---

    def _record_transaction(
        self,
        cursor,
        wallet_row: sqlite3.Row,
        kind: TransactionKind,
        direction: Direction,
        amount_cents: int,
        description: str,
        match_id: str | None,
        now: int,
    ) -> str:
        transaction_id = str(uuid.uuid4())
        cursor.execute(
            """
            INSERT INTO wallet_transactions
            (transaction_id, owner_id, wallet_id, kind, direction, amount_cents,
             description, match_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transaction_id,
                wallet_row["owner_id"],
                wallet_row["wallet_id"],
                kind.value,
                direction.value,
                amount_cents,
                description,
                match_id,
                now,
            ),
        )
        return transaction_id

    def _credit(
        self,
        cursor,
        wallet_row: sqlite3.Row,
        amount_cents: int,
        kind: TransactionKind,
        description: str,
        now: int,
        match_id: str | None = None,
    ) -> None:
        if amount_cents <= 0:
            raise ValidationError(f"Credit amount must be positive, got {amount_cents}")
        cursor.execute(
            "UPDATE wallets SET balance_cents = balance_cents + ? WHERE wallet_id = ?",
            (amount_cents, wallet_row["wallet_id"]),
        )
        self._record_transaction(
            cursor, wallet_row, kind, Direction.CREDIT, amount_cents, description, match_id, now
        )

    def _debit(
        self,
        cursor,
        wallet_row: sqlite3.Row,
        amount_cents: int,
        kind: TransactionKind,
        description: str,
        now: int,
        match_id: str | None = None,
    ) -> None:
        """Debit a wallet, failing without effect if it would go negative."""
        if amount_cents <= 0:
            raise ValidationError(f"Debit amount must be positive, got {amount_cents}")
        cursor.execute(
            """
            UPDATE wallets
            SET balance_cents = balance_cents - ?
            WHERE wallet_id = ? AND balance_cents >= ?
            """,
            (amount_cents, wallet_row["wallet_id"], amount_cents),
        )
        if cursor.rowcount == 0:
            cursor.execute(
                "SELECT balance_cents FROM wallets WHERE wallet_id = ?",
                (wallet_row["wallet_id"],),
            )
            current = cursor.fetchone()
            available = from_cents(current["balance_cents"]) if current else from_cents(0)
            raise InsufficientFundsError(
                f"Insufficient funds in {wallet_row['purpose']} wallet: "
                f"have {available}, need {from_cents(amount_cents)}"
            )
        self._record_transaction(
            cursor, wallet_row, kind, Direction.DEBIT, amount_cents, description, match_id, now
        )

    def _move(
        self,
        cursor,
        from_row: sqlite3.Row,
        to_row: sqlite3.Row,
        amount_cents: int,
        kind: TransactionKind,
        description: str,
        now: int,
        match_id: str | None = None,
    ) -> None:
        """Debit one wallet and credit another; one ledger row for each side."""
        if from_row["wallet_id"] == to_row["wallet_id"]:
            raise ValidationError("Cannot transfer a wallet to itself")
        self._debit(cursor, from_row, amount_cents, kind, description, now, match_id)
        self._credit(cursor, to_row, amount_cents, kind, description, now, match_id)

    def _move_between_own_wallets(
        self,
        cursor,
        owner_id: str,
        from_purpose: WalletPurpose,
        to_purpose: WalletPurpose,
        amount_cents: int,
        kind: TransactionKind,
        description: str,
        now: int,
        match_id: str | None = None,
    ) -> None:
        from_row = self._get_wallet_row(cursor, owner_id, from_purpose)
        to_row = self._get_wallet_row(cursor, owner_id, to_purpose)
        self._move(cursor, from_row, to_row, amount_cents, kind, description, now, match_id)
