"""
Repository for wallets and the append-only transaction log.
"""

from __future__ import annotations

from domain.models.wallet import Direction, Transaction, TransactionKind, Wallet, WalletPurpose
from repositories.interfaces import IWalletRepository
from repositories.ledger_repository import LedgerRepository
from services.errors import NotFoundError
from utils.money import from_cents


class WalletRepository(LedgerRepository, IWalletRepository):
    """
    Handles reads and one-sided/two-sided balance changes for the wallets table.

    Amounts crossing this boundary are integer cents.
    """

    def get_wallet(self, wallet_id: str) -> Wallet | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM wallets WHERE wallet_id = ?", (wallet_id,))
            row = cursor.fetchone()
            return self._row_to_wallet(row) if row else None

    def get_wallet_for(self, owner_id: str, purpose: WalletPurpose) -> Wallet | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            try:
                row = self._get_wallet_row(cursor, owner_id, purpose)
            except NotFoundError:
                return None
            return self._row_to_wallet(row)

    def get_wallets_by_owner(self, owner_id: str) -> list[Wallet]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM wallets
                WHERE owner_id = ? AND purpose != 'platform'
                ORDER BY CASE purpose
                    WHEN 'personal' THEN 0 WHEN 'escrow' THEN 1 ELSE 2 END
                """,
                (owner_id,),
            )
            return [self._row_to_wallet(row) for row in cursor.fetchall()]

    def get_platform_wallet(self, now: int) -> Wallet:
        """Return the platform fee wallet, creating it if it does not exist yet."""
        with self.atomic_transaction() as conn:
            row = self._ensure_platform_wallet(conn.cursor(), now)
            return self._row_to_wallet(row)

    def deposit(
        self,
        owner_id: str,
        purpose: WalletPurpose,
        amount_cents: int,
        kind: TransactionKind,
        description: str,
        now: int,
    ) -> Wallet:
        """Atomically credit a wallet and record the ledger entry."""
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            row = self._get_wallet_row(cursor, owner_id, purpose)
            self._credit(cursor, row, amount_cents, kind, description, now)
            return self._row_to_wallet(self._get_wallet_row(cursor, owner_id, purpose))

    def withdraw(
        self,
        owner_id: str,
        purpose: WalletPurpose,
        amount_cents: int,
        description: str,
        now: int,
    ) -> Wallet:
        """
        Atomically debit a wallet.

        Raises:
            InsufficientFundsError: If amount exceeds the balance
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            row = self._get_wallet_row(cursor, owner_id, purpose)
            self._debit(cursor, row, amount_cents, TransactionKind.WITHDRAWAL, description, now)
            return self._row_to_wallet(self._get_wallet_row(cursor, owner_id, purpose))

    def transfer(
        self,
        from_wallet_id: str,
        to_wallet_id: str,
        amount_cents: int,
        kind: TransactionKind,
        description: str,
        now: int,
    ) -> tuple[Wallet, Wallet]:
        """
        Atomically move funds between two wallets.

        Returns:
            (source wallet, destination wallet) after the transfer
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            from_row = self._get_wallet_row_by_id(cursor, from_wallet_id)
            to_row = self._get_wallet_row_by_id(cursor, to_wallet_id)
            self._move(cursor, from_row, to_row, amount_cents, kind, description, now)
            return (
                self._row_to_wallet(self._get_wallet_row_by_id(cursor, from_wallet_id)),
                self._row_to_wallet(self._get_wallet_row_by_id(cursor, to_wallet_id)),
            )

    def _get_wallet_row_by_id(self, cursor, wallet_id: str):
        cursor.execute("SELECT * FROM wallets WHERE wallet_id = ?", (wallet_id,))
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError(f"Wallet {wallet_id} not found")
        return row

    # --- Transaction log ---

    def get_transactions_by_owner(self, owner_id: str, limit: int | None = None) -> list[Transaction]:
        """Newest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            query = """
                SELECT * FROM wallet_transactions
                WHERE owner_id = ?
                ORDER BY created_at DESC, rowid DESC
            """
            params: tuple = (owner_id,)
            if limit is not None:
                query += " LIMIT ?"
                params = (owner_id, limit)
            cursor.execute(query, params)
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def get_transactions_by_wallet(self, wallet_id: str) -> list[Transaction]:
        """Oldest first, in write order."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM wallet_transactions WHERE wallet_id = ? ORDER BY rowid ASC",
                (wallet_id,),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def get_transactions_by_match(self, match_id: str) -> list[Transaction]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM wallet_transactions WHERE match_id = ? ORDER BY rowid ASC",
                (match_id,),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def get_ledger_balance(self, wallet_id: str):
        """Balance implied by the wallet's transaction history."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COALESCE(SUM(CASE WHEN direction = ? THEN amount_cents
                                         ELSE -amount_cents END), 0) AS net
                FROM wallet_transactions
                WHERE wallet_id = ?
                """,
                (Direction.CREDIT.value, wallet_id),
            )
            return from_cents(cursor.fetchone()["net"])
