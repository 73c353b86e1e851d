"""
Repository for the users mirror table.
"""

from __future__ import annotations

import sqlite3

from domain.models.user import ADMIN_LEVEL_NONE, User
from domain.models.wallet import USER_WALLET_PURPOSES
from repositories.interfaces import IUserRepository
from repositories.ledger_repository import LedgerRepository
from services import error_codes
from services.errors import PreconditionError


class UserRepository(LedgerRepository, IUserRepository):
    """Handles CRUD operations for the users table."""

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            user_id=row["user_id"],
            display_name=row["display_name"],
            admin_level=row["admin_level"],
            suspended=bool(row["suspended"]),
            created_at=row["created_at"],
        )

    def add(
        self,
        user_id: str,
        display_name: str,
        now: int,
        admin_level: int = ADMIN_LEVEL_NONE,
    ) -> User:
        """
        Register a user together with its personal, escrow and spectator wallets.

        Raises:
            PreconditionError: If the user already exists
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM users WHERE user_id = ?", (user_id,))
            if cursor.fetchone():
                raise PreconditionError(
                    f"User {user_id} already exists", code=error_codes.USER_ALREADY_EXISTS
                )
            cursor.execute(
                """
                INSERT INTO users (user_id, display_name, admin_level, suspended, created_at)
                VALUES (?, ?, ?, 0, ?)
                """,
                (user_id, display_name, admin_level, now),
            )
            for purpose in USER_WALLET_PURPOSES:
                self._create_wallet(cursor, user_id, purpose, now)
        return User(user_id=user_id, display_name=display_name, admin_level=admin_level, created_at=now)

    def get_by_id(self, user_id: str) -> User | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users WHERE user_id = ?", (user_id,))
            row = cursor.fetchone()
            return self._row_to_user(row) if row else None

    def exists(self, user_id: str) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM users WHERE user_id = ?", (user_id,))
            return cursor.fetchone() is not None

    def set_admin_level(self, user_id: str, admin_level: int) -> None:
        with self.connection() as conn:
            conn.execute(
                "UPDATE users SET admin_level = ? WHERE user_id = ?",
                (admin_level, user_id),
            )

    def set_suspended(self, user_id: str, suspended: bool) -> None:
        with self.connection() as conn:
            conn.execute(
                "UPDATE users SET suspended = ? WHERE user_id = ?",
                (1 if suspended else 0, user_id),
            )
