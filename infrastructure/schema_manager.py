"""
Schema and migration management for SQLite database.
"""

import logging
import sqlite3

logger = logging.getLogger("escrow.schema")


class SchemaManager:
    """
    Owns schema creation and migrations.

    Call initialize() to ensure schema is present and migrations are applied.
    """

    def __init__(self, db_path: str, use_uri: bool = False):
        self.db_path = db_path
        self.use_uri = use_uri

    def initialize(self) -> None:
        """Create base schema and apply migrations."""
        logger.info(f"Initializing database schema: {self.db_path}")
        conn = self._connect()
        try:
            cursor = conn.cursor()
            self._create_base_schema(cursor)
            self._create_schema_migrations_table(cursor)
            self._run_migrations(cursor)
            conn.commit()
        finally:
            # Closing the last connection checkpoints the WAL into the main file
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, uri=self.use_uri)
        conn.row_factory = sqlite3.Row
        if not self.use_uri:  # Skip WAL for in-memory databases
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=5000")
        return conn

    def _create_base_schema(self, cursor) -> None:
        # Users (identity mirror; owned by the external identity provider)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                user_id TEXT PRIMARY KEY,
                display_name TEXT NOT NULL,
                admin_level INTEGER NOT NULL DEFAULT 0,
                suspended INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL
            )
            """
        )

        # Wallets - balance in integer cents, never negative
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS wallets (
                wallet_id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                purpose TEXT NOT NULL
                    CHECK (purpose IN ('personal', 'escrow', 'spectator', 'platform')),
                balance_cents INTEGER NOT NULL DEFAULT 0 CHECK (balance_cents >= 0),
                created_at INTEGER NOT NULL,
                UNIQUE (owner_id, purpose)
            )
            """
        )
        # Exactly one platform fee wallet system-wide
        cursor.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_wallets_single_platform "
            "ON wallets(purpose) WHERE purpose = 'platform'"
        )

        # Matches
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS matches (
                match_id TEXT PRIMARY KEY,
                game TEXT NOT NULL,
                bet_amount_cents INTEGER NOT NULL CHECK (bet_amount_cents > 0),
                status TEXT NOT NULL DEFAULT 'waiting',
                player1_id TEXT NOT NULL,
                player2_id TEXT,
                reported_winner_id TEXT,
                winner_id TEXT,
                spectator_count INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL,
                FOREIGN KEY (player1_id) REFERENCES users(user_id),
                FOREIGN KEY (player2_id) REFERENCES users(user_id)
            )
            """
        )

    # --- Migration helpers ---

    def _add_column_if_not_exists(self, cursor, table: str, column: str, column_type: str) -> None:
        try:
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
        except sqlite3.OperationalError:
            pass

    def _create_schema_migrations_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

    def _run_migrations(self, cursor) -> None:
        applied = {row["name"] for row in cursor.execute("SELECT name FROM schema_migrations")}
        for name, action in self._get_migrations():
            if name in applied:
                continue
            logger.info(f"Applying migration: {name}")
            action(cursor)
            cursor.execute(
                "INSERT INTO schema_migrations (name) VALUES (?)",
                (name,),
            )

    def _get_migrations(self):
        return [
            ("create_wallet_transactions_table", self._migration_create_wallet_transactions_table),
            ("add_wallet_transactions_append_only", self._migration_add_append_only_triggers),
            ("create_spectator_bets_table", self._migration_create_spectator_bets_table),
            ("add_match_proposal_columns", self._migration_add_match_proposal_columns),
            ("add_match_dispute_columns", self._migration_add_match_dispute_columns),
            ("add_match_settlement_columns", self._migration_add_match_settlement_columns),
            ("add_spectator_bet_payout_column", self._migration_add_spectator_bet_payout_column),
            ("add_indexes_v1", self._migration_add_indexes_v1),
        ]

    # --- Migrations ---

    def _migration_create_wallet_transactions_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS wallet_transactions (
                transaction_id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                wallet_id TEXT NOT NULL,
                kind TEXT NOT NULL,
                direction TEXT NOT NULL CHECK (direction IN ('credit', 'debit')),
                amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
                description TEXT NOT NULL,
                match_id TEXT,
                created_at INTEGER NOT NULL,
                FOREIGN KEY (wallet_id) REFERENCES wallets(wallet_id)
            )
            """
        )

    def _migration_add_append_only_triggers(self, cursor) -> None:
        """Ledger rows are never updated or deleted."""
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS wallet_transactions_no_update
            BEFORE UPDATE ON wallet_transactions
            BEGIN
                SELECT RAISE(ABORT, 'wallet_transactions is append-only');
            END
            """
        )
        cursor.execute(
            """
            CREATE TRIGGER IF NOT EXISTS wallet_transactions_no_delete
            BEFORE DELETE ON wallet_transactions
            BEGIN
                SELECT RAISE(ABORT, 'wallet_transactions is append-only');
            END
            """
        )

    def _migration_create_spectator_bets_table(self, cursor) -> None:
        """Create table for fixed-odds spectator bets."""
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS spectator_bets (
                bet_id TEXT PRIMARY KEY,
                match_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                predicted_winner_id TEXT NOT NULL,
                amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
                odds_multiplier TEXT NOT NULL DEFAULT '1.90',
                status TEXT NOT NULL DEFAULT 'pending',
                created_at INTEGER NOT NULL,
                FOREIGN KEY (match_id) REFERENCES matches(match_id),
                FOREIGN KEY (user_id) REFERENCES users(user_id)
            )
            """
        )

    def _migration_add_match_proposal_columns(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "matches", "proposed_amount_cents", "INTEGER")
        self._add_column_if_not_exists(cursor, "matches", "proposed_by_id", "TEXT")

    def _migration_add_match_dispute_columns(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "matches", "dispute_status", "TEXT NOT NULL DEFAULT 'none'")
        self._add_column_if_not_exists(cursor, "matches", "dispute_reason", "TEXT")
        self._add_column_if_not_exists(cursor, "matches", "dispute_evidence", "TEXT")
        self._add_column_if_not_exists(cursor, "matches", "dispute_raised_by_id", "TEXT")
        self._add_column_if_not_exists(cursor, "matches", "dispute_resolved_by_id", "TEXT")
        self._add_column_if_not_exists(cursor, "matches", "dispute_resolution", "TEXT")

    def _migration_add_match_settlement_columns(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "matches", "approved_at", "INTEGER")
        self._add_column_if_not_exists(cursor, "matches", "settlement_executed_at", "INTEGER")

    def _migration_add_spectator_bet_payout_column(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "spectator_bets", "payout_cents", "INTEGER")

    def _migration_add_indexes_v1(self, cursor) -> None:
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_wallet_transactions_owner "
            "ON wallet_transactions(owner_id, created_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_wallet_transactions_wallet "
            "ON wallet_transactions(wallet_id)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_matches_settlement "
            "ON matches(status, dispute_status, settlement_executed_at, approved_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_matches_players "
            "ON matches(player1_id, player2_id)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_spectator_bets_match "
            "ON spectator_bets(match_id, status)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_spectator_bets_user "
            "ON spectator_bets(user_id)"
        )
