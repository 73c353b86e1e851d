import sqlite3

import pytest

from infrastructure.schema_manager import SchemaManager


def test_schema_manager_initializes_tables(tmp_path):
    """Test that SchemaManager creates all required tables."""
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()

    with sqlite3.connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in cursor.fetchall()}

    required = {
        "users",
        "wallets",
        "matches",
        "spectator_bets",
        "wallet_transactions",
        "schema_migrations",
    }
    assert required.issubset(tables)


def test_initialize_is_idempotent(tmp_path):
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()
    SchemaManager(db_path).initialize()

    with sqlite3.connect(db_path) as conn:
        names = [row[0] for row in conn.execute("SELECT name FROM schema_migrations")]
    assert len(names) == len(set(names))
    assert "add_wallet_transactions_append_only" in names


def test_match_columns_added_by_migrations(tmp_path):
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()

    with sqlite3.connect(db_path) as conn:
        columns = {row[1] for row in conn.execute("PRAGMA table_info(matches)")}
    assert {
        "proposed_amount_cents",
        "proposed_by_id",
        "dispute_status",
        "dispute_reason",
        "approved_at",
        "settlement_executed_at",
    }.issubset(columns)


def _seed_wallet(conn):
    conn.execute(
        "INSERT INTO wallets (wallet_id, owner_id, purpose, balance_cents, created_at) "
        "VALUES ('w1', 'u1', 'personal', 100, 0)"
    )
    conn.execute(
        "INSERT INTO wallet_transactions (transaction_id, owner_id, wallet_id, kind, direction, "
        "amount_cents, description, created_at) "
        "VALUES ('t1', 'u1', 'w1', 'deposit', 'credit', 100, 'seed', 0)"
    )


def test_transactions_are_append_only(tmp_path):
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()

    conn = sqlite3.connect(db_path)
    try:
        _seed_wallet(conn)
        conn.commit()
        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            conn.execute("UPDATE wallet_transactions SET amount_cents = 1")
        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            conn.execute("DELETE FROM wallet_transactions")
    finally:
        conn.close()


def test_balance_cannot_go_negative_and_platform_wallet_is_unique(tmp_path):
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()

    conn = sqlite3.connect(db_path)
    try:
        _seed_wallet(conn)
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("UPDATE wallets SET balance_cents = -1 WHERE wallet_id = 'w1'")
        conn.execute(
            "INSERT INTO wallets (wallet_id, owner_id, purpose, balance_cents, created_at) "
            "VALUES ('p1', 'platform', 'platform', 0, 0)"
        )
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO wallets (wallet_id, owner_id, purpose, balance_cents, created_at) "
                "VALUES ('p2', 'someone-else', 'platform', 0, 0)"
            )
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO wallets (wallet_id, owner_id, purpose, balance_cents, created_at) "
                "VALUES ('w2', 'u1', 'personal', 0, 0)"
            )
    finally:
        conn.close()
