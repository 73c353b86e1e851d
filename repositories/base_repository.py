"""
SQLite connection handling shared by every escrow repository.
"""

import logging
import sqlite3
from abc import ABC
from contextlib import contextmanager

from database import Database
from services.errors import StorageBusyError

logger = logging.getLogger("escrow.repositories")


class BaseRepository(ABC):
    """
    Owns the database path and hands out short-lived connections.

    Each call opens its own connection, so repositories are safe to share
    between threads; SQLite's write lock does the serializing.
    """

    # Milliseconds a writer waits for the lock before raising "database is locked"
    BUSY_TIMEOUT_MS = 5000

    # DB paths whose schema has been created or migrated in this process
    _schema_initialized_paths: set[str] = set()

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._use_uri = db_path.startswith("file:")
        if db_path not in BaseRepository._schema_initialized_paths:
            Database(db_path)
            BaseRepository._schema_initialized_paths.add(db_path)

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.BUSY_TIMEOUT_MS / 1000,
            uri=self._use_uri,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={self.BUSY_TIMEOUT_MS}")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _session(self, begin: str | None):
        conn = self.get_connection()
        try:
            if begin:
                conn.execute(begin)
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            conn.rollback()
            if "locked" in str(e) or "busy" in str(e):
                logger.warning(f"Write lock on {self.db_path} not acquired: {e}")
                raise StorageBusyError("Database is busy, try again") from e
            raise
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def connection(self):
        """
        Plain connection for reads and single-statement writes.

        Commits on success, rolls back on exception, always closes.
        """
        with self._session(None) as conn:
            yield conn

    @contextmanager
    def atomic_transaction(self):
        """
        Connection inside a ``BEGIN IMMEDIATE`` transaction.

        The write lock is taken before any row is read, so the rows a
        transition validates cannot change underneath it. Two racing
        transitions on the same match serialize here and the second one
        re-reads the state the first one committed.

        Usage:
            with self.atomic_transaction() as conn:
                cursor = conn.cursor()
                cursor.execute(...)
        """
        with self._session("BEGIN IMMEDIATE") as conn:
            yield conn

    @contextmanager
    def cursor(self):
        with self.connection() as conn:
            yield conn.cursor()
