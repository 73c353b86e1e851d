"""
Database bootstrap.

``Database(db_path)`` makes sure the schema exists and all migrations have
been applied for the given SQLite file.
"""

import logging

from infrastructure.schema_manager import SchemaManager

logger = logging.getLogger("escrow.database")


class Database:
    """Handle to an initialized SQLite database file."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._use_uri = db_path.startswith("file:")
        SchemaManager(db_path, use_uri=self._use_uri).initialize()
        logger.debug(f"Database ready at {db_path}")
