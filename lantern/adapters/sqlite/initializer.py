"""SQLite database initializer adapter.

Implements the DatabaseInitializer port using SQLite.
"""

import logging
from pathlib import Path

from lantern.adapters.sqlite.schema import SCHEMA_VERSION, check_schema_version
from lantern.adapters.sqlite.schema import init_database as sqlite_init_database

logger = logging.getLogger(__name__)


class SqliteDatabaseInitializer:
    """SQLite implementation of DatabaseInitializer port."""

    def init_database(self, db_path: Path) -> None:
        """Create the sync state schema, or verify an existing one.

        Args:
            db_path: Path to the SQLite database file.

        Raises:
            sqlite3.Error: If database creation fails.
            RuntimeError: If the database was created by a newer schema.
        """
        existing = check_schema_version(db_path)
        if existing > SCHEMA_VERSION:
            raise RuntimeError(
                f"State database {db_path} has schema version {existing}, "
                f"this lantern supports up to {SCHEMA_VERSION}"
            )
        sqlite_init_database(db_path)
        logger.debug("Initialized sync state database at %s", db_path)
