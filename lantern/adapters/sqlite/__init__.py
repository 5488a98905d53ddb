"""SQLite adapters for lantern sync state storage."""

from .base_repository import SQLiteBaseRepository
from .initializer import SqliteDatabaseInitializer
from .schema import check_schema_version, init_database
from .sync_state_repository import SQLiteSyncStateStore

__all__ = [
    "SQLiteBaseRepository",
    "SQLiteSyncStateStore",
    "SqliteDatabaseInitializer",
    "init_database",
    "check_schema_version",
]
