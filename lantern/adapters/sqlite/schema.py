"""SQLite database schema for lantern sync state.

Tables:
- sync_cursors: Bulk-sync progress per tenant
- sync_markers: Per (item, tenant) sync facts: marker, stored document id and
  last-synced time
- meta: System metadata (schema version, creation time)
"""

import sqlite3
from pathlib import Path

# Schema version for migrations
SCHEMA_VERSION = 1


def init_database(db_path: Path) -> None:
    """Initialize a new lantern state database with complete schema.

    Safe to run against an existing database; every statement is idempotent.

    Args:
        db_path: Path to the SQLite database file (typically .lantern/state.db)

    Raises:
        sqlite3.Error: If database creation fails
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        _create_tables(conn)
        _create_indexes(conn)
        _insert_default_meta(conn)
        conn.commit()
    finally:
        conn.close()


def _create_tables(conn: sqlite3.Connection) -> None:
    """Create all database tables.

    Args:
        conn: Open SQLite connection
    """
    cursor = conn.cursor()

    # start_time is an ISO-8601 UTC timestamp, NULL when nothing is scheduled
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS sync_cursors (
            tenant_id INTEGER PRIMARY KEY,
            start_time TEXT,
            posts_processed INTEGER NOT NULL DEFAULT 0
                CHECK (posts_processed >= 0)
        )
    """)

    # A row with marked = 1 is the "already synced" fact for (item, tenant).
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS sync_markers (
            item_id INTEGER NOT NULL,
            tenant_id INTEGER NOT NULL,
            marked INTEGER NOT NULL DEFAULT 0,
            document_id TEXT,
            last_synced TEXT,
            PRIMARY KEY (item_id, tenant_id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)


def _create_indexes(conn: sqlite3.Connection) -> None:
    """Create database indexes for query performance.

    Args:
        conn: Open SQLite connection
    """
    cursor = conn.cursor()

    # Per-tenant marker scans (status reporting)
    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_sync_markers_tenant
        ON sync_markers(tenant_id) WHERE marked = 1
    """)


def _insert_default_meta(conn: sqlite3.Connection) -> None:
    """Insert default metadata entries.

    Args:
        conn: Open SQLite connection
    """
    cursor = conn.cursor()

    cursor.execute(
        """
        INSERT OR IGNORE INTO meta (key, value) VALUES
        ('schema_version', ?),
        ('created_at', datetime('now'))
    """,
        (str(SCHEMA_VERSION),),
    )


def check_schema_version(db_path: Path) -> int:
    """Check the schema version of an existing database.

    Args:
        db_path: Path to the SQLite database

    Returns:
        Schema version number (0 if database doesn't exist or has no version)
    """
    if not db_path.exists():
        return 0

    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM meta WHERE key = 'schema_version'")
        row = cursor.fetchone()
        return int(row[0]) if row else 0
    except sqlite3.Error:
        return 0
    finally:
        conn.close()
