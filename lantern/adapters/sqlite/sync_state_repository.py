"""SQLite adapter implementing the SyncStateStore protocol."""

from datetime import datetime
from pathlib import Path

from lantern.adapters.sqlite.base_repository import SQLiteBaseRepository
from lantern.domain.entities import SyncCursor


def _to_text(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_text(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteSyncStateStore(SQLiteBaseRepository):
    """SQLite implementation of SyncStateStore.

    Expects a database initialized with schema.init_database().
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file.
        """
        super().__init__(db_path)

    # Cursors

    def get_sync_status(self, tenant_id: int) -> SyncCursor:
        rows = self._query(
            "SELECT start_time, posts_processed FROM sync_cursors WHERE tenant_id = ?",
            (tenant_id,),
        )
        if not rows:
            return SyncCursor()
        start_time, posts_processed = rows[0]
        return SyncCursor(start_time=_from_text(start_time), posts_processed=posts_processed)

    def update_sync_status(self, cursor: SyncCursor, tenant_id: int) -> bool:
        """Persist a tenant's cursor.

        Uses UPSERT semantics - inserts if the tenant has no cursor yet,
        updates otherwise.

        Returns:
            True if a row was written.
        """
        with self._transaction() as cur:
            cur.execute(
                """
                INSERT INTO sync_cursors (tenant_id, start_time, posts_processed)
                VALUES (?, ?, ?)
                ON CONFLICT(tenant_id) DO UPDATE SET
                    start_time = excluded.start_time,
                    posts_processed = excluded.posts_processed
                """,
                (tenant_id, _to_text(cursor.start_time), cursor.posts_processed),
            )
            return cur.rowcount > 0

    def reset_sync_cursor(self, tenant_id: int) -> None:
        with self._transaction() as cur:
            cur.execute("DELETE FROM sync_cursors WHERE tenant_id = ?", (tenant_id,))

    def list_sync_statuses(self) -> dict[int, SyncCursor]:
        rows = self._query(
            "SELECT tenant_id, start_time, posts_processed FROM sync_cursors "
            "ORDER BY tenant_id"
        )
        return {
            tenant_id: SyncCursor(
                start_time=_from_text(start_time), posts_processed=posts_processed
            )
            for tenant_id, start_time, posts_processed in rows
        }

    # Markers

    def is_marked(self, item_id: int, tenant_id: int) -> bool:
        rows = self._query(
            "SELECT 1 FROM sync_markers WHERE item_id = ? AND tenant_id = ? AND marked = 1",
            (item_id, tenant_id),
        )
        return bool(rows)

    def set_marked(self, item_id: int, tenant_id: int) -> bool:
        """Mark an item as synced (compare-and-set).

        Returns:
            True if this call flipped the marker, False if it was already set.
        """
        with self._transaction() as cur:
            cur.execute(
                "INSERT OR IGNORE INTO sync_markers (item_id, tenant_id) VALUES (?, ?)",
                (item_id, tenant_id),
            )
            cur.execute(
                "UPDATE sync_markers SET marked = 1 "
                "WHERE item_id = ? AND tenant_id = ? AND marked = 0",
                (item_id, tenant_id),
            )
            return cur.rowcount == 1

    def mark_synced(
        self, item_id: int, tenant_id: int, document_id: str, when: datetime
    ) -> bool:
        """Set the marker, document id and last-synced time in one transaction.

        Returns:
            True if this call flipped the marker, False if it was already set.
        """
        with self._transaction() as cur:
            cur.execute(
                "INSERT OR IGNORE INTO sync_markers (item_id, tenant_id) VALUES (?, ?)",
                (item_id, tenant_id),
            )
            cur.execute(
                "UPDATE sync_markers SET marked = 1 "
                "WHERE item_id = ? AND tenant_id = ? AND marked = 0",
                (item_id, tenant_id),
            )
            newly_marked = cur.rowcount == 1
            cur.execute(
                "UPDATE sync_markers SET document_id = ?, last_synced = ? "
                "WHERE item_id = ? AND tenant_id = ?",
                (document_id, _to_text(when), item_id, tenant_id),
            )
            return newly_marked

    def clear_marked(self, item_id: int, tenant_id: int) -> None:
        with self._transaction() as cur:
            cur.execute(
                "DELETE FROM sync_markers WHERE item_id = ? AND tenant_id = ?",
                (item_id, tenant_id),
            )

    def get_document_id(self, item_id: int, tenant_id: int) -> str | None:
        rows = self._query(
            "SELECT document_id FROM sync_markers WHERE item_id = ? AND tenant_id = ?",
            (item_id, tenant_id),
        )
        return rows[0][0] if rows else None

    def set_document_id(self, item_id: int, tenant_id: int, document_id: str) -> None:
        with self._transaction() as cur:
            cur.execute(
                """
                INSERT INTO sync_markers (item_id, tenant_id, document_id)
                VALUES (?, ?, ?)
                ON CONFLICT(item_id, tenant_id) DO UPDATE SET
                    document_id = excluded.document_id
                """,
                (item_id, tenant_id, document_id),
            )

    def get_last_synced(self, item_id: int, tenant_id: int) -> datetime | None:
        rows = self._query(
            "SELECT last_synced FROM sync_markers WHERE item_id = ? AND tenant_id = ?",
            (item_id, tenant_id),
        )
        return _from_text(rows[0][0]) if rows else None

    def touch_last_synced(self, item_id: int, tenant_id: int, when: datetime) -> None:
        with self._transaction() as cur:
            cur.execute(
                """
                INSERT INTO sync_markers (item_id, tenant_id, last_synced)
                VALUES (?, ?, ?)
                ON CONFLICT(item_id, tenant_id) DO UPDATE SET
                    last_synced = excluded.last_synced
                """,
                (item_id, tenant_id, _to_text(when)),
            )

    def count_marked(self, tenant_id: int) -> int:
        """Count items marked as synced for a tenant."""
        rows = self._query(
            "SELECT COUNT(*) FROM sync_markers WHERE tenant_id = ? AND marked = 1",
            (tenant_id,),
        )
        return rows[0][0]
