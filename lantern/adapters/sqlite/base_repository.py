"""Base class for SQLite repository adapters.

Provides lazy connection handling, a write-serializing transaction helper and
the context manager protocol for the SQLite-backed sync state store.
"""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Self

from lantern.ports.repositories import SyncStateError

# Milliseconds SQLite waits on a locked database before failing a statement.
BUSY_TIMEOUT_MS = 5000


class SQLiteBaseRepository:
    """Base class providing SQLite connection management.

    Thread Safety:
        The connection is created lazily with double-checked locking and
        opened with check_same_thread=False, since event handlers, bulk syncs
        and the index timeout wrapper's worker may touch the same store.
        Writes go through _transaction(), which holds a per-repository lock
        so that read-modify-write sequences are not interleaved.

    Errors:
        sqlite3.Error raised inside _transaction() or _query() is re-raised
        as SyncStateError, so callers can tell persistence failures apart
        from index failures.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._conn_lock = threading.Lock()
        self._write_lock = threading.RLock()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection, creating one if needed.

        Returns:
            SQLite connection object.
        """
        if self._conn is None:
            with self._conn_lock:
                # Re-check after acquiring the lock
                if self._conn is None:
                    conn = sqlite3.connect(self.db_path, check_same_thread=False)
                    conn.execute(f"PRAGMA busy_timeout = {BUSY_TIMEOUT_MS}")
                    self._conn = conn
        return self._conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """Run statements in one committed transaction.

        Rolls back on any error. sqlite3.Error becomes SyncStateError.

        Yields:
            Cursor on the shared connection.
        """
        with self._write_lock:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                yield cursor
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise SyncStateError(f"Failed to write sync state: {e}") from e
            except BaseException:
                conn.rollback()
                raise

    def _query(self, sql: str, params: tuple = ()) -> list[tuple]:
        """Run a read-only query and return all rows."""
        try:
            return self._get_connection().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise SyncStateError(f"Failed to read sync state: {e}") from e

    def close(self) -> None:
        """Close the database connection if open.

        Safe to call multiple times; the next access reconnects.
        """
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        """Exit context manager, closing the database connection."""
        self.close()
        return False
