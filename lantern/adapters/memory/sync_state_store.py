"""In-memory adapter implementing the SyncStateStore protocol.

Holds everything in dictionaries guarded by a single lock. Suitable for tests
and single-process deployments that can afford to lose progress on restart.
"""

import threading
from dataclasses import dataclass
from datetime import datetime

from lantern.domain.entities import SyncCursor


@dataclass
class _ItemState:
    marked: bool = False
    document_id: str | None = None
    last_synced: datetime | None = None


class InMemorySyncStateStore:
    """Dictionary-backed SyncStateStore."""

    def __init__(self) -> None:
        self._cursors: dict[int, SyncCursor] = {}
        self._items: dict[tuple[int, int], _ItemState] = {}
        self._lock = threading.Lock()

    def get_sync_status(self, tenant_id: int) -> SyncCursor:
        with self._lock:
            return self._cursors.get(tenant_id, SyncCursor())

    def update_sync_status(self, cursor: SyncCursor, tenant_id: int) -> bool:
        with self._lock:
            self._cursors[tenant_id] = cursor
        return True

    def reset_sync_cursor(self, tenant_id: int) -> None:
        with self._lock:
            self._cursors.pop(tenant_id, None)

    def list_sync_statuses(self) -> dict[int, SyncCursor]:
        with self._lock:
            return dict(sorted(self._cursors.items()))

    def _item(self, item_id: int, tenant_id: int) -> _ItemState:
        # Caller holds the lock
        return self._items.setdefault((item_id, tenant_id), _ItemState())

    def is_marked(self, item_id: int, tenant_id: int) -> bool:
        with self._lock:
            state = self._items.get((item_id, tenant_id))
            return state is not None and state.marked

    def set_marked(self, item_id: int, tenant_id: int) -> bool:
        with self._lock:
            state = self._item(item_id, tenant_id)
            if state.marked:
                return False
            state.marked = True
            return True

    def mark_synced(
        self, item_id: int, tenant_id: int, document_id: str, when: datetime
    ) -> bool:
        with self._lock:
            state = self._item(item_id, tenant_id)
            newly_marked = not state.marked
            state.marked = True
            state.document_id = document_id
            state.last_synced = when
            return newly_marked

    def clear_marked(self, item_id: int, tenant_id: int) -> None:
        with self._lock:
            self._items.pop((item_id, tenant_id), None)

    def get_document_id(self, item_id: int, tenant_id: int) -> str | None:
        with self._lock:
            state = self._items.get((item_id, tenant_id))
            return state.document_id if state else None

    def set_document_id(self, item_id: int, tenant_id: int, document_id: str) -> None:
        with self._lock:
            self._item(item_id, tenant_id).document_id = document_id

    def get_last_synced(self, item_id: int, tenant_id: int) -> datetime | None:
        with self._lock:
            state = self._items.get((item_id, tenant_id))
            return state.last_synced if state else None

    def touch_last_synced(self, item_id: int, tenant_id: int, when: datetime) -> None:
        with self._lock:
            self._item(item_id, tenant_id).last_synced = when

    def count_marked(self, tenant_id: int) -> int:
        with self._lock:
            return sum(
                1
                for (_, item_tenant), state in self._items.items()
                if item_tenant == tenant_id and state.marked
            )

    def close(self) -> None:
        """Nothing to release; state lives as long as the store object."""
