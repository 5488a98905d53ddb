"""Repository port interfaces for sync state persistence.

These protocols define abstract interfaces for storing bulk-sync cursors and
per-item sync facts. Implementations should be in adapters/ layer.
"""

from datetime import datetime
from typing import Protocol

from lantern.domain.entities import SyncCursor


class SyncStateError(Exception):
    """Raised by store adapters when sync state cannot be read or written.

    Callers must not swallow this error: a lost cursor or marker write breaks
    bulk-sync resumability.
    """


class SyncStateStore(Protocol):
    """Store for per-tenant cursors and per-(item, tenant) sync facts.

    Tenant ids are always resolved by the caller before reaching the store.
    """

    def get_sync_status(self, tenant_id: int) -> SyncCursor:
        """Get the bulk-sync cursor of a tenant.

        Args:
            tenant_id: The tenant.

        Returns:
            The stored cursor, or an unscheduled cursor at offset 0.
        """
        ...

    def update_sync_status(self, cursor: SyncCursor, tenant_id: int) -> bool:
        """Persist a tenant's cursor.

        Args:
            cursor: The cursor to store. Uses UPSERT semantics.
            tenant_id: The tenant.

        Returns:
            True if the cursor was written.
        """
        ...

    def reset_sync_cursor(self, tenant_id: int) -> None:
        """Clear a tenant's cursor (no start time, offset 0)."""
        ...

    def list_sync_statuses(self) -> dict[int, SyncCursor]:
        """Return every stored cursor keyed by tenant id."""
        ...

    def is_marked(self, item_id: int, tenant_id: int) -> bool:
        """Check whether an item has an index document for a tenant."""
        ...

    def set_marked(self, item_id: int, tenant_id: int) -> bool:
        """Mark an item as synced for a tenant.

        Returns:
            True if the marker was newly set, False if it already existed.
        """
        ...

    def mark_synced(
        self, item_id: int, tenant_id: int, document_id: str, when: datetime
    ) -> bool:
        """Record a successful index write in one atomic step.

        Sets the marker (compare-and-set), stores the document id and the
        last-synced time together: either all three are persisted or none.

        Returns:
            True if the marker was newly set, False if it already existed.
        """
        ...

    def clear_marked(self, item_id: int, tenant_id: int) -> None:
        """Forget the marker and stored document id of an item."""
        ...

    def get_document_id(self, item_id: int, tenant_id: int) -> str | None:
        """Get the index document id stored for an item, if any."""
        ...

    def set_document_id(self, item_id: int, tenant_id: int, document_id: str) -> None:
        """Store the index document id of an item."""
        ...

    def get_last_synced(self, item_id: int, tenant_id: int) -> datetime | None:
        """Get when the item was last written to the index."""
        ...

    def touch_last_synced(self, item_id: int, tenant_id: int, when: datetime) -> None:
        """Record when the item was last written to the index."""
        ...

    def close(self) -> None:
        """Release connections held by the store."""
        ...
