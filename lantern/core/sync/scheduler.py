"""Scheduling of per-tenant bulk syncs.

Scheduling only touches the sync state store, so administrative commands can
schedule and cancel syncs without a content export or a search backend.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from lantern.domain.config import SyncConfig
from lantern.ports.repositories import SyncStateStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncScheduler:
    """Schedules and cancels bulk syncs by writing tenant cursors.

    Cursor read-modify-write sequences are serialized per tenant with an
    in-process lock; the sync engine takes the same lock while it advances
    a tenant's cursor.
    """

    def __init__(
        self,
        state_store: SyncStateStore,
        config: SyncConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._state = state_store
        self._config = config or SyncConfig()
        self._clock = clock
        self._cursor_locks: dict[int, threading.Lock] = {}
        self._cursor_locks_guard = threading.Lock()

    def resolve_tenant(self, tenant_id: int | None) -> int:
        """Return tenant_id, or the configured default tenant when None."""
        return self._config.default_tenant if tenant_id is None else tenant_id

    def cursor_lock(self, tenant_id: int) -> threading.Lock:
        with self._cursor_locks_guard:
            return self._cursor_locks.setdefault(tenant_id, threading.Lock())

    def schedule(self, tenant_id: int | None = None) -> bool:
        """Schedule a bulk sync for a tenant.

        The first call wins: a tenant that already has a start time keeps it.

        Args:
            tenant_id: Tenant to schedule. Defaults to the configured default
                tenant.

        Returns:
            True if the sync was scheduled by this call.
        """
        tenant = self.resolve_tenant(tenant_id)
        with self.cursor_lock(tenant):
            cursor = self._state.get_sync_status(tenant)
            if cursor.is_scheduled:
                logger.debug("Bulk sync already scheduled for tenant %d", tenant)
                return False
            scheduled = self._state.update_sync_status(
                cursor.scheduled_at(self._clock()), tenant
            )

        if scheduled:
            logger.info("Scheduled bulk sync for tenant %d", tenant)
        return scheduled

    def cancel(self, tenant_id: int) -> bool:
        """Cancel a scheduled bulk sync, discarding its progress.

        Returns:
            True if a scheduled sync was cancelled.
        """
        with self.cursor_lock(tenant_id):
            cursor = self._state.get_sync_status(tenant_id)
            if not cursor.is_scheduled:
                return False
            self._state.reset_sync_cursor(tenant_id)

        logger.info(
            "Cancelled bulk sync for tenant %d after %d items",
            tenant_id,
            cursor.posts_processed,
        )
        return True
