"""Inbound adapter between content lifecycle notifications and the sync engine.

Lifecycle events (publish, delete) are fire-and-forget: whatever goes wrong is
logged and the caller carries on. Administrative triggers return their result
so the caller can report it.
"""

import logging

from lantern.core.sync.sync_engine import SyncEngine
from lantern.core.use_case_errors import log_use_case_error
from lantern.domain.entities import BulkSyncReport, ContentItem, ContentStatus, SyncResult
from lantern.ports.progress import ProgressCallback

logger = logging.getLogger(__name__)


class EventGateway:
    """Routes content store notifications and admin requests to a SyncEngine."""

    def __init__(self, engine: SyncEngine) -> None:
        self._engine = engine

    def on_status_transition(
        self,
        new_status: ContentStatus | str,
        old_status: ContentStatus | str,
        item: ContentItem,
    ) -> SyncResult | None:
        """Handle a status change of a content item.

        Returns:
            The sync result, or None if the event was filtered out or failed.
        """
        try:
            return self._engine.handle_transition(new_status, old_status, item)
        except Exception as e:
            log_use_case_error(e, f"sync of item {item.id}")
            return None

    def on_delete(self, item_id: int, tenant_id: int | None = None) -> bool:
        """Handle the deletion of a content item.

        Returns:
            True if a delete call was sent to the index.
        """
        try:
            return self._engine.handle_delete(item_id, tenant_id)
        except Exception as e:
            log_use_case_error(e, f"delete of item {item_id}")
            return False

    def on_admin_trigger_run_pending_syncs(
        self, progress: ProgressCallback | None = None
    ) -> BulkSyncReport:
        """Run all scheduled bulk syncs and return the per-tenant report."""
        report = self._engine.run_pending_syncs(progress=progress)
        logger.info(
            "Bulk sync run finished: %d tenants, %d items, %d failed tenants",
            len(report.tenants),
            report.processed,
            len(report.failed_tenants),
        )
        return report

    def on_schedule_sync_request(self, tenant_id: int | None = None) -> bool:
        """Schedule a bulk sync; returns False if one was already scheduled."""
        return self._engine.schedule_sync(tenant_id)

    def on_cancel_sync_request(self, tenant_id: int) -> bool:
        """Cancel a scheduled bulk sync; returns False if none was scheduled."""
        return self._engine.cancel_sync(tenant_id)
