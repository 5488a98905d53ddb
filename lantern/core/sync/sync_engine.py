"""Sync engine for keeping the search index in step with the content store.

This module contains the core synchronization logic: deciding whether an item
is indexed as new or updated, maintaining the per-item sync markers, and
driving the resumable bulk sync across tenants.

Callers (the event gateway, the CLI) construct one SyncEngine with injected
collaborators and keep UI and transport concerns on their side.
"""

import logging
import sqlite3
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Self

from lantern.core.sync.document_builder import DocumentBuilder
from lantern.core.sync.routing import IndexRouter
from lantern.core.sync.scheduler import SyncScheduler
from lantern.domain.config import GLOBAL_TENANT_ID, SyncConfig, TenantConfig
from lantern.domain.entities import (
    BulkSyncReport,
    ContentItem,
    ContentStatus,
    IndexDocument,
    IndexResponse,
    SyncErrorType,
    SyncOutcome,
    SyncResult,
    TenantSyncReport,
)
from lantern.domain.exceptions import UnknownTenantError
from lantern.ports.config import TenantConfigSource
from lantern.ports.content import ContentAccessor
from lantern.ports.index import IndexClient, IndexClientError
from lantern.ports.progress import ProgressCallback
from lantern.ports.repositories import SyncStateError, SyncStateStore

logger = logging.getLogger(__name__)


def classify_sync_error(exception: Exception) -> SyncErrorType:
    """Classify an exception into a SyncErrorType.

    This function determines the appropriate error category for a given exception,
    allowing callers to handle different failure modes appropriately.

    Args:
        exception: The exception to classify.

    Returns:
        SyncErrorType indicating the category of error.
    """
    # TimeoutError first: some index clients raise subclasses of both
    if isinstance(exception, TimeoutError):
        return SyncErrorType.TIMEOUT

    if isinstance(exception, IndexClientError):
        return SyncErrorType.INDEX_ERROR

    if isinstance(exception, (SyncStateError, sqlite3.Error)):
        return SyncErrorType.DATABASE_ERROR

    if isinstance(exception, UnknownTenantError):
        return SyncErrorType.CONTENT_ERROR

    return SyncErrorType.UNKNOWN


def _status_value(status: ContentStatus | str) -> str:
    return status.value if isinstance(status, ContentStatus) else str(status)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncEngine:
    """Decides per-item sync actions and runs scheduled bulk syncs.

    The engine owns no persistent state of its own. Markers, stored document
    ids and bulk-sync cursors live in the SyncStateStore; content is read
    through the ContentAccessor; documents go out through the IndexClient.

    Concurrency:
        Index calls are idempotent upserts and may race. Marker writes rely
        on the store's compare-and-set. Cursor read-modify-write is
        serialized per tenant with an in-process lock.
    """

    def __init__(
        self,
        content: ContentAccessor,
        index_client: IndexClient,
        state_store: SyncStateStore,
        tenant_configs: TenantConfigSource,
        config: SyncConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the sync engine.

        Args:
            content: Read-only content store accessor.
            index_client: Search index client.
            state_store: Persistence for cursors and markers.
            tenant_configs: Per-tenant routing configuration.
            config: Sync pacing configuration (defaults if omitted).
            clock: Returns the current time; injectable for tests.
        """
        self._content = content
        self._index = index_client
        self._state = state_store
        self._tenant_configs = tenant_configs
        self._config = config or SyncConfig()
        self._clock = clock
        self._builder = DocumentBuilder(content, self._config.protected_meta_keys)
        self._router = IndexRouter(tenant_configs)
        self._scheduler = SyncScheduler(state_store, self._config, clock)
        self._suppress_depth = 0
        self._suppress_lock = threading.Lock()

    @property
    def router(self) -> IndexRouter:
        return self._router

    def close(self) -> None:
        """Release the index client and the state store."""
        try:
            self._index.close()
        finally:
            self._state.close()

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        """Exit context manager, closing the index client and state store."""
        self.close()
        return False

    # ------------------------------------------------------------------
    # Suppression (autosave / bulk import)
    # ------------------------------------------------------------------

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Suppress event-triggered syncs for the duration of the block.

        Used around autosaves and bulk imports. Bulk syncs and direct
        decide_and_sync calls are not affected. Blocks may nest.
        """
        with self._suppress_lock:
            self._suppress_depth += 1
        try:
            yield
        finally:
            with self._suppress_lock:
                self._suppress_depth -= 1

    @property
    def is_suppressed(self) -> bool:
        return self._suppress_depth > 0

    # ------------------------------------------------------------------
    # Per-item sync
    # ------------------------------------------------------------------

    def decide_and_sync(
        self,
        item: ContentItem,
        tenant_id: int | None = None,
        host_tenant_id: int | None = None,
    ) -> SyncResult:
        """Index an item, as new or as an update depending on its marker.

        Makes exactly one index client call. On the first successful index
        the marker is set and the returned document id stored; later calls
        only refresh the last-synced time.

        Args:
            item: The content item to sync.
            tenant_id: Tenant the marker is keyed on. Defaults to the
                item's tenant.
            host_tenant_id: Tenant whose index should receive the write,
                unless cross-tenant search forces the global index.

        Returns:
            SyncResult describing the outcome. Index failures are reported
            in the result, never raised.

        Raises:
            SyncStateError: If markers or timestamps cannot be persisted.
        """
        tenant = item.tenant_id if tenant_id is None else tenant_id
        target = self._router.target_index(tenant, host_tenant_id)
        result = SyncResult(item_id=item.id, tenant_id=tenant, target_index_id=target)

        document = self._builder.build(item, tenant)
        already_marked = self._state.is_marked(item.id, tenant)

        response = self._call_index(document, target, result)
        if not response:
            result.outcome = SyncOutcome.FAILED
            return result

        result.document_id = response.document_id
        now = self._clock()

        if not already_marked:
            if not response.document_id:
                logger.warning(
                    "Index returned no document id for item %d (tenant %d); "
                    "leaving it unmarked",
                    item.id,
                    tenant,
                )
                result.outcome = SyncOutcome.FAILED
                result.error = "index response carried no document id"
                result.error_type = SyncErrorType.INDEX_ERROR
                return result

            newly_marked = self._state.mark_synced(
                item.id, tenant, response.document_id, now
            )
            if newly_marked:
                result.outcome = SyncOutcome.INDEXED
            else:
                # Another sync marked the item between our check and write
                logger.debug("Item %d (tenant %d) was marked concurrently", item.id, tenant)
                result.outcome = SyncOutcome.UPDATED
        elif response.document_id and self._state.get_document_id(item.id, tenant) is None:
            # Marked without a document id: store it so a later delete can find it
            logger.info(
                "Restoring missing document id for item %d (tenant %d)", item.id, tenant
            )
            self._state.mark_synced(item.id, tenant, response.document_id, now)
            result.outcome = SyncOutcome.UPDATED
        else:
            self._state.touch_last_synced(item.id, tenant, now)
            result.outcome = SyncOutcome.UPDATED

        logger.debug(
            "Synced item %d (tenant %d) to index %d: %s",
            item.id,
            tenant,
            target,
            result.outcome.value,
        )
        return result

    def _call_index(
        self, document: IndexDocument, target: int, result: SyncResult
    ) -> IndexResponse | None:
        """Call the index client, converting client failures into None."""
        try:
            response = self._index.index_document(document, target)
        except (IndexClientError, TimeoutError) as e:
            result.error = str(e) or type(e).__name__
            result.error_type = classify_sync_error(e)
            logger.warning(
                "Indexing item %d into index %d failed: %s",
                document.item_id,
                target,
                result.error,
            )
            return None

        if not response:
            result.error = "empty response from index client"
            result.error_type = SyncErrorType.INDEX_ERROR
            logger.warning(
                "Index client returned an empty response for item %d", document.item_id
            )
            return None
        return response

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    def _rejects_event(self, item_id: int, tenant_id: int) -> bool:
        if self.is_suppressed:
            logger.debug("Sync suppressed for item %d", item_id)
            return True
        if not self._content.can_edit(item_id, tenant_id):
            logger.debug("Caller may not edit item %d (tenant %d)", item_id, tenant_id)
            return True
        return False

    def _tenant_config(self, tenant_id: int) -> TenantConfig:
        return self._tenant_configs.get_tenant_config(tenant_id)

    def handle_transition(
        self,
        new_status: ContentStatus | str,
        old_status: ContentStatus | str,
        item: ContentItem,
    ) -> SyncResult | None:
        """React to a status transition of a content item.

        Only transitions into "publish" are acted on. Unpublishing does not
        remove the document; only a hard delete does.

        Args:
            new_status: Status after the transition.
            old_status: Status before the transition.
            item: The item that transitioned.

        Returns:
            The SyncResult if a sync was attempted, None if filtered out.
        """
        if _status_value(new_status) != ContentStatus.PUBLISH.value:
            return None

        if item.is_revision or self._rejects_event(item.id, item.tenant_id):
            return None

        if not self._tenant_config(item.tenant_id).syncs(item.content_type):
            logger.debug(
                "Content type %r is not synced for tenant %d",
                item.content_type,
                item.tenant_id,
            )
            return None

        logger.info(
            "Item %d (tenant %d) transitioned %s -> %s; syncing",
            item.id,
            item.tenant_id,
            _status_value(old_status),
            _status_value(new_status),
        )
        return self.decide_and_sync(item, item.tenant_id, self._router.host_tenant())

    def handle_delete(self, item_id: int, tenant_id: int | None = None) -> bool:
        """Remove an item's document from the index before the item is deleted.

        Fire-and-forget: a failed delete call is logged, not retried. The
        item's marker and stored document id are cleared afterwards.

        Args:
            item_id: The item being deleted.
            tenant_id: Tenant owning the item. Defaults to the configured
                default tenant.

        Returns:
            True if a delete call was issued, False if filtered out or the
            item has no stored document id.
        """
        tenant = self._scheduler.resolve_tenant(tenant_id)
        if self._rejects_event(item_id, tenant):
            return False

        item = self._content.get_item(item_id, tenant)
        if item is None or not self._tenant_config(tenant).syncs(item.content_type):
            return False

        document_id = self._state.get_document_id(item_id, tenant)
        if not document_id:
            logger.debug("Item %d (tenant %d) has no stored document id", item_id, tenant)
            return False

        target = self._router.target_index(tenant)
        try:
            self._index.delete_document(
                document_id, source_index_hint=None, target_index_id=target
            )
        except (IndexClientError, TimeoutError) as e:
            logger.warning(
                "Deleting document %s from index %d failed: %s", document_id, target, e
            )

        self._state.clear_marked(item_id, tenant)
        logger.info("Removed item %d (tenant %d) from index %d", item_id, tenant, target)
        return True

    # ------------------------------------------------------------------
    # Bulk sync
    # ------------------------------------------------------------------

    def schedule_sync(self, tenant_id: int | None = None) -> bool:
        """Schedule a bulk sync for a tenant (first call wins).

        Returns:
            True if the sync was scheduled by this call.
        """
        return self._scheduler.schedule(tenant_id)

    def cancel_sync(self, tenant_id: int) -> bool:
        """Cancel a scheduled bulk sync, discarding its progress.

        Returns:
            True if a scheduled sync was cancelled.
        """
        return self._scheduler.cancel(tenant_id)

    def run_pending_syncs(self, progress: ProgressCallback | None = None) -> BulkSyncReport:
        """Run every scheduled bulk sync.

        Tenants are processed sequentially. A failure in one tenant is logged
        and recorded in the report; the remaining tenants still run.

        Args:
            progress: Optional callback receiving per-page progress.

        Returns:
            BulkSyncReport with one entry per tenant that had a scheduled sync.
        """
        report = BulkSyncReport()

        for tenant_id in self._content.get_tenant_ids():
            tenant_config = self._tenant_config(tenant_id)
            if not tenant_config.synced_post_types:
                continue

            tenant_report = TenantSyncReport(tenant_id=tenant_id)
            try:
                ran = self._sync_tenant(tenant_id, tenant_config, tenant_report, progress)
            except Exception as e:
                logger.exception("Bulk sync of tenant %d aborted", tenant_id)
                tenant_report.error = str(e) or type(e).__name__
                tenant_report.error_type = classify_sync_error(e)
                ran = True

            if ran:
                report.tenants.append(tenant_report)

        return report

    def _sync_tenant(
        self,
        tenant_id: int,
        tenant_config: TenantConfig,
        report: TenantSyncReport,
        progress: ProgressCallback | None,
    ) -> bool:
        """Advance one tenant's bulk sync.

        Returns:
            False if the tenant had nothing scheduled, True otherwise.
        """
        page_size = self._config.page_size

        with self._scheduler.cursor_lock(tenant_id):
            cursor = self._state.get_sync_status(tenant_id)
            if not cursor.is_scheduled:
                return False

            pages = 0
            while True:
                page = list(
                    self._content.list_publishable_items(
                        tenant_id,
                        tenant_config.synced_post_types,
                        cursor.posts_processed,
                        page_size,
                    )
                )
                if not page:
                    self._state.reset_sync_cursor(tenant_id)
                    report.completed = True
                    logger.info(
                        "Bulk sync of tenant %d complete (%d items)",
                        tenant_id,
                        cursor.posts_processed,
                    )
                    break

                if progress is not None:
                    progress.on_start(len(page), f"Syncing tenant {tenant_id}")
                try:
                    for position, item in enumerate(page, start=1):
                        cursor = cursor.advanced()
                        result = self.decide_and_sync(item, tenant_id, GLOBAL_TENANT_ID)
                        # Checkpoint after every item so an interrupted run
                        # resumes at the next one
                        self._state.update_sync_status(cursor, tenant_id)
                        report.processed += 1
                        if result.succeeded:
                            report.indexed += 1
                        else:
                            report.failed += 1
                        if progress is not None:
                            progress.on_progress(position, item.title or f"#{item.id}")
                finally:
                    if progress is not None:
                        progress.on_complete()

                pages += 1
                # A short page may be the end of the listing: read the next offset once more
                if len(page) == page_size and pages >= self._config.max_pages_per_run:
                    break

        return True
